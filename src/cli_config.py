"""Configuration loading and CLI overrides for runtime tunables.

Precedence, lowest first: Constants defaults, config file, CLI flags.
"""

from __future__ import annotations

import logging

from constants import Constants, _load_config_file, apply_config
from common.errors import AutopubError

logger = logging.getLogger(__name__)


class ConfigError(AutopubError):
    """The configuration file cannot be read or holds invalid values."""


def load_config(path: str) -> None:
    """Load ``path`` and apply it onto Constants.

    Raises:
        ConfigError: If the file is unreadable or invalid.
    """
    try:
        data = _load_config_file(path)
        apply_config(data)
    except (OSError, ValueError, TypeError) as exc:
        raise ConfigError(f"cannot load config {path}: {exc}") from exc
    logger.info("Loaded configuration from %s", path)


def apply_cli_overrides(args) -> None:
    """Apply CLI flags, which take precedence over the config file."""
    if getattr(args, "PREFIX", None):
        Constants.PREFIX = args.PREFIX
    if getattr(args, "ROOT_PACKAGE", None):
        Constants.ROOT_PACKAGE = args.ROOT_PACKAGE
    if getattr(args, "TOOLCHAIN", None):
        Constants.TOOLCHAIN = args.TOOLCHAIN


def configure(args) -> None:
    """Apply the config file named by ``args.CONFIG`` (if any), then CLI overrides."""
    if getattr(args, "CONFIG", None):
        load_config(args.CONFIG)
    apply_cli_overrides(args)
