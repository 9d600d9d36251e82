"""Constants used in the project."""

import json
import logging
import os
from enum import Enum

logger = logging.getLogger(__name__)


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    SNAPSHOT_ERROR = 4
    COMMAND_ERROR = 5


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    PREFIX = "rustc-ap"
    ROOT_PACKAGE = "syntax"
    TOOLCHAIN = "nightly"
    LICENSE = "MIT / Apache-2.0"
    REPOSITORY_URL = "https://github.com/rust-lang/rust"
    REGISTRY_API_URL = "https://crates.io/api/v1/crates/"
    SOURCE_ARCHIVE_URL = "https://github.com/rust-lang/rust/archive/{commit}.tar.gz"
    # Crates reach `term` through the sysroot in-tree; published copies must declare it.
    EXTRA_DEPENDENCY = ("term", "0.4")
    MANIFEST_FILE = "Cargo.toml"
    LIB_FILE = "lib.rs"
    READY_MARKER = ".ok"
    USER_AGENT = "autopub (https://github.com/rust-lang/rust)"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    DOWNLOAD_TIMEOUT = 600

    @classmethod
    def sentinel_crate(cls) -> str:
        """Name of the published crate queried to learn the current generation."""
        return f"{cls.PREFIX}-{cls.ROOT_PACKAGE}"


# Config keys and the Constants attribute each one overrides.
_CONFIG_KEYS = {
    "prefix": "PREFIX",
    "root_package": "ROOT_PACKAGE",
    "toolchain": "TOOLCHAIN",
    "license": "LICENSE",
    "repository_url": "REPOSITORY_URL",
    "registry_api_url": "REGISTRY_API_URL",
    "source_archive_url": "SOURCE_ARCHIVE_URL",
    "request_timeout": "REQUEST_TIMEOUT",
}


def _load_config_file(path: str) -> dict:
    """Read a YAML or JSON config file into a dict.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the content is not a mapping or fails to parse.
    """
    with open(path, encoding="utf-8") as fh:
        text = fh.read()
    if os.path.splitext(path)[1].lower() == ".json":
        data = json.loads(text)
    else:
        import yaml  # pylint: disable=import-outside-toplevel
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ValueError(f"invalid YAML in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"config root in {path} must be a mapping")
    return data


def apply_config(data: dict) -> None:
    """Apply a loaded config mapping onto Constants.

    Unknown keys are logged and ignored.
    """
    for key, value in data.items():
        if key == "extra_dependency":
            if not isinstance(value, dict) or "name" not in value or "version" not in value:
                raise ValueError("extra_dependency must be a mapping with 'name' and 'version'")
            Constants.EXTRA_DEPENDENCY = (str(value["name"]), str(value["version"]))
            continue
        attr = _CONFIG_KEYS.get(key)
        if attr is None:
            logger.warning("Ignoring unknown config key: %s", key)
            continue
        if attr == "REQUEST_TIMEOUT":
            value = int(value)
        setattr(Constants, attr, value)
