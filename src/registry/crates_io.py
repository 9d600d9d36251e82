"""crates.io client: learn the current published generation and the next version."""
from __future__ import annotations

import json
import logging

import semantic_version

from constants import Constants
from common.errors import RegistryError
from common.http_client import safe_get
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)

ZERO_VERSION = semantic_version.Version("0.0.0")


def get_current_version(crate_name: str, url: str | None = None) -> semantic_version.Version:
    """Return the maximum published version of ``crate_name``.

    A 404 means the crate was never published and yields ``0.0.0``.

    Args:
        crate_name: Registry crate name to look up.
        url: Registry API base; defaults to Constants.REGISTRY_API_URL.

    Raises:
        RegistryError: On any other status, or a body without a valid max_version.
    """
    logger.info("Fetching current version of %s", crate_name)
    fullurl = (url or Constants.REGISTRY_API_URL) + crate_name

    with Timer() as timer:
        res = safe_get(fullurl, context="crates.io", headers={"Accept": "application/json"})

    if res.status_code == 404:
        logger.info("%s is not published yet; starting from %s", crate_name, ZERO_VERSION)
        return ZERO_VERSION
    if res.status_code != 200:
        logger.error(
            "Unexpected registry response",
            extra=extra_context(
                event="http_response",
                outcome="unexpected_status",
                status_code=res.status_code,
                duration_ms=timer.duration_ms(),
                target=safe_url(fullurl)
            )
        )
        raise RegistryError(
            f"crates.io returned status {res.status_code} for {crate_name}",
            status_code=res.status_code,
        )

    try:
        body = json.loads(res.text)
        raw = body["crate"]["max_version"]
        version = semantic_version.Version(raw)
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
        raise RegistryError(
            f"could not read max_version of {crate_name} from crates.io response: {exc}",
            status_code=res.status_code,
        ) from exc

    if is_debug_enabled(logger):
        logger.debug(
            "Current version",
            extra=extra_context(
                event="parse",
                component="crates_io",
                action="max_version",
                outcome="success",
                version=str(version)
            )
        )
    return version


def bump_major(version: semantic_version.Version) -> semantic_version.Version:
    """Increment only the major component; minor, patch and tags are kept."""
    return semantic_version.Version(
        major=version.major + 1,
        minor=version.minor,
        patch=version.patch,
        prerelease=version.prerelease,
        build=version.build,
    )


def next_version(sentinel_crate: str | None = None, url: str | None = None) -> semantic_version.Version:
    """Version every crate of this run is published at.

    Each run is a new major generation of the sentinel crate.
    """
    current = get_current_version(sentinel_crate or Constants.sentinel_crate(), url=url)
    return bump_major(current)
