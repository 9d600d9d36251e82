"""Sequential publication of a resolved crate closure.

Crates are handled strictly one at a time in closure order: a crate is only
published once every local dependency is live at the target version. The first
failure ends the run; manifests already rewritten and crates already published
stay as they are.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from constants import Constants
from manifest.lib_patch import patch_lib_rs
from manifest.transformer import rewrite_manifest
from metadata.models import Package
from toolchain.cargo import cargo_publish

logger = logging.getLogger(__name__)

PublishStep = Callable[[Path], None]
PrePublishHook = Callable[[Path], object]


def publish_package(
    pkg: Package,
    commit: str,
    version,
    *,
    publish: PublishStep,
    pre_publish: PrePublishHook = patch_lib_rs,
    prefix: Optional[str] = None,
) -> None:
    """Rewrite, patch and publish one package."""
    logger.info("Publishing %s %s", pkg.name, version)
    rewrite_manifest(
        pkg.manifest_path,
        pkg.name,
        commit,
        version,
        prefix=prefix,
        extra_dependency=Constants.EXTRA_DEPENDENCY,
    )
    crate_dir = Path(pkg.manifest_path).parent
    pre_publish(crate_dir)
    publish(crate_dir)


def publish_all(
    packages: Sequence[Package],
    commit: str,
    version,
    *,
    publish: Optional[PublishStep] = None,
    pre_publish: PrePublishHook = patch_lib_rs,
    prefix: Optional[str] = None,
    toolchain: Optional[str] = None,
    dry_run: bool = False,
) -> List[str]:
    """Publish ``packages`` in order and return the names handled.

    ``publish`` defaults to ``cargo publish`` with the given toolchain.
    Any exception propagates immediately and stops the run.
    """
    def _cargo(crate_dir: Path) -> None:
        cargo_publish(crate_dir, toolchain=toolchain, dry_run=dry_run)

    done: List[str] = []
    for pkg in packages:
        publish_package(
            pkg,
            commit,
            version,
            publish=publish or _cargo,
            pre_publish=pre_publish,
            prefix=prefix,
        )
        done.append(pkg.name)
    logger.info("Published %d crates at %s", len(done), version)
    return done
