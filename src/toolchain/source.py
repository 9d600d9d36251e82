"""Fetch and unpack the rust-lang/rust source tree for one commit."""
from __future__ import annotations

import io
import logging
import tarfile
from pathlib import Path

from constants import Constants
from common.errors import RegistryError
from common.http_client import safe_get
from common.logging_utils import safe_url

logger = logging.getLogger(__name__)


def source_root(workdir: str | Path, commit: str) -> Path:
    """Directory the archive for ``commit`` unpacks into."""
    return Path(workdir) / f"rust-{commit}"


def download_source(workdir: str | Path, commit: str) -> Path:
    """Download and unpack the source archive of ``commit`` into ``workdir``.

    The top-level workspace manifest is moved aside so each crate resolves on
    its own, then a ready marker is written.

    Raises:
        RegistryError: If the archive host does not answer 200, or the archive
            is corrupt or lacks the expected top-level directory.
    """
    url = Constants.SOURCE_ARCHIVE_URL.format(commit=commit)
    logger.info("Downloading source tarball from %s", safe_url(url))
    res = safe_get(url, context="source archive", timeout=Constants.DOWNLOAD_TIMEOUT)
    if res.status_code != 200:
        raise RegistryError(
            f"source archive download returned status {res.status_code}",
            status_code=res.status_code,
        )

    workdir = Path(workdir)
    workdir.mkdir(parents=True, exist_ok=True)
    try:
        with tarfile.open(fileobj=io.BytesIO(res.content), mode="r:gz") as archive:
            archive.extractall(workdir, filter="data")
    except (tarfile.TarError, OSError) as exc:
        raise RegistryError(f"cannot unpack source archive for {commit}: {exc}") from exc

    root = source_root(workdir, commit)
    if not root.is_dir():
        raise RegistryError(f"source archive has no top-level {root.name} directory")
    workspace_manifest = root / "src" / Constants.MANIFEST_FILE
    if workspace_manifest.exists():
        workspace_manifest.rename(workspace_manifest.with_name(Constants.MANIFEST_FILE + ".bk"))
    (root / Constants.READY_MARKER).touch()
    return root


def ensure_source(workdir: str | Path, commit: str) -> Path:
    """Return the unpacked tree for ``commit``, downloading it unless already present."""
    root = source_root(workdir, commit)
    if (root / Constants.READY_MARKER).exists():
        logger.info("Reusing source tree at %s", root)
        return root
    return download_source(workdir, commit)
