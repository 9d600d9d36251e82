"""Textual patches applied to a crate's ``lib.rs`` before it is published."""
from __future__ import annotations

import logging
from pathlib import Path

from constants import Constants
from common.errors import ManifestError

logger = logging.getLogger(__name__)

FEATURE_NEEDLE = "\n#![feature("
FEATURE_INJECTION = "rustc_private, "
DIAGNOSTIC_ARRAY_MARKER = "__build_diagnostic_array! {"
DIAGNOSTIC_ARRAY_STUB = "fn _foo() {}\n"


def patch_lib_source(contents: str) -> str:
    """Return ``contents`` with the out-of-tree build fixes applied.

    - ``rustc_private`` is added to the first crate-level feature list.
    - Everything from the ``__build_diagnostic_array!`` invocation onward is
      replaced by an empty function.
    """
    i = contents.find(FEATURE_NEEDLE)
    if i != -1:
        at = i + len(FEATURE_NEEDLE)
        contents = contents[:at] + FEATURE_INJECTION + contents[at:]

    i = contents.find(DIAGNOSTIC_ARRAY_MARKER)
    if i != -1:
        contents = contents[:i] + DIAGNOSTIC_ARRAY_STUB
    return contents


def patch_lib_rs(crate_dir: str | Path) -> bool:
    """Patch ``lib.rs`` in ``crate_dir`` if it exists.

    Returns:
        True when the file was rewritten.

    Raises:
        ManifestError: If lib.rs cannot be read or written.
    """
    lib = Path(crate_dir) / Constants.LIB_FILE
    if not lib.exists():
        return False
    try:
        contents = lib.read_text(encoding="utf-8")
    except OSError as exc:
        raise ManifestError(f"cannot read {lib}: {exc}") from exc
    patched = patch_lib_source(contents)
    if patched == contents:
        return False
    try:
        lib.write_text(patched, encoding="utf-8")
    except OSError as exc:
        raise ManifestError(f"cannot write {lib}: {exc}") from exc
    logger.info("Patched %s", lib)
    return True
