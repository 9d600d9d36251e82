"""Cargo manifest rewriting for registry publication.

An in-tree manifest names its siblings through ``path`` dependencies and
carries no registry metadata. ``transform`` turns it into one that crates.io
accepts:

- ``[package]`` gets the prefixed name, the run's version and fixed metadata.
- ``[lib]`` keeps the original crate name as the artifact name and drops any
  ``crate-type`` so the library is built as a plain rlib.
- ``[dependencies]`` path entries become prefixed registry entries pinned to
  the run's version, and the sysroot-provided extra dependency is declared.

Documents are handled with tomlkit so untouched parts keep their formatting.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional, Tuple

import tomlkit
from tomlkit.exceptions import TOMLKitError
from tomlkit.items import InlineTable
from tomlkit.toml_document import TOMLDocument

from constants import Constants
from common.errors import ManifestError
from common.logging_utils import extra_context, is_debug_enabled

logger = logging.getLogger(__name__)

LIB_KIND_KEYS = ("crate-type", "crate_type")

DESCRIPTION_TEMPLATE = (
    "Automatically published version of the package `{name}` "
    "in the rust-lang/rust repository from commit {commit}"
)


def parse_manifest(text: str) -> TOMLDocument:
    """Parse manifest text, raising ManifestError when it is not valid TOML."""
    try:
        return tomlkit.parse(text)
    except TOMLKitError as exc:
        raise ManifestError(f"manifest is not valid TOML: {exc}") from exc


def _table(doc: TOMLDocument, key: str, *, required: bool) -> Optional[Any]:
    value = doc.get(key)
    if value is None:
        if required:
            raise ManifestError(f"manifest has no [{key}] table")
        return None
    if not isinstance(value, dict):
        raise ManifestError(f"manifest [{key}] is not a table")
    return value


def prefixed(name: str, prefix: Optional[str] = None) -> str:
    """Registry name of an in-tree crate."""
    return f"{prefix or Constants.PREFIX}-{name}"


def _rewrite_package(doc: TOMLDocument, name: str, commit: str, version: str, prefix: str) -> None:
    pkg = _table(doc, "package", required=True)
    pkg["name"] = prefixed(name, prefix)
    pkg["version"] = version
    pkg["license"] = Constants.LICENSE
    pkg["description"] = DESCRIPTION_TEMPLATE.format(name=name, commit=commit)
    pkg["repository"] = Constants.REPOSITORY_URL


def _rewrite_lib(doc: TOMLDocument, name: str) -> None:
    lib = _table(doc, "lib", required=False)
    if lib is None:
        return
    lib["name"] = name
    for key in LIB_KIND_KEYS:
        if key in lib:
            del lib[key]


def _inline_copy(spec: Any, drop: Tuple[str, ...] = ()) -> Any:
    """Inline table holding the keys of ``spec`` except those in ``drop``."""
    entry = tomlkit.inline_table()
    for key, value in spec.items():
        if key in drop:
            continue
        entry[key] = value.unwrap() if hasattr(value, "unwrap") else value
    return entry


def _registry_entry(spec: Any, version: str) -> Any:
    """Inline table equal to ``spec`` without its path and pinned to ``version``."""
    entry = _inline_copy(spec, drop=("path",))
    entry["version"] = version
    return entry


def _rewrite_dependencies(
    doc: TOMLDocument,
    version: str,
    prefix: str,
    extra: Tuple[str, str],
) -> None:
    deps = _table(doc, "dependencies", required=False)
    if deps is None:
        return

    rewritten = tomlkit.table()
    for dep_name, spec in deps.items():
        if isinstance(spec, dict) and "path" in spec:
            new_name = prefixed(dep_name, prefix)
            rewritten[new_name] = _registry_entry(spec, version)
            if is_debug_enabled(logger):
                logger.debug(
                    "Path dependency rewritten",
                    extra=extra_context(
                        event="rewrite",
                        component="manifest",
                        action="dependency",
                        dependency=dep_name,
                        target=new_name
                    )
                )
        elif isinstance(spec, dict) and not isinstance(spec, InlineTable):
            # A [dependencies.<name>] sub-table would render after every plain entry.
            rewritten[dep_name] = _inline_copy(spec)
        else:
            rewritten[dep_name] = spec

    extra_name, extra_version = extra
    rewritten[extra_name] = extra_version
    doc["dependencies"] = rewritten


def transform(
    manifest: TOMLDocument,
    package_name: str,
    commit: str,
    target_version: Any,
    *,
    prefix: Optional[str] = None,
    extra_dependency: Optional[Tuple[str, str]] = None,
) -> TOMLDocument:
    """Rewrite ``manifest`` in place for publication and return it.

    Args:
        manifest: Parsed manifest document.
        package_name: Original (unprefixed) crate name.
        commit: Upstream commit the sources come from.
        target_version: Version of this run; anything whose str() is a version.
        prefix: Registry name prefix; defaults to Constants.PREFIX.
        extra_dependency: (name, version) appended to [dependencies];
            defaults to Constants.EXTRA_DEPENDENCY.

    Raises:
        ManifestError: If [package] is missing, or a rewritten section is not a table.
    """
    prefix = prefix or Constants.PREFIX
    version = str(target_version)
    _rewrite_package(manifest, package_name, commit, version, prefix)
    _rewrite_lib(manifest, package_name)
    _rewrite_dependencies(manifest, version, prefix, extra_dependency or Constants.EXTRA_DEPENDENCY)
    return manifest


def render_manifest(
    text: str,
    package_name: str,
    commit: str,
    target_version: Any,
    **kwargs: Any,
) -> str:
    """Parse, transform and serialize manifest text."""
    doc = parse_manifest(text)
    return tomlkit.dumps(transform(doc, package_name, commit, target_version, **kwargs))


def rewrite_manifest(
    manifest_path: str | Path,
    package_name: str,
    commit: str,
    target_version: Any,
    **kwargs: Any,
) -> None:
    """Rewrite the manifest at ``manifest_path``, overwriting the original."""
    path = Path(manifest_path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ManifestError(f"cannot read manifest {path}: {exc}") from exc
    try:
        output = render_manifest(text, package_name, commit, target_version, **kwargs)
    except ManifestError as exc:
        raise ManifestError(f"{path}: {exc}") from exc
    try:
        path.write_text(output, encoding="utf-8")
    except OSError as exc:
        raise ManifestError(f"cannot write manifest {path}: {exc}") from exc
    logger.info("Rewrote manifest %s", path)
