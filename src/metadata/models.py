"""Data models for the cargo dependency-graph snapshot."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from common.errors import MalformedMetadata


@dataclass(frozen=True)
class Package:
    """One package of the snapshot."""
    id: str
    name: str
    source: Optional[str]  # None for path/workspace packages
    manifest_path: str

    @property
    def is_local(self) -> bool:
        """True when the package comes from the local tree, not a registry."""
        return self.source is None


@dataclass(frozen=True)
class ResolveNode:
    """Direct resolved edges of one package, in the order cargo lists them."""
    id: str
    dependencies: Tuple[str, ...]


@dataclass(frozen=True)
class Metadata:
    """Packages plus the resolve graph, read-only after load."""
    packages: Tuple[Package, ...]
    resolve: Tuple[ResolveNode, ...]
    _by_id: Dict[str, Package] = field(init=False, repr=False, compare=False)
    _nodes: Dict[str, ResolveNode] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_by_id", {p.id: p for p in self.packages})
        object.__setattr__(self, "_nodes", {n.id: n for n in self.resolve})

    def package(self, package_id: str) -> Optional[Package]:
        return self._by_id.get(package_id)

    def package_named(self, name: str) -> Optional[Package]:
        """First package carrying ``name``, in snapshot order."""
        return next((p for p in self.packages if p.name == name), None)

    def node(self, package_id: str) -> Optional[ResolveNode]:
        return self._nodes.get(package_id)


def _require(obj: Dict[str, Any], key: str, kind: type, where: str) -> Any:
    if key not in obj:
        raise MalformedMetadata(f"{where}: missing required field '{key}'")
    value = obj[key]
    if not isinstance(value, kind):
        raise MalformedMetadata(f"{where}: field '{key}' has unexpected type {type(value).__name__}")
    return value


def _parse_package(raw: Any, index: int) -> Package:
    where = f"packages[{index}]"
    if not isinstance(raw, dict):
        raise MalformedMetadata(f"{where}: expected an object")
    source = raw.get("source")
    if source is not None and not isinstance(source, str):
        raise MalformedMetadata(f"{where}: field 'source' has unexpected type {type(source).__name__}")
    return Package(
        id=_require(raw, "id", str, where),
        name=_require(raw, "name", str, where),
        source=source,
        manifest_path=_require(raw, "manifest_path", str, where),
    )


def _parse_node(raw: Any, index: int) -> ResolveNode:
    where = f"resolve.nodes[{index}]"
    if not isinstance(raw, dict):
        raise MalformedMetadata(f"{where}: expected an object")
    deps = _require(raw, "dependencies", list, where)
    if not all(isinstance(d, str) for d in deps):
        raise MalformedMetadata(f"{where}: dependencies must be package id strings")
    return ResolveNode(id=_require(raw, "id", str, where), dependencies=tuple(deps))


def parse_metadata(data: Any) -> Metadata:
    """Build a Metadata snapshot from an already-decoded JSON document.

    Raises:
        MalformedMetadata: If required fields are absent or mistyped.
    """
    if not isinstance(data, dict):
        raise MalformedMetadata("metadata root must be an object")
    packages = _require(data, "packages", list, "metadata")
    resolve = _require(data, "resolve", dict, "metadata")
    nodes = _require(resolve, "nodes", list, "resolve")
    return Metadata(
        packages=tuple(_parse_package(p, i) for i, p in enumerate(packages)),
        resolve=tuple(_parse_node(n, i) for i, n in enumerate(nodes)),
    )


def load_metadata(text: str) -> Metadata:
    """Deserialize ``cargo metadata --format-version=1`` output.

    Raises:
        MalformedMetadata: If the text is not JSON or lacks required fields.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedMetadata(f"metadata is not valid JSON: {exc}") from exc
    return parse_metadata(data)
