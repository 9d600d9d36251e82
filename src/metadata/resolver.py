"""Dependency-closure resolution over a metadata snapshot.

Produces the local packages reachable from a root in publish order: every
package comes after all of its local dependencies.
"""
from __future__ import annotations

import logging
from typing import List, Set

from common.errors import DanglingDependency, MissingResolveNode
from common.logging_utils import extra_context, is_debug_enabled
from .models import Metadata, Package

logger = logging.getLogger(__name__)


def _fill(metadata: Metadata, pkg: Package, out: List[Package], seen: Set[str]) -> None:
    # Keyed by name: the first path to reach a name wins, its subtree is not revisited.
    if pkg.name in seen:
        return
    seen.add(pkg.name)

    node = metadata.node(pkg.id)
    if node is None:
        raise MissingResolveNode(pkg.id)

    for dep_id in node.dependencies:
        dep = metadata.package(dep_id)
        if dep is None:
            raise DanglingDependency(dep_id)
        if dep.is_local:
            _fill(metadata, dep, out, seen)
        elif is_debug_enabled(logger):
            logger.debug(
                "Registry dependency treated as leaf",
                extra=extra_context(
                    event="decision",
                    component="resolver",
                    action="skip",
                    package=dep.name,
                    parent=pkg.name
                )
            )
    out.append(pkg)


def resolve(metadata: Metadata, root_id: str) -> List[Package]:
    """Return the ordered local closure of the package ``root_id``.

    Dependencies are visited in the order the resolve graph lists them.
    Registry-sourced packages are leaves and never appear in the result.

    Raises:
        DanglingDependency: If ``root_id`` or a referenced dependency id is unknown.
        MissingResolveNode: If a visited package has no resolve node.
    """
    root = metadata.package(root_id)
    if root is None:
        raise DanglingDependency(root_id)
    crates: List[Package] = []
    _fill(metadata, root, crates, set())
    logger.info("Resolved %d local crates from %s", len(crates), root.name)
    return crates


def resolve_named(metadata: Metadata, root_name: str) -> List[Package]:
    """Same as ``resolve`` but locates the root by package name."""
    root = metadata.package_named(root_name)
    if root is None:
        raise DanglingDependency(f"package named '{root_name}'")
    return resolve(metadata, root.id)
