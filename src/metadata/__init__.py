"""Cargo metadata snapshot model and closure resolution."""

from .models import Metadata, Package, ResolveNode, load_metadata, parse_metadata
from .resolver import resolve, resolve_named

__all__ = [
    "Metadata",
    "Package",
    "ResolveNode",
    "load_metadata",
    "parse_metadata",
    "resolve",
    "resolve_named",
]
