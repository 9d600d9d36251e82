"""Manifest rewriting and pre-publish source patches."""

from .transformer import parse_manifest, prefixed, render_manifest, rewrite_manifest, transform
from .lib_patch import patch_lib_rs, patch_lib_source

__all__ = [
    "parse_manifest",
    "prefixed",
    "render_manifest",
    "rewrite_manifest",
    "transform",
    "patch_lib_rs",
    "patch_lib_source",
]
