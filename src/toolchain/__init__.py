"""Wrappers around the external rustc/cargo binaries and the upstream source archive."""
