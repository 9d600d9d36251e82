"""Shared helpers: errors, HTTP access and logging."""
