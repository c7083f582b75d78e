"""Adapters - I/O implementations of ports."""

from .file_store import FileActionStore, StoreError

__all__ = [
    "FileActionStore",
    "StoreError",
]
