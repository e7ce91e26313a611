"""Adapters - I/O implementations of ports."""

from .file_store import FileProgramStore

__all__ = [
    "FileProgramStore",
]
