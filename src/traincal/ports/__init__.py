"""Ports - interfaces/protocols for external dependencies."""

from .program_store import ProgramStore

__all__ = [
    "ProgramStore",
]
