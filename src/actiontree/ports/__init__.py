"""Ports - interfaces/protocols for external dependencies."""

from .action_repo import ActionRepository

__all__ = [
    "ActionRepository",
]
