"""Pure sibling sorting logic - no I/O dependencies."""

import unicodedata
from enum import Enum

from .actions import Action
from .tree import build_children_index


class SortMode(str, Enum):
    MANUAL = "manual"
    DUE_DATE = "due-date"
    NAME = "name"
    FLAGGED = "flagged"
    CREATED = "created"

    @classmethod
    def parse(cls, value: str) -> "SortMode":
        """Accept wire names as well as underscores ("due_date")."""
        return cls(value.strip().lower().replace("_", "-"))


def _title_key(title: str) -> str:
    return unicodedata.normalize("NFKD", title).casefold()


def order_by_position(actions: list[Action]) -> list[Action]:
    """Manual order: position, then id for the ties a mutation never leaves."""
    return sorted(actions, key=lambda a: (a.position, a.id))


def sort_siblings(actions: list[Action], mode: SortMode) -> list[Action]:
    """
    Sort one sibling group.

    Pure function - no I/O. Python's sort is stable, so equal-rank actions
    keep their input (manual) order.
    """
    match mode:
        case SortMode.MANUAL:
            return list(actions)
        case SortMode.DUE_DATE:
            # Undated actions after all dated ones; timestamps avoid comparing
            # naive with aware datetimes across the two buckets
            return sorted(
                actions,
                key=lambda a: (a.due_date is None, a.due_date.timestamp() if a.due_date else 0.0),
            )
        case SortMode.NAME:
            return sorted(actions, key=lambda a: _title_key(a.title))
        case SortMode.FLAGGED:
            return sorted(actions, key=lambda a: not a.flagged)
        case SortMode.CREATED:
            # Position stands in for creation order (newer = higher)
            return sorted(actions, key=lambda a: -a.position)
    raise ValueError(f"Unknown sort mode: {mode}")


def sort_tree(actions: list[Action], mode: SortMode) -> list[Action]:
    """
    Sort every sibling group independently.

    Groups are never merged, so a child is never reordered relative to a node
    at another depth. Returns the actions group by group.
    """
    if mode == SortMode.MANUAL:
        return list(actions)
    result: list[Action] = []
    for children in build_children_index(actions).values():
        result.extend(sort_siblings(children, mode))
    return result
