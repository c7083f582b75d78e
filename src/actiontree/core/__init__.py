"""Functional core - pure business logic with no I/O."""

from .actions import (
    Action,
    ActionTreeError,
    DuplicateActionError,
    Status,
    check_forest,
    index_actions,
    set_status,
)
from .filters import FilterSpec, QuickFilter, filter_actions, count_quick_filters
from .sorting import SortMode, sort_siblings, sort_tree, order_by_position
from .tree import FlatNode, build_children_index, flatten, toggle_collapsed
from .ordering import Patch, effective_parent, reorder, indent, outdent, move_up, move_down, place_after
from .recurrence import Frequency, RecurrenceRule, next_occurrence, next_occurrences, parse_interval
from .repeat import RepeatMode, complete, next_instance
from .view import ActionView, build_view

__all__ = [
    # Actions
    "Action",
    "ActionTreeError",
    "DuplicateActionError",
    "Status",
    "check_forest",
    "index_actions",
    "set_status",
    # Filters
    "FilterSpec",
    "QuickFilter",
    "filter_actions",
    "count_quick_filters",
    # Sorting
    "SortMode",
    "sort_siblings",
    "sort_tree",
    "order_by_position",
    # Tree
    "FlatNode",
    "build_children_index",
    "flatten",
    "toggle_collapsed",
    # Ordering
    "Patch",
    "effective_parent",
    "reorder",
    "indent",
    "outdent",
    "move_up",
    "move_down",
    "place_after",
    # Recurrence
    "Frequency",
    "RecurrenceRule",
    "next_occurrence",
    "next_occurrences",
    "parse_interval",
    "RepeatMode",
    "complete",
    "next_instance",
    # View
    "ActionView",
    "build_view",
]
