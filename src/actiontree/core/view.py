"""Pure outline view assembly - no I/O dependencies."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from .actions import Action, Status
from .filters import (
    FilterSpec,
    QuickFilter,
    count_deferred,
    count_quick_filters,
    filter_actions,
    total_estimated_minutes,
)
from .recurrence import short_label
from .sorting import SortMode, order_by_position, sort_tree
from .tree import FlatNode, flatten


@dataclass
class ActionView:
    """Flattened outline plus the counters shown around it."""

    nodes: list[FlatNode]
    visible: list[Action]
    sort_mode: SortMode
    filter_spec: FilterSpec
    quick_filter_counts: dict[QuickFilter, int] = field(default_factory=dict)
    deferred_count: int = 0
    completed_count: int = 0
    total_minutes: int = 0


def build_view(
    actions: list[Action],
    collapsed: Iterable[str],
    now: datetime,
    filter_spec: FilterSpec | None = None,
    sort_mode: SortMode = SortMode.MANUAL,
) -> ActionView:
    """
    Run the read path: filter, manual order, per-group sort, flatten.

    Pure function - no I/O. The counters are taken over the unfiltered
    collection so the badges stay stable while a quick filter is active.
    """
    filter_spec = filter_spec or FilterSpec()
    visible = filter_actions(actions, filter_spec, now)
    ordered = sort_tree(order_by_position(visible), sort_mode)
    nodes = flatten(ordered, collapsed)

    return ActionView(
        nodes=nodes,
        visible=visible,
        sort_mode=sort_mode,
        filter_spec=filter_spec,
        quick_filter_counts=count_quick_filters(actions, now, filter_spec.show_deferred),
        deferred_count=count_deferred(actions, now),
        completed_count=sum(1 for a in actions if a.status == Status.COMPLETED),
        total_minutes=total_estimated_minutes([n.action for n in nodes]),
    )


def format_node_line(node: FlatNode, now: datetime | None = None) -> str:
    """
    Format one outline row for terminal display.

    Pure function - no I/O.
    """
    action = node.action
    if node.has_children:
        marker = "▸" if node.is_collapsed else "▾"
    else:
        marker = "•"
    check = "[x]" if action.status == Status.COMPLETED else "[ ]"

    extras = []
    if action.flagged:
        extras.append("⚑")
    if action.due_date:
        due = f"due {action.due_date.date().isoformat()}"
        if now and action.is_active and action.is_overdue(now):
            due = f"OVERDUE {action.due_date.date().isoformat()}"
        extras.append(due)
    if action.estimated_minutes:
        extras.append(f"{action.estimated_minutes}m")
    if action.recurrence:
        extras.append(f"↻ {short_label(action.recurrence)}")
    if action.status in (Status.ON_HOLD, Status.DROPPED):
        extras.append(action.status.value)

    suffix = f" ({', '.join(extras)})" if extras else ""
    return f"{'  ' * node.depth}{marker} {check} {action.title}{suffix}"
