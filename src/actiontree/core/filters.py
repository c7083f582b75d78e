"""Pure action filtering logic - no I/O dependencies."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .actions import Action, Status


class QuickFilter(str, Enum):
    ALL = "all"
    OVERDUE = "overdue"
    TODAY = "today"
    FLAGGED = "flagged"
    UPCOMING = "upcoming"


@dataclass(frozen=True)
class FilterSpec:
    """Declarative predicate applied before sorting and flattening."""

    statuses: frozenset[Status] | None = None
    exclude_statuses: frozenset[Status] = frozenset()
    show_completed: bool = False
    show_deferred: bool = False
    quick_filter: QuickFilter = QuickFilter.ALL
    max_minutes: int | None = None


def matches_quick_filter(action: Action, quick_filter: QuickFilter, now: datetime) -> bool:
    match quick_filter:
        case QuickFilter.ALL:
            return True
        case QuickFilter.OVERDUE:
            return action.is_overdue(now)
        case QuickFilter.TODAY:
            return action.is_due_today(now)
        case QuickFilter.FLAGGED:
            return action.flagged
        case QuickFilter.UPCOMING:
            return action.is_upcoming(now)
    return False


def matches(action: Action, spec: FilterSpec, now: datetime) -> bool:
    """Whether a single action passes the filter."""
    if spec.statuses is not None and action.status not in spec.statuses:
        return False
    if action.status in spec.exclude_statuses:
        return False
    if action.status == Status.COMPLETED and not spec.show_completed:
        return False
    # Only active actions can be hidden by a future defer date
    if action.is_active and action.is_deferred(now) and not spec.show_deferred:
        return False
    if not matches_quick_filter(action, spec.quick_filter, now):
        return False
    if spec.max_minutes is not None:
        if not action.estimated_minutes or action.estimated_minutes > spec.max_minutes:
            return False
    return True


def filter_actions(actions: list[Action], spec: FilterSpec, now: datetime) -> list[Action]:
    """
    Drop actions that fail the filter, keeping input order.

    Pure function - no I/O. "now" must come from the caller so the result is
    deterministic.
    """
    return [a for a in actions if matches(a, spec, now)]


def count_quick_filters(
    actions: list[Action],
    now: datetime,
    show_deferred: bool = False,
) -> dict[QuickFilter, int]:
    """Badge counts per quick filter, over active actions only."""
    active = [a for a in actions if a.is_active and (show_deferred or not a.is_deferred(now))]
    return {
        qf: sum(1 for a in active if matches_quick_filter(a, qf, now))
        for qf in QuickFilter
        if qf != QuickFilter.ALL
    }


def count_deferred(actions: list[Action], now: datetime) -> int:
    return sum(1 for a in actions if a.is_active and a.is_deferred(now))


def total_estimated_minutes(actions: list[Action]) -> int:
    """Sum of estimates over active actions."""
    return sum(a.estimated_minutes or 0 for a in actions if a.is_active)
