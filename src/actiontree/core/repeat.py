"""Pure repeating-action logic - no I/O dependencies."""

import uuid
from dataclasses import replace
from datetime import datetime
from enum import Enum

from .actions import Action, Status, set_status
from .recurrence import is_exhausted, next_occurrence


class RepeatMode(str, Enum):
    """Which date the next instance is computed from."""

    FIXED = "fixed"
    DEFER_ANOTHER = "defer_another"
    DUE_AGAIN = "due_again"


def next_instance(
    action: Action,
    completed_at: datetime,
    mode: RepeatMode = RepeatMode.FIXED,
    new_id: str | None = None,
) -> Action | None:
    """
    Materialize the action that follows a completed repeating action.

    FIXED steps the existing due (or defer) date by the rule; DEFER_ANOTHER
    and DUE_AGAIN restart the defer / due date from the completion time. The
    gap between defer and due date is kept. The rule is copied forward
    unchanged. Returns None when the action does not repeat or its series
    is over.

    Pure function - no I/O.
    """
    rule = action.recurrence
    if rule is None:
        return None

    due, defer = action.due_date, action.defer_date
    gap = due - defer if due and defer else None

    match mode:
        case RepeatMode.FIXED:
            if due:
                due = next_occurrence(rule, due)
                defer = due - gap if gap is not None else None
            elif defer:
                defer = next_occurrence(rule, defer)
            else:
                due = next_occurrence(rule, completed_at)
        case RepeatMode.DEFER_ANOTHER:
            defer = next_occurrence(rule, completed_at)
            due = defer + gap if gap is not None else None
        case RepeatMode.DUE_AGAIN:
            due = next_occurrence(rule, completed_at)
            defer = due - gap if gap is not None else None

    produced = action.repeat_count + 1
    occurrence = due or defer
    if occurrence is not None and is_exhausted(rule, occurrence, produced):
        return None

    return replace(
        action,
        id=new_id or uuid.uuid4().hex,
        status=Status.ACTIVE,
        completed_at=None,
        due_date=due,
        defer_date=defer,
        repeat_count=produced,
    )


def complete(
    action: Action,
    now: datetime,
    mode: RepeatMode = RepeatMode.FIXED,
    new_id: str | None = None,
) -> tuple[Action, Action | None]:
    """Mark an action completed and build its next instance, if any."""
    done = set_status(action, Status.COMPLETED, now)
    if action.status == Status.COMPLETED:
        # Completing twice must not spawn a second follow-up
        return done, None
    return done, next_instance(action, now, mode, new_id)
