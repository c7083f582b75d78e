"""Pure action domain logic - no I/O dependencies."""

from dataclasses import dataclass, replace
from datetime import date, datetime, time
from enum import Enum

from .recurrence import RecurrenceRule


class ActionTreeError(Exception):
    """Base error for actiontree."""

    pass


class DuplicateActionError(ActionTreeError):
    """Raised when an action collection contains the same id twice."""

    def __init__(self, action_id: str):
        super().__init__(f"Duplicate action id: {action_id}")
        self.action_id = action_id


class Status(str, Enum):
    """Action lifecycle status."""

    ACTIVE = "active"
    COMPLETED = "completed"
    ON_HOLD = "on_hold"
    DROPPED = "dropped"


def start_of_day(now: datetime) -> datetime:
    """Midnight of now's calendar day, keeping its tzinfo."""
    return datetime.combine(now.date(), time(0, 0), tzinfo=now.tzinfo)


@dataclass
class Action:
    """A task node in the action hierarchy."""

    id: str
    title: str
    parent_id: str | None = None
    position: int = 0
    status: Status = Status.ACTIVE
    flagged: bool = False
    due_date: datetime | None = None
    defer_date: datetime | None = None
    estimated_minutes: int | None = None
    completed_at: datetime | None = None
    recurrence: RecurrenceRule | None = None
    repeat_count: int = 0
    note: str = ""

    @property
    def is_active(self) -> bool:
        return self.status == Status.ACTIVE

    def is_deferred(self, now: datetime) -> bool:
        """Defer date is still in the future."""
        return self.defer_date is not None and self.defer_date > now

    def is_overdue(self, now: datetime) -> bool:
        """Due before the start of today."""
        return self.due_date is not None and self.due_date < start_of_day(now)

    def is_due_today(self, now: datetime) -> bool:
        return self.due_date is not None and self.due_date.date() == now.date()

    def is_upcoming(self, now: datetime) -> bool:
        """Due today or later."""
        return self.due_date is not None and self.due_date >= start_of_day(now)

    @classmethod
    def from_dict(cls, data: dict) -> "Action":
        """Create Action from the API's camelCase JSON shape."""
        rule = data.get("recurrence")
        return cls(
            id=data["id"],
            title=data["title"],
            parent_id=data.get("parentId"),
            position=int(data.get("position", 0)),
            status=Status(data.get("status", "active")),
            flagged=bool(data.get("flagged", False)),
            due_date=_parse_instant(data.get("dueDate")),
            defer_date=_parse_instant(data.get("deferDate")),
            estimated_minutes=data.get("estimatedMinutes"),
            completed_at=_parse_instant(data.get("completedAt")),
            recurrence=RecurrenceRule.from_dict(rule) if rule else None,
            repeat_count=data.get("repeatCount", 0),
            note=data.get("note", "") or "",
        )

    def to_dict(self) -> dict:
        """Serialize to the API's camelCase JSON shape."""
        return {
            "id": self.id,
            "title": self.title,
            "parentId": self.parent_id,
            "position": self.position,
            "status": self.status.value,
            "flagged": self.flagged,
            "dueDate": self.due_date.isoformat() if self.due_date else None,
            "deferDate": self.defer_date.isoformat() if self.defer_date else None,
            "estimatedMinutes": self.estimated_minutes,
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
            "recurrence": self.recurrence.to_dict() if self.recurrence else None,
            "repeatCount": self.repeat_count,
            "note": self.note,
        }


def _parse_instant(value: str | None) -> datetime | None:
    if not value:
        return None
    # Accept plain dates as midnight; older exports stored due dates that way
    if len(value) == 10:
        return datetime.combine(date.fromisoformat(value), time(0, 0))
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def index_actions(actions: list[Action]) -> dict[str, Action]:
    """
    Map action id to action.

    Duplicate ids are a data-integrity bug in the caller; they are rejected
    instead of picking a winner.
    """
    by_id: dict[str, Action] = {}
    for action in actions:
        if action.id in by_id:
            raise DuplicateActionError(action.id)
        by_id[action.id] = action
    return by_id


def set_status(action: Action, status: Status, now: datetime) -> Action:
    """
    Return a copy with a new status, keeping completed_at in step.

    completed_at is stamped on the transition into COMPLETED and cleared on
    any transition out of it. Pure function - no I/O.
    """
    if status == Status.COMPLETED:
        completed_at = action.completed_at if action.status == Status.COMPLETED else now
    else:
        completed_at = None
    return replace(action, status=status, completed_at=completed_at)


def check_forest(actions: list[Action]) -> list[str]:
    """
    Return ids of actions that are their own ancestor.

    An empty list means the parent links form a forest.
    """
    parents = {a.id: a.parent_id for a in actions}
    cyclic = []
    for action_id in parents:
        seen: set[str] = set()
        current = parents.get(action_id)
        while current is not None and current in parents:
            if current == action_id:
                cyclic.append(action_id)
                break
            if current in seen:
                break
            seen.add(current)
            current = parents[current]
    return cyclic
