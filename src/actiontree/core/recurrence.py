"""Pure recurrence rule evaluation - no I/O dependencies.

Weekdays use the 0 = Sunday numbering of the rule picker, not Python's
Monday-based ``date.weekday()``.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import TypeVar

from dateutil.relativedelta import relativedelta

D = TypeVar("D", date, datetime)

DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
WEEKDAYS = frozenset({1, 2, 3, 4, 5})

_INTERVAL_PATTERN = re.compile(r"^(\d+)(d|w|m|y)$")


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


_UNITS = {
    "d": Frequency.DAILY,
    "w": Frequency.WEEKLY,
    "m": Frequency.MONTHLY,
    "y": Frequency.YEARLY,
}


@dataclass(frozen=True)
class RecurrenceRule:
    """How often an action repeats. Never mutated once attached."""

    frequency: Frequency
    interval: int = 1
    days_of_week: frozenset[int] | None = None
    end_date: date | None = None
    count: int | None = None

    def __post_init__(self):
        if self.interval < 1:
            raise ValueError(f"interval must be positive, got {self.interval}")
        if self.days_of_week is not None:
            days = frozenset(self.days_of_week)
            if not days or not days <= frozenset(range(7)):
                raise ValueError(f"days_of_week must be a non-empty subset of 0..6, got {sorted(days)}")
            object.__setattr__(self, "days_of_week", days)

    @classmethod
    def from_dict(cls, data: dict) -> "RecurrenceRule":
        days = data.get("daysOfWeek")
        end = data.get("endDate")
        return cls(
            frequency=Frequency(data["frequency"]),
            interval=int(data.get("interval", 1)),
            days_of_week=frozenset(days) if days else None,
            end_date=date.fromisoformat(end[:10]) if end else None,
            count=data.get("count"),
        )

    def to_dict(self) -> dict:
        data: dict = {"frequency": self.frequency.value, "interval": self.interval}
        if self.days_of_week:
            data["daysOfWeek"] = sorted(self.days_of_week)
        if self.end_date:
            data["endDate"] = self.end_date.isoformat()
        if self.count is not None:
            data["count"] = self.count
        return data


def sunday_weekday(d: date) -> int:
    """Weekday number with Sunday = 0."""
    return (d.weekday() + 1) % 7


def next_occurrence(rule: RecurrenceRule, anchor: D) -> D:
    """
    Next occurrence strictly after the anchor.

    Pure function - no I/O, never reads the clock. Month and year steps clamp
    to the last valid day (Jan 31 + 1 month = Feb 29 in a leap year).
    """
    match rule.frequency:
        case Frequency.DAILY:
            return anchor + timedelta(days=rule.interval)
        case Frequency.WEEKLY:
            if not rule.days_of_week:
                return anchor + timedelta(weeks=rule.interval)
            return _next_weekly_day(rule.days_of_week, rule.interval, anchor)
        case Frequency.MONTHLY:
            return anchor + relativedelta(months=rule.interval)
        case Frequency.YEARLY:
            return anchor + relativedelta(years=rule.interval)
    raise ValueError(f"Unknown frequency: {rule.frequency}")


def _next_weekly_day(days: frozenset[int], interval: int, anchor: D) -> D:
    current = sunday_weekday(anchor)
    # Rest of the anchor's week first
    for offset in range(1, 7 - current):
        if current + offset in days:
            return anchor + timedelta(days=offset)

    week_start = anchor - timedelta(days=current) + timedelta(weeks=interval)
    first = min(days)
    return week_start + timedelta(days=first)


def is_exhausted(rule: RecurrenceRule, occurrence: date | datetime, produced: int) -> bool:
    """
    Whether the series ends before this occurrence.

    produced is the number of instances that already exist, the anchor's
    included, so a rule with count=3 yields the anchor plus two more.
    """
    if rule.count is not None and produced >= rule.count:
        return True
    if rule.end_date is not None:
        day = occurrence.date() if isinstance(occurrence, datetime) else occurrence
        return day > rule.end_date
    return False


def next_occurrences(rule: RecurrenceRule, anchor: D, limit: int = 5) -> list[D]:
    """Preview the next occurrences, stopping at the rule's end conditions."""
    results: list[D] = []
    current = anchor
    while len(results) < limit:
        current = next_occurrence(rule, current)
        if is_exhausted(rule, current, len(results) + 1):
            break
        results.append(current)
    return results


def parse_interval(value: str) -> RecurrenceRule:
    """
    Parse the compact interval format used by the API ("3d", "2w", "1m", "1y").

    Raises ValueError for anything else.
    """
    match = _INTERVAL_PATTERN.match(value.strip().lower())
    if not match:
        raise ValueError(f"Invalid interval format: {value}")
    return RecurrenceRule(frequency=_UNITS[match.group(2)], interval=int(match.group(1)))


def describe_rule(rule: RecurrenceRule) -> str:
    """Human-readable description, e.g. "Every 2 weeks on Mon, Thu"."""
    n = rule.interval
    match rule.frequency:
        case Frequency.DAILY:
            return "Every day" if n == 1 else f"Every {n} days"
        case Frequency.WEEKLY:
            days = rule.days_of_week
            if days and len(days) < 7:
                if days == WEEKDAYS and n == 1:
                    return "Every weekday"
                names = ", ".join(DAY_NAMES[d] for d in sorted(days))
                return f"Weekly on {names}" if n == 1 else f"Every {n} weeks on {names}"
            return "Every week" if n == 1 else f"Every {n} weeks"
        case Frequency.MONTHLY:
            return "Every month" if n == 1 else f"Every {n} months"
        case Frequency.YEARLY:
            return "Every year" if n == 1 else f"Every {n} years"
    return "Repeating"


def short_label(rule: RecurrenceRule) -> str:
    """Compact badge label: "Weekly", "2w", "3mo"."""
    labels = {
        Frequency.DAILY: ("Daily", "d"),
        Frequency.WEEKLY: ("Weekly", "w"),
        Frequency.MONTHLY: ("Monthly", "mo"),
        Frequency.YEARLY: ("Yearly", "y"),
    }
    word, unit = labels[rule.frequency]
    return word if rule.interval == 1 else f"{rule.interval}{unit}"
