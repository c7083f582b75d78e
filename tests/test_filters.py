"""Tests for action filtering."""

from datetime import datetime, timezone

import pytest

from actiontree.core.actions import Action, Status
from actiontree.core.filters import (
    FilterSpec,
    QuickFilter,
    count_deferred,
    count_quick_filters,
    filter_actions,
    matches_quick_filter,
    total_estimated_minutes,
)

NOW = datetime(2025, 6, 10, 9, 30)


def act(action_id, **kwargs):
    return Action(id=action_id, title=action_id, **kwargs)


@pytest.fixture
def mixed():
    return [
        act("overdue", due_date=datetime(2025, 6, 1), estimated_minutes=15),
        act("today", due_date=datetime(2025, 6, 10, 17, 0), flagged=True, estimated_minutes=45),
        act("later", due_date=datetime(2025, 7, 1)),
        act("undated", estimated_minutes=5),
        act("done", status=Status.COMPLETED, due_date=datetime(2025, 6, 1), estimated_minutes=60),
        act("held", status=Status.ON_HOLD),
        act("hidden", defer_date=datetime(2025, 6, 20), estimated_minutes=30),
    ]


def ids(actions):
    return [a.id for a in actions]


class TestQuickFilter:
    def test_overdue_keeps_only_active(self):
        actions = [
            act("a", due_date=datetime(2025, 6, 1)),
            act("b", due_date=datetime(2025, 6, 1), status=Status.COMPLETED),
        ]
        spec = FilterSpec(quick_filter=QuickFilter.OVERDUE)
        assert ids(filter_actions(actions, spec, datetime(2025, 6, 10))) == ["a"]

    def test_due_earlier_today_is_not_overdue(self):
        action = act("a", due_date=datetime(2025, 6, 10, 8, 0))
        assert not matches_quick_filter(action, QuickFilter.OVERDUE, NOW)
        assert matches_quick_filter(action, QuickFilter.TODAY, NOW)
        assert matches_quick_filter(action, QuickFilter.UPCOMING, NOW)

    def test_undated_matches_only_all(self):
        action = act("a")
        for qf in QuickFilter:
            assert matches_quick_filter(action, qf, NOW) is (qf == QuickFilter.ALL)

    def test_today(self, mixed):
        spec = FilterSpec(quick_filter=QuickFilter.TODAY)
        assert ids(filter_actions(mixed, spec, NOW)) == ["today"]

    def test_upcoming(self, mixed):
        spec = FilterSpec(quick_filter=QuickFilter.UPCOMING)
        assert ids(filter_actions(mixed, spec, NOW)) == ["today", "later"]

    def test_flagged(self, mixed):
        spec = FilterSpec(quick_filter=QuickFilter.FLAGGED)
        assert ids(filter_actions(mixed, spec, NOW)) == ["today"]


class TestStatusAndDefer:
    def test_defaults_hide_completed_and_deferred(self, mixed):
        assert ids(filter_actions(mixed, FilterSpec(), NOW)) == ["overdue", "today", "later", "undated", "held"]

    def test_show_completed(self, mixed):
        spec = FilterSpec(show_completed=True)
        assert "done" in ids(filter_actions(mixed, spec, NOW))

    def test_show_deferred(self, mixed):
        spec = FilterSpec(show_deferred=True)
        assert "hidden" in ids(filter_actions(mixed, spec, NOW))

    def test_defer_date_reached_is_visible(self):
        action = act("a", defer_date=datetime(2025, 6, 10, 9, 0))
        assert ids(filter_actions([action], FilterSpec(), NOW)) == ["a"]

    def test_deferred_on_hold_is_not_hidden_by_defer(self):
        action = act("a", status=Status.ON_HOLD, defer_date=datetime(2025, 12, 1))
        assert ids(filter_actions([action], FilterSpec(), NOW)) == ["a"]

    def test_status_allow_list(self, mixed):
        spec = FilterSpec(statuses=frozenset({Status.ON_HOLD}))
        assert ids(filter_actions(mixed, spec, NOW)) == ["held"]

    def test_allow_list_does_not_override_show_completed(self, mixed):
        spec = FilterSpec(statuses=frozenset({Status.COMPLETED}))
        assert filter_actions(mixed, spec, NOW) == []

    def test_exclude_statuses(self, mixed):
        spec = FilterSpec(exclude_statuses=frozenset({Status.ON_HOLD}))
        assert "held" not in ids(filter_actions(mixed, spec, NOW))

    def test_max_minutes_drops_unestimated(self, mixed):
        spec = FilterSpec(max_minutes=20)
        assert ids(filter_actions(mixed, spec, NOW)) == ["overdue", "undated"]

    def test_quick_filter_applies_to_every_shown_status(self):
        actions = [
            act("held", status=Status.ON_HOLD, due_date=datetime(2025, 6, 1)),
            act("done", status=Status.COMPLETED, due_date=datetime(2025, 6, 1)),
            act("held_later", status=Status.ON_HOLD, due_date=datetime(2025, 7, 1)),
        ]
        spec = FilterSpec(show_completed=True, quick_filter=QuickFilter.OVERDUE)
        assert ids(filter_actions(actions, spec, NOW)) == ["held", "done"]

    def test_max_minutes_applies_to_every_shown_status(self):
        actions = [
            act("held", status=Status.ON_HOLD, estimated_minutes=10),
            act("dropped", status=Status.DROPPED, estimated_minutes=90),
        ]
        assert ids(filter_actions(actions, FilterSpec(max_minutes=20), NOW)) == ["held"]

    def test_keeps_input_order(self):
        actions = [act("z"), act("a"), act("m")]
        assert ids(filter_actions(actions, FilterSpec(), NOW)) == ["z", "a", "m"]

    def test_timezone_aware_instants(self):
        now = datetime(2025, 6, 10, 12, 0, tzinfo=timezone.utc)
        action = act("a", due_date=datetime(2025, 6, 9, 23, 0, tzinfo=timezone.utc))
        assert matches_quick_filter(action, QuickFilter.OVERDUE, now)


class TestCounts:
    def test_quick_filter_counts(self, mixed):
        counts = count_quick_filters(mixed, NOW)
        assert counts == {
            QuickFilter.OVERDUE: 1,
            QuickFilter.TODAY: 1,
            QuickFilter.FLAGGED: 1,
            QuickFilter.UPCOMING: 2,
        }

    def test_counts_include_deferred_when_shown(self):
        actions = [act("a", defer_date=datetime(2025, 7, 1), due_date=datetime(2025, 7, 2))]
        assert count_quick_filters(actions, NOW)[QuickFilter.UPCOMING] == 0
        assert count_quick_filters(actions, NOW, show_deferred=True)[QuickFilter.UPCOMING] == 1

    def test_count_deferred(self, mixed):
        assert count_deferred(mixed, NOW) == 1

    def test_total_estimated_minutes_active_only(self, mixed):
        assert total_estimated_minutes(mixed) == 15 + 45 + 5 + 30
