"""Tests for tree flattening."""

import pytest

from actiontree.core.actions import Action, DuplicateActionError
from actiontree.core.sorting import order_by_position
from actiontree.core.tree import (
    ancestor_ids,
    build_children_index,
    flatten,
    is_descendant,
    parent_map,
    subtree_ids,
    toggle_collapsed,
)


def act(action_id: str, parent: str | None = None, pos: int = 0) -> Action:
    return Action(id=action_id, title=action_id.upper(), parent_id=parent, position=pos)


@pytest.fixture
def simple():
    """A, B at the top level; C under B."""
    return [act("a", pos=1), act("b", pos=2), act("c", "b", pos=1)]


@pytest.fixture
def outline():
    """
    r1
      x
        x1
        x2
      y
    r2
      z
    """
    return order_by_position(
        [
            act("r1", pos=1),
            act("x", "r1", pos=1),
            act("x1", "x", pos=1),
            act("x2", "x", pos=2),
            act("y", "r1", pos=2),
            act("r2", pos=2),
            act("z", "r2", pos=1),
        ]
    )


def shape(nodes):
    return [(n.id, n.depth, n.has_children, n.is_collapsed) for n in nodes]


class TestBuildChildrenIndex:
    def test_groups_by_parent_in_input_order(self, simple):
        index = build_children_index(simple)
        assert [a.id for a in index[None]] == ["a", "b"]
        assert [a.id for a in index["b"]] == ["c"]
        assert "a" not in index

    def test_dangling_parent_grouped_as_root(self):
        actions = [act("a", pos=1), act("orphan", "deleted", pos=5)]
        index = build_children_index(actions)
        assert [a.id for a in index[None]] == ["a", "orphan"]
        assert "deleted" not in index

    def test_rejects_duplicate_ids(self):
        with pytest.raises(DuplicateActionError, match="dup"):
            build_children_index([act("dup"), act("dup", pos=1)])


class TestFlatten:
    def test_scenario_expanded(self, simple):
        assert shape(flatten(simple, set())) == [
            ("a", 0, False, False),
            ("b", 0, True, False),
            ("c", 1, False, False),
        ]

    def test_scenario_collapsed(self, simple):
        assert shape(flatten(simple, {"b"})) == [
            ("a", 0, False, False),
            ("b", 0, True, True),
        ]

    def test_default_collapsed_is_empty(self, simple):
        assert len(flatten(simple)) == 3

    def test_preorder_depths(self, outline):
        nodes = flatten(outline)
        assert [(n.id, n.depth) for n in nodes] == [
            ("r1", 0),
            ("x", 1),
            ("x1", 2),
            ("x2", 2),
            ("y", 1),
            ("r2", 0),
            ("z", 1),
        ]

    def test_every_action_appears_once(self, outline):
        ids = [n.id for n in flatten(outline)]
        assert len(ids) == len(outline)
        assert sorted(ids) == sorted(a.id for a in outline)

    def test_collapse_removes_exactly_the_subtree(self, outline):
        full = [n.id for n in flatten(outline)]
        collapsed = [n.id for n in flatten(outline, {"x"})]
        removed = set(full) - set(collapsed)
        assert removed == subtree_ids(outline, "x") == {"x1", "x2"}
        # Remaining order unchanged
        assert collapsed == [i for i in full if i not in removed]

    def test_collapse_round_trip(self, outline):
        before = flatten(outline)
        flatten(outline, {"r1"})
        assert flatten(outline, set()) == before

    def test_collapsed_ancestor_hides_collapsed_descendant(self, outline):
        ids = [n.id for n in flatten(outline, {"r1", "x"})]
        assert ids == ["r1", "r2", "z"]

    def test_collapsed_leaf_is_marked_but_harmless(self, outline):
        nodes = {n.id: n for n in flatten(outline, {"y"})}
        assert nodes["y"].is_collapsed is True
        assert nodes["y"].has_children is False

    def test_orphan_treated_as_root(self):
        actions = [act("a", pos=1), act("lost", "gone", pos=2), act("kid", "lost", pos=1)]
        assert shape(flatten(actions)) == [
            ("a", 0, False, False),
            ("lost", 0, True, False),
            ("kid", 1, False, False),
        ]

    def test_input_order_is_sibling_order(self):
        actions = [act("b", pos=2), act("a", pos=1)]
        assert [n.id for n in flatten(actions)] == ["b", "a"]

    def test_deep_chain_does_not_recurse(self):
        actions = [act("n0")] + [act(f"n{i}", f"n{i - 1}") for i in range(1, 3000)]
        nodes = flatten(actions)
        assert len(nodes) == 3000
        assert nodes[-1].depth == 2999

    def test_cycle_is_unreachable(self):
        actions = [act("root"), act("p", "q"), act("q", "p")]
        assert [n.id for n in flatten(actions)] == ["root"]

    def test_empty(self):
        assert flatten([], set()) == []


class TestAncestry:
    def test_ancestor_ids_nearest_first(self, outline):
        assert ancestor_ids(parent_map(outline), "x1") == ["x", "r1"]

    def test_is_descendant(self, outline):
        parents = parent_map(outline)
        assert is_descendant(parents, "x2", "r1") is True
        assert is_descendant(parents, "r1", "x2") is False
        assert is_descendant(parents, "x", "x") is False

    def test_ancestor_walk_stops_on_cycle(self):
        parents = {"p": "q", "q": "p"}
        assert ancestor_ids(parents, "p") == ["q"]

    def test_subtree_ids_of_leaf(self, outline):
        assert subtree_ids(outline, "z") == set()


class TestToggleCollapsed:
    def test_adds_and_removes(self):
        collapsed = toggle_collapsed(set(), "a")
        assert collapsed == {"a"}
        assert toggle_collapsed(collapsed, "a") == frozenset()

    def test_does_not_mutate_input(self):
        original = {"a"}
        toggle_collapsed(original, "b")
        assert original == {"a"}
