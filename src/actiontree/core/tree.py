"""Pure tree flattening logic - no I/O dependencies."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from .actions import Action, index_actions

logger = logging.getLogger(__name__)

ChildrenIndex = dict[str | None, list[Action]]


@dataclass(frozen=True)
class FlatNode:
    """One row of the flattened outline."""

    action: Action
    depth: int
    has_children: bool
    is_collapsed: bool

    @property
    def id(self) -> str:
        return self.action.id

    @property
    def parent_id(self) -> str | None:
        return self.action.parent_id


def build_children_index(actions: list[Action]) -> ChildrenIndex:
    """
    Group actions by parent, keeping input order inside each group.

    An action whose parent is not in the collection (deleted or filtered out)
    is grouped under None and shows up as a root. Pure function - no I/O.
    """
    by_id = index_actions(actions)
    index: ChildrenIndex = {}
    for action in actions:
        parent = action.parent_id if action.parent_id in by_id else None
        index.setdefault(parent, []).append(action)
    return index


def flatten(actions: list[Action], collapsed: Iterable[str] = frozenset()) -> list[FlatNode]:
    """
    Pre-order, depth-annotated sequence of the action forest.

    Collapsed nodes are emitted but their descendants are not; the underlying
    actions are untouched so re-expanding restores them. Iterative, so deep
    outlines do not hit the recursion limit.
    """
    collapsed = frozenset(collapsed)
    index = build_children_index(actions)
    result: list[FlatNode] = []

    stack = [(iter(index.get(None, [])), 0)]
    while stack:
        children, depth = stack[-1]
        action = next(children, None)
        if action is None:
            stack.pop()
            continue

        kids = index.get(action.id, [])
        is_collapsed = action.id in collapsed
        result.append(FlatNode(action, depth, bool(kids), is_collapsed))
        if kids and not is_collapsed:
            stack.append((iter(kids), depth + 1))

    if not collapsed and len(result) != len(actions):
        # Only a parent cycle can leave nodes unreachable from the roots
        logger.warning("flatten: %d action(s) unreachable from any root", len(actions) - len(result))
    return result


def parent_map(actions: Iterable[Action]) -> dict[str, str | None]:
    return {a.id: a.parent_id for a in actions}


def ancestor_ids(parents: dict[str, str | None], action_id: str) -> list[str]:
    """Ancestors from nearest to farthest, stopping at unknown parents or a cycle."""
    result: list[str] = []
    seen = {action_id}
    current = parents.get(action_id)
    while current is not None and current in parents and current not in seen:
        result.append(current)
        seen.add(current)
        current = parents[current]
    return result


def is_descendant(parents: dict[str, str | None], node_id: str, ancestor_id: str) -> bool:
    """True if ancestor_id is a strict ancestor of node_id."""
    return ancestor_id in ancestor_ids(parents, node_id)


def subtree_ids(actions: list[Action], root_id: str) -> set[str]:
    """Ids of root_id's descendants, root excluded."""
    index = build_children_index(actions)
    result: set[str] = set()
    pending = [root_id]
    while pending:
        for child in index.get(pending.pop(), []):
            if child.id not in result:
                result.add(child.id)
                pending.append(child.id)
    return result


def toggle_collapsed(collapsed: Iterable[str], action_id: str) -> frozenset[str]:
    """Return a new collapsed set with action_id flipped."""
    current = frozenset(collapsed)
    if action_id in current:
        return current - {action_id}
    return current | {action_id}
