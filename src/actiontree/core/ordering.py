"""Pure reorder / indent / outdent logic - no I/O dependencies.

Every operation reads the flattened sequence the user is looking at, plus
the full collection for key allocation, and returns a Patch of field updates
for the caller to persist. Sibling groups follow the outline: an action whose
parent is missing belongs to the top-level group. An empty patch
means the gesture was a no-op (unknown id, nothing to indent under, a move
that would put a node inside its own subtree, ...); nothing here raises for
those.

Position keys are integers spaced DEFAULT_STRIDE apart. An insert takes the
midpoint of its neighbours; only when no integer is left between them is the
smallest run of neighbours around the insertion point renumbered.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any

from .actions import Action, index_actions
from .sorting import order_by_position
from .tree import FlatNode, is_descendant, parent_map

logger = logging.getLogger(__name__)

DEFAULT_STRIDE = 1024


@dataclass
class Patch:
    """Per-action field updates produced by a mutation, awaiting persistence."""

    changes: dict[str, dict[str, Any]] = field(default_factory=dict)

    def set(self, action_id: str, **fields: Any) -> None:
        self.changes.setdefault(action_id, {}).update(fields)

    def __bool__(self) -> bool:
        return bool(self.changes)

    def __len__(self) -> int:
        return len(self.changes)

    def __contains__(self, action_id: object) -> bool:
        return action_id in self.changes

    def __getitem__(self, action_id: str) -> dict[str, Any]:
        return self.changes[action_id]

    def apply(self, actions: list[Action]) -> list[Action]:
        """Return the collection with the patch applied; input is not modified."""
        return [replace(a, **self.changes[a.id]) if a.id in self.changes else a for a in actions]

    def to_dict(self) -> dict[str, dict[str, Any]]:
        """Wire shape: {id: {"parentId": ..., "position": ...}}."""
        names = {"parent_id": "parentId", "position": "position"}
        return {
            action_id: {names[k]: v for k, v in fields.items()}
            for action_id, fields in self.changes.items()
        }


def allocate_keys(keys: list[int], index: int, stride: int = DEFAULT_STRIDE) -> tuple[int, list[int]]:
    """
    Make room for one new key at index in an ascending key list.

    Returns (start, new_keys): new_keys replaces keys[start:start + len(new_keys) - 1]
    with the inserted key at index. Keys are always > 0.
    """
    n = len(keys)
    lo = hi = index
    grow_right = True
    while True:
        lower = keys[lo - 1] if lo > 0 else 0
        upper = keys[hi] if hi < n else None
        count = hi - lo + 1
        if upper is None or upper - lower - 1 >= count:
            break
        if (grow_right and hi < n) or lo == 0:
            hi += 1
        else:
            lo -= 1
        grow_right = not grow_right

    if upper is None:
        new_keys = [lower + stride * (j + 1) for j in range(count)]
    else:
        span = upper - lower
        new_keys = [lower + span * (j + 1) // (count + 1) for j in range(count)]
    return lo, new_keys


def _place(
    moved: Action,
    new_parent: str | None,
    siblings: list[Action],
    index: int,
    stride: int,
) -> Patch:
    """Insert moved into siblings (position order, moved excluded) at index."""
    start, new_keys = allocate_keys([s.position for s in siblings], index, stride)
    window = siblings[start:index] + [moved] + siblings[index : start + len(new_keys) - 1]

    patch = Patch()
    for action, key in zip(window, new_keys):
        if action.id == moved.id:
            continue
        if action.position != key:
            patch.set(action.id, position=key)

    moved_key = new_keys[index - start]
    if moved.parent_id != new_parent:
        patch.set(moved.id, parent_id=new_parent)
    if moved.position != moved_key or moved.id in patch:
        patch.set(moved.id, position=moved_key)
    if len(new_keys) > 1:
        logger.debug("Renumbered %d sibling(s) under %s", len(new_keys) - 1, new_parent)
    return patch


def effective_parent(action: Action, by_id: dict[str, Action]) -> str | None:
    """Parent the outline groups action under: None when the parent is missing."""
    return action.parent_id if action.parent_id in by_id else None


def _siblings(by_id: dict[str, Action], parent_id: str | None, exclude: str) -> list[Action]:
    return order_by_position(
        [a for a in by_id.values() if effective_parent(a, by_id) == parent_id and a.id != exclude]
    )


def _insert_index_after(siblings: list[Action], anchor: Action) -> int:
    anchor_key = (anchor.position, anchor.id)
    return sum(1 for s in siblings if (s.position, s.id) <= anchor_key)


def _locate(nodes: list[FlatNode], action_id: str) -> int | None:
    for i, node in enumerate(nodes):
        if node.id == action_id:
            return i
    return None


def _previous_sibling(nodes: list[FlatNode], i: int) -> FlatNode | None:
    depth = nodes[i].depth
    for node in reversed(nodes[:i]):
        if node.depth < depth:
            return None
        if node.depth == depth:
            return node
    return None


def _next_sibling(nodes: list[FlatNode], i: int) -> FlatNode | None:
    depth = nodes[i].depth
    for node in nodes[i + 1 :]:
        if node.depth < depth:
            return None
        if node.depth == depth:
            return node
    return None


def _visible_parent(nodes: list[FlatNode], i: int) -> FlatNode | None:
    depth = nodes[i].depth
    for node in reversed(nodes[:i]):
        if node.depth == depth - 1:
            return node
    return None


def reorder(
    nodes: list[FlatNode],
    dragged_id: str,
    target_id: str,
    actions: list[Action],
    stride: int = DEFAULT_STRIDE,
) -> Patch:
    """
    Move dragged_id into target_id's slot in target_id's sibling group.

    The dragged node lands after the target when it was above it in the
    sequence and before it otherwise. Its subtree follows it. actions is the
    full collection, so siblings that are filtered out or collapsed keep
    distinct keys. A target shown as a root because its parent is missing
    puts the dragged node at the top level.
    """
    if dragged_id == target_id:
        logger.debug("reorder %s: dropped onto itself", dragged_id)
        return Patch()
    di = _locate(nodes, dragged_id)
    ti = _locate(nodes, target_id)
    if di is None or ti is None:
        logger.debug("reorder %s -> %s: id not in sequence", dragged_id, target_id)
        return Patch()

    by_id = index_actions(actions)
    if dragged_id not in by_id or target_id not in by_id:
        return Patch()
    if is_descendant(parent_map(by_id.values()), target_id, dragged_id):
        logger.debug("reorder %s -> %s: target is inside the dragged subtree", dragged_id, target_id)
        return Patch()

    target = by_id[target_id]
    new_parent = effective_parent(target, by_id)
    siblings = _siblings(by_id, new_parent, dragged_id)
    index = siblings.index(target)
    if di < ti:
        index += 1
    return _place(by_id[dragged_id], new_parent, siblings, index, stride)


def indent(
    nodes: list[FlatNode],
    action_id: str,
    actions: list[Action],
    stride: int = DEFAULT_STRIDE,
) -> Patch:
    """Make action_id the last child of the sibling shown just above it."""
    i = _locate(nodes, action_id)
    if i is None:
        logger.debug("indent %s: id not in sequence", action_id)
        return Patch()
    previous = _previous_sibling(nodes, i)
    if previous is None:
        logger.debug("indent %s: no preceding sibling", action_id)
        return Patch()

    by_id = index_actions(actions)
    if action_id not in by_id or previous.id not in by_id:
        return Patch()
    siblings = _siblings(by_id, previous.id, action_id)
    return _place(by_id[action_id], previous.id, siblings, len(siblings), stride)


def outdent(
    nodes: list[FlatNode],
    action_id: str,
    actions: list[Action],
    stride: int = DEFAULT_STRIDE,
) -> Patch:
    """Move action_id up one level, directly after its former parent."""
    i = _locate(nodes, action_id)
    if i is None:
        logger.debug("outdent %s: id not in sequence", action_id)
        return Patch()
    if nodes[i].depth == 0:
        logger.debug("outdent %s: already top level", action_id)
        return Patch()
    parent_node = _visible_parent(nodes, i)
    if parent_node is None:
        return Patch()

    by_id = index_actions(actions)
    if action_id not in by_id or parent_node.id not in by_id:
        return Patch()
    parent = by_id[parent_node.id]
    new_parent = effective_parent(parent, by_id)
    siblings = _siblings(by_id, new_parent, action_id)
    index = _insert_index_after(siblings, parent)
    return _place(by_id[action_id], new_parent, siblings, index, stride)


def move_up(
    nodes: list[FlatNode],
    action_id: str,
    actions: list[Action],
    stride: int = DEFAULT_STRIDE,
) -> Patch:
    """Swap with the sibling shown above."""
    i = _locate(nodes, action_id)
    if i is None:
        return Patch()
    previous = _previous_sibling(nodes, i)
    if previous is None:
        return Patch()
    return reorder(nodes, action_id, previous.id, actions, stride=stride)


def move_down(
    nodes: list[FlatNode],
    action_id: str,
    actions: list[Action],
    stride: int = DEFAULT_STRIDE,
) -> Patch:
    """Swap with the sibling shown below."""
    i = _locate(nodes, action_id)
    if i is None:
        return Patch()
    following = _next_sibling(nodes, i)
    if following is None:
        return Patch()
    return reorder(nodes, action_id, following.id, actions, stride=stride)


def place_after(
    actions: list[Action],
    anchor_id: str,
    new_action: Action,
    stride: int = DEFAULT_STRIDE,
) -> Patch:
    """
    Key allocation for a new action inserted right after an existing one.

    new_action does not need to be in actions yet; the patch sets its
    parent and position.
    """
    by_id = index_actions([a for a in actions if a.id != new_action.id])
    anchor = by_id.get(anchor_id)
    if anchor is None:
        return Patch()
    new_parent = effective_parent(anchor, by_id)
    siblings = _siblings(by_id, new_parent, new_action.id)
    index = siblings.index(anchor) + 1
    patch = _place(new_action, new_parent, siblings, index, stride)
    # The caller creates new_action from scratch, so spell out both fields
    fields = patch.changes.setdefault(new_action.id, {})
    fields.setdefault("parent_id", new_parent)
    fields.setdefault("position", new_action.position)
    return patch
