"""Shared workflow layer between the CLI and any other front end.

Each write workflow re-reads the collection, derives the flattened view,
asks the core for a patch, persists it and returns it. Gestures are
serialized by construction: every patch is computed from the latest saved
state.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import datetime

from . import core
from .adapters.file_store import FileActionStore
from .config import Config
from .core.actions import Action, ActionTreeError, index_actions
from .core.filters import FilterSpec
from .core.ordering import DEFAULT_STRIDE, Patch
from .core.repeat import RepeatMode
from .core.sorting import SortMode
from .core.tree import FlatNode
from .core.view import ActionView
from .ports.action_repo import ActionRepository

logger = logging.getLogger(__name__)

Gesture = Callable[[list[FlatNode], list[Action]], Patch]


class ActionNotFoundError(ActionTreeError):
    """Raised when a workflow is asked to change an action that does not exist."""

    def __init__(self, action_id: str):
        super().__init__(f"No action with id {action_id!r}")
        self.action_id = action_id


@dataclass
class ViewOptions:
    """UI-owned view state, passed in on every call."""

    filter_spec: FilterSpec = field(default_factory=FilterSpec)
    sort_mode: SortMode = SortMode.MANUAL
    collapsed: frozenset[str] = frozenset()

    @classmethod
    def from_config(cls, config: Config) -> "ViewOptions":
        return cls(
            filter_spec=FilterSpec(
                show_completed=config.show_completed,
                show_deferred=config.show_deferred,
            ),
            sort_mode=config.default_sort,
        )


@dataclass
class CompletionResult:
    completed: Action
    next_action: Action | None
    patch: Patch


def get_store(config: Config) -> FileActionStore:
    """Resolve the actions file from config."""
    return FileActionStore(config.actions_path)


def load_view(repo: ActionRepository, now: datetime, options: ViewOptions | None = None) -> ActionView:
    """Fetch the collection and build the outline."""
    options = options or ViewOptions()
    return core.build_view(
        repo.fetch_all(),
        options.collapsed,
        now,
        filter_spec=options.filter_spec,
        sort_mode=options.sort_mode,
    )


def apply_gesture(
    repo: ActionRepository,
    gesture: Gesture,
    action_ids: list[str],
    now: datetime,
    options: ViewOptions | None = None,
    dry_run: bool = False,
) -> Patch:
    """
    Compute a patch from a fresh read and persist it.

    No-op patches are logged and never written.
    """
    options = options or ViewOptions()
    actions = repo.fetch_all()
    by_id = index_actions(actions)
    for action_id in action_ids:
        if action_id not in by_id:
            raise ActionNotFoundError(action_id)

    view = core.build_view(
        actions,
        options.collapsed,
        now,
        filter_spec=options.filter_spec,
        sort_mode=options.sort_mode,
    )
    patch = gesture(view.nodes, actions)
    if not patch:
        logger.info("No changes for %s", ", ".join(action_ids))
        return patch

    if dry_run:
        logger.info("Dry run: %d action(s) would change", len(patch))
        return patch

    repo.save_all(patch.apply(actions))
    logger.info("Saved changes to %d action(s)", len(patch))
    return patch


def indent_action(
    repo: ActionRepository,
    action_id: str,
    now: datetime,
    options: ViewOptions | None = None,
    stride: int = DEFAULT_STRIDE,
    dry_run: bool = False,
) -> Patch:
    return apply_gesture(
        repo,
        lambda nodes, actions: core.indent(nodes, action_id, actions=actions, stride=stride),
        [action_id],
        now,
        options,
        dry_run,
    )


def outdent_action(
    repo: ActionRepository,
    action_id: str,
    now: datetime,
    options: ViewOptions | None = None,
    stride: int = DEFAULT_STRIDE,
    dry_run: bool = False,
) -> Patch:
    return apply_gesture(
        repo,
        lambda nodes, actions: core.outdent(nodes, action_id, actions=actions, stride=stride),
        [action_id],
        now,
        options,
        dry_run,
    )


def move_action(
    repo: ActionRepository,
    dragged_id: str,
    target_id: str,
    now: datetime,
    options: ViewOptions | None = None,
    stride: int = DEFAULT_STRIDE,
    dry_run: bool = False,
) -> Patch:
    """Drop dragged_id onto target_id's slot."""
    return apply_gesture(
        repo,
        lambda nodes, actions: core.reorder(nodes, dragged_id, target_id, actions=actions, stride=stride),
        [dragged_id, target_id],
        now,
        options,
        dry_run,
    )


def complete_action(
    repo: ActionRepository,
    action_id: str,
    now: datetime,
    mode: RepeatMode = RepeatMode.FIXED,
    stride: int = DEFAULT_STRIDE,
    dry_run: bool = False,
) -> CompletionResult:
    """
    Complete an action; a repeating one gets its next instance right after it.
    """
    actions = repo.fetch_all()
    by_id = index_actions(actions)
    if action_id not in by_id:
        raise ActionNotFoundError(action_id)

    done, following = core.complete(by_id[action_id], now, mode)
    updated = [done if a.id == action_id else a for a in actions]

    patch = Patch()
    if following is not None:
        patch = core.place_after(updated, action_id, following, stride=stride)
        following = replace(following, **patch[following.id])
        updated = patch.apply(updated) + [following]
        logger.info("Next instance of %s due %s", action_id, following.due_date)

    if not dry_run:
        repo.save_all(updated)
    return CompletionResult(completed=done, next_action=following, patch=patch)
