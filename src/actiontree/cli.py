"""actiontree CLI - hierarchical action outline."""

import json
import logging
import sys
from datetime import date, datetime

import click

from .config import load_config
from .core.actions import ActionTreeError
from .core.filters import FilterSpec, QuickFilter
from .core.ordering import Patch
from .core.recurrence import (
    DAY_NAMES,
    RecurrenceRule,
    describe_rule,
    next_occurrences,
    parse_interval,
)
from .core.repeat import RepeatMode
from .core.sorting import SortMode
from .core.view import format_node_line
from .workflows import (
    ViewOptions,
    complete_action,
    get_store,
    indent_action,
    load_view,
    move_action,
    outdent_action,
)

SORT_CHOICES = [m.value for m in SortMode]
QUICK_CHOICES = [q.value for q in QuickFilter]


def _parse_now(value: str | None) -> datetime:
    if not value:
        return datetime.now()
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"not an ISO date/time: {value}", param_hint="--now")


def _echo_patch(patch: Patch, as_json: bool, dry_run: bool) -> None:
    if as_json:
        click.echo(json.dumps(patch.to_dict(), indent=2))
        return
    if not patch:
        click.echo("No changes.")
        return
    verb = "Would update" if dry_run else "Updated"
    click.echo(f"{verb} {len(patch)} action(s):")
    for action_id, fields in patch.changes.items():
        parts = ", ".join(f"{k}={v}" for k, v in fields.items())
        click.echo(f"  {action_id}: {parts}")


def _fail(e: Exception) -> None:
    click.echo(f"Error: {e}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(package_name="actiontree")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--file", "actions_file", default=None, help="Actions JSON file (overrides config)")
@click.pass_context
def main(ctx, debug: bool, actions_file: str | None):
    """actiontree - hierarchical action outline."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )
    config = load_config()
    if actions_file:
        config.actions_file = actions_file
    ctx.obj = config


def _view_options(config, sort: str | None, quick: str, show_completed: bool | None,
                  show_deferred: bool | None, max_minutes: int | None, collapse: tuple[str, ...]) -> ViewOptions:
    options = ViewOptions.from_config(config)
    return ViewOptions(
        filter_spec=FilterSpec(
            show_completed=options.filter_spec.show_completed if show_completed is None else show_completed,
            show_deferred=options.filter_spec.show_deferred if show_deferred is None else show_deferred,
            quick_filter=QuickFilter(quick),
            max_minutes=max_minutes,
        ),
        sort_mode=SortMode.parse(sort) if sort else options.sort_mode,
        collapsed=frozenset(collapse),
    )


def view_options(f):
    """Shared filter/sort/collapse options for commands that read the outline."""
    f = click.option("--sort", type=click.Choice(SORT_CHOICES), default=None, help="Sort mode")(f)
    f = click.option("--quick", type=click.Choice(QUICK_CHOICES), default="all", help="Quick filter")(f)
    f = click.option("--completed/--no-completed", "show_completed", default=None, help="Show completed actions")(f)
    f = click.option("--deferred/--no-deferred", "show_deferred", default=None, help="Show deferred actions")(f)
    f = click.option("--max-minutes", type=int, default=None, help="Only actions estimated at or under N minutes")(f)
    f = click.option("--collapse", multiple=True, help="Action id to collapse (repeatable)")(f)
    f = click.option("--now", "now_str", default=None, help="Reference time (ISO), defaults to now")(f)
    return f


@main.command()
@view_options
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def tree(config, sort, quick, show_completed, show_deferred, max_minutes, collapse, now_str, as_json: bool):
    """Show the action outline."""
    now = _parse_now(now_str)
    options = _view_options(config, sort, quick, show_completed, show_deferred, max_minutes, collapse)
    try:
        view = load_view(get_store(config), now, options)
    except ActionTreeError as e:
        _fail(e)

    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "id": n.action.id,
                        "title": n.action.title,
                        "depth": n.depth,
                        "hasChildren": n.has_children,
                        "isCollapsed": n.is_collapsed,
                    }
                    for n in view.nodes
                ],
                indent=2,
            )
        )
        return

    if not view.nodes:
        click.echo("No actions.")
        return

    for node in view.nodes:
        click.echo(format_node_line(node, now))

    counts = ", ".join(f"{qf.value} {n}" for qf, n in view.quick_filter_counts.items() if n)
    click.echo()
    click.echo(f"{len(view.nodes)} shown, {view.deferred_count} deferred, {view.completed_count} completed")
    if counts:
        click.echo(f"Quick filters: {counts}")
    if view.total_minutes:
        click.echo(f"Estimated: {view.total_minutes} min")


def _run_gesture(run, as_json: bool, dry_run: bool) -> None:
    try:
        patch = run()
    except ActionTreeError as e:
        _fail(e)
    _echo_patch(patch, as_json, dry_run)


@main.command()
@click.argument("action_id")
@view_options
@click.option("--dry-run", is_flag=True, help="Show the patch without saving")
@click.option("--json", "as_json", is_flag=True, help="Output the patch as JSON")
@click.pass_obj
def indent(config, action_id, sort, quick, show_completed, show_deferred, max_minutes, collapse, now_str,
           dry_run: bool, as_json: bool):
    """Make ACTION_ID a child of the sibling above it."""
    now = _parse_now(now_str)
    options = _view_options(config, sort, quick, show_completed, show_deferred, max_minutes, collapse)
    _run_gesture(
        lambda: indent_action(get_store(config), action_id, now, options, config.position_stride, dry_run),
        as_json,
        dry_run,
    )


@main.command()
@click.argument("action_id")
@view_options
@click.option("--dry-run", is_flag=True, help="Show the patch without saving")
@click.option("--json", "as_json", is_flag=True, help="Output the patch as JSON")
@click.pass_obj
def outdent(config, action_id, sort, quick, show_completed, show_deferred, max_minutes, collapse, now_str,
            dry_run: bool, as_json: bool):
    """Move ACTION_ID up one level, after its parent."""
    now = _parse_now(now_str)
    options = _view_options(config, sort, quick, show_completed, show_deferred, max_minutes, collapse)
    _run_gesture(
        lambda: outdent_action(get_store(config), action_id, now, options, config.position_stride, dry_run),
        as_json,
        dry_run,
    )


@main.command()
@click.argument("dragged_id")
@click.argument("target_id")
@view_options
@click.option("--dry-run", is_flag=True, help="Show the patch without saving")
@click.option("--json", "as_json", is_flag=True, help="Output the patch as JSON")
@click.pass_obj
def move(config, dragged_id, target_id, sort, quick, show_completed, show_deferred, max_minutes, collapse,
         now_str, dry_run: bool, as_json: bool):
    """Move DRAGGED_ID into TARGET_ID's place."""
    now = _parse_now(now_str)
    options = _view_options(config, sort, quick, show_completed, show_deferred, max_minutes, collapse)
    _run_gesture(
        lambda: move_action(get_store(config), dragged_id, target_id, now, options, config.position_stride, dry_run),
        as_json,
        dry_run,
    )


@main.command()
@click.argument("action_id")
@click.option("--now", "now_str", default=None, help="Completion time (ISO), defaults to now")
@click.option("--mode", type=click.Choice([m.value for m in RepeatMode]), default=None,
              help="How a repeating action schedules its next instance")
@click.option("--dry-run", is_flag=True, help="Show the result without saving")
@click.pass_obj
def complete(config, action_id, now_str, mode, dry_run: bool):
    """Complete ACTION_ID, creating the next instance if it repeats."""
    now = _parse_now(now_str)
    repeat_mode = RepeatMode(mode) if mode else config.repeat_mode
    try:
        result = complete_action(get_store(config), action_id, now, repeat_mode, config.position_stride, dry_run)
    except ActionTreeError as e:
        _fail(e)

    click.echo(f"✓ {result.completed.title}")
    nxt = result.next_action
    if nxt is not None:
        due = f" due {nxt.due_date.isoformat()}" if nxt.due_date else ""
        defer = f" deferred until {nxt.defer_date.isoformat()}" if nxt.defer_date else ""
        click.echo(f"↻ Next: {nxt.title}{due}{defer} ({nxt.id})")


@main.command("next-due")
@click.argument("rule")
@click.option("--from", "anchor_str", required=True, help="Anchor date (YYYY-MM-DD)")
@click.option("--count", "-n", default=1, show_default=True, help="How many occurrences to list")
@click.option("--on", "on_days", default=None, help="Weekdays for weekly rules, e.g. mon,wed,fri")
def next_due(rule: str, anchor_str: str, count: int, on_days: str | None):
    """Show the next dates for RULE (e.g. 1d, 2w, 1m, 1y)."""
    try:
        anchor = date.fromisoformat(anchor_str)
        parsed = parse_interval(rule)
        if on_days:
            names = [d.strip()[:3].lower() for d in on_days.split(",") if d.strip()]
            lookup = {n.lower(): i for i, n in enumerate(DAY_NAMES)}
            unknown = [n for n in names if n not in lookup]
            if unknown:
                raise ValueError(f"Unknown weekday: {', '.join(unknown)}")
            days = frozenset(lookup[n] for n in names)
            parsed = RecurrenceRule(frequency=parsed.frequency, interval=parsed.interval, days_of_week=days)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(describe_rule(parsed))
    for d in next_occurrences(parsed, anchor, count):
        click.echo(f"  {d.isoformat()} ({d.strftime('%A')})")


if __name__ == "__main__":
    main()
