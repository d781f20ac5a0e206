"""Dashboard CLI commands: focus, segments, review, standup, preferences."""

import click
from rich.panel import Panel
from rich.table import Table

from cli.utils import (
    PRIORITY_STYLES,
    console,
    fmt_datetime,
    get_context,
    get_snapshot,
    print_json,
    styled,
)


def _preferences(ctx, overrides: dict):
    from advisor.preferences import merge_preferences

    return merge_preferences(get_context(ctx)["config"].dashboard.to_preferences(), overrides)


@click.command()
@click.option("--limit", type=int, default=None, help="Override focus_limit (2-8)")
@click.option("--include-low/--no-include-low", default=None, help="Keep low-priority items")
@click.option("--json", "as_json", is_flag=True, help="Emit JSON instead of a table")
@click.pass_context
def focus(ctx, limit, include_low, as_json):
    """Today Focus: who to reach out to right now."""
    from advisor.focus import build_today_focus

    prefs = _preferences(ctx, {"focus_limit": limit, "include_low_priority": include_low})
    items = build_today_focus(get_snapshot(ctx), prefs, now=get_context(ctx)["now"])

    if as_json:
        print_json(items)
        return
    if not items:
        console.print("[green]Nothing needs attention today.[/]")
        return

    table = Table(show_header=True, title="Today Focus")
    table.add_column("#", style="dim", width=2)
    table.add_column("Contact", style="cyan")
    table.add_column("Do")
    table.add_column("Why", max_width=48)
    table.add_column("Score", justify="right")
    table.add_column("Priority")
    for i, item in enumerate(items, 1):
        why = item.reason
        if item.secondary_reason:
            why += f"\n[dim]{item.secondary_reason}[/]"
        table.add_row(
            str(i),
            item.contact_name,
            item.action_label,
            why,
            str(item.score),
            styled(item.priority.value, PRIORITY_STYLES),
        )
    console.print(table)


@click.command()
@click.option("--limit", type=int, default=None, help="Override segment_limit (1-5)")
@click.option("--cooldown", type=int, default=None, help="Override cooldown_days (0-14)")
@click.option("--include-low/--no-include-low", default=None, help="Keep low-priority items")
@click.option("--json", "as_json", is_flag=True, help="Emit JSON instead of tables")
@click.pass_context
def segments(ctx, limit, cooldown, include_low, as_json):
    """Outreach queues for family, friends and work."""
    from advisor.segments import build_segment_queues

    prefs = _preferences(
        ctx,
        {"segment_limit": limit, "cooldown_days": cooldown, "include_low_priority": include_low},
    )
    queues = build_segment_queues(get_snapshot(ctx), prefs, now=get_context(ctx)["now"])

    if as_json:
        print_json(queues)
        return
    if not queues:
        console.print("[yellow]No family/friends/work groups found.[/]")
        return

    for queue in queues:
        if not queue.items:
            console.print(f"[bold]{queue.title}[/] ({queue.group_name}): [green]all good[/]")
            continue
        table = Table(show_header=True, title=f"{queue.title} ({queue.group_name})")
        table.add_column("Contact", style="cyan")
        table.add_column("Do")
        table.add_column("Why", max_width=40)
        table.add_column("Urgency", justify="right")
        table.add_column("Health", justify="right", style="dim")
        for item in queue.items:
            table.add_row(
                item.contact_name,
                item.action_label,
                item.reason,
                f"{item.urgency} {styled(item.priority.value, PRIORITY_STYLES)}",
                str(item.health_score),
            )
        console.print(table)


@click.command()
@click.option("--days", "window_days", type=int, default=None, help="Window length in days")
@click.option("--json", "as_json", is_flag=True, help="Emit JSON instead of tables")
@click.pass_context
def review(ctx, window_days, as_json):
    """Weekly review: who got attention, who didn't, what's next."""
    from advisor.weekly_review import build_weekly_review

    review_cfg = get_context(ctx)["config"].review
    result = build_weekly_review(
        get_snapshot(ctx),
        window_days=window_days or review_cfg.window_days,
        now=get_context(ctx)["now"],
        at_risk_threshold=review_cfg.at_risk_threshold,
    )

    if as_json:
        print_json(result)
        return

    s = result.summary
    console.print(
        Panel(
            f"{s.interactions} interactions with {s.unique_contacts} people\n"
            f"At risk: {s.at_risk_contacts}   Open loops: {s.open_loops}   Closed loops: {s.closed_loops}",
            title=f"Last {s.window_days} days ({s.window_start:%b %d} - {s.window_end:%b %d})",
        )
    )

    if result.attended_contacts:
        table = Table(show_header=True, title="Attended")
        table.add_column("Contact", style="cyan")
        table.add_column("Count", justify="right")
        table.add_column("Last", style="dim")
        table.add_column("Preview", max_width=50)
        for row in result.attended_contacts:
            name = f"{row.contact_name} {row.contact_last_name}" if row.contact_last_name else row.contact_name
            table.add_row(
                name,
                str(row.interaction_count),
                fmt_datetime(row.last_interaction_at),
                row.last_interaction_preview or "",
            )
        console.print(table)

    if result.next_steps:
        console.print("\n[bold]Next steps[/]")
        for step in result.next_steps:
            name = f"{step.contact_name} {step.contact_last_name}" if step.contact_last_name else step.contact_name
            console.print(
                f"  {styled(step.priority.value, PRIORITY_STYLES)} {step.action_label}: "
                f"[cyan]{name}[/] - {step.reason}"
            )


@click.command()
@click.option("--force", is_flag=True, help="Print even if today's standup time hasn't passed")
@click.pass_context
def standup(ctx, force):
    """Plain-text daily standup digest."""
    from advisor.standup import build_daily_standup, is_standup_due

    obj = get_context(ctx)
    now = obj["now"]
    if not force and not is_standup_due(now, None, obj["config"].review.standup_time):
        console.print(f"[dim]Standup not due yet (scheduled {obj['config'].review.standup_time}).[/]")
        return
    click.echo(build_daily_standup(get_snapshot(ctx), now=now))


@click.command()
@click.option("--set", "assignments", multiple=True, metavar="KEY=VALUE", help="Preview overrides")
@click.option("--json", "as_json", is_flag=True, help="Emit the serialized preferences")
@click.pass_context
def preferences(ctx, assignments, as_json):
    """Show effective dashboard preferences (after clamping)."""
    from advisor.preferences import serialize_preferences

    overrides = {}
    for item in assignments:
        key, sep, value = item.partition("=")
        if not sep:
            raise click.BadParameter(f"expected KEY=VALUE, got {item}", param_hint="--set")
        overrides[key.strip()] = value.strip()

    prefs = _preferences(ctx, overrides)
    if as_json:
        click.echo(serialize_preferences(prefs))
        return

    table = Table(show_header=True, title="Dashboard preferences")
    table.add_column("Key", style="cyan")
    table.add_column("Value", justify="right")
    for key, value in prefs.to_dict().items():
        table.add_row(key, str(value).lower() if isinstance(value, bool) else str(value))
    console.print(table)
