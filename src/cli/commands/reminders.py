"""Reminder CLI commands: suggest, resolve, and the reminders store group."""

import uuid

import click
from rich.table import Table

from cli.utils import (
    console,
    fmt_datetime,
    get_context,
    get_reminder_store,
    get_snapshot,
    get_structured_llm,
    parse_now,
    print_json,
)

INTERACTION_TYPES = ["call", "text", "email", "coffee", "dinner", "hangout", "meeting", "whatsapp", "other"]


def _lookup_contact(ctx, contact_id: str):
    contact = get_snapshot(ctx).contact(contact_id)
    if contact is None:
        console.print(f"[red]Unknown contact:[/] {contact_id}")
        raise SystemExit(1)
    return contact


@click.command()
@click.argument("contact_id")
@click.argument("content")
@click.option("--type", "interaction_type", default="other", type=click.Choice(INTERACTION_TYPES))
@click.option("--at", "timestamp", default=None, help="Conversation time (ISO); defaults to --now")
@click.option("--conversation-id", default=None, help="Source conversation id (used with --save)")
@click.option("--save", is_flag=True, help="Write the suggested reminder to the reminders db")
@click.option("--json", "as_json", is_flag=True, help="Emit JSON")
@click.pass_context
def suggest(ctx, contact_id, content, interaction_type, timestamp, conversation_id, save, as_json):
    """Should this conversation create a follow-up reminder?"""
    from reminders.suggestion import AutoReminderRequest, suggest_auto_reminder

    obj = get_context(ctx)
    contact = _lookup_contact(ctx, contact_id)
    conversation_at = parse_now(timestamp) if timestamp else obj["now"]

    request = AutoReminderRequest(
        content=content,
        contact_name=contact.full_name,
        contact_frequency=contact.contact_frequency,
        interaction_type=interaction_type,
        conversation_timestamp=conversation_at,
    )
    suggestion = suggest_auto_reminder(
        request,
        llm=get_structured_llm(ctx),
        min_confidence=obj["config"].reminders.min_confidence,
        now=obj["now"],
    )

    saved = None
    if suggestion is not None and save:
        saved = get_reminder_store(ctx).create_if_missing(
            contact_id=contact.id,
            remind_at=suggestion.remind_at,
            conversation_id=conversation_id,
            context=content,
        )

    if as_json:
        print_json({"suggestion": suggestion, "saved_reminder_id": saved.id if saved else None})
        return
    if suggestion is None:
        console.print("[dim]No follow-up needed.[/]")
        return

    console.print(
        f"Remind on [cyan]{fmt_datetime(suggestion.remind_at)}[/] "
        f"(in {suggestion.days_until}d, {suggestion.source.value}, {suggestion.confidence:.0%})"
    )
    console.print(f"[dim]{suggestion.reason}[/]")
    if saved:
        console.print(f"[green]Saved reminder[/] {saved.id}")


@click.command()
@click.argument("contact_id")
@click.argument("content")
@click.option("--type", "interaction_type", default="other", type=click.Choice(INTERACTION_TYPES))
@click.option("--at", "timestamp", default=None, help="Conversation time (ISO); defaults to --now")
@click.option("--conversation-id", default=None)
@click.option("--json", "as_json", is_flag=True, help="Emit JSON")
@click.pass_context
def resolve(ctx, contact_id, content, interaction_type, timestamp, conversation_id, as_json):
    """Dismiss due reminders that this new conversation completes."""
    from contacts.models import Conversation
    from reminders.resolution import ReminderResolver
    from shared_types import InteractionType

    obj = get_context(ctx)
    config = obj["config"]
    conversation = Conversation(
        id=conversation_id or uuid.uuid4().hex[:12],
        contact_id=contact_id,
        content=content,
        timestamp=parse_now(timestamp) if timestamp else obj["now"],
        type=InteractionType(interaction_type),
    )
    store = get_reminder_store(ctx)
    # snapshot reminders become resolvable once they live in the store
    store.import_reminders(
        r for r in get_snapshot(ctx).reminders if r.contact_id == contact_id and r.is_pending
    )
    resolver = ReminderResolver(
        store,
        llm=get_structured_llm(ctx),
        min_confidence=config.reminders.resolution_min_confidence,
        max_candidates=config.reminders.max_resolution_candidates,
    )
    result = resolver.resolve(contact_id, conversation, now=obj["now"])

    if as_json:
        print_json(result)
        return
    if result is None:
        console.print("[dim]No reminders resolved.[/]")
        return
    console.print(
        f"[green]Resolved {len(result.resolved_ids)} reminder(s)[/] via {result.source.value}: "
        + ", ".join(result.resolved_ids)
    )


@click.group()
def reminders():
    """Inspect and edit the reminders database."""


@reminders.command("list")
@click.argument("contact_id", required=False)
@click.option("--all", "show_all", is_flag=True, help="Include SENT/DISMISSED")
@click.pass_context
def reminders_list(ctx, contact_id, show_all):
    """List reminders (pending only unless --all)."""
    from shared_types import ReminderStatus

    store = get_reminder_store(ctx)
    if contact_id:
        rows = store.list_for_contact(contact_id, None if show_all else ReminderStatus.PENDING)
    else:
        rows = store.list_pending()

    if not rows:
        console.print("[yellow]No reminders.[/]")
        return

    now = get_context(ctx)["now"]
    table = Table(show_header=True, title="Reminders")
    table.add_column("ID", style="dim")
    table.add_column("Contact", style="cyan")
    table.add_column("Remind at")
    table.add_column("Status")
    table.add_column("Context", max_width=40)
    for r in rows:
        status = r.status.value
        if r.is_overdue(now):
            status = f"[red]{status} (overdue)[/]"
        table.add_row(r.id, r.contact_id, fmt_datetime(r.remind_at), status, r.context[:40])
    console.print(table)


@reminders.command("add")
@click.argument("contact_id")
@click.option("--days", type=click.IntRange(1, 180), default=7, show_default=True)
@click.option("--note", default="", help="Context shown with the reminder")
@click.pass_context
def reminders_add(ctx, contact_id, days, note):
    """Remind me about CONTACT_ID in N days (09:00)."""
    from reminders.suggestion import quick_reminder_date

    remind_at = quick_reminder_date(days, now=get_context(ctx)["now"])
    reminder = get_reminder_store(ctx).create_if_missing(contact_id, remind_at, context=note)
    console.print(f"[green]Added[/] {reminder.id} for {fmt_datetime(reminder.remind_at)}")


@reminders.command("dismiss")
@click.argument("reminder_id")
@click.pass_context
def reminders_dismiss(ctx, reminder_id):
    """Dismiss one reminder by id."""
    from reminders.store import ReminderNotFoundError

    store = get_reminder_store(ctx)
    try:
        reminder = store.get(reminder_id)
    except ReminderNotFoundError:
        console.print(f"[red]No reminder with id[/] {reminder_id}")
        raise SystemExit(1)
    if not reminder.is_pending:
        console.print(f"[yellow]Already {reminder.status.value.lower()}.[/]")
        return
    store.dismiss([reminder_id])
    console.print(f"[green]Dismissed[/] {reminder_id}")
