"""Per-contact CLI commands: health, stale, upcoming."""

import click
from rich.table import Table

from cli.utils import (
    HEALTH_STYLES,
    STALENESS_STYLES,
    console,
    fmt_datetime,
    get_context,
    get_snapshot,
    print_json,
    styled,
)


@click.command()
@click.argument("contact_id", required=False)
@click.option("--json", "as_json", is_flag=True, help="Emit JSON instead of a table")
@click.pass_context
def health(ctx, contact_id, as_json):
    """Relationship health for one contact, or everyone."""
    from contacts.health import calculate_relationship_health

    snapshot = get_snapshot(ctx)
    now = get_context(ctx)["now"]

    if contact_id:
        contact = snapshot.contact(contact_id)
        if contact is None:
            console.print(f"[red]Unknown contact:[/] {contact_id}")
            raise SystemExit(1)
        contacts = [contact]
    else:
        contacts = snapshot.contacts

    latest = snapshot.latest_conversations()
    pending = snapshot.pending_reminders_by_contact()
    rows = []
    for contact in contacts:
        last = latest.get(contact.id)
        rows.append(
            (
                contact,
                calculate_relationship_health(
                    contact_frequency=contact.contact_frequency,
                    last_conversation_at=last.timestamp if last else None,
                    pending_reminders=pending.get(contact.id, []),
                    now=now,
                ),
            )
        )
    rows.sort(key=lambda pair: pair[1].score)

    if as_json:
        print_json([{"contact_id": c.id, "contact_name": c.full_name, **vars(h)} for c, h in rows])
        return

    table = Table(show_header=True, title="Relationship health")
    table.add_column("Contact", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Status")
    table.add_column("Fresh", justify="right", style="dim")
    table.add_column("Consist.", justify="right", style="dim")
    table.add_column("Follow-thru", justify="right", style="dim")
    table.add_column("Days", justify="right")
    table.add_column("Overdue", justify="right")
    for contact, h in rows:
        table.add_row(
            contact.full_name,
            str(h.score),
            styled(h.status.value, HEALTH_STYLES),
            str(h.freshness),
            str(h.consistency),
            str(h.follow_through),
            str(h.days_since_last_interaction),
            f"{h.overdue_reminder_count}/{h.pending_reminder_count}",
        )
    console.print(table)


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Emit JSON instead of a table")
@click.pass_context
def stale(ctx, as_json):
    """Contacts at or past 80% of their cadence goal."""
    from contacts.stale import get_stale_contacts

    snapshot = get_snapshot(ctx)
    results = get_stale_contacts(snapshot.contacts, snapshot.conversations, now=get_context(ctx)["now"])

    if as_json:
        print_json(results)
        return
    if not results:
        console.print("[green]Nobody is overdue. Nice.[/]")
        return

    table = Table(show_header=True, title="Stale contacts")
    table.add_column("Contact", style="cyan")
    table.add_column("Cadence")
    table.add_column("Last talked", style="dim")
    table.add_column("Days", justify="right")
    table.add_column("Status")
    for s in results:
        table.add_row(
            s.full_name,
            s.contact_frequency.value,
            fmt_datetime(s.last_conversation_date),
            f"{s.days_since}/{s.frequency_days}",
            styled(s.staleness.value, STALENESS_STYLES),
        )
    console.print(table)


@click.command()
@click.option("--days", "within_days", default=30, show_default=True, help="Look-ahead window")
@click.option("--json", "as_json", is_flag=True, help="Emit JSON instead of a table")
@click.pass_context
def upcoming(ctx, within_days, as_json):
    """Birthdays, anniversaries and other dates coming up."""
    from contacts.dates import get_upcoming_dates, turning_age

    snapshot = get_snapshot(ctx)
    results = get_upcoming_dates(
        snapshot.important_dates,
        snapshot.contacts_by_id(),
        within_days=within_days,
        now=get_context(ctx)["now"],
    )

    if as_json:
        print_json(results)
        return
    if not results:
        console.print(f"[yellow]Nothing in the next {within_days} days.[/]")
        return

    table = Table(show_header=True, title=f"Upcoming ({within_days} days)")
    table.add_column("When", style="cyan", width=10)
    table.add_column("In", justify="right")
    table.add_column("Contact")
    table.add_column("Label")
    table.add_column("Turning", justify="right", style="dim")
    for u in results:
        age = turning_age(u.year, u.occurs_on)
        table.add_row(
            u.occurs_on.isoformat(),
            "today" if u.days_until == 0 else f"{u.days_until}d",
            u.contact_full_name or u.contact_id,
            u.label,
            str(age) if age is not None else "",
        )
    console.print(table)
