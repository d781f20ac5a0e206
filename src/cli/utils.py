"""Shared CLI utilities."""

import dataclasses
import enum
import json
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import click
import structlog
from rich.console import Console

console = Console()
logger = structlog.get_logger()

PRIORITY_STYLES = {"high": "red", "medium": "yellow", "low": "dim"}
STALENESS_STYLES = {"red": "red", "yellow": "yellow", "green": "green"}
HEALTH_STYLES = {"strong": "green", "steady": "yellow", "at-risk": "red"}


def parse_now(value: Optional[str]) -> datetime:
    """--now override (ISO date/datetime); local clock when omitted."""
    from contacts.timeutils import parse_timestamp

    if not value:
        return datetime.now()
    parsed = parse_timestamp(value)
    if parsed is None:
        raise click.BadParameter(f"not an ISO date/datetime: {value}", param_hint="--now")
    return parsed


def get_context(ctx: click.Context) -> dict:
    return ctx.ensure_object(dict)


def get_snapshot(ctx: click.Context):
    """Load (once) the snapshot named by --snapshot or paths.snapshot.

    Rows from an existing reminders db are overlaid by id, so reminders the
    CLI created or dismissed show up in health, focus and reviews.
    """
    from contacts.snapshot import load_snapshot

    obj = get_context(ctx)
    if obj.get("snapshot") is None:
        path = obj.get("snapshot_path") or obj["config"].paths.snapshot
        try:
            snapshot = load_snapshot(path)
        except (OSError, ValueError) as e:
            console.print(f"[red]Snapshot error:[/] {e}")
            sys.exit(1)
        if Path(obj["config"].paths.reminders_db).expanduser().exists():
            stored = get_reminder_store(ctx).list_all()
            logger.debug("snapshot.reminders_overlaid", count=len(stored))
            snapshot = snapshot.with_reminders(stored)
        obj["snapshot"] = snapshot
    return obj["snapshot"]


def get_reminder_store(ctx: click.Context, db_path: Optional[Path] = None):
    from reminders.store import ReminderStore

    obj = get_context(ctx)
    return ReminderStore(db_path or obj["config"].paths.reminders_db)


def get_structured_llm(ctx: click.Context):
    from cli.config import create_structured_llm

    obj = get_context(ctx)
    if "llm" not in obj:
        obj["llm"] = create_structured_llm(obj["config"])
    return obj["llm"]


def _json_default(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, Path):
        return str(value)
    raise TypeError(f"Not JSON serializable: {type(value).__name__}")


def to_jsonable(value):
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, list):
        return [to_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    return value


def print_json(value) -> None:
    click.echo(json.dumps(to_jsonable(value), default=_json_default, indent=2, ensure_ascii=False))


def styled(value: str, styles: dict) -> str:
    style = styles.get(value)
    return f"[{style}]{value}[/]" if style else value


def fmt_datetime(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else "-"
