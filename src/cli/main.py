"""CLI entry point for rapport."""

import sys
from pathlib import Path

import click

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from cli.commands import (
    focus,
    health,
    preferences,
    reminders,
    resolve,
    review,
    segments,
    stale,
    standup,
    suggest,
    upcoming,
)
from cli.config import load_config_model
from cli.logging_config import setup_logging
from cli.utils import console, parse_now


@click.group()
@click.version_option(version="0.1.0")
@click.option("-c", "--config", "config_path", type=click.Path(path_type=Path), help="Config YAML")
@click.option("-s", "--snapshot", "snapshot_path", type=click.Path(path_type=Path), help="Snapshot JSON/YAML")
@click.option("--db", "db_path", type=click.Path(path_type=Path), help="Reminders SQLite db")
@click.option("--now", "now_value", default=None, help="Pretend the current time is this ISO timestamp")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, config_path, snapshot_path, db_path, now_value, verbose):
    """rapport - who to reach out to, and why."""
    try:
        config = load_config_model(config_path)
    except ValueError as e:
        console.print(f"[red]Config error:[/] {e}")
        sys.exit(1)

    if db_path:
        config.paths.reminders_db = db_path.expanduser()
    setup_logging(
        json_mode=config.logging.json_mode,
        level="DEBUG" if verbose else config.logging.level,
        log_file=config.paths.log_file,
    )

    obj = ctx.ensure_object(dict)
    obj["config"] = config
    obj["snapshot_path"] = snapshot_path
    obj["now"] = parse_now(now_value)


for command in (
    health,
    stale,
    upcoming,
    focus,
    segments,
    review,
    standup,
    preferences,
    suggest,
    resolve,
    reminders,
):
    cli.add_command(command)


if __name__ == "__main__":
    cli()
