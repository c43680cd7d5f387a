"""
Command line entry point.

    folder-sentry monitor /srv/builds /srv/releases
    folder-sentry days-since 2024-01-15
"""

import logging
import logging.config
import sys
from datetime import date, datetime
from pathlib import Path

import click
from rich.console import Console

from folder_sentry.config import LogLevel, get_config
from folder_sentry.models import BaseError, InvalidPathError
from folder_sentry.monitoring import MonitorController
from folder_sentry.presenters import ConsolePresenter
from folder_sentry.utils import days_between

logger = logging.getLogger(__name__)

console = Console()


@click.group()
@click.version_option(package_name="folder-sentry")
def main():
    """Watch directories for structural changes and ask before carrying on."""


@main.command()
@click.argument('paths', nargs=-1, type=click.Path(path_type=Path))
@click.option('--polling', is_flag=True, help='Use the polling observer (e.g. for network shares)')
@click.option(
    '--log-level',
    type=click.Choice([level.value for level in LogLevel], case_sensitive=False),
    default=None,
    help='Override the configured logging level',
)
def monitor(paths: tuple[Path, ...], polling: bool, log_level: str | None):
    """
    Monitor PATHS until you choose to stop.

    Each created, deleted or renamed entry must be acknowledged before the
    next one is shown. Without PATHS the configured FOLDER_SENTRY_WATCHED_PATHS
    are used.
    """
    config = get_config()
    updates = {}
    if polling:
        updates["use_polling"] = True
    if log_level:
        updates["log_level"] = LogLevel(log_level.upper())
    if updates:
        config = config.model_copy(update=updates)

    logging.config.dictConfig(config.get_log_config())

    presenter = ConsolePresenter(console=console)
    sentry = MonitorController(config=config, presenter=presenter)
    presenter.attach(sentry.controller)

    try:
        state = sentry.run(list(paths) if paths else None)
    except InvalidPathError as e:
        console.print(f"[bold red]Invalid path:[/bold red] {e.message}")
        sys.exit(2)
    except KeyboardInterrupt:
        sentry.shutdown("interrupted")
        console.print("[yellow]Monitoring interrupted[/yellow]")
        sys.exit(130)
    except BaseError as e:
        logger.error("Monitoring failed: %s", e)
        console.print(f"[bold red]Monitoring failed:[/bold red] {e.message}")
        sys.exit(1)

    stats = sentry.get_monitoring_stats()["acknowledgment_stats"]
    console.print(
        f"Monitoring stopped after {stats['sessions_opened']} changes "
        f"(continue flag: {state.continue_flag})"
    )


@main.command(name="days-since")
@click.argument('opened', type=click.DateTime(formats=["%Y-%m-%d", "%Y/%m/%d"]))
@click.option(
    '--today',
    type=click.DateTime(formats=["%Y-%m-%d", "%Y/%m/%d"]),
    default=None,
    help='Reference date instead of today',
)
def days_since(opened: datetime, today: datetime | None):
    """Print how many days have passed since OPENED (e.g. when a bug was filed)."""
    reference = today.date() if today else date.today()
    span = days_between(opened, reference)

    console.print(f"Today is:  {reference.isoformat()}")
    console.print(f"Opened on:  {opened.date().isoformat()}")
    console.print(f"[green]The span is:  {span}  days[/green]")


if __name__ == "__main__":
    main()
