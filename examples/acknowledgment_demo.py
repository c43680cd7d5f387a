#!/usr/bin/env python3
"""
Demonstration script for folder-sentry.

Watches a scratch directory, makes a few structural changes in it, and lets a
scripted operator acknowledge them: every change but the last is answered with
Continue, the last one with Stop.

Usage:
    python examples/acknowledgment_demo.py [--watch-dir PATH] [--changes N]
"""

import asyncio
import logging
import tempfile
import threading
import time
from pathlib import Path

import click
from folder_sentry.config import SentryConfig
from folder_sentry.core import IAcknowledgmentPresenter
from folder_sentry.models import Decision
from folder_sentry.monitoring import MonitorController
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

console = Console()


class ScriptedPresenter(IAcknowledgmentPresenter):
    """Answers each notification after a short delay, stopping on the last change."""

    def __init__(self, answers_before_stop: int, delay: float = 0.5):
        self.answers_before_stop = answers_before_stop
        self.delay = delay
        self.controller = None
        self.answered = 0

    def present(self, notification):
        console.print(f"🔔 [bold yellow]{notification.message}[/bold yellow] [dim]{notification.path}[/dim]")
        decision = Decision.CONTINUE if self.answered < self.answers_before_stop else Decision.STOP
        self.answered += 1
        threading.Timer(self.delay, self.controller.decide, args=(decision,)).start()

    def update_elapsed(self, update):
        console.print(f"   ⏱️  waiting {update.display}", style="dim")

    def escalate(self, request):
        console.print(f"   ⚠️  [red]attention requested ({request.reason.value})[/red]")

    def dismiss(self, session):
        label = session.decision.value if session.decision else "unanswered"
        console.print(f"   ✅ {session.event.describe()} -> [cyan]{label}[/cyan]")


def make_changes(directory: Path, count: int, pause: float = 1.5):
    """Alternate between creating, renaming and deleting entries."""
    for i in range(count):
        time.sleep(pause)
        step = i % 3
        if step == 0:
            (directory / f"report-{i}.txt").write_text("draft", encoding='utf-8')
        elif step == 1:
            (directory / f"report-{i - 1}.txt").rename(directory / f"final-{i - 1}.txt")
        else:
            (directory / f"final-{i - 2}.txt").unlink()


async def run_demo(watch_dir: Path, changes: int):
    console.print(
        Panel.fit(
            "🔍 [bold blue]Folder Sentry Demo[/bold blue]\n"
            f"📁 Watching: [cyan]{watch_dir}[/cyan] | 🔁 Changes: [yellow]{changes}[/yellow]",
            border_style="blue",
        )
    )

    presenter = ScriptedPresenter(answers_before_stop=changes - 1)
    sentry = MonitorController(config=SentryConfig(tick_interval_seconds=0.25), presenter=presenter)
    presenter.controller = sentry.controller

    writer = threading.Thread(target=make_changes, args=(watch_dir, changes), daemon=True)
    writer.start()

    state = await sentry.run_async([watch_dir])

    stats = sentry.get_monitoring_stats()["acknowledgment_stats"]
    table = Table(title="📊 Run Summary", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Sessions opened", str(stats["sessions_opened"]))
    table.add_row("Continue answers", str(stats["decisions"]["continue"]))
    table.add_row("Stop answers", str(stats["decisions"]["stop"]))
    table.add_row("Continue flag", str(state.continue_flag))
    console.print(table)


@click.command()
@click.option(
    '--watch-dir',
    '-d',
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help='Directory to monitor (a temporary one by default)',
)
@click.option('--changes', '-n', type=click.IntRange(min=1, max=12), default=4, help='Number of changes to make')
def main(watch_dir: Path | None, changes: int):
    """Run the folder-sentry acknowledgment demonstration."""
    try:
        if watch_dir is None:
            with tempfile.TemporaryDirectory() as scratch:
                asyncio.run(run_demo(Path(scratch), changes))
        else:
            watch_dir.mkdir(parents=True, exist_ok=True)
            asyncio.run(run_demo(watch_dir, changes))
    except KeyboardInterrupt:
        console.print("\n⚡ [yellow]Demo interrupted by user[/yellow]")


if __name__ == "__main__":
    main()
