"""
Interactive terminal presenter.

Renders each change with rich and reads the operator's answer on a background
thread, so watchers keep detecting and queuing while the prompt is waiting.
"""

import logging
import threading
from uuid import UUID

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from folder_sentry.core.interfaces import IAcknowledgmentPresenter
from folder_sentry.models import (
    AcknowledgmentSession,
    ChangeNotification,
    Decision,
    ElapsedUpdate,
    EscalationRequest,
    NoActiveSessionError,
    SessionState,
    format_elapsed,
)

logger = logging.getLogger(__name__)

CHOICES = {"c": Decision.CONTINUE, "s": Decision.STOP}
ELAPSED_CHOICE = "t"


class ConsolePresenter(IAcknowledgmentPresenter):
    """
    Terminal presenter backed by rich.

    Answering ``t`` shows how long the change has waited and counts as the
    operator's attention returning to it, which requests an escalation.
    """

    def __init__(self, console: Console | None = None, controller=None):
        self.console = console or Console()
        self.controller = controller
        self._latest: dict[UUID, ElapsedUpdate] = {}
        self._lock = threading.Lock()

    def attach(self, controller) -> None:
        """Bind the acknowledgment controller that receives decisions."""
        self.controller = controller

    def present(self, notification: ChangeNotification) -> None:
        table = Table.grid(padding=(0, 2))
        table.add_column(style="cyan")
        table.add_column()
        table.add_row("Path", notification.path)
        table.add_row("Detected", notification.detected_at.astimezone().strftime("%Y-%m-%d %H:%M:%S"))

        self.console.print(
            Panel(table, title=f"[bold yellow]{notification.message}[/bold yellow]", border_style="yellow")
        )

        self._start_prompt(notification.session_id)

    def update_elapsed(self, update: ElapsedUpdate) -> None:
        with self._lock:
            self._latest[update.session_id] = update

    def escalate(self, request: EscalationRequest) -> None:
        for _ in range(request.flash_count):
            self.console.bell()
        self.console.print(
            f"[bold red]Attention:[/bold red] change unanswered for {format_elapsed(request.elapsed)}"
        )

    def dismiss(self, session: AcknowledgmentSession) -> None:
        with self._lock:
            self._latest.pop(session.id, None)

        if session.state == SessionState.ACKNOWLEDGED:
            style = "green" if session.decision == Decision.CONTINUE else "red"
            self.console.print(f"[{style}]{session.decision.value.capitalize()}[/{style}]: {session.event.describe()}")
        else:
            self.console.print(f"[dim]Dismissed unanswered: {session.event.describe()}[/dim]")

    def elapsed_display(self, session_id: UUID) -> str:
        """Last reported unanswered duration for a session."""
        with self._lock:
            update = self._latest.get(session_id)
        return update.display if update else "0:00:00"

    def _start_prompt(self, session_id: UUID) -> None:
        thread = threading.Thread(
            target=self._prompt,
            args=(session_id,),
            name=f"prompt-{session_id}",
            daemon=True,
        )
        thread.start()

    def _prompt(self, session_id: UUID) -> None:
        if self.controller is None:
            logger.error("Console presenter is not attached to a controller")
            return

        while True:
            try:
                answer = Prompt.ask(
                    "Keep monitoring? [c]ontinue, [s]top, [t]ime waiting",
                    choices=[*CHOICES, ELAPSED_CHOICE],
                    default="c",
                    console=self.console,
                )
            except EOFError:
                logger.warning("Input closed, stopping monitoring")
                answer = "s"

            if answer == ELAPSED_CHOICE:
                self.console.print(f"Waiting for {self.elapsed_display(session_id)}")
                self.controller.signal_attention()
                continue

            current = self.controller.current_session
            if current is None or current.id != session_id:
                logger.warning("Session %s is no longer open, ignoring answer", session_id)
                return

            try:
                self.controller.decide(CHOICES[answer])
            except NoActiveSessionError as e:
                logger.warning("Decision ignored: %s", e)
            return
