"""
Acknowledgment controller.

Serializes ChangeEvents into one-at-a-time acknowledgment sessions and turns
each operator decision into the run's continue flag. Every state transition,
and every presenter callback, runs inside a single reentrant critical section;
events arriving while a session is open wait in a FIFO queue.
"""

import logging
import threading
from collections import deque
from collections.abc import Callable, Iterable
from datetime import UTC, datetime, timedelta
from pathlib import Path

from folder_sentry.config import SentryConfig, get_config
from folder_sentry.core.interfaces import IAcknowledgmentPresenter
from folder_sentry.models import (
    AcknowledgmentSession,
    ChangeEvent,
    ChangeNotification,
    Decision,
    ElapsedUpdate,
    EscalationReason,
    EscalationRequest,
    MonitoringRunState,
    NoActiveSessionError,
)
from folder_sentry.monitoring.escalation import EscalationTimer

logger = logging.getLogger(__name__)


class AcknowledgmentController:
    """
    Core state machine: ``Idle -> SessionOpen -> Idle``.

    The controller owns the run state exclusively. It stops accepting events
    for good once a Stop decision (or a shutdown) clears the continue flag.
    """

    def __init__(
        self,
        config: SentryConfig | None = None,
        presenter: IAcknowledgmentPresenter | None = None,
        timer: EscalationTimer | None = None,
        on_halt: Callable[[], object] | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """
        Initialize the acknowledgment controller.

        Args:
            config: Sentry configuration (global configuration if omitted)
            presenter: Collaborator rendering sessions to the operator
            timer: Optional escalation timer (created from config if not provided)
            on_halt: Called once, outside the critical section, when monitoring must stop
            clock: Source of the current time
        """
        self.config = config or get_config()
        self.presenter = presenter
        self.on_halt = on_halt
        self._clock = clock or (lambda: datetime.now(UTC))

        self.timer = timer or EscalationTimer(
            interval_seconds=self.config.tick_interval_seconds,
            overdue_threshold_seconds=self.config.overdue_threshold_seconds,
            on_tick=self._handle_tick,
            on_overdue=self._handle_overdue,
            clock=self._clock,
        )

        self._lock = threading.RLock()
        self._state = MonitoringRunState()
        self._current: AcknowledgmentSession | None = None
        self._queue: deque[ChangeEvent] = deque()
        self._finished = threading.Event()
        self._halt_requested = False

        self._stats = {
            "sessions_opened": 0,
            "events_queued": 0,
            "events_rejected": 0,
            "decisions": {Decision.CONTINUE.value: 0, Decision.STOP.value: 0},
        }

    def begin(self, registered_paths: Iterable[str | Path] = ()) -> MonitoringRunState:
        """
        Start a new monitoring run with a fresh run state.

        Returns:
            A copy of the new run state
        """
        with self._lock:
            if self._current is not None:
                self.timer.stop()
                self._dismiss(self._current)
                self._current = None

            self._queue.clear()
            self._state = MonitoringRunState(registered_paths={str(p) for p in registered_paths})
            self._finished.clear()
            self._halt_requested = False
            logger.info("Monitoring run started for %d directories", len(self._state.registered_paths))
            return self._state.model_copy(deep=True)

    def submit(self, event: ChangeEvent) -> bool:
        """
        Ingest a change event.

        Opens a session right away when idle, otherwise queues the event
        behind the open session.

        Returns:
            True if the event was opened or queued, False if monitoring has stopped
        """
        with self._lock:
            if not self._state.continue_flag:
                self._stats["events_rejected"] += 1
                logger.warning("Monitoring stopped, ignoring %s", event)
                return False

            if self._current is not None:
                self._queue.append(event)
                self._stats["events_queued"] += 1
                logger.info("Session open, queued %s (%d waiting)", event, len(self._queue))
                return True

            self._open_session(event)
            return True

    def decide(self, decision: Decision) -> AcknowledgmentSession:
        """
        Resolve the open session with an operator decision.

        Args:
            decision: Continue or Stop

        Returns:
            The acknowledged session

        Raises:
            NoActiveSessionError: If no session is open
        """
        decision = Decision(decision)

        with self._lock:
            session = self._current
            if session is None:
                logger.error("Decision %s received with no open session", decision.value)
                raise NoActiveSessionError(
                    f"No acknowledgment session is open for decision {decision.value}",
                    decision=decision.value,
                )

            session.acknowledge(decision, at=self._clock())
            self.timer.stop()
            self._state.continue_flag = decision == Decision.CONTINUE
            self._current = None
            self._stats["decisions"][decision.value] += 1

            logger.info(
                "Session %s acknowledged with %s after %s",
                session.id,
                decision.value,
                session.acknowledged_at - session.reference_time,
            )
            self._dismiss(session)

            if self._state.continue_flag:
                if self._queue:
                    self._open_session(self._queue.popleft())
                halt = False
            else:
                halt = self._finish_locked("stop decision")

        if halt:
            self._run_halt()
        return session

    def signal_attention(self) -> bool:
        """
        Report that the operator's attention returned to the pending item.

        Returns:
            True if an escalation was requested, False when no session is open
        """
        with self._lock:
            session = self._current
            if session is None:
                logger.debug("Attention signal with no open session, ignoring")
                return False

            self._escalate(session, EscalationReason.ATTENTION_RETURNED, self._elapsed(session))
            return True

    def shutdown(self, reason: str = "shutdown") -> None:
        """
        Abort the run from outside the acknowledgment flow.

        An open session is dismissed but keeps its pending state.
        """
        with self._lock:
            self._state.continue_flag = False
            session, self._current = self._current, None
            if session is not None:
                self.timer.stop()
                self._dismiss(session)
            halt = self._finish_locked(reason)

        if halt:
            self._run_halt()

    def wait_until_finished(self, timeout: float | None = None) -> bool:
        """Block until the run is finished; returns False on timeout."""
        return self._finished.wait(timeout)

    @property
    def continue_flag(self) -> bool:
        with self._lock:
            return self._state.continue_flag

    @property
    def is_idle(self) -> bool:
        with self._lock:
            return self._current is None

    @property
    def is_finished(self) -> bool:
        return self._finished.is_set()

    @property
    def current_session(self) -> AcknowledgmentSession | None:
        with self._lock:
            return self._current

    @property
    def pending_count(self) -> int:
        """Number of events queued behind the open session."""
        with self._lock:
            return len(self._queue)

    @property
    def run_state(self) -> MonitoringRunState:
        """Copy of the current run state."""
        with self._lock:
            return self._state.model_copy(deep=True)

    def get_stats(self) -> dict:
        with self._lock:
            return {
                "sessions_opened": self._stats["sessions_opened"],
                "events_queued": self._stats["events_queued"],
                "events_rejected": self._stats["events_rejected"],
                "decisions": dict(self._stats["decisions"]),
                "pending_events": len(self._queue),
                "session_open": self._current is not None,
            }

    def _open_session(self, event: ChangeEvent) -> None:
        session = AcknowledgmentSession(event=event, opened_at=self._clock())
        self._current = session
        self._stats["sessions_opened"] += 1
        logger.info("Opened session %s: %s", session.id, event.describe())

        self.timer.start(session)

        if self.presenter is not None:
            try:
                self.presenter.present(ChangeNotification.for_session(session))
            except Exception as e:
                logger.error("Presenter failed to show session %s: %s", session.id, e)

    def _finish_locked(self, reason: str) -> bool:
        dropped = len(self._queue)
        self._queue.clear()
        if dropped:
            logger.info("Discarded %d queued events after %s", dropped, reason)

        self._finished.set()
        logger.info("Monitoring run finished (%s)", reason)

        if self._halt_requested:
            return False
        self._halt_requested = True
        return True

    def _run_halt(self) -> None:
        if self.on_halt is None:
            return
        try:
            self.on_halt()
        except Exception as e:
            logger.error("Error halting monitoring: %s", e)

    def _dismiss(self, session: AcknowledgmentSession) -> None:
        if self.presenter is None:
            return
        try:
            self.presenter.dismiss(session)
        except Exception as e:
            logger.error("Presenter failed to dismiss session %s: %s", session.id, e)

    def _elapsed(self, session: AcknowledgmentSession) -> timedelta:
        return self._clock() - session.reference_time

    def _escalate(self, session: AcknowledgmentSession, reason: EscalationReason, elapsed: timedelta) -> None:
        logger.info("Escalating session %s (%s)", session.id, reason.value)
        if self.presenter is None:
            return
        request = EscalationRequest(
            session_id=session.id,
            reason=reason,
            elapsed=max(elapsed, timedelta(0)),
            flash_count=self.config.flash_count,
        )
        try:
            self.presenter.escalate(request)
        except Exception as e:
            logger.error("Presenter failed to escalate session %s: %s", session.id, e)

    def _handle_tick(self, session: AcknowledgmentSession, elapsed: timedelta) -> None:
        with self._lock:
            # Ticks racing a decision are dropped here
            if self._current is not session:
                return
            logger.debug("Session %s unanswered for %s", session.id, elapsed)
            if self.presenter is not None:
                self.presenter.update_elapsed(ElapsedUpdate(session_id=session.id, elapsed=elapsed))

    def _handle_overdue(self, session: AcknowledgmentSession, elapsed: timedelta) -> None:
        with self._lock:
            if self._current is not session:
                return
            self._escalate(session, EscalationReason.OVERDUE, elapsed)
