"""
Escalation timer for pending acknowledgment sessions.

Ticks at a fixed interval while a session is open and reports the time elapsed
since the change was detected. Optionally fires an overdue callback once per
session when the elapsed time reaches a threshold.
"""

import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from folder_sentry.models import AcknowledgmentSession

logger = logging.getLogger(__name__)

SessionTimeCallback = Callable[[AcknowledgmentSession, timedelta], object]


def utc_now() -> datetime:
    return datetime.now(UTC)


class EscalationTimer:
    """
    Periodic tick source bound to one session at a time.

    Each ``start()`` spawns a fresh daemon ticker thread with its own stop
    event, so a ticker that was stopped can never resume for a later session.
    """

    def __init__(
        self,
        interval_seconds: float = 1.0,
        overdue_threshold_seconds: float | None = None,
        on_tick: SessionTimeCallback | None = None,
        on_overdue: SessionTimeCallback | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """
        Initialize the escalation timer.

        Args:
            interval_seconds: Tick cadence
            overdue_threshold_seconds: Elapsed time that triggers ``on_overdue`` (disabled if None)
            on_tick: Called with the session and its elapsed time on every tick
            on_overdue: Called once per session when the threshold is reached
            clock: Source of the current time
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self.interval_seconds = interval_seconds
        self.overdue_threshold_seconds = overdue_threshold_seconds
        self.on_tick = on_tick
        self.on_overdue = on_overdue
        self._clock = clock or utc_now

        self._lock = threading.Lock()
        self._session: AcknowledgmentSession | None = None
        self._stop_event: threading.Event | None = None
        self._thread: threading.Thread | None = None

    def start(self, session: AcknowledgmentSession) -> None:
        """Begin ticking for a session, replacing any previous one."""
        with self._lock:
            self._halt_locked()

            stop_event = threading.Event()
            thread = threading.Thread(
                target=self._run,
                args=(session, stop_event),
                name=f"escalation-{session.id}",
                daemon=True,
            )
            self._session = session
            self._stop_event = stop_event
            self._thread = thread
            thread.start()

        logger.debug("Escalation timer started for session %s", session.id)

    def stop(self) -> bool:
        """
        Halt ticking.

        Returns:
            True if a running ticker was stopped, False if none was running
        """
        with self._lock:
            session = self._session
            stopped = self._halt_locked()

        if stopped:
            logger.debug("Escalation timer stopped for session %s", session.id)
        return stopped

    def elapsed(self, session: AcknowledgmentSession) -> timedelta:
        """Time since the session's change was detected."""
        return self._clock() - session.reference_time

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._stop_event is not None and not self._stop_event.is_set()

    @property
    def session(self) -> AcknowledgmentSession | None:
        with self._lock:
            return self._session

    def join(self, timeout: float | None = None) -> None:
        """Wait for the current ticker thread to exit."""
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _halt_locked(self) -> bool:
        if self._stop_event is None or self._stop_event.is_set():
            self._session = None
            return False
        self._stop_event.set()
        self._session = None
        return True

    def _run(self, session: AcknowledgmentSession, stop_event: threading.Event) -> None:
        threshold = self.overdue_threshold_seconds
        overdue_fired = False

        while not stop_event.wait(self.interval_seconds):
            elapsed = self.elapsed(session)

            try:
                if self.on_tick is not None:
                    self.on_tick(session, elapsed)

                if (
                    threshold is not None
                    and not overdue_fired
                    and not stop_event.is_set()
                    and elapsed.total_seconds() >= threshold
                ):
                    overdue_fired = True
                    logger.info("Session %s unanswered for %s", session.id, elapsed)
                    if self.on_overdue is not None:
                        self.on_overdue(session, elapsed)

            except Exception as e:
                logger.error("Escalation timer callback failed for session %s: %s", session.id, e)
