"""
Acknowledgment session and run state models.

An AcknowledgmentSession pairs one ChangeEvent with exactly one eventual
Continue/Stop decision. MonitoringRunState carries the continue flag and the
registered paths of a monitoring run; it is owned by the acknowledgment
controller and only read by everybody else.
"""

from datetime import UTC, datetime
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, computed_field

from folder_sentry.models.change_event import ChangeEvent
from folder_sentry.models.exceptions import SessionStateError


class Decision(str, Enum):
    """Operator answer to an acknowledgment session."""

    CONTINUE = "continue"
    STOP = "stop"


class SessionState(str, Enum):
    """Acknowledgment session lifecycle states."""

    PENDING = "pending"
    ACKNOWLEDGED = "acknowledged"


class AcknowledgmentSession(BaseModel):
    """A pending or answered acknowledgment of a single change."""

    id: UUID = Field(default_factory=uuid4, description="Unique session identifier")
    event: ChangeEvent = Field(..., description="Change this session concerns")
    state: SessionState = Field(default=SessionState.PENDING, description="Current session state")
    decision: Decision | None = Field(None, description="Operator decision once acknowledged")
    opened_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Session creation timestamp",
    )
    acknowledged_at: datetime | None = Field(None, description="When the decision arrived")

    model_config = ConfigDict(validate_assignment=True)

    @computed_field
    @property
    def is_pending(self) -> bool:
        """Whether the session still awaits a decision."""
        return self.state == SessionState.PENDING

    @property
    def reference_time(self) -> datetime:
        """Point in time the unanswered duration is measured from."""
        return self.event.detected_at

    def acknowledge(self, decision: Decision, at: datetime | None = None) -> None:
        """
        Record the operator decision.

        Args:
            decision: Continue or Stop
            at: Acknowledgment time, defaults to now

        Raises:
            SessionStateError: If the session was already acknowledged
        """
        if self.state != SessionState.PENDING:
            raise SessionStateError(
                f"Session {self.id} was already acknowledged with {self.decision.value}",
                session_id=str(self.id),
                state=self.state.value,
            )
        self.decision = decision
        self.acknowledged_at = at or datetime.now(UTC)
        self.state = SessionState.ACKNOWLEDGED

    def __str__(self) -> str:
        return f"Session({self.id}: {self.event.describe()} [{self.state.value}])"


class MonitoringRunState(BaseModel):
    """State of one monitoring run."""

    continue_flag: bool = Field(default=True, description="Whether monitoring continues after the current session")
    registered_paths: set[str] = Field(default_factory=set, description="Directories being watched")
    started_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When the run began",
    )

    model_config = ConfigDict(validate_assignment=True)
