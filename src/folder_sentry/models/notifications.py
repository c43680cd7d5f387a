"""Payloads emitted to the acknowledgment presenter."""

from datetime import datetime, timedelta
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from folder_sentry.models.change_event import ChangeEvent, ChangeKind
from folder_sentry.models.session import AcknowledgmentSession


def format_elapsed(elapsed: timedelta) -> str:
    """Render a duration as ``H:MM:SS``."""
    total = max(int(elapsed.total_seconds()), 0)
    hours, remainder = divmod(total, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours}:{minutes:02d}:{seconds:02d}"


class EscalationReason(str, Enum):
    """What caused an attention-escalation request."""

    ATTENTION_RETURNED = "attention_returned"
    OVERDUE = "overdue"


class ChangeNotification(BaseModel):
    """A change surfaced to the operator when its session opens."""

    session_id: UUID = Field(..., description="Session awaiting acknowledgment")
    event: ChangeEvent = Field(..., description="The detected change")
    message: str = Field(..., min_length=1, description="Human-readable message to render")
    opened_at: datetime = Field(..., description="When the session opened")

    model_config = ConfigDict(frozen=True)

    @computed_field
    @property
    def kind(self) -> ChangeKind:
        return self.event.kind

    @computed_field
    @property
    def name(self) -> str:
        return self.event.name

    @computed_field
    @property
    def path(self) -> str:
        return self.event.path

    @computed_field
    @property
    def detected_at(self) -> datetime:
        return self.event.detected_at

    @classmethod
    def for_session(cls, session: AcknowledgmentSession) -> "ChangeNotification":
        """Build the notification for a freshly opened session."""
        return cls(
            session_id=session.id,
            event=session.event,
            message=session.event.describe(),
            opened_at=session.opened_at,
        )


class ElapsedUpdate(BaseModel):
    """Periodic telemetry of how long a session has gone unanswered."""

    session_id: UUID
    elapsed: timedelta

    model_config = ConfigDict(frozen=True)

    @field_validator('elapsed')
    @classmethod
    def clamp_negative(cls, v):
        """Clock adjustments must never produce a negative duration."""
        return max(v, timedelta(0))

    @computed_field
    @property
    def display(self) -> str:
        return format_elapsed(self.elapsed)


class EscalationRequest(BaseModel):
    """Request for an attention-seeking side effect (flash, bell, alert)."""

    session_id: UUID
    reason: EscalationReason
    elapsed: timedelta = Field(default=timedelta(0))
    flash_count: int = Field(default=3, ge=1, le=20, description="How many times to flash")

    model_config = ConfigDict(frozen=True)
