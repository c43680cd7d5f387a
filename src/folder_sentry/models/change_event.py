"""
Data model for detected filesystem changes.

A ChangeEvent is built once by the directory watcher that observed the change
and handed over to the acknowledgment controller; it never changes afterwards.
"""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field


class ChangeKind(str, Enum):
    """Structural change kinds reported by the watchers."""

    CREATED = "created"
    DELETED = "deleted"
    RENAMED = "renamed"

    @property
    def label(self) -> str:
        """Capitalized verb used in operator messages."""
        return self.value.capitalize()


class ChangeEvent(BaseModel):
    """
    Immutable record of a created, deleted or renamed directory entry.

    For renames, ``name`` and ``path`` describe the entry's new identity.
    """

    kind: ChangeKind = Field(..., description="Type of structural change")
    name: str = Field(..., min_length=1, description="Entry name relative to the watched directory")
    path: str = Field(..., min_length=1, description="Full path of the affected entry")
    is_directory: bool = Field(default=False, description="Whether the entry is a directory")
    watched_root: str | None = Field(None, description="Registered directory that reported the change")
    detected_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When the change was detected",
    )

    model_config = ConfigDict(frozen=True)

    @computed_field
    @property
    def entity(self) -> str:
        """Human-readable entry type."""
        return "Folder" if self.is_directory else "File"

    def describe(self) -> str:
        """Operator message, e.g. ``Folder reports Created!``."""
        return f"{self.entity} {self.name} {self.kind.label}!"

    def __str__(self) -> str:
        return f"ChangeEvent({self.kind.value}: {self.path})"
