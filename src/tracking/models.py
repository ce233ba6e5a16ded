"""Audit metadata models — who created or modified an entity, when, and why.

A TrackingRecord is embedded by value in every trackable entity. Creation
fields are frozen once the record exists; modification fields are updated
by the owning entity through ``record_modification``.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field

UNKNOWN_REASON = "Unknown reason"


def _now() -> datetime:
    return datetime.now(tz=UTC)


class TrackingRecord(BaseModel):
    """Creation and modification metadata for a single entity."""

    created_by_user_id: str = Field(min_length=1, frozen=True)
    created_date: datetime = Field(default_factory=_now, frozen=True)
    created_reason: str = Field(default=UNKNOWN_REASON, frozen=True)
    modified_by_user_id: str | None = None
    modified_date: datetime | None = None
    modified_reason: str = UNKNOWN_REASON

    @classmethod
    def create(cls, created_by_user_id: str, created_reason: str = UNKNOWN_REASON) -> TrackingRecord:
        """Start a fresh record stamped with the current time."""
        return cls(created_by_user_id=created_by_user_id, created_reason=created_reason)

    def record_modification(self, modified_by_user_id: str, modified_reason: str = UNKNOWN_REASON) -> None:
        """Stamp the modification fields with the given user, reason and now."""
        self.modified_by_user_id = modified_by_user_id
        self.modified_reason = modified_reason
        self.modified_date = _now()


@runtime_checkable
class Trackable(Protocol):
    """Capability shared by entities that embed a TrackingRecord."""

    @property
    def tracking(self) -> TrackingRecord: ...

    def set_modified_by(self, user_id: str, reason: str = UNKNOWN_REASON) -> None: ...
