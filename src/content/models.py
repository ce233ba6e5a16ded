"""Revision model — one versioned snapshot of a container's content.

The content payload is opaque here; only identity, the publish marker and
the embedded tracking record carry rules.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, Field

from revisioning.content.fields import FieldSpec, populate, project, tracking_data
from revisioning.tracking.models import UNKNOWN_REASON, TrackingRecord

logger = logging.getLogger(__name__)

RevisionId = int | str


class Revision(BaseModel):
    """A content snapshot owned by exactly one container.

    ``was_published`` only ever moves from False to True during normal
    operation; cloning through ``new_instance`` is the one place a fresh
    False is produced.
    """

    revision_id: RevisionId | None = None
    content: dict[str, Any] = Field(default_factory=dict)
    was_published: bool = False
    tracking: TrackingRecord

    @classmethod
    def create(
        cls,
        created_by_user_id: str,
        created_reason: str = UNKNOWN_REASON,
        *,
        revision_id: RevisionId | None = None,
        content: Mapping[str, Any] | None = None,
    ) -> Revision:
        """Build a new, never-published revision."""
        return cls(
            revision_id=revision_id,
            content=dict(content or {}),
            tracking=TrackingRecord.create(created_by_user_id, created_reason),
        )

    def publish_revision(self) -> None:
        """Mark this revision as having been live."""
        self.was_published = True

    def new_instance(
        self,
        created_by_user_id: str,
        created_reason: str = UNKNOWN_REASON,
        *,
        revision_id: RevisionId | None = None,
    ) -> Revision:
        """Clone this revision for a copy workflow.

        Content is deep-copied, the publish marker is cleared and tracking
        starts over for the new creator. Identity is left to the caller.
        """
        clone = self.model_copy(
            deep=True,
            update={
                "revision_id": revision_id,
                "was_published": False,
                "tracking": TrackingRecord.create(created_by_user_id, created_reason),
            },
        )
        logger.debug("Cloned revision %s as %s", self.revision_id, revision_id)
        return clone

    def set_modified_by(self, user_id: str, reason: str = UNKNOWN_REASON) -> None:
        self.tracking.record_modification(user_id, reason)

    def set_content(self, content: Mapping[str, Any]) -> None:
        self.content = dict(content)

    # ── Projection ───────────────────────────────────────────────

    def populate(self, data: Mapping[str, Any], ignore: Iterable[str] | None = None) -> None:
        """Apply settable values from ``data``; unknown keys are skipped."""
        populate(self, REVISION_FIELDS, data, ignore)

    def to_array(self, ignore: Iterable[str] | None = None) -> dict[str, Any]:
        """Flat camelCase projection, tracking fields included."""
        return project(self, REVISION_FIELDS, ignore)

    @classmethod
    def from_array(cls, data: Mapping[str, Any]) -> Revision:
        """Rebuild a revision, tracking included, from ``to_array`` output."""
        return cls(
            revision_id=data.get("revisionId"),
            content=dict(data.get("content") or {}),
            was_published=bool(data.get("wasPublished", False)),
            tracking=TrackingRecord.model_validate(tracking_data(data)),
        )


REVISION_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("revisionId", getter=lambda r: r.revision_id),
    FieldSpec("content", getter=lambda r: r.content, setter=Revision.set_content),
    FieldSpec("wasPublished", getter=lambda r: r.was_published),
    *FieldSpec.tracking_fields(),
)
