"""Container aggregate — a named content unit and its revision history.

A container keeps every revision it has ever owned plus two pointers into
that history: the staged (draft) slot and the published (live) slot. The
slot rules guarantee the two never hold the same revision id:

* publishing always empties the staged slot;
* staging the revision that is currently published empties the published slot.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Iterator, Mapping
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Any, ClassVar, Self

from pydantic import TypeAdapter
from pydantic_core import to_jsonable_python

from revisioning.content.fields import CREATION_FIELDS, FieldSpec, populate, project, tracking_data
from revisioning.content.history import resolve_last_saved_draft
from revisioning.content.identity import IdentityGenerator
from revisioning.content.models import Revision, RevisionId
from revisioning.content.sites import Site, SiteId, SiteRepository
from revisioning.errors import InvalidArgumentError
from revisioning.tracking.models import UNKNOWN_REASON, TrackingRecord

logger = logging.getLogger(__name__)

# PHP-style ISO 8601, e.g. 2026-02-18T10:00:00+0000
DEFAULT_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

# jsonSerialize never follows the revision list or the site back-reference.
JSON_IGNORE = frozenset({"revisions", "site"})

_DATETIME = TypeAdapter(datetime)


def _now() -> datetime:
    return datetime.now(tz=UTC)


class Container:
    """Versioned content aggregate shared by pages and blocks.

    Args:
        created_by_user_id: Creator recorded in the tracking record.
        created_reason: Why the container was created.
        invalidate_draft_cache: Clear the memoized last saved draft on every
            structural mutation. Off by default: the first computed draft is
            kept for the lifetime of the instance.
        date_format: strftime format for the ``*String`` projection fields.
    """

    container_type: ClassVar[str] = "container"
    field_table: ClassVar[tuple[FieldSpec, ...]] = ()

    def __init__(
        self,
        created_by_user_id: str,
        created_reason: str = UNKNOWN_REASON,
        *,
        invalidate_draft_cache: bool = False,
        date_format: str = DEFAULT_DATE_FORMAT,
    ) -> None:
        self._tracking = TrackingRecord.create(created_by_user_id, created_reason)
        self._name: str | None = None
        self._author: str | None = None
        self._last_published: datetime | None = None
        self._published_revision: Revision | None = None
        self._published_revision_id: RevisionId | None = None
        self._staged_revision: Revision | None = None
        self._staged_revision_id: RevisionId | None = None
        self._site_id: SiteId | None = None
        self._revisions: dict[RevisionId | None, Revision] = {}
        self._current_revision: Revision | None = None
        self._last_saved_draft: Revision | None = None
        self.invalidate_draft_cache = invalidate_draft_cache
        self.date_format = date_format

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self._name!r}, "
            f"published={self._published_revision_id!r}, staged={self._staged_revision_id!r}, "
            f"revisions={len(self._revisions)})"
        )

    # ── Tracking ─────────────────────────────────────────────────

    @property
    def tracking(self) -> TrackingRecord:
        return self._tracking

    @property
    def created_by_user_id(self) -> str:
        return self._tracking.created_by_user_id

    @property
    def created_date(self) -> datetime:
        return self._tracking.created_date

    @property
    def created_reason(self) -> str:
        return self._tracking.created_reason

    def set_modified_by(self, user_id: str, reason: str = UNKNOWN_REASON) -> None:
        """Stamp the modification fields of the tracking record."""
        self._tracking.record_modification(user_id, reason)

    # ── Simple properties ────────────────────────────────────────

    @property
    def name(self) -> str | None:
        return self._name

    def set_name(self, name: str | None) -> None:
        """Set the URL-friendly container name; None leaves it unnamed.

        Raises:
            InvalidArgumentError: If ``name`` is not a string or contains
                whitespace. The current name is kept.
        """
        if name is None:
            self._name = None
            return
        if not isinstance(name, str):
            raise InvalidArgumentError(f"Container name must be a string, got {type(name).__name__}.")
        if any(ch.isspace() for ch in name):
            raise InvalidArgumentError("Container names should not contain spaces.")
        self._name = name

    @property
    def author(self) -> str | None:
        return self._author

    def set_author(self, author: str | None) -> None:
        self._author = author

    @property
    def last_published(self) -> datetime | None:
        return self._last_published

    def set_last_published(self, last_published: datetime | str | None) -> None:
        """Set the last publish time; ISO 8601 strings are parsed."""
        self._last_published = None if last_published is None else _DATETIME.validate_python(last_published)

    def created_date_string(self, fmt: str | None = None) -> str:
        return self.created_date.strftime(fmt or self.date_format)

    def last_published_string(self, fmt: str | None = None) -> str | None:
        if self._last_published is None:
            return None
        return self._last_published.strftime(fmt or self.date_format)

    @property
    def current_revision(self) -> Revision | None:
        """Revision currently being displayed; independent of the slots."""
        return self._current_revision

    @current_revision.setter
    def current_revision(self, revision: Revision | None) -> None:
        self._current_revision = revision

    # ── Site ─────────────────────────────────────────────────────

    @property
    def site_id(self) -> SiteId | None:
        return self._site_id

    def set_site_id(self, site_id: SiteId | None) -> None:
        self._site_id = site_id

    def set_site(self, site: Site) -> None:
        """Attach to ``site``; only its id is kept."""
        self._site_id = site.site_id

    def resolve_site(self, repository: SiteRepository) -> Site | None:
        """Fetch the owning site from ``repository``; nothing is cached."""
        if self._site_id is None:
            return None
        return repository.get(self._site_id)

    # ── Slots ────────────────────────────────────────────────────

    @property
    def published_revision(self) -> Revision | None:
        return self._published_revision

    @property
    def published_revision_id(self) -> RevisionId | None:
        return self._published_revision_id

    @property
    def staged_revision(self) -> Revision | None:
        return self._staged_revision

    @property
    def staged_revision_id(self) -> RevisionId | None:
        return self._staged_revision_id

    def set_published_revision(self, revision: Revision) -> None:
        """Make ``revision`` live.

        Any staged revision is dropped, even when it is ``revision`` itself.
        The revision is marked as published and ``last_published`` moves to
        now.
        """
        _require_revision(revision)
        if self._staged_revision is not None:
            self.remove_staged_revision()
        revision.publish_revision()
        self._published_revision = revision
        self._published_revision_id = revision.revision_id
        self.set_last_published(_now())
        logger.debug("Published revision %s on %r", revision.revision_id, self._name)
        self._structure_changed()

    def set_staged_revision(self, revision: Revision) -> None:
        """Make ``revision`` the pending draft.

        If ``revision`` is the one currently published, the published slot is
        emptied first.
        """
        _require_revision(revision)
        if (
            self._published_revision is not None
            and self._published_revision.revision_id == revision.revision_id
        ):
            self.remove_published_revision()
        self._staged_revision = revision
        self._staged_revision_id = revision.revision_id
        logger.debug("Staged revision %s on %r", revision.revision_id, self._name)
        self._structure_changed()

    def remove_published_revision(self) -> None:
        self._published_revision = None
        self._published_revision_id = None
        self._structure_changed()

    def remove_staged_revision(self) -> None:
        self._staged_revision = None
        self._staged_revision_id = None
        self._structure_changed()

    # ── Revisions ────────────────────────────────────────────────

    @property
    def revisions(self) -> Mapping[RevisionId | None, Revision]:
        """Read-only view of the history keyed by revision id, oldest first."""
        return MappingProxyType(self._revisions)

    def iter_revisions(self) -> Iterator[Revision]:
        """Iterate over a snapshot of the history, oldest first."""
        return iter(tuple(self._revisions.values()))

    def add_revision(self, revision: Revision) -> None:
        """Insert or replace ``revision`` keyed by its id.

        Replacing keeps the original position in the history.
        """
        _require_revision(revision)
        self._revisions[revision.revision_id] = revision
        self._structure_changed()

    def set_revisions(self, revisions: Iterable[Revision]) -> None:
        """Replace the whole history.

        Raises:
            InvalidArgumentError: If any element is not a Revision. The
                existing history is left untouched.
        """
        items = list(revisions)
        for item in items:
            if not isinstance(item, Revision):
                raise InvalidArgumentError("Invalid Revision passed in. Unable to set revisions.")
        self._revisions = {r.revision_id: r for r in items}
        self._structure_changed()

    def get_revision_by_id(self, revision_id: RevisionId | None) -> Revision | None:
        return self._revisions.get(revision_id)

    def get_last_saved_draft_revision(self) -> Revision | None:
        """Return the newest revision that was never staged, published or live.

        The first non-empty answer is memoized on the instance. Unless
        ``invalidate_draft_cache`` is set, later mutations do not refresh it.
        """
        if self._last_saved_draft is not None:
            return self._last_saved_draft
        self._last_saved_draft = resolve_last_saved_draft(
            self._revisions.values(),
            published=self._published_revision,
            staged=self._staged_revision,
        )
        return self._last_saved_draft

    def _structure_changed(self) -> None:
        if self.invalidate_draft_cache:
            self._last_saved_draft = None

    # ── Cloning ──────────────────────────────────────────────────

    def _clone(self, created_by_user_id: str, created_reason: str) -> Self:
        new = copy.copy(self)
        new._tracking = TrackingRecord.create(created_by_user_id, created_reason)
        new._last_published = _now()
        new._revisions = {}
        new._published_revision = None
        new._published_revision_id = None
        new._staged_revision = None
        new._staged_revision_id = None
        new._current_revision = None
        new._last_saved_draft = None
        return new

    def new_instance(
        self,
        created_by_user_id: str,
        created_reason: str = UNKNOWN_REASON,
        *,
        id_generator: IdentityGenerator | None = None,
    ) -> Self:
        """Copy this container for a new owner; the copy starts as a draft.

        The published revision, or failing that the staged one, is cloned
        into the copy's staged slot and becomes its only revision.
        """
        new = self._clone(created_by_user_id, created_reason)
        source = self._published_revision or self._staged_revision
        if source is not None:
            revision = source.new_instance(
                created_by_user_id,
                created_reason,
                revision_id=id_generator.next_id() if id_generator else None,
            )
            new.add_revision(revision)
            new.set_staged_revision(revision)
        logger.debug("Cloned container %r (source revision %s)", self._name, source and source.revision_id)
        return new

    def new_instance_if_has_revision(
        self,
        created_by_user_id: str,
        created_reason: str = UNKNOWN_REASON,
        *,
        id_generator: IdentityGenerator | None = None,
    ) -> Self | None:
        """Copy only live content; None when nothing is published.

        Drafts do not propagate: the copy holds a single clone of the
        published revision, in its published slot.
        """
        if self._published_revision is None:
            logger.debug("Skipping clone of unpublished container %r", self._name)
            return None
        new = self._clone(created_by_user_id, created_reason)
        revision = self._published_revision.new_instance(
            created_by_user_id,
            created_reason,
            revision_id=id_generator.next_id() if id_generator else None,
        )
        new.add_revision(revision)
        new.set_published_revision(revision)
        return new

    # ── Populate / projection ────────────────────────────────────

    def populate(self, data: Mapping[str, Any], ignore: Iterable[str] | None = None) -> None:
        """Apply values through the field table; unknown keys are skipped.

        By default the creation tracking fields are ignored so external data
        cannot rewrite provenance.
        """
        populate(self, self.field_table, data, ignore)

    def populate_from_object(self, other: object, ignore: Iterable[str] | None = None) -> None:
        """Populate from another container's projection; other objects are ignored."""
        if isinstance(other, Container):
            self.populate(other.to_array(), ignore)

    def to_array(self, ignore: Iterable[str] | None = None) -> dict[str, Any]:
        """Project every readable field; revisions are left out by default."""
        return project(self, self.field_table, ignore)

    def json_serialize(self) -> dict[str, Any]:
        """JSON-compatible projection without revisions or the site."""
        return to_jsonable_python(self.to_array(JSON_IGNORE))

    # ── Documents ────────────────────────────────────────────────

    def to_document(self) -> dict[str, Any]:
        """Full JSON-compatible dump, history included, for storage."""
        data = self.to_array(ignore=())
        data["containerType"] = self.container_type
        return to_jsonable_python(data)

    @classmethod
    def from_document(cls, data: Mapping[str, Any], **kwargs: Any) -> Self:
        """Rebuild a container from ``to_document`` output.

        Slot pointers are restored as stored: no publish side effects run and
        ``last_published`` keeps its stored value.

        Raises:
            InvalidArgumentError: If a slot references a revision id that is
                not in the stored history, or the name is invalid.
        """
        tracking = TrackingRecord.model_validate(tracking_data(data))
        container = cls(tracking.created_by_user_id, tracking.created_reason, **kwargs)
        container._tracking = tracking
        container.populate(data, ignore=CREATION_FIELDS | {"revisions"})
        container.set_revisions(Revision.from_array(r) for r in data.get("revisions") or [])
        container._published_revision = container._slot_from_document(data.get("publishedRevisionId"))
        container._published_revision_id = data.get("publishedRevisionId")
        container._staged_revision = container._slot_from_document(data.get("stagedRevisionId"))
        container._staged_revision_id = data.get("stagedRevisionId")
        return container

    def _slot_from_document(self, revision_id: RevisionId | None) -> Revision | None:
        if revision_id is None:
            return None
        revision = self.get_revision_by_id(revision_id)
        if revision is None:
            raise InvalidArgumentError(f"Slot references unknown revision {revision_id!r}.")
        return revision


def _require_revision(revision: object) -> None:
    if not isinstance(revision, Revision):
        raise InvalidArgumentError(f"Expected a Revision, got {type(revision).__name__}.")


Container.field_table = (
    FieldSpec("name", getter=lambda c: c.name, setter=Container.set_name),
    FieldSpec("author", getter=lambda c: c.author, setter=Container.set_author),
    FieldSpec("lastPublished", getter=lambda c: c.last_published, setter=Container.set_last_published),
    FieldSpec("publishedRevisionId", getter=lambda c: c.published_revision_id),
    FieldSpec("stagedRevisionId", getter=lambda c: c.staged_revision_id),
    *FieldSpec.tracking_fields(),
    FieldSpec(
        "revisions",
        getter=lambda c: [r.to_array() for r in c.iter_revisions()],
        setter=Container.set_revisions,
        project_ignored=True,
    ),
    FieldSpec("siteId", getter=lambda c: c.site_id, setter=Container.set_site_id),
    FieldSpec("createdDateString", getter=lambda c: c.created_date_string()),
    FieldSpec("lastPublishedString", getter=lambda c: c.last_published_string()),
)


class Page(Container):
    """A routable page."""

    container_type: ClassVar[str] = "page"

    def __init__(self, created_by_user_id: str, created_reason: str = UNKNOWN_REASON, **kwargs: Any) -> None:
        super().__init__(created_by_user_id, created_reason, **kwargs)
        self._page_type = "n"

    @property
    def page_type(self) -> str:
        """Page type code; ``n`` is a normal page."""
        return self._page_type

    def set_page_type(self, page_type: str) -> None:
        self._page_type = page_type


Page.field_table = (
    *Container.field_table,
    FieldSpec("pageType", getter=lambda p: p.page_type, setter=Page.set_page_type),
)


class Block(Container):
    """A reusable content block placed on pages."""

    container_type: ClassVar[str] = "block"


CONTAINER_TYPES: dict[str, type[Container]] = {
    cls.container_type: cls for cls in (Container, Page, Block)
}
