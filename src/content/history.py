"""Revision history resolution.

Finds the most recent pure draft: the newest revision that is neither in
a slot right now nor has ever been live.
"""

from __future__ import annotations

from collections.abc import Iterable

from revisioning.content.models import Revision


def is_untouched_draft(
    revision: Revision,
    published: Revision | None = None,
    staged: Revision | None = None,
) -> bool:
    """Return True if ``revision`` has never been part of the publish lineage."""
    if published is not None and published.revision_id == revision.revision_id:
        return False
    if staged is not None and staged.revision_id == revision.revision_id:
        return False
    return not revision.was_published


def resolve_last_saved_draft(
    revisions: Iterable[Revision],
    published: Revision | None = None,
    staged: Revision | None = None,
) -> Revision | None:
    """Scan ``revisions`` newest first and return the first untouched draft.

    Args:
        revisions: History in insertion order, oldest first.
        published: The container's current published revision, if any.
        staged: The container's current staged revision, if any.

    Returns:
        The matching revision, or None when every revision is excluded.
    """
    for revision in reversed(list(revisions)):
        if is_untouched_draft(revision, published, staged):
            return revision
    return None
