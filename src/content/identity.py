"""Identity generation for revisions created outside a persistence layer."""

from __future__ import annotations

import itertools
from collections.abc import Iterable
from typing import Protocol

from revisioning.content.models import Revision, RevisionId


class IdentityGenerator(Protocol):
    """Allocates revision identifiers."""

    def next_id(self) -> RevisionId: ...


class SequentialIdGenerator:
    """Hands out increasing integer ids starting at ``start``."""

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)

    def next_id(self) -> int:
        return next(self._counter)

    @classmethod
    def following(cls, revisions: Iterable[Revision]) -> SequentialIdGenerator:
        """Start one past the largest integer id among ``revisions``."""
        int_ids = [r.revision_id for r in revisions if isinstance(r.revision_id, int)]
        return cls(max(int_ids, default=0) + 1)
