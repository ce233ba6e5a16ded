"""Declarative field table driving generic populate and projection.

Each entity lists its externally visible properties as ``FieldSpec``
entries. ``populate`` applies incoming values through the declared
setters and ``project`` reads the declared getters; names outside the
table, or without the needed accessor, are skipped silently so callers
can send data for newer or older schemas.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import TypeAdapter

logger = logging.getLogger(__name__)

# Original-creation provenance; never accepted from external data by default.
CREATION_FIELDS = frozenset({"createdByUserId", "createdDate", "createdReason"})

_OPTIONAL_DATETIME = TypeAdapter(datetime | None)


@dataclass(frozen=True)
class FieldSpec:
    """One projected property: its external name and accessors.

    ``populate_ignored`` / ``project_ignored`` mark the field as part of
    the default ignore set for the respective direction.
    """

    name: str
    getter: Callable[[Any], Any] | None = None
    setter: Callable[[Any, Any], None] | None = None
    populate_ignored: bool = False
    project_ignored: bool = False

    @classmethod
    def tracking_fields(cls) -> tuple[FieldSpec, ...]:
        """Entries for an embedded ``tracking`` record.

        Creation fields are read-only; modification fields are settable so a
        projection carries the audit trail back through ``populate``.
        """
        return (
            cls("createdByUserId", getter=lambda o: o.tracking.created_by_user_id, populate_ignored=True),
            cls("createdDate", getter=lambda o: o.tracking.created_date, populate_ignored=True),
            cls("createdReason", getter=lambda o: o.tracking.created_reason, populate_ignored=True),
            cls("modifiedByUserId", getter=lambda o: o.tracking.modified_by_user_id, setter=_set_modified_by_user_id),
            cls("modifiedDate", getter=lambda o: o.tracking.modified_date, setter=_set_modified_date),
            cls("modifiedReason", getter=lambda o: o.tracking.modified_reason, setter=_set_modified_reason),
        )


def _set_modified_by_user_id(target: Any, value: str | None) -> None:
    target.tracking.modified_by_user_id = value


def _set_modified_date(target: Any, value: datetime | str | None) -> None:
    target.tracking.modified_date = _OPTIONAL_DATETIME.validate_python(value)


def _set_modified_reason(target: Any, value: str) -> None:
    target.tracking.modified_reason = value


def default_populate_ignore(fields: Sequence[FieldSpec]) -> frozenset[str]:
    return frozenset(f.name for f in fields if f.populate_ignored)


def default_project_ignore(fields: Sequence[FieldSpec]) -> frozenset[str]:
    return frozenset(f.name for f in fields if f.project_ignored)


def populate(
    target: Any,
    fields: Sequence[FieldSpec],
    data: Mapping[str, Any],
    ignore: Iterable[str] | None = None,
) -> None:
    """Invoke the declared setter for every key of ``data`` not ignored.

    Keys are applied in ``data`` order. Setter errors propagate to the
    caller unchanged.

    Args:
        target: Object whose setters are invoked.
        fields: The target's field table.
        data: Incoming property values keyed by external name.
        ignore: Names to skip. Defaults to the table's populate ignore set.
    """
    skip = default_populate_ignore(fields) if ignore is None else frozenset(ignore)
    by_name = {f.name: f for f in fields}
    for name, value in data.items():
        if name in skip:
            continue
        spec = by_name.get(name)
        if spec is None or spec.setter is None:
            logger.debug("Skipping unsettable property %r on %s", name, type(target).__name__)
            continue
        spec.setter(target, value)


def project(
    source: Any,
    fields: Sequence[FieldSpec],
    ignore: Iterable[str] | None = None,
) -> dict[str, Any]:
    """Read every declared getter not ignored into a new mapping.

    Args:
        source: Object to read from.
        fields: The source's field table.
        ignore: Names to leave out. Defaults to the table's project ignore set.

    Returns:
        Property values keyed by external name, in table order.
    """
    skip = default_project_ignore(fields) if ignore is None else frozenset(ignore)
    return {f.name: f.getter(source) for f in fields if f.getter is not None and f.name not in skip}


def tracking_data(data: Mapping[str, Any]) -> dict[str, Any]:
    """Pick tracking record keyword arguments out of a projection.

    Keys absent from ``data`` are left out so the record's own defaults
    apply.
    """
    mapping = {
        "createdByUserId": "created_by_user_id",
        "createdDate": "created_date",
        "createdReason": "created_reason",
        "modifiedByUserId": "modified_by_user_id",
        "modifiedDate": "modified_date",
        "modifiedReason": "modified_reason",
    }
    return {attr: data[key] for key, attr in mapping.items() if data.get(key) is not None}
