"""JSON document I/O for containers.

A document holds one container with its full revision history. Loading
dispatches on the stored ``containerType`` and restores slot pointers
exactly as saved.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from revisioning.content.container import CONTAINER_TYPES, Container
from revisioning.errors import DocumentError, InvalidArgumentError

logger = logging.getLogger(__name__)


def load_container(path: Path, **kwargs: Any) -> Container:
    """Load a container document from ``path``.

    Args:
        path: JSON file written by ``save_container``.
        **kwargs: Passed to the container constructor
            (``invalidate_draft_cache``, ``date_format``).

    Raises:
        DocumentError: If the file is missing, is not valid JSON, names an
            unknown container type, or does not describe a valid container.
    """
    if not path.exists():
        raise DocumentError(f"Container document not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        logger.warning("Corrupt container document at %s", path)
        raise DocumentError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise DocumentError(f"Expected a JSON object in {path}")

    container_type = data.get("containerType", Container.container_type)
    cls = CONTAINER_TYPES.get(container_type)
    if cls is None:
        raise DocumentError(f"Unknown container type {container_type!r} in {path}")

    try:
        return cls.from_document(data, **kwargs)
    except (ValidationError, InvalidArgumentError, KeyError) as exc:
        logger.warning("Invalid container document at %s: %s", path, exc)
        raise DocumentError(f"Invalid container document {path}: {exc}") from exc


def save_container(container: Container, path: Path) -> None:
    """Write ``container`` and its history to ``path`` as JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(container.to_document(), indent=2),
        encoding="utf-8",
    )
    logger.debug("Saved %s %r to %s", container.container_type, container.name, path)
