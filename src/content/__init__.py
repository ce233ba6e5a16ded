"""Content domain — revisions, containers and their publishing rules.

Containers (pages and reusable blocks) own a revision history and at most
one staged and one published pointer into it. Services load and save
whole containers as JSON documents.
"""

from revisioning.content.container import (
    CONTAINER_TYPES,
    DEFAULT_DATE_FORMAT,
    Block,
    Container,
    Page,
)
from revisioning.content.history import resolve_last_saved_draft
from revisioning.content.identity import IdentityGenerator, SequentialIdGenerator
from revisioning.content.models import Revision, RevisionId
from revisioning.content.services import load_container, save_container
from revisioning.content.sites import InMemorySiteRepository, Site, SiteRepository

__all__ = [
    "CONTAINER_TYPES",
    "DEFAULT_DATE_FORMAT",
    "Block",
    "Container",
    "IdentityGenerator",
    "InMemorySiteRepository",
    "Page",
    "Revision",
    "RevisionId",
    "SequentialIdGenerator",
    "Site",
    "SiteRepository",
    "load_container",
    "resolve_last_saved_draft",
    "save_container",
]
