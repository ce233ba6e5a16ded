"""Tracking domain — audit metadata attached to content entities."""

from revisioning.tracking.models import UNKNOWN_REASON, Trackable, TrackingRecord

__all__ = [
    "UNKNOWN_REASON",
    "Trackable",
    "TrackingRecord",
]
