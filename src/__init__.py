"""Content revisioning and publishing model.

Versioned content containers (pages and reusable blocks) that keep a
revision history with at most one staged and one published pointer.
"""

__version__ = "0.1.0"
