"""Error taxonomy for the revisioning package."""


class RevisioningError(Exception):
    """Base error for revisioning operations."""


class InvalidArgumentError(RevisioningError, ValueError):
    """Raised when a caller passes a value that violates a container rule.

    No state is changed when this is raised.
    """


class DocumentError(RevisioningError):
    """Raised when a container document cannot be read or parsed."""
