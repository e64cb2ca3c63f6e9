"""Error hierarchy for the reporting engine.

Rejected edits are not errors: they come back as ``EditOutcome.REJECTED``.
"""

from __future__ import annotations


class ReportingError(Exception):
    """Base class for recoverable reporting failures."""


class StorageError(ReportingError):
    """The draft medium refused a read, write or delete."""


class DraftLoadError(StorageError):
    """A draft exists but could not be read back (corrupt or unreadable)."""


class SaveFailed(ReportingError):
    """The permanent-save collaborator reported a failure."""
