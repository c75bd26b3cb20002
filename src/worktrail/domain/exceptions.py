from __future__ import annotations
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from worktrail.infra.db.store import RowFailure


class WorktrailError(Exception):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class StorageError(WorktrailError):
    """Connection, filesystem, schema or transaction failure. Fatal for the command."""


class BatchUpsertError(WorktrailError):
    """One or more rows of a batch write failed; the rest were kept."""

    def __init__(self, failures: list[RowFailure]) -> None:
        self.failures = failures
        super().__init__(f"{len(failures)} row(s) could not be written")


class InvalidRecordError(WorktrailError, ValueError):
    """An input record is malformed (missing field, unparseable date)."""


class TogglApiError(WorktrailError):
    """The Toggl API could not be reached or returned something unusable."""


class ConfigurationError(WorktrailError):
    """A setting required by the command is missing."""
