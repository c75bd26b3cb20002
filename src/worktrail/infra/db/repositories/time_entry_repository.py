"""Repository for imported TimeEntries. No business logic; caller owns the transaction."""
from __future__ import annotations
from collections.abc import Iterable
from datetime import tzinfo
from sqlmodel import Session
from worktrail.domain.clock import as_utc_naive, local_date
from worktrail.domain.exceptions import InvalidRecordError
from worktrail.infra.db.store import DataStore, UpsertReport
from worktrail.models.core import TimeEntry

_KEY = ("id",)


def time_entry_to_row(entry: TimeEntry, tz: tzinfo | None) -> dict:
    if entry.id is None:
        raise InvalidRecordError("Time entry has no id")
    if entry.start is None:
        raise InvalidRecordError(f"Time entry {entry.id} has no start")
    return {
        "id": entry.id,
        "description": entry.description,
        "start": as_utc_naive(entry.start),
        "stop": as_utc_naive(entry.stop) if entry.stop is not None else None,
        "project_id": entry.project_id,
        "workspace_id": entry.workspace_id,
        # Attributed to the local date it started on, even if it ends after midnight.
        "day": local_date(entry.start, tz),
    }


class TimeEntryRepository:
    def __init__(self, session: Session, tz: tzinfo | None) -> None:
        self._store = DataStore(session)
        self._tz = tz

    def _to_row(self, entry: TimeEntry) -> dict:
        return time_entry_to_row(entry, self._tz)

    def upsert(self, entry: TimeEntry) -> None:
        self._store.upsert_one(TimeEntry, entry, key=_KEY, to_row=self._to_row)

    def upsert_many(self, entries: Iterable[TimeEntry]) -> UpsertReport:
        return self._store.upsert_many(TimeEntry, entries, key=_KEY, to_row=self._to_row)

    def list_all(self) -> list[TimeEntry]:
        return self._store.list_all(TimeEntry)
