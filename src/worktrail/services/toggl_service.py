"""Toggl import use-case service: fetch remote entries and upsert them."""
from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import date, timedelta, tzinfo
from worktrail.infra.db.repositories.time_entry_repository import TimeEntryRepository
from worktrail.infra.db.store import UpsertReport
from worktrail.infra.db.uow import UnitOfWork
from worktrail.infra.toggl.client import TogglClient, TogglTimeEntry
from worktrail.models.core import TimeEntry

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    start: date
    end: date
    fetched: int
    rejected: int
    report: UpsertReport


def to_time_entry(remote: TogglTimeEntry) -> TimeEntry:
    return TimeEntry(
        id=remote.id,
        description=remote.description,
        start=remote.start,
        stop=remote.stop,
        project_id=remote.project_id,
        workspace_id=remote.workspace_id,
    )


class TogglService:
    def __init__(self, uow: UnitOfWork, client: TogglClient, tz: tzinfo | None) -> None:
        self._uow = uow
        self._client = client
        self._tz = tz

    def sync(self, start: date, end: date) -> SyncResult:
        """Import entries started on ``start`` through ``end`` (inclusive)."""
        # The API end bound is exclusive; ask for the following day.
        fetched = self._client.get_time_entries(start, end + timedelta(days=1))
        repo = TimeEntryRepository(self._uow.session, self._tz)
        report = repo.upsert_many(to_time_entry(e) for e in fetched.entries)
        self._uow.commit()
        logger.info(
            "Synced %d Toggl entries (%d rejected, %d failed) for %s..%s",
            report.written, len(fetched.rejected), len(report.failures), start, end,
        )
        return SyncResult(
            start=start,
            end=end,
            fetched=len(fetched.entries),
            rejected=len(fetched.rejected),
            report=report,
        )
