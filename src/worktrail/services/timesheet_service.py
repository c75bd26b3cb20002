"""Timesheet report use-case service."""
from __future__ import annotations
import logging
from datetime import date, tzinfo
from worktrail.domain.duration import ZERO, Duration
from worktrail.domain.timesheet import fill_gaps
from worktrail.infra.db.repositories.event_repository import EventRepository
from worktrail.infra.db.repositories.expected_duration_repository import ExpectedDurationRepository
from worktrail.infra.db.repositories.timesheet_repository import TimesheetRepository
from worktrail.infra.db.uow import UnitOfWork
from worktrail.models.core import ExpectedDuration
from worktrail.schemas.timesheet import ExpectedDurationRead, TimeSheet

logger = logging.getLogger(__name__)


class TimesheetService:
    def __init__(self, uow: UnitOfWork, tz: tzinfo | None) -> None:
        self._uow = uow
        self._tz = tz

    def build_report(
        self, start: date, end: date, *, default_expected: Duration, fill: bool = True,
    ) -> TimeSheet:
        """Aggregate entries, policy and locations for ``[start, end]``.

        Days that have time entries but no expected duration get
        ``default_expected`` persisted first, once.
        """
        if end < start:
            raise ValueError(f"Report end {end} is before start {start}")

        session = self._uow.session
        backfilled = ExpectedDurationRepository(session).backfill_default(default_expected)
        if backfilled:
            logger.info("Backfilled default expected duration for %d day(s)", backfilled)
            self._uow.commit()

        result = TimesheetRepository(session).daily_rollups(
            start, end, default_expected=default_expected, tz=self._tz,
        )
        names = EventRepository(session, self._tz).names_by_day(start, end)
        rows = [
            row.model_copy(update={"locations": ", ".join(names.get(row.date, []))})
            for row in result.rows
        ]
        if fill:
            rows = fill_gaps(rows)

        return TimeSheet(
            rows=rows,
            total_actual=sum((r.actual_duration for r in rows), ZERO),
            total_expected=sum((r.expected_duration for r in rows), ZERO),
            skipped_rows=len(result.skipped),
        )

    def set_expected(self, day: date, expected: Duration) -> ExpectedDurationRead:
        record = ExpectedDuration(day=day, duration=expected.seconds)
        ExpectedDurationRepository(self._uow.session).upsert(record)
        self._uow.commit()
        return ExpectedDurationRead(day=day, duration=expected)

    def list_expected(self) -> list[ExpectedDurationRead]:
        rows = ExpectedDurationRepository(self._uow.session).list_all()
        return sorted((ExpectedDurationRead.model_validate(r) for r in rows), key=lambda r: r.day)
