"""Per-date rollups of time entries against the expected-duration policy."""
from __future__ import annotations
from datetime import date, datetime, time, tzinfo
from sqlalchemy import Row
from sqlmodel import Session
from worktrail.domain.clock import local_time
from worktrail.domain.duration import Duration
from worktrail.infra.db.store import DataStore, QueryResult
from worktrail.schemas.timesheet import TimeSheetRow

# Saldo is a prefix sum over the whole history up to :end, so the window
# runs before the :start filter is applied.
_DAILY_ROLLUP_SQL = """
    WITH daily AS (
        SELECT t.day AS day,
               SUM(CASE WHEN t.stop IS NULL THEN 0
                        ELSE CAST(strftime('%s', t.stop) AS INTEGER)
                           - CAST(strftime('%s', t.start) AS INTEGER)
                   END) AS actual_seconds,
               MIN(t.start) AS first_start
        FROM time_entry AS t
        WHERE t.day <= :end
        GROUP BY t.day
    ),
    rolled AS (
        SELECT d.day AS day,
               d.actual_seconds AS actual_seconds,
               d.first_start AS first_start,
               COALESCE(e.duration, :default_seconds) AS expected_seconds,
               d.actual_seconds - COALESCE(e.duration, :default_seconds) AS delta_seconds,
               SUM(d.actual_seconds - COALESCE(e.duration, :default_seconds)) OVER (
                   ORDER BY d.day ROWS BETWEEN UNBOUNDED PRECEDING AND CURRENT ROW
               ) AS saldo_seconds
        FROM daily AS d
        LEFT JOIN expected_duration AS e ON e.day = d.day
    )
    SELECT day, actual_seconds, first_start, expected_seconds, delta_seconds, saldo_seconds
    FROM rolled
    WHERE day >= :start
    ORDER BY day
"""

_END_OF_DAY = time(23, 59, 59)


def _normalized_end(day: date, start: time, actual: Duration) -> time:
    """Start of business plus the worked time, kept within the same day."""
    if actual.seconds <= 0:
        return start
    end = datetime.combine(day, start) + actual.to_timedelta()
    if end.date() != day:
        return _END_OF_DAY
    return end.time()


def rollup_from_row(row: Row, tz: tzinfo | None) -> TimeSheetRow:
    day = date.fromisoformat(row.day)
    actual = Duration(row.actual_seconds)
    start = local_time(datetime.fromisoformat(row.first_start), tz)
    return TimeSheetRow(
        date=day,
        actual_duration=actual,
        expected_duration=Duration(row.expected_seconds),
        delta=Duration(row.delta_seconds),
        saldo=Duration(row.saldo_seconds),
        normalized_start_of_business=start,
        normalized_end_of_business=_normalized_end(day, start, actual),
    )


class TimesheetRepository:
    def __init__(self, session: Session) -> None:
        self._store = DataStore(session)

    def daily_rollups(
        self, start: date, end: date, *, default_expected: Duration, tz: tzinfo | None,
    ) -> QueryResult[TimeSheetRow]:
        """One row per local date in ``[start, end]`` that has time entries."""
        return self._store.view_query(
            _DAILY_ROLLUP_SQL,
            {
                "start": start.isoformat(),
                "end": end.isoformat(),
                "default_seconds": default_expected.seconds,
            },
            lambda row: rollup_from_row(row, tz),
        )
