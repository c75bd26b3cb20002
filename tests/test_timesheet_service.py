"""Integration tests for the timesheet report, run against a temp SQLite DB."""
from datetime import date, datetime, time, timedelta, timezone
import pytest
from worktrail.domain.duration import ZERO, Duration
from worktrail.infra.db.repositories.event_repository import EventRepository
from worktrail.infra.db.repositories.time_entry_repository import TimeEntryRepository
from worktrail.infra.db.uow import UnitOfWork
from worktrail.models.core import Event, TimeEntry
from worktrail.services.timesheet_service import TimesheetService

H = 3600


def _seed(entries=(), events=(), tz=timezone.utc):
    with UnitOfWork() as uow:
        TimeEntryRepository(uow.session, tz).upsert_many(entries).raise_for_failures()
        EventRepository(uow.session, tz).upsert_many(events).raise_for_failures()


def _entry(entry_id, start, stop):
    return TimeEntry(id=entry_id, start=start, stop=stop)


def _report(start, end, default=ZERO, tz=timezone.utc, fill=True):
    with UnitOfWork() as uow:
        return TimesheetService(uow, tz).build_report(start, end, default_expected=default, fill=fill)


def test_gap_day_is_filled_and_carries_saldo(use_test_engine):
    _seed([
        _entry(1, datetime(2024, 1, 1, 8), datetime(2024, 1, 1, 12)),
        _entry(2, datetime(2024, 1, 3, 8), datetime(2024, 1, 3, 9)),
    ])

    sheet = _report(date(2024, 1, 1), date(2024, 1, 3))

    assert [r.date for r in sheet.rows] == [date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3)]
    assert [r.actual_duration for r in sheet.rows] == [Duration(4 * H), ZERO, Duration(H)]
    assert [r.saldo for r in sheet.rows] == [Duration(4 * H), Duration(4 * H), Duration(5 * H)]
    assert sheet.rows[0].normalized_start_of_business == time(8, 0)
    assert sheet.rows[0].normalized_end_of_business == time(12, 0)
    assert sheet.total_actual == Duration(5 * H)
    assert sheet.saldo == Duration(5 * H)
    assert sheet.skipped_rows == 0


def test_full_day_matches_default_expectation(use_test_engine):
    _seed([_entry(1, datetime(2024, 1, 1, 8), datetime(2024, 1, 1, 16))])

    (row,) = _report(date(2024, 1, 1), date(2024, 1, 1), default=Duration(8 * H)).rows

    assert row.actual_duration == Duration(8 * H)
    assert row.expected_duration == Duration(8 * H)
    assert row.delta == ZERO
    assert row.saldo == ZERO


def test_rows_satisfy_delta_and_running_saldo(use_test_engine):
    _seed([
        _entry(1, datetime(2024, 3, 4, 9), datetime(2024, 3, 4, 18)),
        _entry(2, datetime(2024, 3, 5, 9), datetime(2024, 3, 5, 13)),
        _entry(3, datetime(2024, 3, 7, 7), datetime(2024, 3, 7, 15, 30)),
    ])

    sheet = _report(date(2024, 3, 4), date(2024, 3, 7), default=Duration(8 * H))

    saldo = ZERO
    for row in sheet.rows:
        assert row.delta == row.actual_duration - row.expected_duration
        saldo = saldo + row.delta
        assert row.saldo == saldo


def test_open_entry_counts_as_zero(use_test_engine):
    _seed([
        _entry(1, datetime(2024, 1, 1, 8), datetime(2024, 1, 1, 10)),
        _entry(2, datetime(2024, 1, 1, 14), None),
    ])

    (row,) = _report(date(2024, 1, 1), date(2024, 1, 1)).rows

    assert row.actual_duration == Duration(2 * H)


def test_entry_crossing_midnight_belongs_to_its_start_date(use_test_engine):
    _seed([_entry(1, datetime(2024, 1, 1, 22), datetime(2024, 1, 2, 2))])

    sheet = _report(date(2024, 1, 1), date(2024, 1, 2))

    assert [r.date for r in sheet.rows] == [date(2024, 1, 1)]
    row = sheet.rows[0]
    assert row.actual_duration == Duration(4 * H)
    assert row.normalized_start_of_business == time(22, 0)
    assert row.normalized_end_of_business == time(23, 59, 59)


def test_dates_follow_the_configured_timezone(use_test_engine):
    plus_two = timezone(timedelta(hours=2))
    _seed([_entry(1, datetime(2024, 1, 1, 23), datetime(2024, 1, 2, 1))], tz=plus_two)

    (row,) = _report(date(2024, 1, 2), date(2024, 1, 2), tz=plus_two).rows

    assert row.date == date(2024, 1, 2)
    assert row.normalized_start_of_business == time(1, 0)


def test_saldo_includes_history_before_start(use_test_engine):
    _seed([
        _entry(1, datetime(2024, 1, 1, 8), datetime(2024, 1, 1, 18)),
        _entry(2, datetime(2024, 1, 2, 8), datetime(2024, 1, 2, 16)),
    ])

    (row,) = _report(date(2024, 1, 2), date(2024, 1, 2), default=Duration(8 * H)).rows

    assert row.delta == ZERO
    assert row.saldo == Duration(2 * H)


def test_default_expectation_is_persisted_once(use_test_engine):
    _seed([_entry(1, datetime(2024, 1, 1, 8), datetime(2024, 1, 1, 14))])

    first = _report(date(2024, 1, 1), date(2024, 1, 1), default=Duration(8 * H)).rows[0]
    second = _report(date(2024, 1, 1), date(2024, 1, 1), default=Duration(4 * H)).rows[0]

    assert first.expected_duration == Duration(8 * H)
    assert second.expected_duration == Duration(8 * H)
    with UnitOfWork() as uow:
        stored = TimesheetService(uow, timezone.utc).list_expected()
    assert [(e.day, e.duration) for e in stored] == [(date(2024, 1, 1), Duration(8 * H))]


def test_explicit_expectation_overrides_default(use_test_engine):
    _seed([_entry(1, datetime(2024, 12, 25, 10), datetime(2024, 12, 25, 11))])
    with UnitOfWork() as uow:
        TimesheetService(uow, timezone.utc).set_expected(date(2024, 12, 25), ZERO)

    (row,) = _report(date(2024, 12, 25), date(2024, 12, 25), default=Duration(8 * H)).rows

    assert row.expected_duration == ZERO
    assert row.delta == Duration(H)


def test_locations_are_distinct_in_first_seen_order(use_test_engine):
    _seed(
        [_entry(1, datetime(2024, 1, 1, 8), datetime(2024, 1, 1, 9))],
        [
            Event(time=datetime(2024, 1, 1, 13), name="office"),
            Event(time=datetime(2024, 1, 1, 7), name="home"),
            Event(time=datetime(2024, 1, 1, 18), name="home"),
        ],
    )

    (row,) = _report(date(2024, 1, 1), date(2024, 1, 1)).rows

    assert row.locations == "office, home"


def test_event_only_days_are_not_reported(use_test_engine):
    _seed(events=[Event(time=datetime(2024, 1, 1, 9), name="office")])

    assert _report(date(2024, 1, 1), date(2024, 1, 1)).rows == []


def test_compact_report_skips_gap_rows(use_test_engine):
    _seed([
        _entry(1, datetime(2024, 1, 1, 8), datetime(2024, 1, 1, 9)),
        _entry(2, datetime(2024, 1, 5, 8), datetime(2024, 1, 5, 9)),
    ])

    sheet = _report(date(2024, 1, 1), date(2024, 1, 5), fill=False)

    assert [r.date for r in sheet.rows] == [date(2024, 1, 1), date(2024, 1, 5)]


def test_end_before_start_is_rejected(use_test_engine):
    with pytest.raises(ValueError):
        _report(date(2024, 1, 2), date(2024, 1, 1))
