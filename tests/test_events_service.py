"""Tests for recording, exporting and importing presence events."""
import json
from datetime import date, datetime, timedelta, timezone
import pytest
from worktrail.domain.exceptions import InvalidRecordError
from worktrail.infra.db.uow import UnitOfWork
from worktrail.services.events_service import EventsService


def _service(uow, tz=timezone.utc):
    return EventsService(uow, tz)


def test_add_event_interprets_naive_time_as_local(use_test_engine):
    plus_two = timezone(timedelta(hours=2))
    with UnitOfWork() as uow:
        _service(uow, plus_two).add_event("office", datetime(2024, 1, 2, 1, 30))
    with UnitOfWork() as uow:
        (event,) = _service(uow, plus_two).list_events()
    assert event.time == datetime(2024, 1, 1, 23, 30)
    assert event.day == date(2024, 1, 2)


def test_add_event_defaults_to_now(use_test_engine):
    before = datetime.now(timezone.utc)
    with UnitOfWork() as uow:
        event = _service(uow).add_event("home")
    assert before.replace(microsecond=0) <= event.time <= datetime.now(timezone.utc)
    assert event.time.tzinfo is not None


def test_export_uses_time_and_name(use_test_engine):
    with UnitOfWork() as uow:
        _service(uow).add_event("office", datetime(2024, 1, 1, 8))
        exported = json.loads(_service(uow).export_events())
    assert exported == [{"time": "2024-01-01T08:00:00Z", "name": "office"}]


def test_export_import_round_trip_is_idempotent(use_test_engine):
    with UnitOfWork() as uow:
        service = _service(uow)
        service.add_event("office", datetime(2024, 1, 1, 8))
        service.add_event("home", datetime(2024, 1, 1, 19))
        service.add_event("office", datetime(2024, 1, 2, 9))
        exported = service.export_events()

    with UnitOfWork() as uow:
        summary, report = _service(uow).import_events(exported)
    assert report.ok
    assert summary.received == summary.imported == 3

    with UnitOfWork() as uow:
        events = _service(uow).list_events()
        again = _service(uow).export_events()
    assert len(events) == 3
    assert {(e.time, e.name) for e in events} == {
        (datetime(2024, 1, 1, 8), "office"),
        (datetime(2024, 1, 1, 19), "home"),
        (datetime(2024, 1, 2, 9), "office"),
    }
    assert again == exported


def test_import_accepts_legacy_field_names(use_test_engine):
    payload = json.dumps([
        {"instant": "2024-01-01T08:00:00+01:00", "location": "office"},
        {"time": "2024-01-02T09:00:00Z", "name": "home"},
    ])
    with UnitOfWork() as uow:
        summary, _ = _service(uow).import_events(payload)
    with UnitOfWork() as uow:
        events = sorted(_service(uow).list_events(), key=lambda e: e.time)

    assert summary.imported == 2
    assert [(e.time, e.name) for e in events] == [
        (datetime(2024, 1, 1, 7), "office"),
        (datetime(2024, 1, 2, 9), "home"),
    ]


def test_import_skips_invalid_records(use_test_engine):
    payload = json.dumps([
        {"time": "2024-01-01T08:00:00Z", "name": "office"},
        {"time": "not a time", "name": "home"},
        {"time": "2024-01-01T09:00:00Z"},
        {"time": "2024-01-01T10:00:00Z", "name": ""},
    ])
    with UnitOfWork() as uow:
        summary, report = _service(uow).import_events(payload)

    assert report.ok
    assert (summary.received, summary.imported, summary.invalid, summary.failed) == (4, 1, 3, 0)


@pytest.mark.parametrize("payload", ["{not json", '{"time": "2024-01-01T08:00:00Z", "name": "x"}'])
def test_import_rejects_malformed_payload(use_test_engine, payload):
    with UnitOfWork() as uow:
        with pytest.raises(InvalidRecordError):
            _service(uow).import_events(payload)
