"""Tests for shell-probe presence detection."""
from datetime import date
from worktrail.infra.db.uow import UnitOfWork
from worktrail.services.detect_service import DetectService, detect_present, probe_succeeds
from worktrail.services.events_service import EventsService


def test_probe_exit_status_decides_presence():
    assert probe_succeeds("true")
    assert not probe_succeeds("false")
    assert not probe_succeeds("exit 3")


def test_detect_present_keeps_probe_order():
    probes = {"office": "true", "home": "false", "train": "test 1 -eq 1"}
    assert detect_present(probes) == ["office", "train"]


def test_detect_records_events_for_hits(use_test_engine, utc):
    with UnitOfWork() as uow:
        detected = DetectService(EventsService(uow, utc)).detect({"office": "true", "home": "false"})
    with UnitOfWork() as uow:
        events = EventsService(uow, utc).list_events()

    assert detected == ["office"]
    assert [e.name for e in events] == ["office"]
    assert isinstance(events[0].day, date)
