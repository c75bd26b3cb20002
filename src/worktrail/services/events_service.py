"""Presence event use-case service: record, list, export and import."""
from __future__ import annotations
import json
import logging
from datetime import datetime, tzinfo
from pydantic import TypeAdapter, ValidationError
from worktrail.domain.clock import as_utc, from_local, utc_now
from worktrail.domain.exceptions import InvalidRecordError
from worktrail.infra.db.repositories.event_repository import EventRepository
from worktrail.infra.db.store import UpsertReport
from worktrail.infra.db.uow import UnitOfWork
from worktrail.models.core import Event
from worktrail.schemas.events import EventRead, EventRecord, ImportSummary

logger = logging.getLogger(__name__)

_EXPORT_ADAPTER = TypeAdapter(list[EventRecord])


class EventsService:
    def __init__(self, uow: UnitOfWork, tz: tzinfo | None) -> None:
        self._uow = uow
        self._tz = tz

    def _repo(self) -> EventRepository:
        return EventRepository(self._uow.session, self._tz)

    def add_event(self, name: str, when: datetime | None = None) -> EventRecord:
        """Record ``name`` at ``when`` (local wall-clock if naive) or now."""
        time = utc_now() if when is None else from_local(when, self._tz)
        self._repo().upsert(Event(time=time, name=name))
        self._uow.commit()
        logger.info("Recorded event %r at %s", name, time.isoformat())
        return EventRecord(time=time, name=name)

    def list_events(self) -> list[EventRead]:
        return [EventRead.model_validate(e) for e in self._repo().list_all()]

    def export_events(self) -> str:
        """All stored events, store order, as a JSON array of ``{time, name}``."""
        records = [EventRecord(time=as_utc(e.time), name=e.name) for e in self._repo().list_all()]
        return _EXPORT_ADAPTER.dump_json(records, indent=2).decode()

    def import_events(self, payload: str) -> tuple[ImportSummary, UpsertReport]:
        """Upsert every valid record of an export; invalid ones are skipped with a warning."""
        try:
            raw = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise InvalidRecordError(f"Import is not valid JSON: {exc}") from exc
        if not isinstance(raw, list):
            raise InvalidRecordError("Import must be a JSON array of events")

        events: list[Event] = []
        invalid = 0
        for index, item in enumerate(raw):
            try:
                record = EventRecord.model_validate(item)
            except ValidationError as exc:
                invalid += 1
                logger.warning("Skipping record %d: %s", index, exc.errors()[0].get("msg", exc))
                continue
            events.append(Event(time=record.time, name=record.name))

        report = self._repo().upsert_many(events)
        self._uow.commit()
        summary = ImportSummary(
            received=len(raw),
            imported=report.written,
            invalid=invalid,
            failed=len(report.failures),
        )
        return summary, report
