"""Repository for presence Events. No business logic; caller owns the transaction."""
from __future__ import annotations
from collections.abc import Iterable
from datetime import date, tzinfo
from sqlmodel import Session
from worktrail.domain.clock import as_utc_naive, local_date
from worktrail.domain.exceptions import InvalidRecordError
from worktrail.infra.db.store import DataStore, UpsertReport
from worktrail.models.core import Event

_KEY = ("day", "name")

_NAMES_BY_DAY_SQL = """
    SELECT day, name, MIN(time) AS first_seen
    FROM event
    WHERE day >= :start AND day <= :end
    GROUP BY day, name
    ORDER BY day, first_seen, name
"""


def event_to_row(event: Event, tz: tzinfo | None) -> dict:
    if event.time is None:
        raise InvalidRecordError("Event has no time")
    return {
        "time": as_utc_naive(event.time),
        "name": event.name,
        "day": local_date(event.time, tz),
    }


class EventRepository:
    def __init__(self, session: Session, tz: tzinfo | None) -> None:
        self._store = DataStore(session)
        self._tz = tz

    def _to_row(self, event: Event) -> dict:
        return event_to_row(event, self._tz)

    def upsert(self, event: Event) -> None:
        self._store.upsert_one(Event, event, key=_KEY, to_row=self._to_row)

    def upsert_many(self, events: Iterable[Event]) -> UpsertReport:
        return self._store.upsert_many(Event, events, key=_KEY, to_row=self._to_row)

    def list_all(self) -> list[Event]:
        return self._store.list_all(Event)

    def names_by_day(self, start: date, end: date) -> dict[date, list[str]]:
        """Distinct event names per local date, in order of first sighting."""
        result = self._store.view_query(
            _NAMES_BY_DAY_SQL,
            {"start": start.isoformat(), "end": end.isoformat()},
            lambda row: (date.fromisoformat(row.day), row.name),
        )
        names: dict[date, list[str]] = {}
        for day, name in result.rows:
            bucket = names.setdefault(day, [])
            if name not in bucket:
                bucket.append(name)
        return names
