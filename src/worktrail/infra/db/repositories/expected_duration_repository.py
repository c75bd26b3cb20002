"""Repository for per-date ExpectedDuration policy rows."""
from __future__ import annotations
from sqlmodel import Session
from worktrail.domain.duration import Duration
from worktrail.infra.db.store import DataStore
from worktrail.models.core import ExpectedDuration

_KEY = ("day",)

# Insert-only: days that already have a value keep it.
_BACKFILL_SQL = """
    INSERT INTO expected_duration (day, duration)
    SELECT DISTINCT t.day, :seconds
    FROM time_entry AS t
    WHERE NOT EXISTS (SELECT 1 FROM expected_duration AS e WHERE e.day = t.day)
"""


def expected_duration_to_row(expected: ExpectedDuration) -> dict:
    return {"day": expected.day, "duration": int(expected.duration)}


class ExpectedDurationRepository:
    def __init__(self, session: Session) -> None:
        self._store = DataStore(session)

    def upsert(self, expected: ExpectedDuration) -> None:
        self._store.upsert_one(
            ExpectedDuration, expected, key=_KEY, to_row=expected_duration_to_row,
        )

    def list_all(self) -> list[ExpectedDuration]:
        return self._store.list_all(ExpectedDuration)

    def backfill_default(self, default: Duration) -> int:
        """Persist ``default`` for every day with time entries but no policy row."""
        return self._store.execute(_BACKFILL_SQL, {"seconds": default.seconds})
