"""Timesheet DTOs: pure Pydantic, zero ORM imports."""
from __future__ import annotations
from datetime import date, time
from pydantic import BaseModel, ConfigDict
from worktrail.domain.duration import ZERO, Duration, DurationField


class TimeSheetRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: date
    actual_duration: DurationField = ZERO
    expected_duration: DurationField = ZERO
    delta: DurationField = ZERO
    saldo: DurationField = ZERO
    normalized_start_of_business: time = time(0, 0)
    normalized_end_of_business: time = time(0, 0)
    locations: str = ""

    @classmethod
    def empty(cls, day: date, saldo: Duration = ZERO) -> TimeSheetRow:
        """Placeholder for a date without activity; the balance carries over."""
        return cls(date=day, saldo=saldo)


class TimeSheet(BaseModel):
    rows: list[TimeSheetRow]
    total_actual: DurationField = ZERO
    total_expected: DurationField = ZERO
    skipped_rows: int = 0

    @property
    def saldo(self) -> Duration:
        return self.rows[-1].saldo if self.rows else ZERO


class ExpectedDurationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    day: date
    duration: DurationField = ZERO
