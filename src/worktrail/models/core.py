"""Stored entities. Timestamps are naive UTC; ``day`` is the local calendar date."""
from datetime import date, datetime
from typing import Optional
from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel, UniqueConstraint
from worktrail.domain.duration import Duration


class Event(SQLModel, table=True):
    """A presence observation: where (``name``) somebody was at ``time``.

    At most one row per (day, name); writing the same name again on the
    same local date overwrites ``time``.
    """
    __tablename__ = "event"
    __table_args__ = (UniqueConstraint("day", "name", name="uq_event_day_name"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    time: datetime = Field(sa_type=DateTime)
    name: str
    day: Optional[date] = Field(default=None, index=True, nullable=False)


class TimeEntry(SQLModel, table=True):
    """An interval imported from Toggl, keyed by its external id."""
    __tablename__ = "time_entry"

    id: Optional[int] = Field(
        default=None, primary_key=True, sa_column_kwargs={"autoincrement": False},
    )
    description: Optional[str] = None
    start: datetime = Field(sa_type=DateTime)
    stop: Optional[datetime] = Field(default=None, sa_type=DateTime)
    project_id: Optional[int] = None
    workspace_id: Optional[int] = None
    day: Optional[date] = Field(default=None, index=True, nullable=False)

    @property
    def duration(self) -> Optional[Duration]:
        """``stop - start``; ``None`` while the entry is still running."""
        if self.stop is None:
            return None
        return Duration.of(self.stop - self.start)


class ExpectedDuration(SQLModel, table=True):
    """How much work is expected on ``day``, in signed seconds."""
    __tablename__ = "expected_duration"

    day: date = Field(primary_key=True)
    duration: int = 0

    @property
    def expected(self) -> Duration:
        return Duration(self.duration)
