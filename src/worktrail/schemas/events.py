"""Event export/import DTOs: pure Pydantic, zero ORM imports.

The canonical wire pair is ``{"time", "name"}``; older exports used
``{"instant", "location"}`` and are still accepted on import.
"""
from __future__ import annotations
from datetime import date, datetime, timezone
from pydantic import AliasChoices, BaseModel, Field, field_validator


class EventRecord(BaseModel):
    time: datetime = Field(validation_alias=AliasChoices("time", "instant"))
    name: str = Field(min_length=1, validation_alias=AliasChoices("name", "location"))

    @field_validator("time")
    @classmethod
    def _as_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


class ImportSummary(BaseModel):
    received: int
    imported: int
    invalid: int
    failed: int


class EventRead(BaseModel):
    """A stored event. ``time`` is naive UTC, ``day`` the local date it was filed under."""

    model_config = {"from_attributes": True}

    id: int
    time: datetime
    name: str
    day: date
