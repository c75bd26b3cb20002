"""Conversions between stored naive-UTC timestamps and local calendar dates.

A ``tz`` of ``None`` stands for the system zone; ``datetime.astimezone(None)``
looks up its offset for each instant, so DST changes are honoured.
"""
from __future__ import annotations
from datetime import date, datetime, time, timezone, tzinfo


def as_utc_naive(value: datetime) -> datetime:
    """Normalize to the storage convention. Naive input is taken as UTC already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_local(value: datetime, tz: tzinfo | None) -> datetime:
    return as_utc(value).astimezone(tz)


def local_date(value: datetime, tz: tzinfo | None) -> date:
    return to_local(value, tz).date()


def local_time(value: datetime, tz: tzinfo | None) -> time:
    return to_local(value, tz).time().replace(microsecond=0, tzinfo=None)


def from_local(value: datetime, tz: tzinfo | None) -> datetime:
    """Interpret a naive wall-clock time in ``tz`` and return naive UTC."""
    if value.tzinfo is None:
        # astimezone() on a naive value assumes system local time.
        value = value.replace(tzinfo=tz) if tz is not None else value.astimezone()
    return as_utc_naive(value)


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)
