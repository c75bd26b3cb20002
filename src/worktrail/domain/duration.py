"""Signed time span with whole-second precision.

Persisted and serialized as a bare signed integer of seconds.
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import timedelta
from typing import Annotated, Any
from pydantic import PlainSerializer, PlainValidator


@dataclass(frozen=True, order=True)
class Duration:
    seconds: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "seconds", int(self.seconds))

    @classmethod
    def of(cls, span: timedelta) -> Duration:
        """Build from a timedelta; sub-second parts are truncated."""
        return cls(int(span.total_seconds()))

    @classmethod
    def coerce(cls, value: Any) -> Duration:
        """Accept ints (seconds), timedeltas and Durations."""
        if isinstance(value, Duration):
            return value
        if isinstance(value, timedelta):
            return cls.of(value)
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value)
        raise ValueError(f"cannot interpret {value!r} as a duration")

    def to_timedelta(self) -> timedelta:
        return timedelta(seconds=self.seconds)

    def _magnitude(self) -> str:
        total = abs(self.seconds)
        hours, rest = divmod(total, 3600)
        minutes, seconds = divmod(rest, 60)
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"

    def format_unsigned(self) -> str:
        return self._magnitude()

    def format_signed(self) -> str:
        if self.seconds > 0:
            sign = "+"
        elif self.seconds < 0:
            sign = "-"
        else:
            sign = " "
        return f"{sign}{self._magnitude()}"

    def __str__(self) -> str:
        return self.format_signed()

    def __int__(self) -> int:
        return self.seconds

    def __bool__(self) -> bool:
        return self.seconds != 0

    def __add__(self, other: Duration) -> Duration:
        if not isinstance(other, Duration):
            return NotImplemented
        return Duration(self.seconds + other.seconds)

    def __sub__(self, other: Duration) -> Duration:
        if not isinstance(other, Duration):
            return NotImplemented
        return Duration(self.seconds - other.seconds)

    def __neg__(self) -> Duration:
        return Duration(-self.seconds)

    def __abs__(self) -> Duration:
        return Duration(abs(self.seconds))


ZERO = Duration()

# Pydantic field type: validates from int/timedelta, serializes to int seconds.
DurationField = Annotated[
    Duration,
    PlainValidator(Duration.coerce),
    PlainSerializer(lambda d: d.seconds, return_type=int),
]
