"""Densify aggregated timesheet rows into a date-contiguous sequence."""
from __future__ import annotations
from collections.abc import Iterable
from datetime import timedelta
from worktrail.domain.duration import ZERO
from worktrail.schemas.timesheet import TimeSheetRow

_ONE_DAY = timedelta(days=1)


def fill_gaps(rows: Iterable[TimeSheetRow]) -> list[TimeSheetRow]:
    """Return one row per calendar date from the first to the last input row.

    Existing rows are kept as they are. Missing dates get an empty row that
    carries the previous saldo forward, since the balance does not move on
    inactive days. Empty input gives empty output.
    """
    by_date = {row.date: row for row in rows}
    if not by_date:
        return []

    current, last = min(by_date), max(by_date)
    saldo = ZERO
    filled: list[TimeSheetRow] = []
    while current <= last:
        row = by_date.get(current) or TimeSheetRow.empty(current, saldo)
        filled.append(row)
        saldo = row.saldo
        current += _ONE_DAY
    return filled
