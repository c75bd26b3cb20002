"""Generic read/write paths over the SQLModel session.

Callers supply the mapping pair: ``to_row`` turns an entity into a column
dict for writing, ``from_row`` turns a result row into whatever the caller
wants back. No business logic; caller owns the transaction.
"""
from __future__ import annotations
import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar
from sqlalchemy import Row, text
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, OperationalError, StatementError
from sqlmodel import Session, SQLModel, select
from worktrail.domain.exceptions import BatchUpsertError, StorageError

logger = logging.getLogger(__name__)

E = TypeVar("E")
T = TypeVar("T")

ToRow = Callable[[Any], dict[str, Any]]
FromRow = Callable[[Row], T]


@dataclass
class RowFailure:
    index: int
    entity: Any
    error: Exception

    def __str__(self) -> str:
        return f"row {self.index}: {self.error}"


@dataclass
class UpsertReport:
    written: int = 0
    failures: list[RowFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def raise_for_failures(self) -> None:
        if self.failures:
            raise BatchUpsertError(self.failures)


@dataclass
class QueryResult(Generic[T]):
    rows: list[T]
    skipped: list[Mapping[str, Any]] = field(default_factory=list)


class DataStore:
    def __init__(self, session: Session) -> None:
        self._s = session

    # --- writes ---

    def _upsert_statement(self, table: type[SQLModel], row: dict[str, Any], key: Sequence[str]):
        stmt = sqlite_insert(table.__table__).values(**row)
        updates = {c: stmt.excluded[c] for c in row if c not in key}
        if not updates:
            return stmt.on_conflict_do_nothing(index_elements=list(key))
        return stmt.on_conflict_do_update(index_elements=list(key), set_=updates)

    def upsert_many(
        self, table: type[SQLModel], entities: Iterable[E], *, key: Sequence[str], to_row: ToRow,
    ) -> UpsertReport:
        """Insert-or-replace by natural key, one SAVEPOINT per row.

        A failing row is rolled back alone and recorded; the others stay in
        the surrounding transaction. Transaction-level errors raise.
        """
        report = UpsertReport()
        for index, entity in enumerate(entities):
            try:
                row = to_row(entity)
                with self._s.begin_nested():
                    self._s.exec(self._upsert_statement(table, row, key))
            except IntegrityError as exc:
                report.failures.append(RowFailure(index, entity, exc.orig or exc))
            except OperationalError as exc:
                raise StorageError(f"Could not write to {table.__tablename__}: {exc.orig}") from exc
            except (StatementError, ValueError, TypeError) as exc:
                report.failures.append(RowFailure(index, entity, exc))
            else:
                report.written += 1
        for failure in report.failures:
            logger.warning("Skipped %s row %s", table.__tablename__, failure)
        return report

    def upsert_one(
        self, table: type[SQLModel], entity: E, *, key: Sequence[str], to_row: ToRow,
    ) -> None:
        self.upsert_many(table, [entity], key=key, to_row=to_row).raise_for_failures()

    # --- reads ---

    def list_all(self, table: type[SQLModel]) -> list:
        try:
            return list(self._s.exec(select(table)).all())
        except OperationalError as exc:
            raise StorageError(f"Could not read {table.__tablename__}: {exc.orig}") from exc

    def view_query(
        self, sql: str, params: Mapping[str, Any], from_row: FromRow[T],
    ) -> QueryResult[T]:
        """Run ``sql`` and map every row; rows the mapper rejects are counted, not fatal."""
        try:
            raw_rows = self._s.exec(text(sql), params=dict(params)).all()
        except OperationalError as exc:
            raise StorageError(f"Query failed: {exc.orig}") from exc

        result: QueryResult[T] = QueryResult(rows=[])
        for raw in raw_rows:
            try:
                result.rows.append(from_row(raw))
            except (AttributeError, KeyError, ValueError, TypeError) as exc:
                logger.warning("Skipped unmappable row %r: %s", tuple(raw), exc)
                result.skipped.append(dict(raw._mapping))
        if result.skipped:
            logger.warning("%d of %d row(s) could not be mapped", len(result.skipped), len(raw_rows))
        return result

    def execute(self, sql: str, params: Mapping[str, Any]) -> int:
        """Run a write statement; returns the affected row count."""
        try:
            return self._s.exec(text(sql), params=dict(params)).rowcount
        except OperationalError as exc:
            raise StorageError(f"Statement failed: {exc.orig}") from exc
