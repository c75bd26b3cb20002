"""Engine singleton, SQLite connection setup and schema initialization."""
from __future__ import annotations
import logging
from pathlib import Path
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel, create_engine
from worktrail.config import settings
from worktrail.domain.exceptions import StorageError
import worktrail.models  # noqa: F401   # registers the ORM table mappers

logger = logging.getLogger(__name__)


def _on_connect(dbapi_conn, _):
    # Hand transaction control to SQLAlchemy so SAVEPOINTs nest correctly.
    dbapi_conn.isolation_level = None
    cur = dbapi_conn.cursor()
    cur.execute("PRAGMA journal_mode=WAL")
    cur.execute("PRAGMA synchronous=NORMAL")
    cur.close()


def _on_begin(conn):
    conn.exec_driver_sql("BEGIN")


def configure_sqlite(target: Engine) -> Engine:
    """Register connection hooks on a SQLite engine. No-op for other dialects."""
    if target.dialect.name == "sqlite":
        event.listen(target, "connect", _on_connect)
        event.listen(target, "begin", _on_begin)
    return target


def build_engine(url: str) -> Engine:
    return configure_sqlite(create_engine(url, echo=False))


engine = build_engine(settings.database_url)


def init_db() -> None:
    """Create missing tables ("create if not exists"). Run once per process."""
    url = engine.url
    try:
        if url.drivername.startswith("sqlite") and url.database not in (None, "", ":memory:"):
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        SQLModel.metadata.create_all(engine)
    except (OSError, SQLAlchemyError) as exc:
        raise StorageError(f"Could not initialize database at {engine.url}: {exc}") from exc
    logger.debug("Schema ready at %s", engine.url)


__all__ = ["engine", "init_db", "build_engine", "configure_sqlite"]
