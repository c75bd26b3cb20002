"""Shared test fixtures.

  use_test_engine  : redirects the engine, UoW and schema init to a temp-file SQLite DB.
  session          : a plain session on that engine, for repository-level tests.
  utc              : the timezone most tests attribute dates in.
"""
import os
from datetime import timezone
import pytest
from sqlmodel import SQLModel, Session


def pytest_configure(config):
    """Keep a developer's .env / environment from leaking into test settings."""
    os.environ.pop("WORKTRAIL_TOGGL_API_TOKEN", None)
    os.environ.setdefault("WORKTRAIL_TIMEZONE", "UTC")


@pytest.fixture
def utc():
    return timezone.utc


@pytest.fixture
def use_test_engine(tmp_path, monkeypatch):
    """Monkeypatch infra/db engine references to an isolated temp-file SQLite DB."""
    from worktrail.infra.db.engine import build_engine

    db_path = tmp_path / "test_worktrail.db"
    test_engine = build_engine(f"sqlite:///{db_path}")

    import worktrail.models  # noqa: F401  (register all ORM mappers)
    SQLModel.metadata.create_all(test_engine)

    monkeypatch.setattr("worktrail.infra.db.engine.engine", test_engine)
    monkeypatch.setattr("worktrail.infra.db.uow.engine", test_engine)

    yield test_engine

    SQLModel.metadata.drop_all(test_engine)
    test_engine.dispose()


@pytest.fixture
def session(use_test_engine):
    with Session(use_test_engine) as s:
        yield s
