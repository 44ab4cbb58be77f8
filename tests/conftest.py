"""Shared test fixtures."""
from pathlib import Path
from typing import Generator

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

# Import all models so SQLModel.metadata knows about them
from payroll_sync.models.payroll import Employee, Shift  # noqa: F401
from payroll_sync.models.sync import SyncRun  # noqa: F401
from payroll_sync.sync.store import SyncStore

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine. Tables recreated fresh for each test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="test_session")
def test_session_fixture(engine) -> Generator[Session, None, None]:
    """Provides a DB session connected to in-memory SQLite."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="store")
def store_fixture(engine) -> SyncStore:
    return SyncStore(engine)


@pytest.fixture(name="fixtures_dir")
def fixtures_dir_fixture() -> Path:
    return FIXTURES_DIR
