"""
Pytest will auto-discover / import this file called 'conftest.py'. ]
This file defines fixtures/variables required for testing multiple layers.
"""

from typing import Generator

import pytest
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.chess.python_chess_oracle import PythonChessOracle
from src.core.config import Settings
from src.db.schema import Base
from src.db.sql_repository import SQLGameRepository
from src.game.registry import SessionRegistry
from src.game.routing import ActorRoutingTable
from src.notify.fanout import FanOut
from src.services.session_service import SessionService
from tests.fakes import FixedClock, RecordingNotifier

# Setup an in-memory SQLite database for testing
DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)


@pytest.fixture
def db_session_repo() -> Generator[Session, None, None]:
    """Connection to a test database. Tables are removed at teardown to make unit tests of repository independent of each other."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        Base.metadata.drop_all(bind=engine)
        db.close()


@pytest.fixture
def oracle() -> PythonChessOracle:
    return PythonChessOracle()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url=DATABASE_URL,
        pacing_enabled=True,
        pacing_base_delay_seconds=900,
        pacing_increment_seconds=900,
    )


@pytest.fixture
def registry(oracle: PythonChessOracle) -> SessionRegistry:
    return SessionRegistry(oracle)


@pytest.fixture
def routing() -> ActorRoutingTable:
    return ActorRoutingTable()


@pytest.fixture
def fanout(
    notifier: RecordingNotifier, oracle: PythonChessOracle, clock: FixedClock
) -> FanOut:
    return FanOut(notifier, oracle, clock=clock)


@pytest.fixture
def service(
    registry: SessionRegistry,
    routing: ActorRoutingTable,
    oracle: PythonChessOracle,
    fanout: FanOut,
    settings: Settings,
    clock: FixedClock,
) -> SessionService:
    return SessionService(registry, routing, oracle, fanout, settings, clock=clock)


@pytest.fixture
def persistent_service(
    db_session_repo: Session,
    oracle: PythonChessOracle,
    fanout: FanOut,
    settings: Settings,
    clock: FixedClock,
) -> SessionService:
    registry = SessionRegistry(oracle, SQLGameRepository(db_session_repo))
    return SessionService(
        registry, ActorRoutingTable(), oracle, fanout, settings, clock=clock
    )
