"""
Shared fixtures: a throwaway SQLite file per test, a pinned clock and
an API client wired to both.
"""

import pytest
from datetime import date, timedelta

from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from campsite.config import Settings, get_settings
from campsite.database import build_engine, create_tables, get_db
from campsite.utils.clock import FixedClock
from campsite.utils.dependencies import get_clock
from campsite.utils.rate_limiter import limiter

TODAY = date(2026, 7, 1)


def day(offset: int) -> date:
    """TODAY shifted by offset days"""
    return TODAY + timedelta(days=offset)


@pytest.fixture
def engine(tmp_path):
    # A file, not :memory:, so threads get their own connections to one database
    engine = build_engine(f"sqlite:///{tmp_path / 'campsite.db'}", lock_timeout_seconds=10.0)
    create_tables(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FixedClock(TODAY)


@pytest.fixture
def settings():
    return Settings(
        environment="test",
        database_url="sqlite://",
        log_json=False,
        transaction_retries=2,
    )


@pytest.fixture
def service_factory(session_factory, settings, clock):
    """Build a ReservationService on a fresh session; sessions are closed on teardown."""
    from campsite.services.reservation_service import ReservationService

    sessions = []

    def _make():
        session = session_factory()
        sessions.append(session)
        return ReservationService(session, settings=settings, clock=clock)

    yield _make
    for session in sessions:
        session.close()


@pytest.fixture
def service(service_factory):
    return service_factory()


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield


@pytest.fixture
def client(session_factory, settings, clock):
    from campsite.main import app

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_clock] = lambda: clock

    yield TestClient(app)

    app.dependency_overrides.clear()
