"""
Upkeep Test Suite — Shared Fixtures

Everything runs in-process: an in-memory SQLite database (one shared
connection via StaticPool), a FixedClock pinned to TODAY, and a FastAPI
TestClient whose get_clock dependency is overridden with that clock.

Usage:
    pip install -e ".[test]"
    pytest tests/ -v --tb=short
"""

import os
import sys
from datetime import date
from pathlib import Path

import pytest

# Must be set before core.config is imported anywhere.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("API_KEY", None)

BACKEND_DIR = Path(__file__).resolve().parents[1] / "backend"
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from core.base import Base  # noqa: E402
from core.clock import FixedClock, get_clock  # noqa: E402
from core.db import SessionLocal, engine  # noqa: E402
from core.event_bus import InMemoryEventBus  # noqa: E402
from modules.assets.models import Asset  # noqa: E402
from modules.assets.services import AssetStatusService  # noqa: E402
import modules.maintenance.models  # noqa: E402,F401
from modules.maintenance.services import ScheduleService  # noqa: E402

# "Now" for every test unless a test moves the clock itself.
TODAY = date(2024, 2, 1)


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest.fixture()
def db():
    """Fresh schema per test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def clock():
    return FixedClock(TODAY)


@pytest.fixture()
def bus():
    """Isolated event bus that records everything published on it."""
    bus = InMemoryEventBus()
    bus.received = []
    bus.subscribe("*", bus.received.append)
    return bus


@pytest.fixture()
def asset(db):
    asset = Asset(name="Air Compressor", location="Plant 1")
    db.add(asset)
    db.commit()
    db.refresh(asset)
    return asset


@pytest.fixture()
def service(db, clock, bus):
    return ScheduleService(db, clock=clock, bus=bus, assets=AssetStatusService())


@pytest.fixture()
def make_schedule(service, asset):
    """Create schedules through the service with sensible defaults."""
    def _make(changed_by=None, **overrides):
        data = {
            "title": "Inspect belts",
            "asset_id": asset.id,
            "frequency": "WEEKLY",
            "start_date": "2024-01-01",
        }
        data.update(overrides)
        return service.create_schedule(data, changed_by=changed_by)
    return _make


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def app():
    from core.app import create_app
    return create_app()


@pytest.fixture()
def client(app, db, clock):
    from fastapi.testclient import TestClient

    app.dependency_overrides[get_clock] = lambda: clock
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def api_asset(client):
    r = client.post("/api/assets", json={"name": "Forklift 3", "location": "Dock"})
    assert r.status_code == 201, r.text
    return r.json()
