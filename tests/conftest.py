# tests/conftest.py
"""
Shared fixtures: an in-memory SQLite store per test, a FastAPI TestClient
wired to it, and factories for stored vehicles and drivers.
"""

import os
import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SWEEP_ENABLED"] = "false"
os.environ["NOTIFY_WEBHOOK_URL"] = ""
os.environ.pop("API_KEY", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import create_tables, get_db
from app.models.driver import Driver
from app.models.vehicle import Vehicle
from app.services import settings_store


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    create_tables(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def fresh_settings():
    settings_store.clear_cache()
    yield
    settings_store.clear_cache()


@pytest.fixture
def client(session_factory):
    from app.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def add_vehicle(db, plate="TRK-001", team="team-a", driver=None, **kwargs):
    vehicle = Vehicle(plate_number=plate, model=kwargs.pop("model", "Canter"), team=team, driver=driver, **kwargs)
    db.add(vehicle)
    db.commit()
    return vehicle


def add_driver(db, name="Sato", employee_id="D001", team="team-a", assigned_vehicle_id=None, **kwargs):
    driver = Driver(name=name, employee_id=employee_id, team=team,
                    assigned_vehicle_id=assigned_vehicle_id, **kwargs)
    db.add(driver)
    db.commit()
    return driver
