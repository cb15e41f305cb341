# tests/conftest.py
"""
Shared fixtures: in-memory SQLite database, seeded profiles/vehicles,
bearer tokens, and an API client with the DB dependency overridden.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import create_tables, get_db
from app.main import app
from app.models.booking import Booking, STATUS_PENDING
from app.models.profile import Profile, ROLE_ADMIN, ROLE_USER
from app.models.vehicle import Vehicle
from app.services.session_context import SessionContext
from app.utils.auth import sign_token

TEST_DATABASE_URL = "sqlite://"


@pytest.fixture
def engine():
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def SessionTesting(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(SessionTesting):
    session = SessionTesting()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def admin_profile(db) -> Profile:
    profile = Profile(id="admin-1", email="admin@carbooking.com", full_name="System Admin",
                      role=ROLE_ADMIN, department="IT")
    db.add(profile)
    db.commit()
    return profile


@pytest.fixture
def user_profile(db) -> Profile:
    profile = Profile(id="user-1", email="somchai@carbooking.com", full_name="Somchai P.",
                      role=ROLE_USER, department="Sales")
    db.add(profile)
    db.commit()
    return profile


@pytest.fixture
def other_profile(db) -> Profile:
    profile = Profile(id="user-2", email="nok@carbooking.com", full_name="Nok S.",
                      role=ROLE_USER, department="Finance")
    db.add(profile)
    db.commit()
    return profile


@pytest.fixture
def admin(admin_profile) -> SessionContext:
    return SessionContext.from_profile(admin_profile)


@pytest.fixture
def user(user_profile) -> SessionContext:
    return SessionContext.from_profile(user_profile)


@pytest.fixture
def other_user(other_profile) -> SessionContext:
    return SessionContext.from_profile(other_profile)


@pytest.fixture
def vehicle(db) -> Vehicle:
    v = Vehicle(name="Toyota Camry", plate_number="1AB-1234", capacity=4, status="active")
    db.add(v)
    db.commit()
    db.refresh(v)
    return v


@pytest.fixture
def van(db) -> Vehicle:
    v = Vehicle(name="Toyota Commuter", plate_number="2CD-5678", capacity=12, status="active")
    db.add(v)
    db.commit()
    db.refresh(v)
    return v


def at(hour: int, minute: int = 0, day: int = 2) -> datetime:
    return datetime(2026, 3, day, hour, minute)


def add_booking(db, vehicle_id, start, end, status=STATUS_PENDING, user_id="user-1",
                purpose="Client meeting in Rayong") -> Booking:
    booking = Booking(user_id=user_id, vehicle_id=vehicle_id, start_time=start,
                      end_time=end, purpose=purpose, status=status)
    db.add(booking)
    db.commit()
    db.refresh(booking)
    return booking


@pytest.fixture
def api(SessionTesting):
    """TestClient bound to the test database. Startup hooks are not run."""
    def override_get_db():
        session = SessionTesting()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(admin_profile) -> dict:
    return {"Authorization": f"Bearer {sign_token(admin_profile.id)}"}


@pytest.fixture
def user_headers(user_profile) -> dict:
    return {"Authorization": f"Bearer {sign_token(user_profile.id)}"}


@pytest.fixture
def other_headers(other_profile) -> dict:
    return {"Authorization": f"Bearer {sign_token(other_profile.id)}"}
