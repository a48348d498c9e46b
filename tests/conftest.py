import os

import pytest

# Must be set before the application modules read their settings
os.environ["TESTING"] = "1"
os.environ["TEST_DATABASE_URL"] = "sqlite:///./test.db"

from fastapi.testclient import TestClient

from clinic.core.config import settings
from clinic.core.database import Base, SessionLocal, engine, redis_client
from clinic.core.store import DocumentStore
from clinic.main import app

# Models must be imported so their tables exist on Base.metadata
from clinic.models import appointment, doctor, lab_record, patient, user  # noqa: F401


@pytest.fixture(scope="function")
def test_db():
    Base.metadata.create_all(bind=engine)
    redis_client.flushdb()
    yield
    Base.metadata.drop_all(bind=engine)
    redis_client.flushdb()


@pytest.fixture
def client(test_db):
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client


@pytest.fixture
def db_session(test_db):
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def store(db_session):
    return DocumentStore(db_session)


def register(client, name, email, role="patient", password="secret123"):
    """Register an account and return its id, name and auth headers."""
    response = client.post("/api/auth/register", json={
        "name": name,
        "email": email,
        "password": password,
        "role": role,
    })
    assert response.status_code == 201, response.text
    data = response.json()
    return {
        "id": data["user"]["id"],
        "name": data["user"]["name"],
        "token": data["access_token"],
        "headers": {"Authorization": f"Bearer {data['access_token']}"},
    }


@pytest.fixture
def patient(client):
    return register(client, "Pat Patient", "pat@example.com")


@pytest.fixture
def other_patient(client):
    return register(client, "Olive Other", "olive@example.com")


@pytest.fixture
def doctor_smith(client):
    return register(client, "Dr. Smith", "smith@example.com", role="doctor")


@pytest.fixture
def doctor_jones(client):
    return register(client, "Dr. Jones", "jones@example.com", role="doctor")


@pytest.fixture
def admin(client):
    # Seeded at application startup
    response = client.post("/api/auth/login", json={
        "email": settings.ADMIN_EMAIL,
        "password": settings.ADMIN_PASSWORD,
    })
    assert response.status_code == 200, response.text
    data = response.json()
    return {
        "id": data["user"]["id"],
        "name": data["user"]["name"],
        "token": data["access_token"],
        "headers": {"Authorization": f"Bearer {data['access_token']}"},
    }


appointment_data = {
    "full_name": "Pat Patient",
    "email": "pat@example.com",
    "phone": "555-0100",
    "date": "2026-11-02",
    "time": "09:30",
    "department": "Cardiology",
    "doctor": "Dr. Smith",
    "reason": "Checkup",
}


def book(client, headers, **overrides):
    response = client.post(
        "/api/appointments", json={**appointment_data, **overrides}, headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()
