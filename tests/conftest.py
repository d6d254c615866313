import os
import uuid

# must be set before tasktimer.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_tasktimer.db")

import pytest
from fastapi.testclient import TestClient

from tasktimer.main import app
from tasktimer.database import SessionLocal, Base, engine
from tasktimer.models import User


# Recreate all tables for each test
@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def register(client):
    """Register a user and return (auth headers, user json)."""

    def _register(username=None, password="Pass123!"):
        username = username or f"user_{uuid.uuid4().hex[:8]}"
        r = client.post("/auth/register", json={
            "email": f"{username}@example.com",
            "username": username,
            "password": password,
        })
        assert r.status_code == 201, r.text
        data = r.json()
        return {"Authorization": f"Bearer {data['accessToken']}"}, data["user"]

    return _register


@pytest.fixture
def make_task(client):
    def _make_task(headers, title="Task", **fields):
        r = client.post("/tasks", json={"title": title, **fields}, headers=headers)
        assert r.status_code == 201, r.text
        return r.json()

    return _make_task


@pytest.fixture
def user(db):
    u = User(email="unit@example.com", username="unit", password_hash="x")
    db.add(u)
    db.commit()
    db.refresh(u)
    return u
