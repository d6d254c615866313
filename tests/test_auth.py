import uuid
from fastapi.testclient import TestClient

import tasktimer.config
from tasktimer.models import User


def test_register_returns_token_and_user(client: TestClient):
    email = f"test_{uuid.uuid4().hex}@example.com"
    r = client.post("/auth/register", json={"email": email, "username": "alice", "password": "correct_horse"})
    assert r.status_code == 201
    data = r.json()
    assert data["tokenType"] == "bearer"
    assert data["accessToken"]
    assert data["user"]["email"] == email
    assert data["user"]["username"] == "alice"
    assert "id" in data["user"]
    assert "passwordHash" not in data["user"]


def test_register_duplicate_email_is_unauthorized(client: TestClient):
    body = {"email": "dup@example.com", "username": "dup", "password": "Pass123!"}
    assert client.post("/auth/register", json=body).status_code == 201

    r = client.post("/auth/register", json={**body, "password": "OtherPass123!"})
    assert r.status_code == 401
    assert "exists" in r.json()["detail"].lower()


def test_register_validation(client: TestClient):
    # missing email
    r = client.post("/auth/register", json={"username": "x", "password": "Pass123!"})
    assert r.status_code == 422

    r = client.post("/auth/register", json={"email": "not_an_email", "username": "x", "password": "Pass123!"})
    assert r.status_code == 422

    r = client.post("/auth/register", json={"email": "a@example.com", "username": "x", "password": "123"})
    assert r.status_code == 422
    assert "too short" in r.text.lower()

    r = client.post("/auth/register", json={"email": "a@example.com", "username": "x", "password": "a" * 100})
    assert r.status_code == 422
    assert "too long" in r.text.lower() or "72" in r.text

    r = client.post("/auth/register", json={"email": "a@example.com", "username": "   ", "password": "Pass123!"})
    assert r.status_code == 422


def test_login_success_and_failure(client: TestClient, register):
    _, user = register(username="bob", password="safepassword")

    r = client.post("/auth/login", json={"email": user["email"], "password": "safepassword"})
    assert r.status_code == 200
    assert r.json()["user"]["id"] == user["id"]
    assert r.json()["accessToken"]

    r = client.post("/auth/login", json={"email": user["email"], "password": "WrongPass123!"})
    assert r.status_code == 401

    r = client.post("/auth/login", json={"email": "nobody@example.com", "password": "safepassword"})
    assert r.status_code == 401

    # overly long password is an authentication failure, not a server error
    r = client.post("/auth/login", json={"email": user["email"], "password": "a" * 100})
    assert r.status_code == 401


def test_profile_requires_valid_bearer_token(client: TestClient, register):
    headers, user = register(username="carol")

    r = client.get("/auth/profile", headers=headers)
    assert r.status_code == 200
    assert r.json() == {"id": user["id"], "email": user["email"], "username": "carol"}

    assert client.get("/auth/profile").status_code == 401
    assert client.get("/auth/profile", headers={"Authorization": "Bearer invalid"}).status_code == 401
    assert client.get("/auth/profile", headers={"Authorization": "Token abc"}).status_code == 401


def test_expired_token_is_rejected(client: TestClient, register, monkeypatch):
    monkeypatch.setattr(tasktimer.config, "ACCESS_TOKEN_EXPIRE_MINUTES", -1)
    headers, _ = register()

    r = client.get("/auth/profile", headers=headers)
    assert r.status_code == 401
    assert "expired" in r.json()["detail"].lower()


def test_token_for_deleted_user_is_rejected(client: TestClient, register, db):
    headers, user = register()
    db.delete(db.get(User, user["id"]))
    db.commit()

    r = client.get("/auth/profile", headers=headers)
    assert r.status_code == 401


def test_register_race_on_same_email_is_unauthorized(client: TestClient, monkeypatch):
    import tasktimer.routers.auth as auth_router
    from tasktimer.database import SessionLocal

    real_hash = auth_router.hash_password

    def hash_after_competing_signup(password):
        # another request registers the same email between the check and the insert
        session = SessionLocal()
        try:
            session.add(User(email="race@example.com", username="first", password_hash="x"))
            session.commit()
        finally:
            session.close()
        return real_hash(password)

    monkeypatch.setattr(auth_router, "hash_password", hash_after_competing_signup)
    r = client.post("/auth/register", json={"email": "race@example.com", "username": "second", "password": "Pass123!"})
    assert r.status_code == 401
    assert "exists" in r.json()["detail"].lower()
