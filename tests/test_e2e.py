import time

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from tasktimer.models import TimeLog


class TestE2E:
    def test_track_time_on_a_task(self, client: TestClient):
        # 1. Register and log in
        r = client.post("/auth/register", json={
            "email": "alice@example.com",
            "username": "alice",
            "password": "SecurePass123!",
        })
        assert r.status_code == 201

        r = client.post("/auth/login", json={"email": "alice@example.com", "password": "SecurePass123!"})
        assert r.status_code == 200
        headers = {"Authorization": f"Bearer {r.json()['accessToken']}"}

        # 2. Create the task
        r = client.post("/tasks", json={"title": "Write report", "status": "TODO", "priority": "HIGH"}, headers=headers)
        assert r.status_code == 201
        task_id = r.json()["id"]

        # 3. Track at least one second on it
        r = client.post("/time-logs/start", json={"taskId": task_id}, headers=headers)
        assert r.status_code == 201
        time.sleep(1.1)
        r = client.post("/time-logs/stop", headers=headers)
        assert r.status_code == 200
        duration = r.json()["duration"]
        assert duration >= 1

        # 4. The total for the task is exactly that log
        r = client.get("/time-logs/totals", headers=headers)
        assert r.status_code == 200
        assert r.json()[str(task_id)] == duration

        r = client.get("/dashboard/stats", headers=headers)
        assert r.json()["totalSecondsAll"] == duration

    def test_delete_task_cascades_to_logs(self, client: TestClient, register, make_task, db: Session):
        headers, _ = register()
        task = make_task(headers, "Short lived")

        client.post("/time-logs/start", json={"taskId": task["id"]}, headers=headers)
        client.post("/time-logs/start", json={"taskId": task["id"]}, headers=headers)
        client.post("/time-logs/stop", headers=headers)
        r = client.get(f"/time-logs/task/{task['id']}", headers=headers)
        assert len(r.json()) == 2

        r = client.delete(f"/tasks/{task['id']}", headers=headers)
        assert r.status_code == 200

        r = client.get(f"/time-logs/task/{task['id']}", headers=headers)
        assert r.status_code == 200
        assert r.json() == []
        assert db.query(TimeLog).filter(TimeLog.task_id == task["id"]).count() == 0
        assert client.get("/time-logs/totals", headers=headers).json() == {}

    def test_deleting_task_with_running_timer_leaves_user_idle(self, client: TestClient, register, make_task):
        headers, _ = register()
        task = make_task(headers)
        client.post("/time-logs/start", json={"taskId": task["id"]}, headers=headers)

        client.delete(f"/tasks/{task['id']}", headers=headers)

        assert client.get("/time-logs/active", headers=headers).json() is None
        assert client.post("/time-logs/stop", headers=headers).status_code == 404

    def test_health(self, client: TestClient):
        assert client.get("/health").json() == {"status": "ok"}


def test_unexpected_errors_become_json_500(monkeypatch, register):
    import tasktimer.routers.dashboard as dashboard_router
    from tasktimer.main import app

    headers, _ = register()

    def broken(db, user):
        raise RuntimeError("boom")

    monkeypatch.setattr(dashboard_router, "get_stats", broken)
    client = TestClient(app, raise_server_exceptions=False)

    r = client.get("/dashboard/stats", headers=headers)
    assert r.status_code == 500
    assert r.json() == {"detail": "Internal server error"}

    # framework HTTP errors keep their own status
    r = client.get("/no-such-route", headers=headers)
    assert r.status_code == 404
    assert r.json() == {"detail": "Not Found"}
