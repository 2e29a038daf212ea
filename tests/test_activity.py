import json
from datetime import date, datetime

import pytest
from urllib3.exceptions import ProtocolError

from contractorpro.core.config import settings
from contractorpro.models.activity_log import ActivityLog
from contractorpro.services.snapshot_service import snapshot_service
from contractorpro.tasks.celery_app import create_daily_activity_snapshot

PASSWORD = "correct-horse-battery"


class FakeMinio:
    def __init__(self):
        self.buckets = set()
        self.objects = {}

    def bucket_exists(self, bucket):
        return bucket in self.buckets

    def make_bucket(self, bucket):
        self.buckets.add(bucket)

    def put_object(self, bucket, key, data, length, content_type=None):
        self.objects[(bucket, key)] = data.read(length)


@pytest.fixture()
def fake_minio(monkeypatch):
    fake = FakeMinio()
    monkeypatch.setattr(snapshot_service, "_client", fake)
    monkeypatch.setattr(settings, "ACTIVITY_SNAPSHOT_BUCKET", "activity-archive")
    return fake


@pytest.fixture()
def logged_day(db):
    db.add_all([
        ActivityLog(action_type="auth.login", entity_type="user", entity_id="1",
                    created_at=datetime(2026, 10, 18, 8, 30)),
        ActivityLog(action_type="contract.update", entity_type="contract", entity_id="4",
                    created_at=datetime(2026, 10, 18, 23, 59)),
        ActivityLog(action_type="auth.login", entity_type="user", entity_id="2",
                    created_at=datetime(2026, 10, 19, 0, 1)),
    ])
    db.commit()


def test_login_is_recorded(client, make_user, auth_headers):
    user = make_user("ceo", email="boss@example.com")
    client.post("/api/auth/login", json={"email": "boss@example.com", "password": PASSWORD})

    resp = client.get(
        "/api/activity/logs",
        params={"action_type": "auth.login"},
        headers=auth_headers("1", ["system_admin"], ["view_activity_logs"]),
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 1
    assert body["logs"][0]["actor_id"] == user.id
    assert body["logs"][0]["entity_type"] == "user"


def test_logs_require_permission(client, auth_headers):
    resp = client.get("/api/activity/logs", headers=auth_headers("1", ["system_admin"]))
    assert resp.status_code == 403
    assert resp.json() == {"message": "Insufficient permissions"}


def test_mutations_are_recorded(client, auth_headers):
    headers = auth_headers("2", ["hr_manager"])
    client.post("/api/employees", json={"code": "E-300", "fullName": "Dana"}, headers=headers)

    logs = client.get(
        "/api/activity/logs",
        params={"entity_type": "employee"},
        headers=auth_headers("1", ["system_admin"], ["view_activity_logs"]),
    ).json()["logs"]
    assert [(l["action_type"], l["actor_id"]) for l in logs] == [("employee.create", 2)]


def test_snapshot_writes_one_object_per_day(client, auth_headers, fake_minio, logged_day):
    resp = client.post(
        "/api/activity/snapshots",
        json={"date": "2026-10-18"},
        headers=auth_headers("1", ["system_admin"], ["manage_activity_retention"]),
    )

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "key": "snapshots/2026/10/18.json", "count": 2}
    stored = json.loads(fake_minio.objects[("activity-archive", "snapshots/2026/10/18.json")])
    assert stored["date"] == "2026-10-18"
    assert [log["action_type"] for log in stored["logs"]] == ["auth.login", "contract.update"]
    assert "activity-archive" in fake_minio.buckets


def test_snapshot_without_bucket_is_unavailable(client, auth_headers, monkeypatch):
    monkeypatch.setattr(settings, "ACTIVITY_SNAPSHOT_BUCKET", None)
    resp = client.post(
        "/api/activity/snapshots",
        json={"date": "2026-10-18"},
        headers=auth_headers("1", ["system_admin"], ["manage_activity_retention"]),
    )
    assert resp.status_code == 503
    assert "disabled" in resp.json()["message"]


def test_snapshot_requires_retention_permission(client, auth_headers):
    resp = client.post("/api/activity/snapshots", json={}, headers=auth_headers("1", ["system_admin"], ["view_activity_logs"]))
    assert resp.status_code == 403


def test_snapshot_key_layout():
    assert snapshot_service.key_for(date(2026, 1, 5)) == "snapshots/2026/01/05.json"


def test_daily_task_reports_failure_instead_of_raising(db, monkeypatch):
    monkeypatch.setattr(settings, "ACTIVITY_SNAPSHOT_BUCKET", None)
    result = create_daily_activity_snapshot()
    assert result["status"] == "failed"


def test_daily_task_snapshots_yesterday(db, fake_minio):
    result = create_daily_activity_snapshot()
    assert result["status"] == "ok"
    assert result["key"] == snapshot_service.key_for(date.fromisoformat(result["date"]))
    assert len(fake_minio.objects) == 1


class UnreachableMinio(FakeMinio):
    def bucket_exists(self, bucket):
        raise ProtocolError("Connection aborted.")


@pytest.fixture()
def unreachable_minio(monkeypatch):
    monkeypatch.setattr(snapshot_service, "_client", UnreachableMinio())
    monkeypatch.setattr(settings, "ACTIVITY_SNAPSHOT_BUCKET", "activity-archive")


def test_snapshot_with_unreachable_store_is_unavailable(client, auth_headers, unreachable_minio, logged_day):
    resp = client.post(
        "/api/activity/snapshots",
        json={"date": "2026-10-18"},
        headers=auth_headers("1", ["system_admin"], ["manage_activity_retention"]),
    )
    assert resp.status_code == 503
    assert "unreachable" in resp.json()["message"]


def test_daily_task_reports_unreachable_store(db, unreachable_minio):
    result = create_daily_activity_snapshot()
    assert result["status"] == "failed"
    assert "unreachable" in result["error"]


@pytest.fixture()
def busy_week(db, make_user):
    clerk = make_user("hr_manager", email="clerk@example.com")
    boss = make_user("ceo", email="boss@example.com")
    db.add_all([
        ActivityLog(actor_id=clerk.id, action_type="employee.create", entity_type="employee",
                    created_at=datetime(2026, 10, 14, 9, 0)),
        ActivityLog(actor_id=clerk.id, action_type="contract.update", entity_type="contract",
                    created_at=datetime(2026, 10, 15, 10, 0)),
        ActivityLog(actor_id=clerk.id, action_type="contract.create", entity_type="contract",
                    created_at=datetime(2026, 10, 15, 11, 0)),
        ActivityLog(actor_id=boss.id, action_type="auth.login", entity_type="user",
                    created_at=datetime(2026, 10, 14, 8, 0)),
        ActivityLog(actor_id=boss.id, action_type="contract.update", entity_type="contract",
                    created_at=datetime(2026, 9, 1, 8, 0)),
    ])
    db.commit()
    return {"clerk": clerk, "boss": boss}


def test_analytics_summarizes_window(client, auth_headers, busy_week):
    resp = client.get(
        "/api/activity/analytics",
        params={"date_from": "2026-10-01T00:00:00", "date_to": "2026-10-19T00:00:00"},
        headers=auth_headers("1", ["system_admin"], ["view_activity_analytics"]),
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["total_events"] == 4
    assert body["unique_actors"] == 2
    assert body["entities"][0] == {"key": "contract", "count": 2}
    assert body["daily"] == [{"key": "2026-10-14", "count": 2}, {"key": "2026-10-15", "count": 2}]
    assert body["top_users"][0] == {
        "user_id": busy_week["clerk"].id, "email": "clerk@example.com", "count": 3,
    }


def test_analytics_filters_by_entity(client, auth_headers, busy_week):
    resp = client.get(
        "/api/activity/analytics",
        params={"entity_type": "contract", "date_from": "2026-08-01T00:00:00", "date_to": "2026-10-19T00:00:00"},
        headers=auth_headers("1", ["system_admin"], ["view_activity_logs"]),
    )
    body = resp.json()
    assert body["total_events"] == 3
    assert [a["key"] for a in body["actions"]] == ["contract.update", "contract.create"]


def test_analytics_requires_a_view_permission(client, auth_headers):
    resp = client.get("/api/activity/analytics", headers=auth_headers("1", ["system_admin"], ["manage_activity_retention"]))
    assert resp.status_code == 403
