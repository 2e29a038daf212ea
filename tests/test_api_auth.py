import pytest

from contractorpro.core.security import verify_token

PASSWORD = "correct-horse-battery"


GATED_ROUTES = [
    ("get", "/api/auth/me"),
    ("get", "/api/iam/users"),
    ("post", "/api/iam/users"),
    ("put", "/api/iam/users/1/roles"),
    ("get", "/api/iam/roles"),
    ("post", "/api/iam/roles"),
    ("get", "/api/iam/roles/1/permissions"),
    ("put", "/api/iam/roles/1/permissions"),
    ("get", "/api/iam/permissions"),
    ("get", "/api/employees"),
    ("get", "/api/employees/1"),
    ("post", "/api/employees"),
    ("get", "/api/employees/1/contracts"),
    ("post", "/api/employees/1/contracts"),
    ("get", "/api/contracts"),
    ("get", "/api/contracts/1"),
    ("put", "/api/contracts/1"),
    ("get", "/api/leaves"),
    ("post", "/api/leaves"),
    ("patch", "/api/leaves/1/approve"),
    ("get", "/api/activity/logs"),
    ("post", "/api/activity/snapshots"),
]


def test_login_issues_token_with_union_of_role_permissions(client, make_user):
    make_user("hr_manager", email="hr@example.com")

    resp = client.post("/api/auth/login", json={"email": "hr@example.com", "password": PASSWORD})

    assert resp.status_code == 200
    body = resp.json()
    principal = verify_token(body["token"])
    assert principal.roles == {"hr_manager"}
    assert principal.permissions == {"view_employees", "edit_employees"}
    assert body["user"]["roles"] == ["hr_manager"]
    assert body["expires_in"] == 8 * 3600


def test_login_merges_permissions_across_roles(client, make_user):
    make_user("accountant", "supervisor", email="multi@example.com")

    resp = client.post("/api/auth/login", json={"email": "multi@example.com", "password": PASSWORD})

    principal = verify_token(resp.json()["token"])
    assert principal.roles == {"accountant", "supervisor"}
    assert principal.permissions == {"manage_payroll", "approve_advances", "view_employees"}


def test_login_email_is_case_insensitive(client, make_user):
    make_user("employee", email="worker@example.com")
    resp = client.post("/api/auth/login", json={"email": "Worker@Example.com", "password": PASSWORD})
    assert resp.status_code == 200


@pytest.mark.parametrize(
    "email, password",
    [("hr@example.com", "wrong-password"), ("nobody@example.com", PASSWORD)],
)
def test_bad_credentials_are_rejected(client, make_user, email, password):
    make_user("hr_manager", email="hr@example.com")

    resp = client.post("/api/auth/login", json={"email": email, "password": password})

    assert resp.status_code == 401
    assert resp.json() == {"message": "Invalid credentials"}


def test_inactive_account_cannot_log_in(client, db, make_user):
    user = make_user("ceo", email="gone@example.com")
    user.is_active = False
    db.commit()

    resp = client.post("/api/auth/login", json={"email": "gone@example.com", "password": PASSWORD})
    assert resp.status_code == 401


def test_login_validation_error_is_400(client):
    resp = client.post("/api/auth/login", json={"email": "x"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid request"
    assert resp.json()["issues"]


@pytest.mark.parametrize("method, path", GATED_ROUTES)
def test_gated_routes_require_authentication(client, method, path):
    resp = client.request(method.upper(), path, json={})
    assert resp.status_code == 401
    assert resp.json() == {"message": "Authentication required"}


def test_invalid_token_is_treated_as_anonymous(client):
    resp = client.get("/api/employees", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401


def test_me_returns_token_claims(client, auth_headers):
    resp = client.get("/api/auth/me", headers=auth_headers("5", ["cfo"], ["manage_payroll"]))
    assert resp.status_code == 200
    assert resp.json() == {"subject": "5", "roles": ["cfo"], "permissions": ["manage_payroll"]}


def test_health_is_public(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    assert "X-Request-Id" in resp.headers
