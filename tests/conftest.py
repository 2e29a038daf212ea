import os

os.environ["ENVIRONMENT"] = "testing"
os.environ["JWT_SECRET"] = "test-secret-key"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("ACTIVITY_SNAPSHOT_BUCKET", None)

from datetime import date

import pytest
from fastapi.testclient import TestClient

import contractorpro.models  # noqa: F401
from contractorpro.db.base import Base
from contractorpro.db.session import engine, SessionLocal
from contractorpro.db.seeds.seed_roles import seed_roles
from contractorpro.models.hr import Employee, Contract
from contractorpro.models.role import Role
from contractorpro.models.user import User
from contractorpro.core.security import hash_password, issue_token
from contractorpro.main import app

PASSWORD = "correct-horse-battery"


@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    seed_roles(session)
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def make_user(db):
    """Create a user holding ``roles`` and return it."""
    counter = {"n": 0}

    def _make(*roles, email=None, password=PASSWORD):
        counter["n"] += 1
        user = User(
            email=email or f"user{counter['n']}@example.com",
            hashed_password=hash_password(password),
            full_name=f"User {counter['n']}",
            is_active=True,
            roles=db.query(Role).filter(Role.key.in_(roles)).all(),
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture()
def auth_headers():
    """Bearer header for a token asserting the given claims."""

    def _headers(subject="1", roles=(), permissions=()):
        return {"Authorization": f"Bearer {issue_token(str(subject), roles, permissions)}"}

    return _headers


@pytest.fixture()
def employee_with_contract(db):
    """Two employees, each with one contract; the first is linked to user id 42."""
    own = Employee(code="E-001", full_name="Alice Worker", job_title="Mason", user_id=42)
    other = Employee(code="E-002", full_name="Bob Builder", job_title="Foreman", user_id=43)
    db.add_all([own, other])
    db.commit()
    contracts = [
        Contract(
            employee_id=own.id, type="full_time", start_date=date(2024, 1, 1),
            basic_salary=8500, allowances_json='{"housing": 2000, "transport": 500}',
        ),
        Contract(
            employee_id=other.id, type="full_time", start_date=date(2024, 3, 1),
            basic_salary=12000, allowances_json='{"housing": 3000}',
        ),
    ]
    db.add_all(contracts)
    db.commit()
    return {"own": own, "other": other, "contracts": contracts}
