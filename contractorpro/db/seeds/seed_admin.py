"""Seed the system administrator account from env vars."""

from sqlalchemy.orm import Session

from contractorpro.models.user import User
from contractorpro.models.role import Role
from contractorpro.core.roles import RoleKey
from contractorpro.core.security import hash_password
from contractorpro.core.config import settings


def seed_admin(db: Session) -> None:
    """Create the system administrator if a password is configured and the user is missing."""
    if not settings.SEED_ADMIN_PASSWORD:
        print("ℹ️  SEED_ADMIN_PASSWORD not set, skipping admin seed.")
        return

    admin_role = db.query(Role).filter(Role.key == RoleKey.SYSTEM_ADMIN.value).first()
    if not admin_role:
        print("⚠️  system_admin role not found. Run seed_roles first.")
        return

    email = settings.SEED_ADMIN_EMAIL.lower()
    if db.query(User).filter(User.email == email).first():
        print(f"ℹ️  Admin '{email}' already exists, skipping.")
        return

    admin = User(
        email=email,
        hashed_password=hash_password(settings.SEED_ADMIN_PASSWORD),
        full_name="System Administrator",
        is_active=True,
        roles=[admin_role],
    )
    db.add(admin)
    db.commit()
    print(f"✅ Created admin: {email}")
