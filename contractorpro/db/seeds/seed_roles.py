"""Seed the role and permission catalog into the database."""

from sqlalchemy.orm import Session

from contractorpro.models.role import Role, Permission
from contractorpro.core.roles import (
    RoleKey, PermissionKey, ROLE_DISPLAY_NAMES, PERMISSION_DISPLAY_NAMES,
    DEFAULT_ROLE_PERMISSIONS,
)
from contractorpro.services.iam_service import iam_service


def seed_roles(db: Session) -> None:
    """Upsert every permission and role, then reset each role to its default permissions.

    Safe to run repeatedly.
    """
    for key in PermissionKey:
        permission = db.query(Permission).filter(Permission.key == key.value).first()
        if permission:
            permission.name = PERMISSION_DISPLAY_NAMES[key]
        else:
            db.add(Permission(key=key.value, name=PERMISSION_DISPLAY_NAMES[key]))

    for key in RoleKey:
        role = db.query(Role).filter(Role.key == key.value).first()
        if role:
            role.name = ROLE_DISPLAY_NAMES[key]
        else:
            db.add(Role(key=key.value, name=ROLE_DISPLAY_NAMES[key]))
    db.commit()

    for key in RoleKey:
        role = db.query(Role).filter(Role.key == key.value).first()
        iam_service.replace_role_permissions(db, role.id, DEFAULT_ROLE_PERMISSIONS[key.value])

    print(f"✅ Seeded {len(PermissionKey)} permissions and {len(RoleKey)} roles")
