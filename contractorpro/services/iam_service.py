"""IAM service — role/permission catalog and assignments."""

import logging
from typing import List, Optional, Dict, Any

from sqlalchemy.orm import Session

from contractorpro.models.role import Role, Permission, RolePermission
from contractorpro.models.user import User, UserRole
from contractorpro.core.security import hash_password
from contractorpro.core.exceptions import (
    ResourceConflictError, ResourceNotFoundError, ValidationError,
)

logger = logging.getLogger(__name__)


class IamService:
    """Reads and replaces the role/permission catalog."""

    @staticmethod
    def list_users(db: Session, page: int = 1, page_size: int = 50) -> Dict[str, Any]:
        total = db.query(User).count()
        users = (
            db.query(User)
            .order_by(User.id)
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )
        return {"users": users, "total": total, "page": page}

    @staticmethod
    def create_user(
        db: Session,
        email: str,
        password: str,
        full_name: Optional[str] = None,
        role_keys: Optional[List[str]] = None,
        phone: Optional[str] = None,
    ) -> User:
        """Create a login account holding the given roles."""
        email = email.lower()
        if db.query(User).filter(User.email == email).first():
            raise ResourceConflictError(f"User with email {email} already exists")
        wanted = sorted(set(role_keys or []))
        roles = db.query(Role).filter(Role.key.in_(wanted)).all() if wanted else []
        unknown = sorted(set(wanted) - {r.key for r in roles})
        if unknown:
            raise ValidationError("Unknown roles", issues={"unknown": unknown})

        user = User(
            email=email,
            hashed_password=hash_password(password),
            full_name=full_name,
            phone=phone,
            is_active=True,
            roles=roles,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def list_roles(db: Session) -> List[Role]:
        return db.query(Role).order_by(Role.key).all()

    @staticmethod
    def list_permissions(db: Session) -> List[Permission]:
        return db.query(Permission).order_by(Permission.key).all()

    @staticmethod
    def get_role(db: Session, role_id: int) -> Role:
        role = db.query(Role).filter(Role.id == role_id).first()
        if not role:
            raise ResourceNotFoundError(f"Role {role_id} not found")
        return role

    @staticmethod
    def create_role(db: Session, key: str, name: str, description: Optional[str] = None) -> Role:
        """Create a role with an empty permission set."""
        if db.query(Role).filter(Role.key == key).first():
            raise ResourceConflictError(f"Role '{key}' already exists")
        role = Role(key=key, name=name, description=description)
        db.add(role)
        db.commit()
        db.refresh(role)
        logger.info("Created role %s", key)
        return role

    @staticmethod
    def get_role_permissions(db: Session, role_id: int) -> List[str]:
        """Current permission keys of a role, read from the association table."""
        IamService.get_role(db, role_id)
        rows = (
            db.query(Permission.key)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .filter(RolePermission.role_id == role_id)
            .order_by(Permission.key)
            .all()
        )
        return [key for (key,) in rows]

    @staticmethod
    def replace_role_permissions(db: Session, role_id: int, permission_keys: List[str]) -> List[str]:
        """Replace a role's permission set as one unit: delete all, insert new set.

        Unknown permission keys are rejected before anything is written.
        """
        role = IamService.get_role(db, role_id)
        wanted = sorted(set(permission_keys))
        permissions = db.query(Permission).filter(Permission.key.in_(wanted)).all() if wanted else []
        unknown = sorted(set(wanted) - {p.key for p in permissions})
        if unknown:
            raise ValidationError("Unknown permissions", issues={"unknown": unknown})

        try:
            db.query(RolePermission).filter(RolePermission.role_id == role.id).delete(
                synchronize_session=False
            )
            db.add_all(RolePermission(role_id=role.id, permission_id=p.id) for p in permissions)
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.expire(role)
        logger.info("Replaced permissions of role %s with %s", role.key, wanted)
        return wanted

    @staticmethod
    def replace_user_roles(db: Session, user_id: int, role_keys: List[str]) -> List[str]:
        """Replace a user's role set as one unit."""
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise ResourceNotFoundError(f"User {user_id} not found")
        wanted = sorted(set(role_keys))
        roles = db.query(Role).filter(Role.key.in_(wanted)).all() if wanted else []
        unknown = sorted(set(wanted) - {r.key for r in roles})
        if unknown:
            raise ValidationError("Unknown roles", issues={"unknown": unknown})

        try:
            db.query(UserRole).filter(UserRole.user_id == user.id).delete(synchronize_session=False)
            db.add_all(UserRole(user_id=user.id, role_id=r.id) for r in roles)
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.expire(user)
        logger.info("Replaced roles of user %s with %s", user.id, wanted)
        return wanted


iam_service = IamService()
