"""Role, Permission and RolePermission models for RBAC."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from contractorpro.db.base import Base


class Role(Base):
    """Named bundle of permissions identified by a stable key."""
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    key = Column(String(50), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(String(500), nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    permissions = relationship(
        "Permission",
        secondary="role_permissions",
        lazy="selectin",
        order_by="Permission.key",
    )

    @property
    def permission_keys(self) -> list[str]:
        return [p.key for p in self.permissions]


class Permission(Base):
    """Single named capability. Flat: no hierarchy among permissions."""
    __tablename__ = "permissions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    key = Column(String(100), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(String(500), nullable=True)


class RolePermission(Base):
    """Association between roles and permissions.

    A role's permission set is replaced as a whole (delete all, insert new
    set) inside one transaction; rows are never updated in place.
    """
    __tablename__ = "role_permissions"

    role_id = Column(Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True)
    permission_id = Column(Integer, ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True)
