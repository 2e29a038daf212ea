"""User and UserRole models."""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from contractorpro.db.base import Base


class User(Base):
    """Login account. Holds any number of roles."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    last_login_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    roles = relationship("Role", secondary="user_roles", lazy="selectin", order_by="Role.key")

    @property
    def role_keys(self) -> list[str]:
        return [r.key for r in self.roles]

    @property
    def permission_keys(self) -> list[str]:
        """Union of the permissions of all roles, deduplicated."""
        keys = {p.key for role in self.roles for p in role.permissions}
        return sorted(keys)


class UserRole(Base):
    """Association between users and roles."""
    __tablename__ = "user_roles"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    role_id = Column(Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True)
    assigned_at = Column(DateTime, server_default=func.now(), nullable=False)
