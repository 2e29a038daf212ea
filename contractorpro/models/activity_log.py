"""Activity log model — append-only."""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, func
from contractorpro.db.base import Base


class ActivityLog(Base):
    """Immutable trail of user actions.

    This table is APPEND-ONLY: no UPDATE or DELETE operations should ever
    be performed on it (enforced at application level).
    """
    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    actor_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    action_type = Column(String(100), nullable=False, index=True)  # e.g. "contract.create"
    entity_type = Column(String(50), nullable=False, index=True)  # contract, leave, role, ...
    entity_id = Column(String(100), nullable=True)
    description = Column(String(500), nullable=True)
    metadata_json = Column(Text, nullable=True)
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(String(500), nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False, index=True)
