"""Activity service — append-only trail of user actions."""

import json
from datetime import date, datetime, time, timedelta, timezone
from collections import Counter
from typing import Optional, Any, List, Dict
from sqlalchemy import or_
from sqlalchemy.orm import Session
from fastapi import Request

from contractorpro.models.activity_log import ActivityLog
from contractorpro.models.user import User

ANALYTICS_WINDOW_DAYS = 30
TOP_USERS_LIMIT = 10


class ActivityService:
    """Records immutable activity entries for system events."""

    @staticmethod
    def record(
        db: Session,
        actor_id: Optional[int],
        action_type: str,
        entity_type: str,
        entity_id: Optional[str] = None,
        description: Optional[str] = None,
        metadata: Optional[Any] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> ActivityLog:
        """Write a single activity record.

        Args:
            action_type: e.g. "auth.login", "contract.create", "leave.status.update"
            entity_type: user, role, employee, contract, leave, activity_snapshot

        This method commits immediately so the trail is never lost.
        """
        entry = ActivityLog(
            actor_id=actor_id,
            action_type=action_type,
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            description=description,
            metadata_json=json.dumps(metadata, default=str) if metadata else None,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        db.add(entry)
        db.commit()
        return entry

    @staticmethod
    def record_from_request(
        db: Session,
        request: Request,
        actor_id: Optional[int],
        action_type: str,
        entity_type: str,
        entity_id: Optional[str] = None,
        description: Optional[str] = None,
        metadata: Optional[Any] = None,
    ) -> ActivityLog:
        """Write an activity record extracting IP and user-agent from the request."""
        ip = request.client.host if request.client else None
        ua = request.headers.get("user-agent", "")[:500]
        return ActivityService.record(
            db=db,
            actor_id=actor_id,
            action_type=action_type,
            entity_type=entity_type,
            entity_id=entity_id,
            description=description,
            metadata=metadata,
            ip_address=ip,
            user_agent=ua,
        )

    @staticmethod
    def query_logs(
        db: Session,
        actor_id: Optional[int] = None,
        action_type: Optional[str] = None,
        entity_type: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        search: Optional[str] = None,
        page: int = 1,
        page_size: int = 25,
    ):
        """Query activity logs with filters and pagination."""
        query = db.query(ActivityLog)

        if actor_id:
            query = query.filter(ActivityLog.actor_id == actor_id)
        if action_type:
            query = query.filter(ActivityLog.action_type.ilike(f"%{action_type}%"))
        if entity_type:
            query = query.filter(ActivityLog.entity_type == entity_type)
        if date_from:
            query = query.filter(ActivityLog.created_at >= date_from)
        if date_to:
            query = query.filter(ActivityLog.created_at <= date_to)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                ActivityLog.description.ilike(pattern),
                ActivityLog.action_type.ilike(pattern),
                ActivityLog.entity_type.ilike(pattern),
            ))

        total = query.count()
        logs = (
            query.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )

        return {
            "logs": logs,
            "total": total,
            "page": page,
            "page_size": page_size,
        }

    @staticmethod
    def logs_for_day(db: Session, day: date) -> List[ActivityLog]:
        """All entries created on ``day`` (UTC), oldest first."""
        start = datetime.combine(day, time.min)
        end = start + timedelta(days=1)
        return (
            db.query(ActivityLog)
            .filter(ActivityLog.created_at >= start, ActivityLog.created_at < end)
            .order_by(ActivityLog.created_at.asc(), ActivityLog.id.asc())
            .all()
        )

    @staticmethod
    def analytics(
        db: Session,
        actor_id: Optional[int] = None,
        action_type: Optional[str] = None,
        entity_type: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """Aggregate activity counts over a window (default: the last 30 days)."""
        date_to = date_to or datetime.now(timezone.utc).replace(tzinfo=None)
        date_from = date_from or date_to - timedelta(days=ANALYTICS_WINDOW_DAYS)

        query = (
            db.query(ActivityLog, User.email)
            .outerjoin(User, ActivityLog.actor_id == User.id)
            .filter(ActivityLog.created_at >= date_from, ActivityLog.created_at <= date_to)
        )
        if actor_id:
            query = query.filter(ActivityLog.actor_id == actor_id)
        if action_type:
            query = query.filter(ActivityLog.action_type.ilike(f"%{action_type}%"))
        if entity_type:
            query = query.filter(ActivityLog.entity_type == entity_type)
        rows = query.all()

        entities = Counter(log.entity_type for log, _ in rows)
        actions = Counter(log.action_type for log, _ in rows)
        daily = Counter(log.created_at.date().isoformat() for log, _ in rows)
        actors = Counter(log.actor_id for log, _ in rows)
        emails = {log.actor_id: email for log, email in rows}

        return {
            "total_events": len(rows),
            "unique_actors": len(actors),
            "entities": [{"key": k, "count": n} for k, n in entities.most_common()],
            "actions": [{"key": k, "count": n} for k, n in actions.most_common()],
            "daily": [{"key": k, "count": daily[k]} for k in sorted(daily)],
            "top_users": [
                {"user_id": uid, "email": emails.get(uid), "count": n}
                for uid, n in actors.most_common(TOP_USERS_LIMIT)
            ],
        }


activity_service = ActivityService()
