"""Activity API router — log queries and on-demand snapshots."""

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, Request
from sqlalchemy.orm import Session

from contractorpro.db.session import get_db
from contractorpro.schemas.schemas import (
    ActivityLogOut, ActivityAnalyticsOut, SnapshotRequest, SnapshotOut,
)
from contractorpro.services.activity_service import activity_service
from contractorpro.services.snapshot_service import snapshot_service
from contractorpro.core.rbac import RequirePermission
from contractorpro.core.roles import PermissionKey
from contractorpro.core.security import Principal

router = APIRouter(prefix="/activity", tags=["activity"])


@router.get("/logs")
async def get_activity_logs(
    actor_id: Optional[int] = Query(None),
    action_type: Optional[str] = Query(None),
    entity_type: Optional[str] = Query(None),
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(25, ge=1, le=200),
    db: Session = Depends(get_db),
    principal: Principal = Depends(RequirePermission(PermissionKey.VIEW_ACTIVITY_LOGS)),
):
    result = activity_service.query_logs(
        db, actor_id, action_type, entity_type, date_from, date_to, search, page, page_size,
    )
    return {
        "logs": [ActivityLogOut.model_validate(log) for log in result["logs"]],
        "total": result["total"],
        "page": result["page"],
        "page_size": result["page_size"],
    }


@router.get("/analytics", response_model=ActivityAnalyticsOut)
async def get_activity_analytics(
    actor_id: Optional[int] = Query(None),
    action_type: Optional[str] = Query(None),
    entity_type: Optional[str] = Query(None),
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(
        RequirePermission(PermissionKey.VIEW_ACTIVITY_ANALYTICS, PermissionKey.VIEW_ACTIVITY_LOGS)
    ),
):
    """Event counts by entity, action, day and actor."""
    return activity_service.analytics(db, actor_id, action_type, entity_type, date_from, date_to)


@router.post("/snapshots", response_model=SnapshotOut)
async def create_snapshot(
    request: Request,
    body: Optional[SnapshotRequest] = Body(None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(RequirePermission(PermissionKey.MANAGE_ACTIVITY_RETENTION)),
):
    """Snapshot one day of activity. Defaults to yesterday (UTC)."""
    day = body.snapshot_date if body and body.snapshot_date else None
    if day is None:
        day = datetime.now(timezone.utc).date() - timedelta(days=1)
    result = snapshot_service.create_snapshot_for_date(db, day)
    activity_service.record_from_request(
        db, request,
        actor_id=principal.user_id,
        action_type="activity.snapshot.create",
        entity_type="activity_snapshot",
        entity_id=result["key"],
        metadata={"date": day.isoformat(), "count": result["count"]},
    )
    return SnapshotOut(key=result["key"], count=result["count"])
