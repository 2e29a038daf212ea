"""Auth API router — login and current principal."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from contractorpro.db.session import get_db
from contractorpro.schemas.schemas import LoginRequest, TokenResponse, PrincipalOut
from contractorpro.services.auth_service import auth_service
from contractorpro.services.activity_service import activity_service
from contractorpro.core.rbac import require_authenticated
from contractorpro.core.security import Principal

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, request: Request, db: Session = Depends(get_db)):
    """Authenticate and return a signed access token."""
    result = auth_service.login(db, body.email, body.password)
    activity_service.record_from_request(
        db, request,
        actor_id=result["user"]["id"],
        action_type="auth.login",
        entity_type="user",
        entity_id=result["user"]["id"],
        description=f"{result['user']['email']} signed in",
    )
    return result


@router.get("/me", response_model=PrincipalOut)
async def get_me(principal: Principal = Depends(require_authenticated)):
    """Claims carried by the caller's token."""
    return PrincipalOut(
        subject=principal.subject,
        roles=sorted(principal.roles),
        permissions=sorted(principal.permissions),
    )
