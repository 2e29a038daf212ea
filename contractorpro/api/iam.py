"""IAM API router — users, roles, and role permissions."""

from typing import List

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from contractorpro.db.session import get_db
from contractorpro.schemas.schemas import (
    UserOut, UserCreate, UserRolesUpdate, RoleCreate, RoleOut, PermissionOut,
    RolePermissionsUpdate, RolePermissionsOut,
)
from contractorpro.services.iam_service import iam_service
from contractorpro.services.activity_service import activity_service
from contractorpro.core.rbac import RequireRole, RequirePermission
from contractorpro.core.roles import RoleKey, PermissionKey, PRIVILEGED_ROLES
from contractorpro.core.security import Principal

router = APIRouter(prefix="/iam", tags=["iam"])

require_admin = RequireRole(RoleKey.SYSTEM_ADMIN)
require_privileged = RequireRole(*PRIVILEGED_ROLES)
require_manage_users = RequirePermission(PermissionKey.MANAGE_USERS)


@router.get("/users")
async def list_users(
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_manage_users),
):
    result = iam_service.list_users(db, page, page_size)
    return {
        "users": [UserOut.model_validate(u) for u in result["users"]],
        "total": result["total"],
        "page": result["page"],
    }


@router.post("/users", response_model=UserOut, status_code=201)
async def create_user(
    body: UserCreate,
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_manage_users),
):
    """Create a login account with an initial role set."""
    user = iam_service.create_user(
        db, body.email, body.password, body.full_name, body.role_keys, body.phone,
    )
    activity_service.record_from_request(
        db, request,
        actor_id=principal.user_id,
        action_type="user.create",
        entity_type="user",
        entity_id=user.id,
        metadata={"email": user.email, "roles": user.role_keys},
    )
    return UserOut.model_validate(user)


@router.put("/users/{user_id}/roles")
async def replace_user_roles(
    user_id: int,
    body: UserRolesUpdate,
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    """Replace a user's whole role set. Takes effect on their next login."""
    roles = iam_service.replace_user_roles(db, user_id, body.role_keys)
    activity_service.record_from_request(
        db, request,
        actor_id=principal.user_id,
        action_type="user.roles.update",
        entity_type="user",
        entity_id=user_id,
        metadata={"roles": roles},
    )
    return {"user_id": user_id, "roles": roles}


@router.get("/roles", response_model=List[RoleOut])
async def list_roles(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_privileged),
):
    return iam_service.list_roles(db)


@router.post("/roles", response_model=RoleOut, status_code=201)
async def create_role(
    body: RoleCreate,
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    role = iam_service.create_role(db, body.key, body.name, body.description)
    activity_service.record_from_request(
        db, request,
        actor_id=principal.user_id,
        action_type="role.create",
        entity_type="role",
        entity_id=role.id,
        description=f"Created role {role.key}",
    )
    return role


@router.get("/roles/{role_id}/permissions", response_model=RolePermissionsOut)
async def get_role_permissions(
    role_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_privileged),
):
    role = iam_service.get_role(db, role_id)
    return RolePermissionsOut(
        role_id=role.id,
        role_key=role.key,
        permissions=iam_service.get_role_permissions(db, role_id),
    )


@router.put("/roles/{role_id}/permissions", response_model=RolePermissionsOut)
async def replace_role_permissions(
    role_id: int,
    body: RolePermissionsUpdate,
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    """Replace a role's permission set in one transaction."""
    before = iam_service.get_role_permissions(db, role_id)
    permissions = iam_service.replace_role_permissions(db, role_id, body.permission_keys)
    role = iam_service.get_role(db, role_id)
    activity_service.record_from_request(
        db, request,
        actor_id=principal.user_id,
        action_type="role.permissions.update",
        entity_type="role",
        entity_id=role_id,
        metadata={"before": before, "after": permissions},
    )
    return RolePermissionsOut(role_id=role.id, role_key=role.key, permissions=permissions)


@router.get("/permissions", response_model=List[PermissionOut])
async def list_permissions(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    return iam_service.list_permissions(db)
