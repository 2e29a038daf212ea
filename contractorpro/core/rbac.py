"""Route authorization: pure access decisions plus FastAPI guard dependencies."""

import enum
import logging
from typing import Iterable, Optional

from fastapi import Depends

from contractorpro.core.config import settings
from contractorpro.core.exceptions import AuthenticationError, AuthorizationError
from contractorpro.core.middleware import get_principal
from contractorpro.core.roles import expand_roles, key_of
from contractorpro.core.security import Principal

logger = logging.getLogger(__name__)

AUTHENTICATION_REQUIRED = "Authentication required"
ROLE_DENIED = "Access denied"
PERMISSION_DENIED = "Insufficient permissions"


class AccessDecision(str, enum.Enum):
    ALLOW = "allow"
    DENY_UNAUTHENTICATED = "deny_unauthenticated"
    DENY_UNAUTHORIZED = "deny_unauthorized"


def check_any_role(
    principal: Optional[Principal],
    required_roles: Iterable,
    *,
    expand_hierarchy: bool = False,
) -> AccessDecision:
    """Allow when the principal holds at least one of ``required_roles``.

    A missing principal is always DENY_UNAUTHENTICATED, whatever the
    required set. Matching is on the literal role keys carried in the token
    unless ``expand_hierarchy`` closes them over ROLE_HIERARCHY first.
    """
    if principal is None:
        return AccessDecision.DENY_UNAUTHENTICATED
    required = {key_of(r) for r in required_roles}
    held = expand_roles(principal.roles) if expand_hierarchy else principal.roles
    if held & required:
        return AccessDecision.ALLOW
    return AccessDecision.DENY_UNAUTHORIZED


def check_any_permission(
    principal: Optional[Principal],
    required_permissions: Iterable,
) -> AccessDecision:
    """Allow when the principal's flattened permissions intersect the requirement."""
    if principal is None:
        return AccessDecision.DENY_UNAUTHENTICATED
    required = {key_of(p) for p in required_permissions}
    if principal.permissions & required:
        return AccessDecision.ALLOW
    return AccessDecision.DENY_UNAUTHORIZED


def enforce(decision: AccessDecision, denial_message: str) -> None:
    """Turn a denial into the matching terminal exception."""
    if decision is AccessDecision.ALLOW:
        return
    if decision is AccessDecision.DENY_UNAUTHENTICATED:
        raise AuthenticationError(AUTHENTICATION_REQUIRED)
    raise AuthorizationError(denial_message)


def require_authenticated(principal: Optional[Principal] = Depends(get_principal)) -> Principal:
    """Dependency that only requires a valid principal."""
    if principal is None:
        raise AuthenticationError(AUTHENTICATION_REQUIRED)
    return principal


class RequireRole:
    """Dependency that checks the principal holds any of the given roles."""

    def __init__(self, *roles):
        self.roles = frozenset(key_of(r) for r in roles)

    async def __call__(self, principal: Optional[Principal] = Depends(get_principal)) -> Principal:
        decision = check_any_role(
            principal, self.roles,
            expand_hierarchy=settings.RBAC_EXPAND_ROLE_HIERARCHY,
        )
        if decision is AccessDecision.DENY_UNAUTHORIZED:
            logger.info(
                "Role check denied subject=%s roles=%s required=%s",
                principal.subject, sorted(principal.roles), sorted(self.roles),
            )
        enforce(decision, ROLE_DENIED)
        return principal


class RequirePermission:
    """Dependency that checks the principal holds any of the given permissions."""

    def __init__(self, *permissions):
        self.permissions = frozenset(key_of(p) for p in permissions)

    async def __call__(self, principal: Optional[Principal] = Depends(get_principal)) -> Principal:
        decision = check_any_permission(principal, self.permissions)
        if decision is AccessDecision.DENY_UNAUTHORIZED:
            logger.info(
                "Permission check denied subject=%s required=%s",
                principal.subject, sorted(self.permissions),
            )
        enforce(decision, PERMISSION_DENIED)
        return principal
