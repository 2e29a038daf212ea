"""Password hashing and JWT issue/verify for request principals."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

import bcrypt
from jose import JWTError, jwt

from contractorpro.core.config import settings

logger = logging.getLogger(__name__)

TOKEN_TYPE = "access"


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    pwd_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(pwd_bytes, salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    pwd_bytes = plain_password.encode("utf-8")
    hashed_bytes = hashed_password.encode("utf-8")
    try:
        return bcrypt.checkpw(pwd_bytes, hashed_bytes)
    except ValueError:
        # Stored hash is not a bcrypt hash
        return False


@dataclass(frozen=True)
class Principal:
    """Authenticated identity and its role/permission claims for one request."""

    subject: str
    roles: frozenset[str] = field(default_factory=frozenset)
    permissions: frozenset[str] = field(default_factory=frozenset)

    @property
    def user_id(self) -> Optional[int]:
        try:
            return int(self.subject)
        except ValueError:
            return None


def _claim_list(values: Iterable[str]) -> list[str]:
    return sorted({str(v) for v in values})


def issue_token(
    subject: str,
    roles: Iterable[str],
    permissions: Iterable[str],
    *,
    secret: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
    now: Optional[datetime] = None,
) -> str:
    """Create a signed access token asserting subject, roles and permissions."""
    issued_at = now or datetime.now(timezone.utc)
    expire = issued_at + (expires_delta or timedelta(hours=settings.JWT_EXPIRY_HOURS))
    claims = {
        "sub": str(subject),
        "roles": _claim_list(roles),
        "permissions": _claim_list(permissions),
        "iat": issued_at,
        "exp": expire,
        "type": TOKEN_TYPE,
    }
    return jwt.encode(claims, secret or settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def _is_str_list(value) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


def verify_token(token: str, *, secret: Optional[str] = None) -> Optional[Principal]:
    """Validate a token and return its principal, or None if it is unusable.

    Never raises: malformed, expired and badly signed tokens all yield None.
    """
    if not token:
        return None
    try:
        payload = jwt.decode(
            token,
            secret or settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require_exp": True},
        )
    except JWTError as e:
        logger.debug("Rejected token: %s", e)
        return None

    subject = payload.get("sub")
    roles = payload.get("roles", [])
    permissions = payload.get("permissions", [])
    if payload.get("type") != TOKEN_TYPE or not isinstance(subject, str) or not subject:
        return None
    if not _is_str_list(roles) or not _is_str_list(permissions):
        return None

    return Principal(
        subject=subject,
        roles=frozenset(roles),
        permissions=frozenset(permissions),
    )


def extract_bearer(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer <token>`` header value."""
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


def resolve_principal(authorization: Optional[str]) -> Optional[Principal]:
    token = extract_bearer(authorization)
    if token is None:
        return None
    return verify_token(token)
