"""Auth service — credential check and access-token issue."""

import logging
from datetime import datetime, timezone
from typing import Dict, Any, Tuple, List

from sqlalchemy.orm import Session

from contractorpro.models.user import User
from contractorpro.core.config import settings
from contractorpro.core.security import verify_password, issue_token
from contractorpro.core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


class AuthService:
    """Handles authentication of login credentials."""

    @staticmethod
    def authenticate(db: Session, email: str, password: str) -> Tuple[User, List[str], List[str]]:
        """Verify credentials and resolve the user's role and permission keys.

        Raises:
            AuthenticationError: If credentials are invalid or the account is inactive.
        """
        user = db.query(User).filter(User.email == email.lower()).first()
        if not user or not verify_password(password, user.hashed_password):
            logger.info("Failed login for %s", email)
            raise AuthenticationError("Invalid credentials")

        if not user.is_active:
            logger.info("Login attempt on deactivated account %s", email)
            raise AuthenticationError("Invalid credentials")

        return user, user.role_keys, user.permission_keys

    @staticmethod
    def login(db: Session, email: str, password: str) -> Dict[str, Any]:
        """Authenticate user and return a signed access token."""
        user, roles, permissions = AuthService.authenticate(db, email, password)
        token = issue_token(str(user.id), roles, permissions)

        user.last_login_at = datetime.now(timezone.utc)
        db.commit()

        return {
            "token": token,
            "token_type": "bearer",
            "expires_in": settings.JWT_EXPIRY_HOURS * 3600,
            "user": {
                "id": user.id,
                "email": user.email,
                "full_name": user.full_name,
                "roles": roles,
                "permissions": permissions,
            },
        }


auth_service = AuthService()
