"""Authentication dependencies for FastAPI.

Supabase Auth issues the session token; this module only resolves a bearer
token to the acting user. The user id is what the version history records as
``updated_by``.
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.db.supabase_client import get_supabase

logger = logging.getLogger(__name__)

# HTTP Bearer scheme for Authorization header
security = HTTPBearer(auto_error=False)


class AuthContext:
    """Context object containing authenticated user info."""

    def __init__(self, user_id: UUID, token: str, email: Optional[str] = None):
        self.user_id = user_id
        self.token = token
        self.email = email

    @property
    def actor_id(self) -> str:
        """User id as recorded in audit columns."""
        return str(self.user_id)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[AuthContext]:
    """
    Resolve the Supabase session token on the request to a user.

    Returns None if no valid token is present (for optional auth endpoints).
    """
    if not credentials:
        return None

    token = credentials.credentials

    try:
        # Validates the JWT signature and expiration
        auth_response = get_supabase().auth.get_user(token)
    except Exception as e:
        logger.warning(f"Auth error: {e}")
        return None

    if not auth_response or not auth_response.user:
        return None

    return AuthContext(
        user_id=UUID(str(auth_response.user.id)),
        token=token,
        email=auth_response.user.email,
    )


async def require_auth(
    auth: Optional[AuthContext] = Depends(get_current_user),
) -> AuthContext:
    """Require authentication. Raises 401 if not authenticated."""
    if not auth:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return auth
