from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.db import get_session
from portal.core.errors import Forbidden
from portal.core.security import decode_access_token
from portal.models.user import User

security = HTTPBearer(auto_error=False)

__all__ = ["get_session", "get_current_user", "get_optional_user", "require_admin", "refresh_header"]


def refresh_header(x_refresh_token: str | None = Header(default=None, alias="X-Refresh-Token")) -> str | None:
    """Extract X-Refresh-Token header for logout/refresh endpoints."""
    return x_refresh_token


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def _user_from_token(session: AsyncSession, token: str) -> User | None:
    user_id = decode_access_token(token)
    if not user_id:
        return None
    try:
        uid = int(user_id)
    except ValueError:
        return None
    return await session.get(User, uid)


async def get_current_user(
    session: AsyncSession = Depends(get_session),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> User:
    if not credentials or credentials.scheme.lower() != "bearer":
        raise _unauthorized("Missing or invalid authorization header")
    user = await _user_from_token(session, credentials.credentials)
    if not user:
        raise _unauthorized("Invalid or expired token")
    return user


async def get_optional_user(
    session: AsyncSession = Depends(get_session),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> User | None:
    """Public routes: an invalid token is ignored rather than rejected."""
    if not credentials or credentials.scheme.lower() != "bearer":
        return None
    return await _user_from_token(session, credentials.credentials)


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise Forbidden("Admin role required")
    return current_user
