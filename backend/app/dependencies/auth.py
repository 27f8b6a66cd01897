"""
Authentication dependencies for route protection.

A caller presents a JWT either as ``Authorization: Bearer <token>`` or in the
session cookie set by ``POST /auth/login``. The header wins when both are sent.
"""
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from app.config import get_settings
from app.core.security import decode_token
from app.database.connections import get_mongo_client
from app.database.databases import auth_db
from app.models.identity import Identity
from app.models.user import User, UserStatus
from app.services.auth_service import AuthService

bearer_scheme = HTTPBearer(auto_error=False)


async def get_auth_service() -> AuthService:
    """Dependency to get AuthService instance."""
    client = await get_mongo_client()
    db = client[auth_db.DB_NAME]
    return AuthService(db)


def get_access_token(
    request: Request,
    credentials: Annotated[
        Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)
    ],
) -> Optional[str]:
    """Extract the raw token from the bearer header or the session cookie."""
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(get_settings().auth_cookie_name)


async def get_current_user(
    token: Annotated[Optional[str], Depends(get_access_token)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> User:
    """
    Dependency to get the current authenticated user from the JWT.

    Raises:
        HTTPException 401: If token is missing, invalid or expired
        HTTPException 401: If user not found
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not token:
        raise credentials_exception

    try:
        payload = decode_token(token)
    except JWTError:
        raise credentials_exception

    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id.strip():
        raise credentials_exception

    user = await auth_service.get_user_by_id(user_id)

    if user is None:
        raise credentials_exception

    return user


async def get_current_active_user(
    current_user: Annotated[User, Depends(get_current_user)]
) -> User:
    """
    Dependency to ensure the current user is active (not disabled).

    Raises:
        HTTPException 403: If user account is disabled
    """
    if current_user.status == UserStatus.DISABLED:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is disabled",
        )
    return current_user


async def get_current_identity(
    current_user: Annotated[User, Depends(get_current_active_user)]
) -> Identity:
    """Dependency yielding the caller's Identity for the service layer."""
    return AuthService.to_identity(current_user)


# Type aliases for cleaner route signatures
CurrentUser = Annotated[User, Depends(get_current_active_user)]
CurrentIdentity = Annotated[Identity, Depends(get_current_identity)]
