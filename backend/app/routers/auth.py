"""
Authentication router for registration, login/logout and token refresh.
"""
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from app.config import get_settings
from app.core.rate_limit import check_rate_limit
from app.dependencies.auth import CurrentUser, get_auth_service
from app.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    TokenRefreshResponse,
    UserInfoResponse,
)
from app.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Authentication"])


def get_client_ip(request: Request) -> str:
    """Extract client IP from request."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def set_session_cookie(response: Response, token: str, max_age: int) -> None:
    """Store the access token in an httponly session cookie."""
    settings = get_settings()
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=max_age,
        httponly=True,
        secure=settings.auth_cookie_secure,
        samesite=settings.auth_cookie_samesite,
    )


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def register(
    request: Request,
    body: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Register a new user account.

    - **username**: Display name
    - **email**: Valid email address (must be unique)
    - **password**: Password (minimum 8 characters)
    - **password_confirm**: Must match password
    """
    client_ip = get_client_ip(request)
    if not await check_rate_limit(client_ip, "/auth/register", limit=10, window_seconds=60):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many registration attempts. Please try again later.",
        )

    try:
        return await auth_service.register_user(body)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Login and get access token",
)
async def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Authenticate with email and password.

    The token is returned in the body and also set as an httponly session
    cookie. Protected endpoints accept either the cookie or an
    `Authorization: Bearer` header.

    **Rate limited**: 5 attempts per minute per IP, account lockout after 10 failures.
    """
    client_ip = get_client_ip(request)
    if not await check_rate_limit(client_ip, "/auth/login"):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many login attempts. Please try again later.",
        )

    try:
        result = await auth_service.login(body)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )

    set_session_cookie(response, result.access_token, result.expires_in)
    return result


@router.post(
    "/logout",
    summary="Clear the session cookie",
)
async def logout(response: Response):
    """Remove the session cookie. Bearer tokens simply expire."""
    settings = get_settings()
    response.delete_cookie(
        key=settings.auth_cookie_name,
        httponly=True,
        secure=settings.auth_cookie_secure,
        samesite=settings.auth_cookie_samesite,
    )
    return {"message": "Logged out"}


@router.post(
    "/refresh",
    response_model=TokenRefreshResponse,
    summary="Refresh access token",
)
async def refresh_token(
    response: Response,
    current_user: CurrentUser,
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Refresh the JWT token for an authenticated user.

    The session cookie is renewed as well.
    """
    try:
        result = await auth_service.refresh_token(current_user.id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
        )

    set_session_cookie(response, result.access_token, result.expires_in)
    return TokenRefreshResponse(
        access_token=result.access_token,
        token_type=result.token_type,
        expires_in=result.expires_in,
    )


@router.get(
    "/me",
    response_model=UserInfoResponse,
    summary="Get current user info",
)
async def get_current_user_info(
    current_user: CurrentUser,
):
    """Get information about the currently authenticated user."""
    return {
        "id": current_user.id,
        "username": current_user.username,
        "email": current_user.email,
        "status": current_user.status,
        "created_at": current_user.created_at,
    }
