"""
Dependencies for dependency injection in routes.
"""
from app.dependencies.auth import (
    get_auth_service,
    get_current_user,
    get_current_active_user,
    get_current_identity,
    CurrentUser,
    CurrentIdentity,
)

__all__ = [
    "get_auth_service",
    "get_current_user",
    "get_current_active_user",
    "get_current_identity",
    "CurrentUser",
    "CurrentIdentity",
]
