"""
Pydantic models for database documents and data structures.
"""
from app.models.user import User, UserStatus
from app.models.identity import Identity
from app.models.saved_connection import SavedConnection

__all__ = [
    "User",
    "UserStatus",
    "Identity",
    "SavedConnection",
]
