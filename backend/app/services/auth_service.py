"""
Authentication service for user management and login.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from app.core.security import hash_password, verify_password, create_access_token
from app.core.rate_limit import (
    check_user_lockout,
    increment_failed_login,
    reset_failed_attempts,
    set_user_lockout,
)
from app.config import get_settings
from app.database.databases import auth_db
from app.models.identity import Identity
from app.models.user import User, UserStatus
from app.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
)

logger = logging.getLogger(__name__)


class AuthService:
    """Service for authentication operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        """Initialize with auth database."""
        self.db = db
        self.users_collection = db[auth_db.Collections.USERS]
        self.settings = get_settings()

    async def register_user(self, request: RegisterRequest) -> RegisterResponse:
        """
        Register a new user.

        Args:
            request: Registration request with username, email and password

        Returns:
            RegisterResponse with created user ID

        Raises:
            ValueError: If passwords don't match or email exists
        """
        if not request.passwords_match():
            raise ValueError("Passwords do not match")

        email = request.email.lower()
        username = request.username.strip()
        if not username:
            raise ValueError("Username is required")

        existing = await self.users_collection.find_one({"email": email})
        if existing:
            raise ValueError("Email already registered")

        user_doc = {
            "username": username,
            "email": email,
            "hashed_password": hash_password(request.password),
            "status": UserStatus.ACTIVE.value,
            "created_at": datetime.now(timezone.utc),
        }

        try:
            result = await self.users_collection.insert_one(user_doc)
        except DuplicateKeyError:
            raise ValueError("Email already registered") from None

        user_id = str(result.inserted_id)
        logger.info("User %s registered", user_id)

        return RegisterResponse(
            user_id=user_id,
            username=username,
            email=email,
            message="Registration successful"
        )

    async def login(self, request: LoginRequest) -> LoginResponse:
        """
        Authenticate user and return JWT token.

        Raises:
            ValueError: If credentials are invalid or account is locked
        """
        user_doc = await self.users_collection.find_one({"email": request.email.lower()})

        if not user_doc:
            raise ValueError("Invalid email or password")

        user_id = str(user_doc["_id"])

        if await check_user_lockout(user_id):
            logger.warning("Login refused for locked user %s", user_id)
            raise ValueError("Account temporarily locked due to too many failed attempts")

        if user_doc.get("status") == UserStatus.DISABLED.value:
            raise ValueError("Account is disabled")

        if not verify_password(request.password, user_doc["hashed_password"]):
            failed_count = await increment_failed_login(user_id)

            if failed_count >= self.settings.user_lockout_threshold:
                await set_user_lockout(
                    user_id,
                    self.settings.user_lockout_duration_minutes
                )

            raise ValueError("Invalid email or password")

        await reset_failed_attempts(user_id)
        logger.info("User %s logged in", user_id)

        return self._token_response(user_id, user_doc["username"])

    async def refresh_token(self, user_id: str) -> LoginResponse:
        """
        Issue a fresh JWT token for an authenticated user.

        Raises:
            ValueError: If user not found or disabled
        """
        user = await self.get_user_by_id(user_id)

        if user is None:
            raise ValueError("User not found")

        if user.status == UserStatus.DISABLED.value:
            raise ValueError("Account is disabled")

        return self._token_response(user_id, user.username)

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        """Get user by ID, or None if the ID is malformed or unknown."""
        try:
            user_doc = await self.users_collection.find_one({"_id": ObjectId(user_id)})
        except (InvalidId, TypeError):
            return None

        if not user_doc:
            return None

        user_doc["_id"] = str(user_doc["_id"])
        return User(**user_doc)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        user_doc = await self.users_collection.find_one({"email": email.lower()})

        if not user_doc:
            return None

        user_doc["_id"] = str(user_doc["_id"])
        return User(**user_doc)

    @staticmethod
    def to_identity(user: User) -> Identity:
        """Project a stored user onto the identity handed to services."""
        return Identity(user_id=user.id, username=user.username, email=user.email)

    def _token_response(self, user_id: str, username: str) -> LoginResponse:
        access_token = create_access_token(user_id=user_id, username=username)
        return LoginResponse(
            access_token=access_token,
            token_type="bearer",
            expires_in=self.settings.jwt_access_token_expire_minutes * 60,
            user_id=user_id,
            username=username,
        )
