"""
Application configuration loaded from environment variables.
"""
from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class MatchKey(str, Enum):
    """Field that identifies a saved connection within one owner's registry."""
    CONNECTION_STRING = "connection_string"
    LABEL = "label"


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # MongoDB (the gateway's own storage)
    mongo_uri: str = "mongodb://mongodb:27017"

    # Redis
    redis_host: str = "redis"
    redis_port: int = 6379

    # JWT Configuration
    jwt_secret_key: str = "CHANGE_ME_IN_PRODUCTION_USE_STRONG_SECRET"
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 30

    # Session cookie
    auth_cookie_name: str = "access_token"
    auth_cookie_secure: bool = False
    auth_cookie_samesite: str = "lax"

    # Rate Limiting
    login_rate_limit_attempts: int = 5
    login_rate_limit_window_seconds: int = 60
    user_lockout_threshold: int = 10
    user_lockout_duration_minutes: int = 30

    # Saved-connection registry uniqueness axis
    saved_connection_match_key: MatchKey = MatchKey.CONNECTION_STRING

    # External clusters
    cluster_server_selection_timeout_ms: int = 5000
    cluster_default_page_size: int = 10
    cluster_max_page_size: int = 100
    cluster_export_limit: int = 5000

    # Outgoing mail (bulk e-mail to the addresses in a collection)
    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_username: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_start_tls: bool = True
    smtp_timeout_seconds: float = 30.0

    # HTTP
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
