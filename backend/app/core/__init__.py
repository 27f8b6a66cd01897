"""
Core module - Security, rate limiting, errors and logging.
"""
from app.core.errors import (
    AlreadyExists,
    ClusterError,
    DeliveryFailed,
    ConflictError,
    ErrorKind,
    GatewayError,
    InvalidInput,
    NotFound,
    Unauthenticated,
    Unavailable,
)
from app.core.security import (
    hash_password,
    verify_password,
    create_access_token,
    decode_token,
)
from app.core.rate_limit import (
    check_rate_limit,
    increment_failed_login,
    check_user_lockout,
    reset_failed_attempts,
)

__all__ = [
    "AlreadyExists",
    "ClusterError",
    "DeliveryFailed",
    "ConflictError",
    "ErrorKind",
    "GatewayError",
    "InvalidInput",
    "NotFound",
    "Unauthenticated",
    "Unavailable",
    "hash_password",
    "verify_password",
    "create_access_token",
    "decode_token",
    "check_rate_limit",
    "increment_failed_login",
    "check_user_lockout",
    "reset_failed_attempts",
]
