"""
Error taxonomy shared by the saved-connection registry and the cluster executor.

Every failure a caller can observe is a ``GatewayError`` tagged with an
``ErrorKind``. Routers branch on the kind, never on the message text, and the
message is always safe to return in a response body.
"""
from enum import Enum

from fastapi import HTTPException, status


class ErrorKind(str, Enum):
    """Stable error categories exposed at the gateway boundary."""
    INVALID_INPUT = "invalid_input"
    UNAUTHENTICATED = "unauthenticated"
    ALREADY_EXISTS = "already_exists"
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"
    CLUSTER_ERROR = "cluster_error"
    DELIVERY_FAILED = "delivery_failed"


class GatewayError(Exception):
    """Base class for errors surfaced to API callers."""

    kind: ErrorKind = ErrorKind.UNAVAILABLE
    default_message = "Service temporarily unavailable"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(GatewayError):
    """Malformed or missing request fields."""
    kind = ErrorKind.INVALID_INPUT
    default_message = "Invalid input"


class Unauthenticated(GatewayError):
    """No identity, or an identity without an owner key."""
    kind = ErrorKind.UNAUTHENTICATED
    default_message = "Not authenticated"


class AlreadyExists(GatewayError):
    """The resource already exists for this owner."""
    kind = ErrorKind.ALREADY_EXISTS
    default_message = "Already exists"


class NotFound(GatewayError):
    """Target absent, or not owned by the caller."""
    kind = ErrorKind.NOT_FOUND
    default_message = "Not found"


class Unavailable(GatewayError):
    """Backing storage failed transiently. Safe to retry with backoff."""
    kind = ErrorKind.UNAVAILABLE


class ClusterError(GatewayError):
    """An external cluster could not be reached or rejected the operation."""
    kind = ErrorKind.CLUSTER_ERROR
    default_message = "Cluster operation failed"


class DeliveryFailed(GatewayError):
    """The mail relay refused or could not be reached."""
    kind = ErrorKind.DELIVERY_FAILED
    default_message = "Failed to send emails"


class ConflictError(Exception):
    """
    Raised by the store when a write violates a uniqueness constraint.

    Internal to the storage layer; the service turns it into ``AlreadyExists``.
    """


_STATUS_BY_KIND = {
    ErrorKind.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.CLUSTER_ERROR: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.DELIVERY_FAILED: status.HTTP_502_BAD_GATEWAY,
}


def http_status_for(kind: ErrorKind) -> int:
    """Map an error kind to its HTTP status code."""
    return _STATUS_BY_KIND[kind]


def to_http_exception(error: GatewayError) -> HTTPException:
    """Build the HTTPException a router raises for a gateway error."""
    headers = None
    if error.kind == ErrorKind.UNAUTHENTICATED:
        headers = {"WWW-Authenticate": "Bearer"}
    return HTTPException(
        status_code=http_status_for(error.kind),
        detail=error.message,
        headers=headers,
    )
