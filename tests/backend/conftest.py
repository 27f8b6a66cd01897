"""
Backend-specific test fixtures and configuration.

These fixtures extend the global fixtures with backend-specific helpers
for testing FastAPI routes, services, and database operations.
"""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "backend"))


# =============================================================================
# Redis Override
# =============================================================================

@pytest.fixture(autouse=True)
def patch_redis(mock_async_redis):
    """
    Route rate limiting and lockout through fakeredis for every backend test.
    """
    with patch(
        "app.core.rate_limit.get_redis_client",
        AsyncMock(return_value=mock_async_redis),
    ):
        yield mock_async_redis


# =============================================================================
# Saved-Connection Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def saved_connection_store(mock_connections_db):
    """Store unique on (owner_id, connection_string), indexes created."""
    from app.config import MatchKey
    from app.services.saved_connection_store import SavedConnectionStore

    store = SavedConnectionStore(
        mock_connections_db.saved_connections, MatchKey.CONNECTION_STRING
    )
    await store.ensure_indexes()
    return store


@pytest_asyncio.fixture
async def label_store(mock_async_mongo_client):
    """Store unique on (owner_id, label), in its own database."""
    from app.config import MatchKey
    from app.services.saved_connection_store import SavedConnectionStore

    store = SavedConnectionStore(
        mock_async_mongo_client["connections_db_labels"].saved_connections,
        MatchKey.LABEL,
    )
    await store.ensure_indexes()
    return store


@pytest.fixture
def saved_connection_service(saved_connection_store):
    """Service over the connection-string store."""
    from app.services.saved_connection_service import SavedConnectionService
    return SavedConnectionService(saved_connection_store)


@pytest.fixture
def label_service(label_store):
    """Service over the label store."""
    from app.services.saved_connection_service import SavedConnectionService
    return SavedConnectionService(label_store)


@pytest.fixture
def failing_collection():
    """
    A collection whose every call fails as if MongoDB were unreachable.
    """
    from pymongo.errors import ServerSelectionTimeoutError

    error = ServerSelectionTimeoutError("mongodb:27017: timed out")
    collection = MagicMock()
    collection.find_one = AsyncMock(side_effect=error)
    collection.insert_one = AsyncMock(side_effect=error)
    collection.delete_one = AsyncMock(side_effect=error)
    collection.find = MagicMock(side_effect=error)
    return collection


# =============================================================================
# Auth Fixtures
# =============================================================================

@pytest.fixture
def auth_service(mock_auth_db):
    """AuthService over the mock auth database."""
    from app.services.auth_service import AuthService
    return AuthService(mock_auth_db)


@pytest_asyncio.fixture
async def registered_user(auth_service, test_user_data):
    """
    A registered user and a valid access token for it.

    Returns:
        dict with user_id and token
    """
    from app.core.security import create_access_token
    from app.schemas.auth import RegisterRequest

    result = await auth_service.register_user(RegisterRequest(**test_user_data))
    token = create_access_token(user_id=result.user_id, username=result.username)
    return {"user_id": result.user_id, "token": token}


# =============================================================================
# App Override Helpers
# =============================================================================

@pytest.fixture
def app_with_mocks(app, auth_service, saved_connection_service):
    """
    The FastAPI app with service dependencies bound to mock databases.

    Authentication still runs for real against the mock auth database.
    """
    from app.dependencies.auth import get_auth_service
    from app.routers.saved_connections import get_saved_connection_service

    app.dependency_overrides[get_auth_service] = lambda: auth_service
    app.dependency_overrides[get_saved_connection_service] = lambda: saved_connection_service
    return app


@pytest.fixture
def as_identity(app):
    """
    Bypass authentication and act as a fixed identity.

    Usage:
        def test_protected_route(as_identity, alice):
            as_identity(alice)
    """
    from app.dependencies.auth import get_current_identity

    def _as(identity):
        app.dependency_overrides[get_current_identity] = lambda: identity
    return _as


@pytest.fixture
def cluster_client(mock_async_mongo_client):
    """mongomock-motor client standing in for an external cluster, with a close spy."""
    mock_async_mongo_client.close = MagicMock()
    return mock_async_mongo_client


@pytest.fixture
def cluster_executor(cluster_client):
    """ClusterExecutor whose connections all land on the mock cluster."""
    from app.services.cluster_executor import ClusterExecutor

    factory = MagicMock(return_value=cluster_client)
    executor = ClusterExecutor(client_factory=factory)
    executor.factory = factory
    return executor


# =============================================================================
# Response Assertion Helpers
# =============================================================================

@pytest.fixture
def assert_error_response():
    """Helper to assert error response structure."""
    def _assert(response, status_code: int, detail_contains: str = None):
        assert response.status_code == status_code
        data = response.json()
        assert "detail" in data
        if detail_contains:
            assert detail_contains.lower() in str(data["detail"]).lower()
    return _assert
