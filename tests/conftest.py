"""
Global test fixtures for ClusterGate.

This module provides shared fixtures for all tests including:
- Mock MongoDB (mongomock-motor)
- Mock Redis (fakeredis)
- Test users and identities
- FastAPI app and async HTTP client
"""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest
import pytest_asyncio

# Add backend to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))


# =============================================================================
# MongoDB Fixtures (mongomock-motor)
# =============================================================================

@pytest_asyncio.fixture
async def mock_async_mongo_client():
    """
    Create an async mock MongoDB client using mongomock-motor.

    This provides an in-memory MongoDB that behaves like the real thing
    for testing purposes.
    """
    try:
        from mongomock_motor import AsyncMongoMockClient
        client = AsyncMongoMockClient()
        yield client
        client.close()
    except ImportError:
        pytest.skip("mongomock-motor not installed")


@pytest_asyncio.fixture
async def mock_auth_db(mock_async_mongo_client):
    """Provide mock auth_db database."""
    db = mock_async_mongo_client["auth_db"]
    # Create indexes like the real app
    await db.users.create_index("email", unique=True)
    yield db


@pytest_asyncio.fixture
async def mock_connections_db(mock_async_mongo_client):
    """Provide mock connections_db database (indexes created by the store fixtures)."""
    yield mock_async_mongo_client["connections_db"]


# =============================================================================
# Redis Fixtures (fakeredis)
# =============================================================================

@pytest_asyncio.fixture
async def mock_async_redis():
    """
    Create an async mock Redis client using fakeredis.
    """
    try:
        import fakeredis.aioredis
        redis_client = fakeredis.aioredis.FakeRedis(decode_responses=True)
        yield redis_client
        await redis_client.flushall()
        await redis_client.close()
    except ImportError:
        pytest.skip("fakeredis with aioredis not installed")


# =============================================================================
# User Fixtures
# =============================================================================

@pytest.fixture
def test_user_data() -> dict:
    """Basic test user data for registration."""
    return {
        "username": "alice",
        "email": "alice@example.com",
        "password": "SecurePassword123!",
        "password_confirm": "SecurePassword123!",
    }


@pytest.fixture
def alice():
    """Identity of the first test user."""
    from app.models.identity import Identity
    return Identity(
        user_id="507f1f77bcf86cd799439011",
        username="alice",
        email="alice@example.com",
    )


@pytest.fixture
def bob():
    """Identity of a second, unrelated test user."""
    from app.models.identity import Identity
    return Identity(
        user_id="507f1f77bcf86cd799439012",
        username="bob",
        email="bob@example.com",
    )


@pytest.fixture
def mock_user() -> dict:
    """A complete mock user document as stored in MongoDB."""
    return {
        "_id": "507f1f77bcf86cd799439011",
        "username": "alice",
        "email": "alice@example.com",
        "hashed_password": "$2b$12$LQv3c1yqBWVHxkd0LHAkCOYz6TtxMQJqhN8/X4.qOZ3q7K9V6X6Hy",
        "status": "active",
        "created_at": datetime.now(timezone.utc),
    }


# =============================================================================
# FastAPI Test Client Fixtures
# =============================================================================

@pytest.fixture
def app():
    """
    The FastAPI app. Dependency overrides are cleared after each test.
    """
    from app.main import app
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def async_client(app):
    """
    Create an async test client.

    ASGITransport does not run the lifespan, so no real database is touched.
    """
    from httpx import AsyncClient, ASGITransport

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac


@pytest.fixture
def bearer():
    """
    Helper building an Authorization header for a JWT.

    Usage:
        response = await async_client.get("/auth/me", headers=bearer(token))
    """
    def _bearer(token: str) -> dict:
        return {"Authorization": f"Bearer {token}"}
    return _bearer
