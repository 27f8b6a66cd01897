"""
Tests for the clusters endpoints.

The executor dependency is replaced by one bound to the mongomock cluster,
and authentication is bypassed with a fixed identity unless a test checks it.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.core.errors import ClusterError, DeliveryFailed

CS = "mongodb://cluster.example:27017"


@pytest.fixture
def cluster_app(app, as_identity, alice, cluster_executor):
    """App acting as alice with the executor bound to the mock cluster."""
    from app.routers.clusters import get_cluster_executor

    as_identity(alice)
    app.dependency_overrides[get_cluster_executor] = lambda: cluster_executor
    return app


class TestClusterRoutes:
    """Tests for /clusters/*."""

    @pytest.mark.asyncio
    async def test_requires_authentication(self, app, async_client, auth_service):
        """Cluster routes are not open to anonymous callers."""
        from app.dependencies.auth import get_auth_service

        app.dependency_overrides[get_auth_service] = lambda: auth_service

        response = await async_client.post(
            "/clusters/databases", json={"connection_string": CS}
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_list_collections(self, cluster_app, async_client, cluster_client):
        """Collections of a database are listed."""
        await cluster_client["shop"]["items"].insert_one({"n": 1})

        response = await async_client.post(
            "/clusters/collections",
            json={"connection_string": CS, "db_name": "shop"},
        )

        assert response.status_code == 200
        assert response.json() == ["items"]

    @pytest.mark.asyncio
    async def test_browse_sets_no_store_headers(self, cluster_app, async_client, cluster_client):
        """Document listings are never cacheable."""
        await cluster_client["shop"]["items"].insert_many([{"n": 1}, {"n": 2}])

        response = await async_client.post(
            "/clusters/documents/browse",
            json={
                "connection_string": CS,
                "db_name": "shop",
                "collection_name": "items",
                "limit": 1,
            },
        )

        assert response.status_code == 200
        assert "no-store" in response.headers["cache-control"]
        assert response.headers["pragma"] == "no-cache"
        data = response.json()
        assert data["total"] == 2
        assert len(data["documents"]) == 1

    @pytest.mark.asyncio
    async def test_search_and_export(self, cluster_app, async_client, cluster_client):
        """Search filters by field; export returns everything."""
        await cluster_client["shop"]["items"].insert_many(
            [{"name": "widget"}, {"name": "gadget"}]
        )
        target = {"connection_string": CS, "db_name": "shop", "collection_name": "items"}

        search = await async_client.post(
            "/clusters/documents/search",
            json={**target, "search_field": "name", "search_value": "WID"},
        )
        export = await async_client.post("/clusters/documents/export", json=target)

        assert [d["name"] for d in search.json()["documents"]] == ["widget"]
        assert export.json()["count"] == 2
        assert "no-store" in export.headers["cache-control"]

    @pytest.mark.asyncio
    async def test_insert_update_delete(self, cluster_app, async_client):
        """A document can be created, edited and removed."""
        target = {"connection_string": CS, "db_name": "shop", "collection_name": "items"}

        created = await async_client.post(
            "/clusters/documents", json={**target, "document": {"_id": "w1", "name": "widget"}}
        )
        updated = await async_client.post(
            "/clusters/documents/update",
            json={**target, "document_id": "w1", "update": {"name": "gizmo"}},
        )
        deleted = await async_client.post(
            "/clusters/documents/delete", json={**target, "document_id": "w1"}
        )

        assert created.status_code == 201
        assert created.json()["inserted_id"] == "w1"
        assert updated.json() == {"matched_count": 1, "modified_count": 1}
        assert deleted.json() == {"deleted_count": 1}

    @pytest.mark.asyncio
    async def test_update_and_delete_missing_return_404(self, cluster_app, async_client):
        """Unknown document ids report 404."""
        target = {"connection_string": CS, "db_name": "shop", "collection_name": "items"}

        updated = await async_client.post(
            "/clusters/documents/update",
            json={**target, "document_id": "ghost", "update": {"name": "x"}},
        )
        deleted = await async_client.post(
            "/clusters/documents/delete", json={**target, "document_id": "ghost"}
        )

        assert updated.status_code == 404
        assert deleted.status_code == 404

    @pytest.mark.asyncio
    async def test_invalid_update_returns_400(self, cluster_app, async_client, assert_error_response):
        """Changing _id is rejected as invalid input."""
        response = await async_client.post(
            "/clusters/documents/update",
            json={
                "connection_string": CS,
                "db_name": "shop",
                "collection_name": "items",
                "document_id": "w1",
                "update": {"_id": "w2"},
            },
        )

        assert_error_response(response, 400, "_id")

    @pytest.mark.asyncio
    async def test_cluster_failure_returns_502(self, app, async_client, as_identity, alice):
        """Cluster errors map to 502 Bad Gateway."""
        from app.routers.clusters import get_cluster_executor

        executor = MagicMock()
        executor.list_databases = AsyncMock(side_effect=ClusterError("Could not connect to cluster"))
        as_identity(alice)
        app.dependency_overrides[get_cluster_executor] = lambda: executor

        response = await async_client.post(
            "/clusters/databases", json={"connection_string": CS}
        )

        assert response.status_code == 502
        assert response.json()["detail"] == "Could not connect to cluster"

    @pytest.mark.asyncio
    async def test_browse_page_beyond_range_returns_400(self, cluster_app, async_client):
        """Page numbers that would overflow the skip are invalid input."""
        response = await async_client.post(
            "/clusters/documents/browse",
            json={
                "connection_string": CS,
                "db_name": "shop",
                "collection_name": "items",
                "page": 10**12,
            },
        )

        assert response.status_code == 400


# =============================================================================
# Bulk Email
# =============================================================================

@pytest.fixture
def mailer(cluster_app):
    """Mailer whose send_bulk reports every recipient as sent."""
    from app.routers.clusters import get_mailer

    mailer = MagicMock()
    mailer.send_bulk = AsyncMock(side_effect=lambda sender, recipients, subject, body: len(recipients))
    cluster_app.dependency_overrides[get_mailer] = lambda: mailer
    return mailer


MAIL = {
    "connection_string": CS,
    "db_name": "shop",
    "collection_name": "users",
    "sender": "ops@example.com",
    "subject": "Maintenance",
    "body": "Tonight at 22:00",
}


class TestBulkEmail:
    """Tests for POST /clusters/bulk-email."""

    @pytest.mark.asyncio
    async def test_sends_to_every_address(self, mailer, async_client, cluster_client):
        """Each distinct address in the collection is a recipient."""
        await cluster_client["shop"]["users"].insert_many(
            [{"email": "a@example.com"}, {"email": "b@example.com"}, {"email": "a@example.com"}]
        )

        response = await async_client.post("/clusters/bulk-email", json=MAIL)

        assert response.status_code == 200
        assert response.json() == {"sent": 2}
        mailer.send_bulk.assert_awaited_once_with(
            "ops@example.com", ["a@example.com", "b@example.com"], "Maintenance", "Tonight at 22:00"
        )

    @pytest.mark.asyncio
    async def test_no_emails_returns_404(
        self, mailer, async_client, cluster_client, assert_error_response
    ):
        """Nothing is sent when the collection holds no addresses."""
        await cluster_client["shop"]["users"].insert_one({"name": "no email"})

        response = await async_client.post("/clusters/bulk-email", json=MAIL)

        assert_error_response(response, 404, "no emails")
        mailer.send_bulk.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", ["sender", "subject", "body"])
    async def test_missing_field_returns_400(self, mailer, async_client, missing):
        """Sender, subject and body are all required."""
        body = {k: v for k, v in MAIL.items() if k != missing}

        response = await async_client.post("/clusters/bulk-email", json=body)

        assert response.status_code == 400
        mailer.send_bulk.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_sender_returns_400(self, mailer, async_client):
        """The sender must be an email address."""
        response = await async_client.post(
            "/clusters/bulk-email", json={**MAIL, "sender": "not-an-address"}
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_relay_failure_returns_502(
        self, mailer, async_client, cluster_client, assert_error_response
    ):
        """Delivery failures map to 502 Bad Gateway."""
        await cluster_client["shop"]["users"].insert_one({"email": "a@example.com"})
        mailer.send_bulk.side_effect = DeliveryFailed()

        response = await async_client.post("/clusters/bulk-email", json=MAIL)

        assert_error_response(response, 502, "failed to send")
