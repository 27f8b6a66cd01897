"""
Cluster executor for browsing and editing documents on external clusters.

Every call opens its own client for the caller-supplied connection string,
runs one operation and closes the client, so no connection outlives a request.
"""
import json
import logging
import math
import re
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Optional, TypeVar

from bson import ObjectId, json_util
from bson.errors import BSONError, InvalidDocument
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import (
    ConfigurationError,
    ConnectionFailure,
    DuplicateKeyError,
    InvalidName,
    OperationFailure,
    PyMongoError,
)

from app.config import Settings, get_settings
from app.core.errors import AlreadyExists, ClusterError, GatewayError, InvalidInput
from app.schemas.cluster import (
    DeleteResult,
    DocumentExport,
    DocumentPage,
    InsertResult,
    UpdateResult,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Receives the client, database or collection, depending on what was named
ClusterOperation = Callable[[Any], Awaitable[T]]


def serialize_documents(docs: Any) -> Any:
    """Convert BSON values to relaxed extended JSON (ObjectId -> {"$oid": ...})."""
    return json.loads(json_util.dumps(docs))


def parse_document(document: dict[str, Any]) -> dict[str, Any]:
    """Parse extended JSON from a request body into BSON-ready values."""
    return json_util.loads(json.dumps(document))


def parse_document_id(document_id: str) -> Any:
    """A 24-hex string is an ObjectId; anything else is matched as-is."""
    document_id = document_id.strip()
    if len(document_id) == 24 and ObjectId.is_valid(document_id):
        return ObjectId(document_id)
    return document_id


def coerce_search_value(raw: str) -> Any:
    """
    Interpret a search value typed into a form.

    Numeric strings become numbers and "true"/"false" become booleans.
    Everything else stays a string.
    """
    value = raw.strip()
    if value == "true":
        return True
    if value == "false":
        return False
    if not value or "_" in value:
        return raw
    try:
        return int(value)
    except ValueError:
        pass
    try:
        number = float(value)
    except ValueError:
        return raw
    if not math.isfinite(number):
        return raw
    return number


def build_search_filter(field: str, raw_value: str) -> dict[str, Any]:
    """Strings match as case-insensitive substrings, other values exactly."""
    value = coerce_search_value(raw_value)
    if isinstance(value, str):
        return {field: {"$regex": re.escape(value), "$options": "i"}}
    return {field: value}


class ClusterExecutor:
    """Stateless executor of single operations against external clusters."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client_factory: Callable[..., AsyncIOMotorClient] = AsyncIOMotorClient,
    ):
        self.settings = settings or get_settings()
        self.client_factory = client_factory

    # ==================== Connection handling ====================

    @asynccontextmanager
    async def connect(self, connection_string: str) -> AsyncIterator[AsyncIOMotorClient]:
        """Open a transient client and always close it."""
        try:
            client = self.client_factory(
                connection_string,
                serverSelectionTimeoutMS=self.settings.cluster_server_selection_timeout_ms,
                connectTimeoutMS=self.settings.cluster_server_selection_timeout_ms,
            )
        except (ConfigurationError, ValueError, TypeError):
            raise InvalidInput("Invalid connection string") from None

        try:
            yield client
        finally:
            client.close()

    async def execute(
        self,
        connection_string: str,
        operation: ClusterOperation,
        db_name: Optional[str] = None,
        collection_name: Optional[str] = None,
    ) -> T:
        """
        Run one operation against a cluster.

        The operation receives the collection when ``collection_name`` is given,
        the database when only ``db_name`` is given, otherwise the client.

        Raises:
            InvalidInput: Missing or malformed connection string or names
            AlreadyExists: The cluster reported a duplicate key
            ClusterError: The cluster was unreachable or rejected the operation
        """
        connection_string = (connection_string or "").strip()
        if not connection_string:
            raise InvalidInput("Connection string is required")
        if collection_name is not None and not db_name:
            raise InvalidInput("Database name is required")

        try:
            async with self.connect(connection_string) as client:
                target = client
                if db_name:
                    target = client[db_name]
                    if collection_name:
                        target = target[collection_name]
                return await operation(target)
        except GatewayError:
            raise
        except InvalidName:
            raise InvalidInput("Invalid database or collection name") from None
        except InvalidDocument:
            raise InvalidInput("Document cannot be stored") from None
        except OverflowError:
            raise InvalidInput("Value out of range") from None
        except ConfigurationError:
            raise InvalidInput("Invalid connection string") from None
        except DuplicateKeyError:
            raise AlreadyExists("A document with this _id already exists") from None
        except OperationFailure as e:
            logger.warning("Cluster rejected operation (code %s)", e.code)
            raise ClusterError(f"Cluster rejected the operation (code {e.code})") from None
        except ConnectionFailure as e:
            logger.warning("Cluster unreachable: %s", type(e).__name__)
            raise ClusterError("Could not connect to cluster") from None
        except PyMongoError as e:
            logger.warning("Cluster operation failed: %s", type(e).__name__)
            raise ClusterError() from None

    # ==================== Operations ====================

    async def list_databases(self, connection_string: str) -> list[str]:
        """Names of all databases on the cluster."""
        async def op(client):
            return await client.list_database_names()

        return await self.execute(connection_string, op)

    async def list_collections(self, connection_string: str, db_name: str) -> list[str]:
        """Collection names in a database, sorted."""
        async def op(db):
            return sorted(await db.list_collection_names())

        return await self.execute(connection_string, op, db_name=db_name)

    async def browse_documents(
        self,
        connection_string: str,
        db_name: str,
        collection_name: str,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> DocumentPage:
        """A page of documents, newest _id first."""
        return await self._find_page(
            connection_string, db_name, collection_name, {}, page, limit
        )

    async def search_documents(
        self,
        connection_string: str,
        db_name: str,
        collection_name: str,
        search_field: str,
        search_value: str,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> DocumentPage:
        """A page of documents whose ``search_field`` matches ``search_value``."""
        if not search_field or not search_field.strip():
            raise InvalidInput("Search field is required")
        if not search_value or not search_value.strip():
            raise InvalidInput("Search value is required")

        query = build_search_filter(search_field.strip(), search_value)
        return await self._find_page(
            connection_string, db_name, collection_name, query, page, limit
        )

    async def export_documents(
        self,
        connection_string: str,
        db_name: str,
        collection_name: str,
    ) -> DocumentExport:
        """All documents of a collection, capped at the export limit."""
        cap = self.settings.cluster_export_limit

        async def op(collection):
            return await collection.find({}).limit(cap + 1).to_list(length=cap + 1)

        docs = await self.execute(
            connection_string, op, db_name=db_name, collection_name=collection_name
        )
        truncated = len(docs) > cap
        docs = docs[:cap]
        return DocumentExport(
            documents=serialize_documents(docs),
            count=len(docs),
            truncated=truncated,
        )

    async def insert_document(
        self,
        connection_string: str,
        db_name: str,
        collection_name: str,
        document: dict[str, Any],
    ) -> InsertResult:
        """Insert one document."""
        doc = self._parse_body(document)

        async def op(collection):
            return await collection.insert_one(doc)

        result = await self.execute(
            connection_string, op, db_name=db_name, collection_name=collection_name
        )
        return InsertResult(inserted_id=serialize_documents(result.inserted_id))

    async def update_document(
        self,
        connection_string: str,
        db_name: str,
        collection_name: str,
        document_id: str,
        update: dict[str, Any],
    ) -> UpdateResult:
        """``$set`` fields on the document with the given _id."""
        if not update:
            raise InvalidInput("Update must set at least one field")
        if "_id" in update:
            raise InvalidInput("_id cannot be changed")
        fields = self._parse_body(update)
        query = {"_id": parse_document_id(document_id)}

        async def op(collection):
            return await collection.update_one(query, {"$set": fields})

        result = await self.execute(
            connection_string, op, db_name=db_name, collection_name=collection_name
        )
        return UpdateResult(
            matched_count=result.matched_count,
            modified_count=result.modified_count,
        )

    async def delete_document(
        self,
        connection_string: str,
        db_name: str,
        collection_name: str,
        document_id: str,
    ) -> DeleteResult:
        """Delete the document with the given _id."""
        query = {"_id": parse_document_id(document_id)}

        async def op(collection):
            return await collection.delete_one(query)

        result = await self.execute(
            connection_string, op, db_name=db_name, collection_name=collection_name
        )
        return DeleteResult(deleted_count=result.deleted_count)

    async def collect_emails(
        self,
        connection_string: str,
        db_name: str,
        collection_name: str,
    ) -> list[str]:
        """Distinct non-empty ``email`` values of a collection, in document order."""
        async def op(collection):
            cursor = collection.find(
                {"email": {"$exists": True, "$ne": ""}}, {"email": 1}
            )
            return await cursor.to_list(length=None)

        docs = await self.execute(
            connection_string, op, db_name=db_name, collection_name=collection_name
        )

        emails: list[str] = []
        seen = set()
        for doc in docs:
            value = doc.get("email")
            if not isinstance(value, str):
                continue
            value = value.strip()
            if value and value not in seen:
                seen.add(value)
                emails.append(value)
        return emails

    # ==================== Helpers ====================

    def _page_size(self, limit: Optional[int]) -> int:
        if limit is None:
            return self.settings.cluster_default_page_size
        return max(1, min(limit, self.settings.cluster_max_page_size))

    async def _find_page(
        self,
        connection_string: str,
        db_name: str,
        collection_name: str,
        query: dict[str, Any],
        page: int,
        limit: Optional[int],
    ) -> DocumentPage:
        page = max(page, 1)
        size = self._page_size(limit)
        skip = (page - 1) * size

        async def op(collection):
            total = await collection.count_documents(query)
            cursor = collection.find(query).sort("_id", -1).skip(skip).limit(size)
            return total, await cursor.to_list(length=size)

        total, docs = await self.execute(
            connection_string, op, db_name=db_name, collection_name=collection_name
        )
        return DocumentPage(
            documents=serialize_documents(docs),
            total=total,
            page=page,
            limit=size,
        )

    @staticmethod
    def _parse_body(document: dict[str, Any]) -> dict[str, Any]:
        try:
            return parse_document(document)
        except (TypeError, ValueError, BSONError):
            raise InvalidInput("Document is not valid extended JSON") from None
