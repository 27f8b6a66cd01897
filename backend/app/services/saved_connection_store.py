"""
Persistence for saved connections.

The uniqueness of ``(owner_id, match key)`` is enforced by a unique compound
index, so concurrent inserts are serialized by MongoDB at write time rather than
by the read-before-write in the service.
"""
from datetime import datetime, timezone
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.errors import DuplicateKeyError

from app.config import MatchKey
from app.core.errors import ConflictError
from app.models.saved_connection import SavedConnection


class SavedConnectionStore:
    """MongoDB-backed store for ``SavedConnection`` records."""

    def __init__(
        self,
        collection: AsyncIOMotorCollection,
        match_key: MatchKey = MatchKey.CONNECTION_STRING,
    ):
        """Initialize with the saved_connections collection and the uniqueness axis."""
        self.collection = collection
        self.match_key = MatchKey(match_key)

    @property
    def match_field(self) -> str:
        """Document field holding the match key."""
        return self.match_key.value

    async def ensure_indexes(self) -> None:
        """Create the uniqueness index and the listing index."""
        unique_options = {
            "unique": True,
            "name": f"owner_id_{self.match_field}_unique",
        }
        if self.match_key == MatchKey.LABEL:
            # Unlabelled records are outside the label uniqueness scope
            unique_options["partialFilterExpression"] = {"label": {"$exists": True}}

        await self.collection.create_index(
            [("owner_id", 1), (self.match_field, 1)],
            **unique_options,
        )
        await self.collection.create_index(
            [("owner_id", 1), ("created_at", -1)],
            name="owner_id_created_at",
        )

    async def find_one(self, owner_id: str, match_key: str) -> Optional[SavedConnection]:
        """Exact, case-sensitive lookup within one owner's records."""
        doc = await self.collection.find_one(
            {"owner_id": owner_id, self.match_field: match_key}
        )
        if not doc:
            return None
        return self._doc_to_model(doc)

    async def insert(
        self,
        owner_id: str,
        connection_string: str,
        label: Optional[str] = None,
    ) -> SavedConnection:
        """
        Insert a new record.

        Raises:
            ConflictError: If the owner already has a record with the same match key
        """
        doc = {
            "owner_id": owner_id,
            "connection_string": connection_string,
            "created_at": datetime.now(timezone.utc),
        }
        if label is not None:
            doc["label"] = label

        try:
            result = await self.collection.insert_one(doc)
        except DuplicateKeyError as e:
            raise ConflictError(f"duplicate {self.match_field} for owner") from e

        doc["_id"] = result.inserted_id
        return self._doc_to_model(doc)

    async def find_all_by_owner(self, owner_id: str) -> list[SavedConnection]:
        """All records of one owner, newest first."""
        cursor = self.collection.find({"owner_id": owner_id}).sort(
            [("created_at", -1), ("_id", -1)]
        )
        docs = await cursor.to_list(length=None)
        return [self._doc_to_model(doc) for doc in docs]

    async def delete_one(self, owner_id: str, match_key: str) -> int:
        """Delete the owner's record matching the key. Returns 0 or 1."""
        result = await self.collection.delete_one(
            {"owner_id": owner_id, self.match_field: match_key}
        )
        return result.deleted_count

    @staticmethod
    def _doc_to_model(doc: dict) -> SavedConnection:
        return SavedConnection(
            id=str(doc["_id"]),
            owner_id=doc["owner_id"],
            label=doc.get("label"),
            connection_string=doc["connection_string"],
            created_at=doc["created_at"],
        )
