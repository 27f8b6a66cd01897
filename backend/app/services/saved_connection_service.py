"""
Saved-connection service: the only entry point callers use for the registry.

Every operation is scoped to the caller's owner key, and storage failures are
translated into the gateway error taxonomy. Raw driver errors never
escape, and connection strings never appear in messages or logs.
"""
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from pymongo.errors import PyMongoError

from app.config import MatchKey
from app.core.errors import (
    AlreadyExists,
    ConflictError,
    GatewayError,
    InvalidInput,
    NotFound,
    Unauthenticated,
    Unavailable,
)
from app.models.identity import Identity
from app.models.saved_connection import SavedConnection
from app.services.saved_connection_store import SavedConnectionStore

logger = logging.getLogger(__name__)


class SavedConnectionService:
    """Service for registering, listing and removing saved connections."""

    def __init__(self, store: SavedConnectionStore):
        """Initialize with the saved-connection store."""
        self.store = store

    @property
    def match_key(self) -> MatchKey:
        return self.store.match_key

    async def register(
        self,
        identity: Optional[Identity],
        connection_string: Optional[str],
        label: Optional[str] = None,
    ) -> SavedConnection:
        """
        Save a connection string for the caller.

        The find_one pre-check gives a fast rejection in the common case; the
        unique index behind ``store.insert`` is what actually guarantees at most
        one record per (owner, match key) under concurrent calls.

        Args:
            identity: Authenticated caller
            connection_string: Cluster URI, trimmed before storing
            label: Optional display name, trimmed before storing

        Returns:
            The created SavedConnection

        Raises:
            Unauthenticated: No identity or blank user_id
            InvalidInput: Blank connection string, or blank label when given
                (label is mandatory when it is the uniqueness axis)
            AlreadyExists: The caller already saved this match key
            Unavailable: Storage failed
        """
        owner_id = self._owner_id(identity)

        connection_string = (connection_string or "").strip()
        if not connection_string:
            raise InvalidInput("Connection string is required")

        if label is not None:
            label = label.strip()
            if not label:
                raise InvalidInput("Label must not be blank")
        elif self.match_key == MatchKey.LABEL:
            raise InvalidInput("Label is required")

        match_value = label if self.match_key == MatchKey.LABEL else connection_string

        with self._storage_errors("register"):
            existing = await self.store.find_one(owner_id, match_value)
        if existing is not None:
            raise self._already_exists()

        try:
            with self._storage_errors("register"):
                record = await self.store.insert(owner_id, connection_string, label)
        except ConflictError:
            logger.info("Concurrent duplicate registration rejected for user %s", owner_id)
            raise self._already_exists() from None

        logger.info("Saved connection %s registered for user %s", record.id, owner_id)
        return record

    async def list_connections(self, identity: Optional[Identity]) -> list[SavedConnection]:
        """List the caller's saved connections, newest first. Empty when none."""
        owner_id = self._owner_id(identity)
        with self._storage_errors("list"):
            return await self.store.find_all_by_owner(owner_id)

    async def remove(self, identity: Optional[Identity], match_key: Optional[str]) -> None:
        """
        Delete the caller's saved connection matching ``match_key``.

        The delete filter always includes the caller's owner_id, so a key that
        matches another user's record removes nothing.

        Raises:
            NotFound: No record owned by the caller matches
        """
        owner_id = self._owner_id(identity)

        match_key = (match_key or "").strip()
        if not match_key:
            raise InvalidInput(f"{self._match_key_name()} is required")

        with self._storage_errors("remove"):
            deleted = await self.store.delete_one(owner_id, match_key)

        if deleted == 0:
            raise NotFound("Saved connection not found")

        logger.info("Saved connection removed for user %s", owner_id)

    # ==================== Helpers ====================

    @staticmethod
    def _owner_id(identity: Optional[Identity]) -> str:
        if identity is None:
            raise Unauthenticated()
        owner_id = (getattr(identity, "user_id", None) or "").strip()
        if not owner_id:
            raise Unauthenticated()
        return owner_id

    def _match_key_name(self) -> str:
        if self.match_key == MatchKey.LABEL:
            return "Label"
        return "Connection string"

    def _already_exists(self) -> AlreadyExists:
        if self.match_key == MatchKey.LABEL:
            return AlreadyExists("A saved connection with this label already exists")
        return AlreadyExists("Connection string already saved")

    @contextmanager
    def _storage_errors(self, action: str) -> Iterator[None]:
        """Translate storage failures into ``Unavailable``."""
        try:
            yield
        except (GatewayError, ConflictError):
            raise
        except PyMongoError as e:
            logger.warning("Saved-connection storage failed during %s: %s", action, type(e).__name__)
            raise Unavailable() from e
        except Exception:
            logger.exception("Unexpected error during saved-connection %s", action)
            raise Unavailable() from None
