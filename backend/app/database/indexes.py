"""
Index creation for the gateway databases, run once on startup.
"""
import logging

from motor.motor_asyncio import AsyncIOMotorClient

from app.config import get_settings
from app.database.databases import auth_db, connections_db
from app.services.saved_connection_store import SavedConnectionStore

logger = logging.getLogger(__name__)


async def create_indexes(client: AsyncIOMotorClient) -> None:
    """Create necessary indexes for all databases."""
    settings = get_settings()

    # Auth DB indexes
    auth_users = client[auth_db.DB_NAME][auth_db.Collections.USERS]
    await auth_users.create_index("email", unique=True)

    # Saved-connection registry
    saved = client[connections_db.DB_NAME][connections_db.Collections.SAVED_CONNECTIONS]
    store = SavedConnectionStore(saved, settings.saved_connection_match_key)
    await store.ensure_indexes()

    logger.info(
        "Indexes ensured (saved connections unique on owner_id + %s)",
        settings.saved_connection_match_key.value,
    )
