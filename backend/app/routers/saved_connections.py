"""
Saved connections router.

Every route is scoped to the authenticated caller; there is no global listing.
"""
from fastapi import APIRouter, Depends, status

from app.config import get_settings
from app.core.errors import GatewayError, to_http_exception
from app.database.connections import get_mongo_client
from app.database.databases import connections_db
from app.dependencies.auth import CurrentIdentity
from app.schemas.saved_connection import (
    SavedConnectionCreate,
    SavedConnectionRemoved,
    SavedConnectionResponse,
)
from app.services.saved_connection_service import SavedConnectionService
from app.services.saved_connection_store import SavedConnectionStore

router = APIRouter(prefix="/saved-connections", tags=["Saved Connections"])


async def get_saved_connection_service() -> SavedConnectionService:
    """Dependency to get SavedConnectionService instance."""
    client = await get_mongo_client()
    collection = client[connections_db.DB_NAME][connections_db.Collections.SAVED_CONNECTIONS]
    store = SavedConnectionStore(collection, get_settings().saved_connection_match_key)
    return SavedConnectionService(store)


@router.post(
    "",
    response_model=SavedConnectionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Save a connection",
    responses={
        400: {"description": "Invalid input"},
        401: {"description": "Not authenticated"},
        409: {"description": "Already saved"},
    },
)
async def save_connection(
    body: SavedConnectionCreate,
    identity: CurrentIdentity,
    service: SavedConnectionService = Depends(get_saved_connection_service),
):
    """
    Save a connection string for the current user.

    - **connection_string**: Cluster URI (surrounding whitespace is trimmed)
    - **label**: Optional display name
    """
    try:
        record = await service.register(identity, body.connection_string, body.label)
    except GatewayError as e:
        raise to_http_exception(e)
    return SavedConnectionResponse.from_model(record)


@router.get(
    "",
    response_model=list[SavedConnectionResponse],
    summary="List saved connections",
)
async def list_saved_connections(
    identity: CurrentIdentity,
    service: SavedConnectionService = Depends(get_saved_connection_service),
):
    """List the current user's saved connections, newest first."""
    try:
        records = await service.list_connections(identity)
    except GatewayError as e:
        raise to_http_exception(e)
    return [SavedConnectionResponse.from_model(record) for record in records]


@router.delete(
    "/{match_key:path}",
    response_model=SavedConnectionRemoved,
    summary="Remove a saved connection",
    responses={404: {"description": "No matching saved connection"}},
)
async def remove_saved_connection(
    match_key: str,
    identity: CurrentIdentity,
    service: SavedConnectionService = Depends(get_saved_connection_service),
):
    """
    Remove the current user's saved connection identified by `match_key`.

    The key is the connection string or the label, depending on the
    deployment's uniqueness setting. Percent-encode it in the URL.
    """
    try:
        await service.remove(identity, match_key)
    except GatewayError as e:
        raise to_http_exception(e)
    return SavedConnectionRemoved()
