"""
Clusters router for browsing and editing documents on external clusters.

Connection strings are accepted in POST bodies only so they stay out of URLs
and access logs. Each request opens and closes its own cluster connection.
"""
from fastapi import APIRouter, Depends, Response, status

from app.core.errors import GatewayError, NotFound, to_http_exception
from app.dependencies.auth import CurrentIdentity
from app.schemas.cluster import (
    BrowseRequest,
    BulkEmailRequest,
    BulkEmailResult,
    ClusterRequest,
    CollectionRequest,
    DatabaseRequest,
    DeleteDocumentRequest,
    DeleteResult,
    DocumentExport,
    DocumentPage,
    InsertDocumentRequest,
    InsertResult,
    SearchRequest,
    UpdateDocumentRequest,
    UpdateResult,
)
from app.services.cluster_executor import ClusterExecutor
from app.services.mailer import Mailer

router = APIRouter(prefix="/clusters", tags=["Clusters"])

NO_STORE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
    "Surrogate-Control": "no-store",
}


def get_cluster_executor() -> ClusterExecutor:
    """Dependency to get ClusterExecutor instance."""
    return ClusterExecutor()


def get_mailer() -> Mailer:
    """Dependency to get Mailer instance."""
    return Mailer()


def no_store(response: Response) -> None:
    """Document listings must never be cached by browsers or proxies."""
    response.headers.update(NO_STORE_HEADERS)


# ==================== Structure ====================


@router.post(
    "/databases",
    response_model=list[str],
    summary="List databases",
)
async def list_databases(
    body: ClusterRequest,
    identity: CurrentIdentity,
    executor: ClusterExecutor = Depends(get_cluster_executor),
):
    """List database names on the cluster."""
    try:
        return await executor.list_databases(body.connection_string)
    except GatewayError as e:
        raise to_http_exception(e)


@router.post(
    "/collections",
    response_model=list[str],
    summary="List collections",
)
async def list_collections(
    body: DatabaseRequest,
    identity: CurrentIdentity,
    executor: ClusterExecutor = Depends(get_cluster_executor),
):
    """List collection names in a database."""
    try:
        return await executor.list_collections(body.connection_string, body.db_name)
    except GatewayError as e:
        raise to_http_exception(e)


# ==================== Documents ====================


@router.post(
    "/documents/browse",
    response_model=DocumentPage,
    summary="Browse documents",
)
async def browse_documents(
    body: BrowseRequest,
    response: Response,
    identity: CurrentIdentity,
    executor: ClusterExecutor = Depends(get_cluster_executor),
):
    """
    Page through a collection, newest `_id` first.

    - **page**: 1-based page number
    - **limit**: Page size (capped by server configuration)
    """
    try:
        result = await executor.browse_documents(
            body.connection_string,
            body.db_name,
            body.collection_name,
            page=body.page,
            limit=body.limit,
        )
    except GatewayError as e:
        raise to_http_exception(e)
    no_store(response)
    return result


@router.post(
    "/documents/search",
    response_model=DocumentPage,
    summary="Search documents",
)
async def search_documents(
    body: SearchRequest,
    response: Response,
    identity: CurrentIdentity,
    executor: ClusterExecutor = Depends(get_cluster_executor),
):
    """
    Search one field of a collection.

    Numeric values and `true`/`false` match exactly; other values match as a
    case-insensitive substring.
    """
    try:
        result = await executor.search_documents(
            body.connection_string,
            body.db_name,
            body.collection_name,
            body.search_field,
            body.search_value,
            page=body.page,
            limit=body.limit,
        )
    except GatewayError as e:
        raise to_http_exception(e)
    no_store(response)
    return result


@router.post(
    "/documents/export",
    response_model=DocumentExport,
    summary="Export documents",
)
async def export_documents(
    body: CollectionRequest,
    response: Response,
    identity: CurrentIdentity,
    executor: ClusterExecutor = Depends(get_cluster_executor),
):
    """Return every document of a collection, up to the export cap."""
    try:
        result = await executor.export_documents(
            body.connection_string, body.db_name, body.collection_name
        )
    except GatewayError as e:
        raise to_http_exception(e)
    no_store(response)
    return result


@router.post(
    "/documents",
    response_model=InsertResult,
    status_code=status.HTTP_201_CREATED,
    summary="Insert document",
)
async def insert_document(
    body: InsertDocumentRequest,
    identity: CurrentIdentity,
    executor: ClusterExecutor = Depends(get_cluster_executor),
):
    """Insert one document. Extended JSON such as `{"$oid": ...}` is accepted."""
    try:
        return await executor.insert_document(
            body.connection_string, body.db_name, body.collection_name, body.document
        )
    except GatewayError as e:
        raise to_http_exception(e)


@router.post(
    "/documents/update",
    response_model=UpdateResult,
    summary="Update document",
)
async def update_document(
    body: UpdateDocumentRequest,
    identity: CurrentIdentity,
    executor: ClusterExecutor = Depends(get_cluster_executor),
):
    """Set fields on the document with the given `_id`."""
    try:
        result = await executor.update_document(
            body.connection_string,
            body.db_name,
            body.collection_name,
            body.document_id,
            body.update,
        )
    except GatewayError as e:
        raise to_http_exception(e)

    if result.matched_count == 0:
        raise to_http_exception(NotFound("Document not found"))
    return result


@router.post(
    "/documents/delete",
    response_model=DeleteResult,
    summary="Delete document",
)
async def delete_document(
    body: DeleteDocumentRequest,
    identity: CurrentIdentity,
    executor: ClusterExecutor = Depends(get_cluster_executor),
):
    """Delete the document with the given `_id`."""
    try:
        result = await executor.delete_document(
            body.connection_string, body.db_name, body.collection_name, body.document_id
        )
    except GatewayError as e:
        raise to_http_exception(e)

    if result.deleted_count == 0:
        raise to_http_exception(NotFound("Document not found"))
    return result


# ==================== Mail ====================


@router.post(
    "/bulk-email",
    response_model=BulkEmailResult,
    summary="Email every address in a collection",
    responses={
        404: {"description": "No email addresses in the collection"},
        502: {"description": "Cluster or mail relay failure"},
    },
)
async def send_bulk_email(
    body: BulkEmailRequest,
    identity: CurrentIdentity,
    executor: ClusterExecutor = Depends(get_cluster_executor),
    mailer: Mailer = Depends(get_mailer),
):
    """
    Send one message, blind-copied to every `email` value in the collection.

    - **sender**: From address; it is also the only visible recipient
    - **subject** / **body**: Plain text, an HTML copy is attached
    """
    try:
        recipients = await executor.collect_emails(
            body.connection_string, body.db_name, body.collection_name
        )
        if not recipients:
            raise NotFound("No emails found in this collection")
        sent = await mailer.send_bulk(body.sender, recipients, body.subject, body.body)
    except GatewayError as e:
        raise to_http_exception(e)
    return BulkEmailResult(sent=sent)
