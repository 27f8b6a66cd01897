"""
Cluster browsing request/response schemas.

Connection strings travel in request bodies only, never in URLs.
"""
from typing import Any, Optional

from pydantic import BaseModel, EmailStr, Field

# Keeps skip = (page - 1) * limit well inside int64
MAX_PAGE = 1_000_000


class ClusterRequest(BaseModel):
    """Target a cluster."""
    connection_string: str = Field(..., min_length=1, description="Cluster URI")


class DatabaseRequest(ClusterRequest):
    """Target a database on a cluster."""
    db_name: str = Field(..., min_length=1, description="Database name")


class CollectionRequest(DatabaseRequest):
    """Target a collection on a cluster."""
    collection_name: str = Field(..., min_length=1, description="Collection name")


class BrowseRequest(CollectionRequest):
    """Paginated browse, newest documents first."""
    page: int = Field(default=1, ge=1, le=MAX_PAGE, description="1-based page number")
    limit: Optional[int] = Field(None, ge=1, description="Page size")


class SearchRequest(BrowseRequest):
    """Paginated single-field search."""
    search_field: str = Field(..., min_length=1, description="Field to match")
    search_value: str = Field(..., min_length=1, description="Value to match")


class InsertDocumentRequest(CollectionRequest):
    """Insert one document. Extended JSON ($oid, $date) is accepted."""
    document: dict[str, Any] = Field(..., description="Document body")


class UpdateDocumentRequest(CollectionRequest):
    """Set fields on one document by _id."""
    document_id: str = Field(..., min_length=1, description="Document _id")
    update: dict[str, Any] = Field(..., description="Fields to $set")


class DeleteDocumentRequest(CollectionRequest):
    """Delete one document by _id."""
    document_id: str = Field(..., min_length=1, description="Document _id")


class BulkEmailRequest(CollectionRequest):
    """Mail every address found in the collection's `email` field."""
    sender: EmailStr = Field(..., description="From address, also the visible recipient")
    subject: str = Field(..., min_length=1, max_length=998, description="Subject line")
    body: str = Field(..., min_length=1, description="Plain-text message body")


class DocumentPage(BaseModel):
    """A page of documents in relaxed extended JSON."""
    documents: list[dict[str, Any]]
    total: int
    page: int
    limit: int


class DocumentExport(BaseModel):
    """All documents of a collection, up to the export cap."""
    documents: list[dict[str, Any]]
    count: int
    truncated: bool


class InsertResult(BaseModel):
    inserted_id: Any


class UpdateResult(BaseModel):
    matched_count: int
    modified_count: int


class DeleteResult(BaseModel):
    deleted_count: int


class BulkEmailResult(BaseModel):
    sent: int
