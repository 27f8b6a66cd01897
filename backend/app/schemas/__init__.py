"""
Request and response schemas for API endpoints.
"""
from app.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    TokenRefreshResponse,
    UserInfoResponse,
)
from app.schemas.saved_connection import (
    SavedConnectionCreate,
    SavedConnectionResponse,
    SavedConnectionRemoved,
)
from app.schemas.cluster import (
    ClusterRequest,
    DatabaseRequest,
    CollectionRequest,
    BrowseRequest,
    SearchRequest,
    InsertDocumentRequest,
    UpdateDocumentRequest,
    DeleteDocumentRequest,
    BulkEmailRequest,
    DocumentPage,
    DocumentExport,
    InsertResult,
    UpdateResult,
    DeleteResult,
    BulkEmailResult,
)

__all__ = [
    # Auth
    "LoginRequest",
    "LoginResponse",
    "RegisterRequest",
    "RegisterResponse",
    "TokenRefreshResponse",
    "UserInfoResponse",
    # Saved connections
    "SavedConnectionCreate",
    "SavedConnectionResponse",
    "SavedConnectionRemoved",
    # Clusters
    "ClusterRequest",
    "DatabaseRequest",
    "CollectionRequest",
    "BrowseRequest",
    "SearchRequest",
    "InsertDocumentRequest",
    "UpdateDocumentRequest",
    "DeleteDocumentRequest",
    "BulkEmailRequest",
    "DocumentPage",
    "DocumentExport",
    "InsertResult",
    "UpdateResult",
    "DeleteResult",
    "BulkEmailResult",
]
