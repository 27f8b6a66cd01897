"""
Service layer for business logic.
"""
from app.services.auth_service import AuthService
from app.services.saved_connection_store import SavedConnectionStore
from app.services.saved_connection_service import SavedConnectionService
from app.services.cluster_executor import ClusterExecutor
from app.services.mailer import Mailer

__all__ = [
    "AuthService",
    "SavedConnectionStore",
    "SavedConnectionService",
    "ClusterExecutor",
    "Mailer",
]
