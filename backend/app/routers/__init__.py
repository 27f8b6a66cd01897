"""
API Routers module.
"""
from app.routers import auth, clusters, health, saved_connections

__all__ = ["auth", "clusters", "health", "saved_connections"]
