"""
Connections database configuration.
Stores each user's saved connections to external clusters.

Structure:
- saved_connections: one document per (owner, match key)
"""

DB_NAME = "connections_db"


class Collections:
    """Collection names in connections_db."""
    SAVED_CONNECTIONS = "saved_connections"
