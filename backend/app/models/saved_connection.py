"""
Saved connection model for the connections database.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class SavedConnection(BaseModel):
    """
    Saved connection document in connections_db.saved_connections.

    Immutable once created; the only lifecycle transition after insert is deletion.
    """
    id: str = Field(..., alias="_id", description="MongoDB ObjectId as string")
    owner_id: str = Field(..., description="User ID of the owner")
    label: Optional[str] = Field(None, description="Optional display name")
    connection_string: str = Field(..., description="Cluster URI, may embed credentials")
    created_at: datetime = Field(..., description="Creation timestamp")

    class Config:
        populate_by_name = True
        frozen = True

    def __repr__(self) -> str:
        # connection_string can carry credentials
        return (
            f"SavedConnection(id={self.id!r}, owner_id={self.owner_id!r}, "
            f"label={self.label!r})"
        )

    __str__ = __repr__
