"""
Saved connection request/response schemas.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.models.saved_connection import SavedConnection


class SavedConnectionCreate(BaseModel):
    """Save a connection request. Whitespace is trimmed by the service."""
    connection_string: Optional[str] = Field(None, description="Cluster URI")
    label: Optional[str] = Field(None, max_length=200, description="Optional display name")


class SavedConnectionResponse(BaseModel):
    """Saved connection, returned only to its owner."""
    id: str = Field(..., description="Saved connection ID")
    owner_id: str = Field(..., description="Owner user ID")
    label: Optional[str] = Field(None, description="Display name")
    connection_string: str = Field(..., description="Cluster URI")
    created_at: datetime = Field(..., description="Creation timestamp")

    @classmethod
    def from_model(cls, record: SavedConnection) -> "SavedConnectionResponse":
        return cls(
            id=record.id,
            owner_id=record.owner_id,
            label=record.label,
            connection_string=record.connection_string,
            created_at=record.created_at,
        )


class SavedConnectionRemoved(BaseModel):
    """Removal acknowledgement."""
    message: str = Field(default="Saved connection removed")
