"""
Authenticated caller identity handed from the gateway to the services.
"""
from pydantic import BaseModel, Field, field_validator


class Identity(BaseModel):
    """
    Who is calling. ``user_id`` is the owner key for every saved connection.
    """
    user_id: str = Field(..., min_length=1, description="Stable user identifier")
    username: str = Field(..., description="Display name")
    email: str = Field(..., description="Email address")

    class Config:
        frozen = True

    @field_validator("user_id")
    @classmethod
    def user_id_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("user_id must not be blank")
        return value
