"""
Pydantic schemas for Blog API.

Defines request/response models with validation. Keys are camelCase on the
wire (createdAt, updatedAt, sortBy) to match the frontend.
"""
from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class PostCreate(BaseModel):
    """Schema for creating a new post."""
    title: str = Field(..., min_length=1)
    author: Optional[str] = None
    contents: Optional[str] = None
    tags: list[str] = Field(default_factory=list)


class PostUpdate(BaseModel):
    """Schema for updating a post. All fields optional."""
    title: Optional[str] = Field(None, min_length=1)
    author: Optional[str] = None
    contents: Optional[str] = None
    tags: Optional[list[str]] = None


class PostResponse(BaseModel):
    """Schema for post responses. Timestamps are always sent as UTC."""
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str
    title: str
    author: Optional[str] = None
    contents: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def as_utc(cls, value: datetime) -> datetime:
        # Stored naive, always UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
