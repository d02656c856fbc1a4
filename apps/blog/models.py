"""
Blog database models.

A post is stored as a single row with its tags kept as a JSON document.
"""
import secrets
import time
from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, DateTime, JSON
from sqlalchemy.dialects.postgresql import JSONB

from apps.shared.database import Base


def generate_post_id() -> str:
    """
    Generate a 24-char hex id.

    First 4 bytes are the creation time in seconds, the remaining 8 are random,
    so ids sort roughly by creation time.
    """
    return f"{int(time.time()):08x}{secrets.token_hex(8)}"


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what the DateTime columns return."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Post(Base):
    """
    Post model for blog entries.

    Stores:
    - Basic info (title, author, contents)
    - Tags as an ordered JSON list
    - Timestamps (created_at never changes, updated_at moves on every update)
    """
    __tablename__ = "posts"

    id = Column(String(24), primary_key=True, default=generate_post_id)
    title = Column(Text, nullable=False)
    author = Column(Text, index=True)
    contents = Column(Text)
    tags = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=list)  # ["mongoose", "mongodb"]
    created_at = Column(DateTime, nullable=False, index=True)
    updated_at = Column(DateTime, nullable=False)

    def __repr__(self) -> str:
        return f"<Post id={self.id} title={self.title!r}>"
