"""
Post service

Create/list/filter/get/update/delete over the Post model. Every operation is
one round trip against the injected Database handle; nothing is kept in
memory between calls.

Not-found outcomes are soft: get/update return None and delete reports a
zero count. Validation problems raise PostValidationError, and storage
errors propagate as raised by SQLAlchemy.
"""
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Mapping, Optional

from sqlalchemy import delete, func, select, type_coerce
from sqlalchemy.dialects.postgresql import JSONB

from apps.shared.database import Database
from apps.blog.models import Post, generate_post_id, utcnow
from apps.blog.validation import is_valid_post_id, normalize_sort, validate_post_fields

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeleteResult:
    """Outcome of a delete: how many posts were removed (0 or 1)."""
    deleted_count: int

    @property
    def deleted(self) -> bool:
        return self.deleted_count > 0


class PostService:
    """CRUD operations for blog posts."""

    def __init__(self, database: Database):
        self.database = database

    async def create_post(self, fields: Mapping[str, Any]) -> Post:
        """
        Create and persist a new post.

        Raises:
            PostValidationError: if title is missing or empty
        """
        values = validate_post_fields(fields)
        now = utcnow()
        post = Post(id=generate_post_id(), created_at=now, updated_at=now, **values)

        async with self.database.session() as session:
            session.add(post)
            await session.commit()

        logger.info(f"Created post {post.id}")
        return post

    async def list_all_posts(
        self,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> list[Post]:
        """List all posts, newest first unless told otherwise."""
        return await self._list_posts(None, sort_by, sort_order)

    async def list_posts_by_author(
        self,
        author: str,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> list[Post]:
        """List posts whose author matches exactly (case-sensitive)."""
        return await self._list_posts(Post.author == author, sort_by, sort_order)

    async def list_posts_by_tag(
        self,
        tag: str,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> list[Post]:
        """List posts whose tags contain the given tag."""
        return await self._list_posts(self._has_tag(tag), sort_by, sort_order)

    async def get_post_by_id(self, post_id: str) -> Optional[Post]:
        """Get a single post, or None if there is no such id."""
        if not is_valid_post_id(post_id):
            logger.debug(f"Ignoring malformed post id {post_id!r}")
            return None

        async with self.database.session() as session:
            return await session.get(Post, post_id.lower())

    async def update_post(self, post_id: str, fields: Mapping[str, Any]) -> Optional[Post]:
        """
        Apply the given fields to an existing post.

        Fields that are not given are left untouched, created_at included.
        updated_at always moves forward. Returns None if the post does not exist.

        Raises:
            PostValidationError: if a provided field is invalid (e.g. blank title)
        """
        values = validate_post_fields(fields, partial=True)
        if not is_valid_post_id(post_id):
            logger.debug(f"Ignoring malformed post id {post_id!r}")
            return None

        async with self.database.session() as session:
            post = await session.get(Post, post_id.lower())
            if post is None:
                logger.debug(f"Update skipped, post {post_id} not found")
                return None

            for key, value in values.items():
                setattr(post, key, value)

            now = utcnow()
            if now <= post.updated_at:
                now = post.updated_at + timedelta(microseconds=1)
            post.updated_at = now

            await session.commit()

        logger.info(f"Updated post {post.id} ({', '.join(sorted(values)) or 'timestamp only'})")
        return post

    async def delete_post(self, post_id: str) -> DeleteResult:
        """Delete a post. Deleting a missing id is a no-op with deleted_count=0."""
        if not is_valid_post_id(post_id):
            return DeleteResult(deleted_count=0)

        async with self.database.session() as session:
            result = await session.execute(delete(Post).where(Post.id == post_id.lower()))
            await session.commit()

        deleted_count = result.rowcount or 0
        if deleted_count:
            logger.info(f"Deleted post {post_id}")
        else:
            logger.debug(f"Delete skipped, post {post_id} not found")
        return DeleteResult(deleted_count=deleted_count)

    async def _list_posts(self, criterion, sort_by: Optional[str], sort_order: Optional[str]) -> list[Post]:
        column_name, descending = normalize_sort(sort_by, sort_order)
        column = getattr(Post, column_name)

        stmt = select(Post).order_by(column.desc() if descending else column.asc())
        if criterion is not None:
            stmt = stmt.where(criterion)

        async with self.database.session() as session:
            result = await session.scalars(stmt)
            return list(result.all())

    def _has_tag(self, tag: str):
        if self.database.dialect_name == "postgresql":
            return type_coerce(Post.tags, JSONB).contains([tag])

        # SQLite: correlated lookup over the JSON array
        tag_values = func.json_each(Post.tags).table_valued("value")
        return select(tag_values.c.value).where(tag_values.c.value == tag).exists()
