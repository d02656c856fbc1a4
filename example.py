#!/usr/bin/env python3
"""
Smoke script for the post service

This script:
1. Creates the tables if they do not exist
2. Creates a post
3. Lists all posts
4. Updates the post title
5. Lists all posts again

Run against the database in DATABASE_URL:
    DATABASE_URL=sqlite:///blog.db python example.py
"""

import asyncio
import sys

from apps.shared.database import Database
from apps.blog.service import PostService


def print_posts(posts):
    for post in posts:
        print(f"  - {post.id} {post.title!r} by {post.author} {post.tags} (updated {post.updated_at})")


async def main() -> int:
    database = Database()
    service = PostService(database)

    try:
        await database.create_all()
        print("✓ Tables ready")

        created_post = await service.create_post({
            "title": "Hello SQLAlchemy",
            "author": "Loki Dog",
            "contents": "This post is stored in a database using SQLAlchemy.",
            "tags": ["sqlalchemy", "asyncio"],
        })
        print(f"✓ Created post {created_post.id}")

        posts = await service.list_all_posts()
        print(f"✓ {len(posts)} post(s) in the database")
        print_posts(posts)

        updated_post = await service.update_post(created_post.id, {"title": "Hello Again, Loki!"})
        assert updated_post is not None, "Post disappeared before update"
        assert updated_post.created_at == created_post.created_at, "createdAt changed on update"
        print(f"✓ Updated title to {updated_post.title!r}")

        posts = await service.list_all_posts()
        print_posts(posts)
        return 0
    finally:
        await database.dispose()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
