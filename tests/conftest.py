"""Shared fixtures: an in-memory SQLite database per test."""

import pytest_asyncio

from apps.shared.database import Database
from apps.blog.service import PostService

SAMPLE_POSTS = [
    {
        "title": "Crime and Punishment",
        "author": "Fiodor Dostoyevsky",
        "tags": ["good"],
    },
    {"title": "Hyperion", "author": "Dan Simmons", "tags": ["sci-fi"]},
    {
        "title": "Beowulf",
        "author": "Unknown",
        "tags": ["translations", "Tolkien", "good"],
    },
    {"title": "Endurance"},
]


@pytest_asyncio.fixture
async def database():
    db = Database("sqlite+aiosqlite:///:memory:", echo=False)
    await db.create_all()
    yield db
    await db.drop_all()
    await db.dispose()


@pytest_asyncio.fixture
async def post_service(database):
    return PostService(database)


@pytest_asyncio.fixture
async def sample_posts(post_service):
    created = []
    for post in SAMPLE_POSTS:
        created.append(await post_service.create_post(post))
    return created
