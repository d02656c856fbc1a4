"""Tests for the blog HTTP endpoints."""

from datetime import datetime, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from apps.blog.main import app
from apps.shared.database import get_database


@pytest_asyncio.fixture
async def client(database):
    app.dependency_overrides[get_database] = lambda: database
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_health_reports_database_status(client):
    response = await client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "blog", "database": "connected"}


@pytest.mark.asyncio
async def test_create_post_returns_camel_case_fields(client):
    response = await client.post(
        "/api/v1/posts",
        json={"title": "Hello Loki!", "author": "Your Dog", "tags": ["fastapi"]},
    )

    assert response.status_code == 201
    data = response.json()
    assert len(data["id"]) == 24
    assert data["title"] == "Hello Loki!"
    assert data["tags"] == ["fastapi"]
    assert data["createdAt"] == data["updatedAt"]


@pytest.mark.asyncio
async def test_create_post_without_title_is_rejected(client):
    response = await client.post("/api/v1/posts", json={"author": "Your Dog"})

    assert response.status_code == 422
    assert response.json() == {"error": "Path `title` is required.", "category": "validation"}


@pytest.mark.asyncio
async def test_list_posts_filters(client, sample_posts):
    response = await client.get("/api/v1/posts")
    assert response.status_code == 200
    assert len(response.json()) == 4

    response = await client.get("/api/v1/posts", params={"author": "Unknown"})
    assert [post["title"] for post in response.json()] == ["Beowulf"]

    response = await client.get("/api/v1/posts", params={"tag": "good"})
    assert len(response.json()) == 2


@pytest.mark.asyncio
async def test_list_posts_sorting(client, sample_posts):
    response = await client.get("/api/v1/posts", params={"sortBy": "title", "sortOrder": "ascending"})

    assert response.status_code == 200
    titles = [post["title"] for post in response.json()]
    assert titles == sorted(titles)


@pytest.mark.asyncio
async def test_list_posts_rejects_author_and_tag_together(client, sample_posts):
    response = await client.get("/api/v1/posts", params={"author": "Unknown", "tag": "good"})
    assert response.status_code == 400
    assert response.json() == {
        "error": "Query by either author or tag, not both",
        "category": "client_error",
    }


@pytest.mark.asyncio
async def test_list_posts_rejects_bad_sort_field(client, sample_posts):
    response = await client.get("/api/v1/posts", params={"sortBy": "likes"})

    assert response.status_code == 400
    assert response.json()["category"] == "validation"


@pytest.mark.asyncio
async def test_get_post(client, sample_posts):
    response = await client.get(f"/api/v1/posts/{sample_posts[0].id}")

    assert response.status_code == 200
    assert response.json()["title"] == "Crime and Punishment"

    response = await client.get("/api/v1/posts/000000000000000000000000")
    assert response.status_code == 404
    assert response.json() == {"error": "Post not found", "category": "not_found"}


@pytest.mark.asyncio
async def test_patch_post(client, sample_posts):
    post_id = sample_posts[0].id
    response = await client.patch(f"/api/v1/posts/{post_id}", json={"author": "New Author"})

    assert response.status_code == 200
    data = response.json()
    assert data["author"] == "New Author"
    assert data["title"] == "Crime and Punishment"
    assert data["updatedAt"] > data["createdAt"]

    response = await client.patch("/api/v1/posts/000000000000000000000000", json={"author": "X"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_patch_post_cannot_null_title(client, sample_posts):
    response = await client.patch(f"/api/v1/posts/{sample_posts[0].id}", json={"title": None})

    assert response.status_code == 400
    assert "`title` is required" in response.json()["error"]


@pytest.mark.asyncio
async def test_delete_post(client, sample_posts):
    post_id = sample_posts[0].id

    response = await client.delete(f"/api/v1/posts/{post_id}")
    assert response.status_code == 204

    response = await client.get(f"/api/v1/posts/{post_id}")
    assert response.status_code == 404

    response = await client.delete(f"/api/v1/posts/{post_id}")
    assert response.status_code == 204


@pytest.mark.asyncio
async def test_database_errors_are_sanitized(client, database):
    await database.drop_all()

    response = await client.get("/api/v1/posts")

    assert response.status_code == 500
    data = response.json()
    assert data["category"] == "database"
    assert "Error ID" in data["error"]
    assert "no such table" not in data["error"]


@pytest.mark.asyncio
async def test_long_title_and_author_are_accepted(client):
    response = await client.post("/api/v1/posts", json={"title": "x" * 501, "author": "a" * 201})

    assert response.status_code == 201
    assert response.json()["title"] == "x" * 501


@pytest.mark.asyncio
async def test_listing_includes_long_titles(client, post_service):
    await post_service.create_post({"title": "x" * 5000, "author": "a" * 1000})

    response = await client.get("/api/v1/posts")

    assert response.status_code == 200
    assert [post["title"] for post in response.json()] == ["x" * 5000]


@pytest.mark.asyncio
async def test_timestamps_are_sent_as_utc(client, sample_posts):
    response = await client.get(f"/api/v1/posts/{sample_posts[0].id}")

    data = response.json()
    created_at = datetime.fromisoformat(data["createdAt"].replace("Z", "+00:00"))
    assert created_at.utcoffset() == timezone.utc.utcoffset(None)
    assert created_at.replace(tzinfo=None) == sample_posts[0].created_at


@pytest.mark.asyncio
async def test_unknown_route_uses_error_payload(client):
    response = await client.get("/api/v1/nothing-here")

    assert response.status_code == 404
    assert response.json()["category"] == "not_found"
