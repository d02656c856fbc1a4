"""
Blog API

CRUD endpoints for blog posts.
"""
import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from apps.shared.cors import setup_cors
from apps.shared.database import Database, get_database
from apps.shared.errors import error_response, log_and_sanitize_error
from apps.blog.schemas import PostCreate, PostUpdate, PostResponse
from apps.blog.service import PostService
from apps.blog.validation import PostValidationError

logger = logging.getLogger(__name__)
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())


@asynccontextmanager
async def lifespan(app: FastAPI):
    database = get_database()
    # Create tables
    await database.create_all()
    logger.info("Blog service started")
    yield
    await database.dispose()


app = FastAPI(
    title="Blog Service",
    version="1.0.0",
    description="Blog posts with author and tag filtering",
    lifespan=lifespan,
)

# Setup CORS from shared configuration
setup_cors(app)


@app.exception_handler(PostValidationError)
async def validation_exception_handler(request: Request, exc: PostValidationError):
    return error_response(
        message=exc.message,
        category="validation",
        status_code=status.HTTP_400_BAD_REQUEST,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    # Drop the "body"/"query" prefix from the location
    field = ".".join(str(part) for part in first.get("loc", ())[1:]) or "request"
    if first.get("type") == "missing":
        message = f"Path `{field}` is required."
    else:
        message = f"Path `{field}`: {first.get('msg', 'invalid value')}"

    return error_response(
        message=message,
        category="validation",
        status_code=422,
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    message = (
        detail.get("message") if isinstance(detail, dict) else str(detail)
    ) or "Request failed."
    category = (
        detail.get("category") if isinstance(detail, dict) else None
    )

    if not category:
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            category = "not_found"
        elif exc.status_code >= 500:
            category = "server_error"
        else:
            category = "client_error"

    return error_response(
        message=message,
        category=category,
        status_code=exc.status_code,
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    message, _ = log_and_sanitize_error(exc, f"{request.method} {request.url.path}")
    return error_response(
        message=message,
        category="database",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def get_post_service(database: Database = Depends(get_database)) -> PostService:
    return PostService(database)


router = APIRouter(prefix="/api/v1", tags=["posts"])


@router.get("/health")
async def health(database: Database = Depends(get_database)):
    """Health check endpoint."""
    db_connected = await database.check_connection()
    return {
        "status": "ok" if db_connected else "degraded",
        "service": "blog",
        "database": "connected" if db_connected else "disconnected",
    }


@router.get("/posts", response_model=list[PostResponse])
async def list_posts(
    author: Optional[str] = None,
    tag: Optional[str] = None,
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    service: PostService = Depends(get_post_service),
):
    """
    List posts, optionally filtered by author or by tag.
    Sorted by createdAt descending unless sortBy/sortOrder say otherwise.
    """
    if author and tag:
        raise HTTPException(status_code=400, detail="Query by either author or tag, not both")

    if author:
        return await service.list_posts_by_author(author, sort_by=sort_by, sort_order=sort_order)
    if tag:
        return await service.list_posts_by_tag(tag, sort_by=sort_by, sort_order=sort_order)
    return await service.list_all_posts(sort_by=sort_by, sort_order=sort_order)


@router.get("/posts/{post_id}", response_model=PostResponse)
async def get_post(post_id: str, service: PostService = Depends(get_post_service)):
    """Get a single post by id."""
    post = await service.get_post_by_id(post_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


@router.post("/posts", response_model=PostResponse, status_code=201)
async def create_post(post_data: PostCreate, service: PostService = Depends(get_post_service)):
    """Create a new post."""
    return await service.create_post(post_data.model_dump())


@router.patch("/posts/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: str,
    post_data: PostUpdate,
    service: PostService = Depends(get_post_service),
):
    """Update only the provided fields of a post."""
    post = await service.update_post(post_id, post_data.model_dump(exclude_unset=True))
    if post is None:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


@router.delete("/posts/{post_id}", status_code=204)
async def delete_post(post_id: str, service: PostService = Depends(get_post_service)):
    """Delete a post. Missing ids are not an error."""
    await service.delete_post(post_id)


app.include_router(router)
