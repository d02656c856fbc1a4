"""
Post field validation.

Runs before every write and does not need a database connection.
"""
import re
from typing import Any, Mapping, Optional

WRITABLE_FIELDS = ("title", "author", "contents", "tags")

# API name -> column attribute
SORTABLE_FIELDS = {
    "id": "id",
    "title": "title",
    "author": "author",
    "createdAt": "created_at",
    "created_at": "created_at",
    "updatedAt": "updated_at",
    "updated_at": "updated_at",
}

SORT_ORDERS = {
    "ascending": False,
    "asc": False,
    "descending": True,
    "desc": True,
}

_POST_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")


class PostValidationError(ValueError):
    """Raised when post fields fail validation."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


def is_valid_post_id(value: Any) -> bool:
    return isinstance(value, str) and bool(_POST_ID_RE.match(value))


def _check_optional_text(field: str, value: Any) -> Optional[str]:
    if value is not None and not isinstance(value, str):
        raise PostValidationError(field, f"Path `{field}` must be a string.")
    return value


def _check_tags(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, (list, tuple)):
        raise PostValidationError("tags", "Path `tags` must be a list of strings.")
    for tag in value:
        if not isinstance(tag, str):
            raise PostValidationError("tags", "Path `tags` must be a list of strings.")
    return list(value)


def validate_post_fields(fields: Mapping[str, Any], partial: bool = False) -> dict:
    """
    Validate and clean post fields.

    Only writable fields are kept; unknown keys and system fields (id,
    timestamps) are dropped. With partial=True a missing title is fine, but a
    provided one still has to be non-blank.

    Raises:
        PostValidationError: on a missing/blank title or a wrongly typed field
    """
    if fields is None:
        fields = {}

    cleaned = {}
    if "title" in fields or not partial:
        title = fields.get("title")
        if not isinstance(title, str) or not title.strip():
            raise PostValidationError("title", "Path `title` is required.")
        cleaned["title"] = title

    for field in ("author", "contents"):
        if field in fields:
            cleaned[field] = _check_optional_text(field, fields[field])
        elif not partial:
            cleaned[field] = None

    if "tags" in fields:
        cleaned["tags"] = _check_tags(fields["tags"])
    elif not partial:
        cleaned["tags"] = []

    return cleaned


def normalize_sort(sort_by: Optional[str] = None, sort_order: Optional[str] = None) -> tuple[str, bool]:
    """
    Resolve sort options to (column attribute, descending).

    Defaults to createdAt, descending.
    """
    sort_by = sort_by or "createdAt"
    sort_order = (sort_order or "descending").lower()

    if sort_by not in SORTABLE_FIELDS:
        raise PostValidationError(
            "sortBy",
            f"Cannot sort by `{sort_by}`. Allowed: {', '.join(sorted(SORTABLE_FIELDS))}",
        )
    if sort_order not in SORT_ORDERS:
        raise PostValidationError(
            "sortOrder",
            f"Invalid sort order `{sort_order}`. Use ascending or descending.",
        )

    return SORTABLE_FIELDS[sort_by], SORT_ORDERS[sort_order]
