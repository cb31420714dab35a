"""
Local post validation, run before any request leaves the client.
"""

from typing import Any

from .errors import ValidationError

MAX_TITLE_LENGTH = 200


def validate_post_data(data: dict[str, Any]) -> list[str]:
    """Return every rule the post data violates (empty list when valid)."""
    errors = []

    title = data.get("title")
    if not title or not str(title).strip():
        errors.append("Title is required")

    content = data.get("content")
    blocks = content.get("blocks") if isinstance(content, dict) else None
    if not blocks:
        errors.append("Content is required")

    if title and len(str(title)) > MAX_TITLE_LENGTH:
        errors.append(f"Title is too long (max {MAX_TITLE_LENGTH} characters)")

    return errors


def ensure_valid(data: dict[str, Any]) -> None:
    """Raise ValidationError listing all violations."""
    errors = validate_post_data(data)
    if errors:
        raise ValidationError(errors)
