"""
Slug helpers shared by the blog backend and the migration job.
"""

import re

DEFAULT_SLUG = "post"


def slugify(text: str | None) -> str:
    """Generate a URL-safe slug from a title."""
    text = (text or "").lower()
    text = re.sub(r"[^a-z0-9 -]", "", text)
    text = re.sub(r"\s+", "-", text)
    text = re.sub(r"-+", "-", text)
    return text.strip("-") or DEFAULT_SLUG
