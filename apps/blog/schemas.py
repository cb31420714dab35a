"""
Blog schemas for API - camelCase on the wire, snake_case in the model.
"""

from datetime import datetime
from typing import Any

from ninja import Schema
from pydantic import Field, ConfigDict

from .models import TITLE_MAX_LENGTH, PostStatus

# Request key -> model field
FIELD_MAP = {
    "featuredImage": "featured_image",
    "coverImage": "cover_image",
    "isFeatured": "is_featured",
    "authorTitle": "author_title",
    "authorAvatar": "author_avatar",
    "metaTitle": "meta_title",
    "metaDescription": "meta_description",
    "imageAlt": "image_alt",
    "readTime": "read_time",
    "canonicalUrl": "canonical_url",
    "seoScore": "seo_score",
}


class PostOut(Schema):
    """Post list output - metadata only."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    title: str
    slug: str
    excerpt: str | None = None
    category: str | None = None
    status: str
    author: str | None = None
    featuredImage: str | None = Field(validation_alias="featured_image", default=None)
    coverImage: str | None = Field(validation_alias="cover_image", default=None)
    isFeatured: bool = Field(validation_alias="is_featured", default=False)
    readTime: int = Field(validation_alias="read_time", default=0)
    createdAt: datetime = Field(validation_alias="created_at")
    updatedAt: datetime = Field(validation_alias="updated_at")


class PostDetailOut(PostOut):
    """Full post output with content and SEO metadata."""

    content: Any = Field(validation_alias="content_data", default=None)
    authorTitle: str | None = Field(validation_alias="author_title", default=None)
    authorAvatar: str | None = Field(validation_alias="author_avatar", default=None)
    metaTitle: str | None = Field(validation_alias="meta_title", default=None)
    metaDescription: str | None = Field(validation_alias="meta_description", default=None)
    keywords: str | None = None
    imageAlt: str | None = Field(validation_alias="image_alt", default=None)
    canonicalUrl: str | None = Field(validation_alias="canonical_url", default=None)
    seoScore: int = Field(validation_alias="seo_score", default=0)


class PostUpdateIn(Schema):
    """Post update input. Only the keys sent are applied."""

    title: str | None = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    slug: str | None = None
    content: Any = None
    excerpt: str | None = None
    category: str | None = None
    status: PostStatus | None = None
    author: str | None = None
    authorTitle: str | None = None
    authorAvatar: str | None = None
    featuredImage: str | None = None
    coverImage: str | None = None
    isFeatured: bool | None = None
    metaTitle: str | None = None
    metaDescription: str | None = None
    keywords: str | None = None
    imageAlt: str | None = None
    readTime: int | None = None
    canonicalUrl: str | None = None
    seoScore: int | None = Field(default=None, ge=0, le=100)


class PostCreateIn(PostUpdateIn):
    """Post create input."""

    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)


class BulkDeleteIn(Schema):
    postIds: list[int] = []


class BulkDeleteOut(Schema):
    deleted: list[int]
    errors: list[dict[str, Any]]


class DeleteOut(Schema):
    success: bool
    deletedId: int


def to_model_fields(data: Schema) -> dict[str, Any]:
    """Convert a request schema to a repository payload."""
    payload = data.model_dump(exclude_unset=True)
    return {FIELD_MAP.get(key, key): value for key, value in payload.items()}
