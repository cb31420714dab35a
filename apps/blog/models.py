"""
Post model - single-table store for blog posts.
"""

import json
import logging

from django.db import models
from django.utils import timezone

logger = logging.getLogger(__name__)


TITLE_MAX_LENGTH = 200


class PostStatus(models.TextChoices):
    DRAFT = "draft", "Draft"
    PUBLISHED = "published", "Published"


def parse_content(raw: str | None):
    """Parse stored content back to its block structure, falling back to the raw string."""
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning(f"[Blog] Error parsing stored content: {e}")
        return raw


def serialize_content(content) -> str | None:
    """Serialize block content for storage."""
    if content is None:
        return None
    return json.dumps(content, ensure_ascii=False)


class Post(models.Model):
    """Blog post model."""

    title = models.CharField(max_length=TITLE_MAX_LENGTH)
    slug = models.CharField(max_length=255, unique=True)
    content = models.TextField(null=True, blank=True)
    excerpt = models.TextField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=PostStatus.choices, default=PostStatus.DRAFT)
    category = models.CharField(max_length=100, default="Technology")
    featured_image = models.TextField(null=True, blank=True)
    cover_image = models.TextField(null=True, blank=True)
    is_featured = models.BooleanField(default=False)

    author = models.CharField(max_length=255, default="Admin")
    author_title = models.CharField(max_length=255, default="Content Creator")
    author_avatar = models.CharField(max_length=255, default="AD")

    # SEO metadata
    meta_title = models.CharField(max_length=255, null=True, blank=True)
    meta_description = models.TextField(null=True, blank=True)
    keywords = models.TextField(null=True, blank=True)
    image_alt = models.CharField(max_length=255, null=True, blank=True)
    read_time = models.IntegerField(default=0)
    canonical_url = models.TextField(null=True, blank=True)
    seo_score = models.IntegerField(default=0)

    # Stamped by the repository so a new post has created_at == updated_at
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "posts"
        ordering = ["-updated_at", "-id"]

    def __str__(self) -> str:
        return self.title

    @property
    def content_data(self):
        return parse_content(self.content)
