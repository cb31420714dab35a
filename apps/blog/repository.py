"""
Post repository - CRUD, search and slug uniqueness over the posts table.

Payloads are dicts keyed by model field names (snake_case). The API layer
and the migration job both write through this class.
"""

import logging
from typing import Any, Optional

from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from utils.slug import slugify
from .exceptions import DuplicateSlugError, PostNotFoundError
from .models import TITLE_MAX_LENGTH, Post, PostStatus, serialize_content

logger = logging.getLogger(__name__)

# Never taken from a payload: assigned on create, immutable afterwards
PROTECTED_FIELDS = {"id", "created_at", "updated_at"}

# How many times a derived slug is regenerated after losing an insert race
MAX_SLUG_ATTEMPTS = 5


class PostRepository:
    """
    Persistence backend for blog posts.

    Each operation touches a single row. Slug uniqueness is checked up front
    and re-verified by the UNIQUE constraint at write time.
    """

    def __init__(self):
        self.writable_fields = {
            field.name for field in Post._meta.concrete_fields
        } - PROTECTED_FIELDS
        self.required_fields = {
            field.name for field in Post._meta.concrete_fields if not field.null
        }

    # ============ Reads ============

    def list_posts(
        self,
        status: Optional[str] = None,
        category: Optional[str] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[Post]:
        """
        List posts, newest update first.

        Args:
            status: Only posts with this status
            category: Only posts in this category
            search: Case-insensitive substring matched against title,
                content and excerpt
            limit: Maximum number of posts to return

        Returns:
            List of Post objects
        """
        queryset = Post.objects.all()

        if status:
            queryset = queryset.filter(status=status)
        if category:
            queryset = queryset.filter(category=category)
        if search:
            queryset = queryset.filter(
                Q(title__icontains=search)
                | Q(content__icontains=search)
                | Q(excerpt__icontains=search)
            )

        queryset = queryset.order_by("-updated_at", "-id")
        if limit:
            queryset = queryset[:limit]
        return list(queryset)

    def get_by_id(self, post_id) -> Optional[Post]:
        """Get a post by id, or None."""
        return Post.objects.filter(pk=post_id).first()

    def get_by_slug(self, slug: str) -> Optional[Post]:
        """Get a post by slug, or None."""
        return Post.objects.filter(slug=slug).first()

    def get_published(self) -> list[Post]:
        return self.list_posts(status=PostStatus.PUBLISHED)

    def get_featured(self) -> list[Post]:
        return list(
            Post.objects.filter(status=PostStatus.PUBLISHED, is_featured=True)
            .order_by("-updated_at", "-id")
        )

    # ============ Writes ============

    def create(self, data: dict[str, Any]) -> Post:
        """
        Create a post.

        The slug is derived from the title when absent. An explicit slug that
        is already taken raises DuplicateSlugError.
        """
        fields = self._clean(data)
        if not fields.get("title"):
            raise ValueError("Title is required")

        explicit_slug = fields.pop("slug", None) or None
        if explicit_slug and self._slug_taken(explicit_slug):
            raise DuplicateSlugError(explicit_slug)

        now = timezone.now()
        for attempt in range(1, MAX_SLUG_ATTEMPTS + 1):
            slug = explicit_slug or self.generate_unique_slug(slugify(fields["title"]))
            try:
                with transaction.atomic():
                    post = Post.objects.create(slug=slug, created_at=now, updated_at=now, **fields)
            except IntegrityError:
                if not self._slug_taken(slug):
                    raise
                if explicit_slug:
                    raise DuplicateSlugError(explicit_slug)
                logger.warning(f"[Blog] Slug '{slug}' taken concurrently, retrying ({attempt}/{MAX_SLUG_ATTEMPTS})")
                continue

            logger.info(f"[Blog] Created post {post.id}: {post.title}")
            return post

        raise DuplicateSlugError(slug)

    def update(self, post_id, data: dict[str, Any]) -> Post:
        """
        Merge the given fields into an existing post.

        Only keys present in data change. id and created_at are never touched.
        The slug follows a title change unless a new slug is given explicitly.
        """
        post = self.get_by_id(post_id)
        if post is None:
            raise PostNotFoundError(post_id)

        fields = self._clean(data)
        new_slug = fields.pop("slug", None)

        if new_slug and new_slug != post.slug:
            if self._slug_taken(new_slug, exclude_id=post.id):
                raise DuplicateSlugError(new_slug)
            post.slug = new_slug
        elif fields.get("title") and fields["title"] != post.title:
            post.slug = self.generate_unique_slug(slugify(fields["title"]), exclude_id=post.id)

        for name, value in fields.items():
            setattr(post, name, value)
        post.updated_at = timezone.now()

        try:
            with transaction.atomic():
                post.save()
        except IntegrityError:
            if self._slug_taken(post.slug, exclude_id=post.id):
                raise DuplicateSlugError(post.slug)
            raise

        logger.info(f"[Blog] Updated post {post.id}: {post.title}")
        return post

    def delete(self, post_id) -> dict:
        """Hard-delete a post."""
        deleted, _ = Post.objects.filter(pk=post_id).delete()
        if not deleted:
            raise PostNotFoundError(post_id)

        logger.info(f"[Blog] Deleted post {post_id}")
        return {"success": True, "deletedId": post_id}

    def bulk_delete(self, post_ids: list) -> dict:
        """Delete several posts; missing ids are reported, not fatal."""
        results = {"deleted": [], "errors": []}

        for post_id in post_ids:
            try:
                self.delete(post_id)
                results["deleted"].append(post_id)
            except PostNotFoundError as e:
                results["errors"].append({"postId": post_id, "error": str(e)})

        logger.info(f"[Blog] Bulk deleted {len(results['deleted'])} posts")
        return results

    # ============ Slugs ============

    def generate_unique_slug(self, base: str, exclude_id=None) -> str:
        """
        Return base, or base-1, base-2, ... whichever is first free.

        Args:
            base: Slug to start from
            exclude_id: Post whose own slug does not count as a collision

        Returns:
            A slug no other post holds
        """
        counter = 0
        slug = base
        while self._slug_taken(slug, exclude_id=exclude_id):
            counter += 1
            slug = f"{base}-{counter}"
        return slug

    def _slug_taken(self, slug: str, exclude_id=None) -> bool:
        queryset = Post.objects.filter(slug=slug)
        if exclude_id is not None:
            queryset = queryset.exclude(pk=exclude_id)
        return queryset.exists()

    def _clean(self, data: dict[str, Any]) -> dict[str, Any]:
        """
        Keep writable model fields and serialize content.

        Raises:
            ValueError: If title is blank or too long, or status is unknown
        """
        fields = {
            key: value
            for key, value in data.items()
            if key in self.writable_fields
            and not (value is None and key in self.required_fields)
        }
        if "title" in fields:
            title = str(fields["title"])
            if not title.strip():
                raise ValueError("Title is required")
            if len(title) > TITLE_MAX_LENGTH:
                raise ValueError(f"Title is too long (max {TITLE_MAX_LENGTH} characters)")

        status = fields.get("status")
        if status is not None and status not in PostStatus.values:
            raise ValueError(f"Invalid status: {status}")

        if "content" in fields:
            fields["content"] = serialize_content(fields["content"])
        return fields
