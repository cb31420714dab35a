"""
Blog API endpoints - thin mapping of REST verbs onto PostRepository.
"""

from django.http import HttpRequest
from ninja import Router
from ninja.errors import HttpError

from .repository import PostRepository
from .schemas import (
    BulkDeleteIn,
    BulkDeleteOut,
    DeleteOut,
    PostCreateIn,
    PostDetailOut,
    PostOut,
    PostUpdateIn,
    to_model_fields,
)

router = Router()
repository = PostRepository()


@router.get("", response=list[PostOut])
def list_posts(
    request: HttpRequest,
    status: str | None = None,
    category: str | None = None,
    search: str | None = None,
    limit: int | None = None,
):
    """List posts (metadata only), newest first."""
    return repository.list_posts(status=status, category=category, search=search, limit=limit)


# IMPORTANT: fixed paths MUST be before /{post_id}
@router.get("/published", response=list[PostDetailOut])
def list_published_posts(request: HttpRequest):
    """List published posts."""
    return repository.get_published()


@router.get("/featured", response=list[PostDetailOut])
def list_featured_posts(request: HttpRequest):
    """List featured published posts."""
    return repository.get_featured()


@router.get("/search", response=list[PostOut])
def search_posts(
    request: HttpRequest,
    q: str | None = None,
    category: str | None = None,
    status: str | None = None,
):
    """Search posts by title, content and excerpt."""
    if not q:
        raise HttpError(400, "Search query is required")

    # "all" is what the admin filter dropdowns send
    if category == "all":
        category = None
    if status == "all":
        status = None

    return repository.list_posts(status=status, category=category, search=q)


@router.get("/slug/{slug}", response=PostDetailOut)
def get_post_by_slug(request: HttpRequest, slug: str):
    """Get a post by slug."""
    post = repository.get_by_slug(slug)
    if post is None:
        raise HttpError(404, "Post not found")
    return post


@router.post("/bulk-delete", response=BulkDeleteOut)
def bulk_delete_posts(request: HttpRequest, data: BulkDeleteIn):
    """Delete several posts at once."""
    if not data.postIds:
        raise HttpError(400, "Invalid post IDs")
    return repository.bulk_delete(data.postIds)


@router.get("/{post_id}", response=PostDetailOut)
def get_post(request: HttpRequest, post_id: int):
    """Get a post by id."""
    post = repository.get_by_id(post_id)
    if post is None:
        raise HttpError(404, "Post not found")
    return post


@router.post("", response={201: PostDetailOut})
def create_post(request: HttpRequest, data: PostCreateIn):
    """Create a new post."""
    return repository.create(to_model_fields(data))


@router.put("/{post_id}", response=PostDetailOut)
def update_post(request: HttpRequest, post_id: int, data: PostUpdateIn):
    """Update a post. Fields not sent keep their values."""
    return repository.update(post_id, to_model_fields(data))


@router.delete("/{post_id}", response=DeleteOut)
def delete_post(request: HttpRequest, post_id: int):
    """Delete a post."""
    return repository.delete(post_id)
