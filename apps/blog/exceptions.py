"""
Blog backend exceptions.

The API layer maps these onto HTTP status codes (see core/api.py).
"""


class BlogError(Exception):
    """Base exception for blog backend errors."""
    pass


class PostNotFoundError(BlogError):
    """Raised when a post id does not exist."""

    def __init__(self, post_id):
        self.post_id = post_id
        super().__init__("Post not found")


class DuplicateSlugError(BlogError):
    """Raised when an explicit slug is already held by another post."""

    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f'Slug "{slug}" already exists')


class LegacyDirectoryError(BlogError):
    """Raised when the legacy posts directory cannot be read at all."""
    pass
