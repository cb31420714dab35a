"""
Client module - storage façade used by the post editor.

Structure:
- service.py: PostStorageService (requests, retry, cache, save resolution)
- cache.py: Time-boxed response cache
- errors.py: Error taxonomy and HTTP status classification
- validation.py: Local post validation
- notifications.py: Operator notifications
- autosave.py: Periodic editor auto-save
- config.py: Settings loaded from the environment
"""

from .autosave import AutoSaver
from .cache import ResponseCache
from .config import StorageConfig
from .errors import (
    AuthError,
    ClientError,
    ErrorKind,
    NetworkError,
    NotFoundError,
    OfflineError,
    PostStorageError,
    RequestTimeoutError,
    ServerError,
    UnknownError,
    ValidationError,
)
from .notifications import Notification, NotificationLevel, Notifier
from .service import PostStorageService
from .validation import validate_post_data


def create_post_storage(config: StorageConfig | None = None, **kwargs) -> PostStorageService:
    """Build a service from the given config (or the environment)."""
    return PostStorageService(config or StorageConfig.from_env(), **kwargs)


__all__ = [
    "AutoSaver",
    "ResponseCache",
    "StorageConfig",
    "ErrorKind",
    "PostStorageError",
    "NetworkError",
    "OfflineError",
    "RequestTimeoutError",
    "ServerError",
    "NotFoundError",
    "AuthError",
    "ClientError",
    "UnknownError",
    "ValidationError",
    "Notification",
    "NotificationLevel",
    "Notifier",
    "PostStorageService",
    "create_post_storage",
    "validate_post_data",
]
