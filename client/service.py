"""
Post Storage Service - resilient client for the blog posts API.

Wraps the HTTP API with:
- Time-boxed response caching (list and single-post reads)
- Per-attempt timeout and exponential backoff retry
- Offline short-circuiting
- Local validation before writes
- Operator notifications for every write and every failure
- Create-vs-update resolution (save_post) and auto-save

The hosting application constructs and owns the service:

    async with PostStorageService(StorageConfig.from_env()) as storage:
        posts = await storage.get_all_posts()
"""

import asyncio
import logging
import time
from typing import Any, Callable, Optional

import httpx
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential

from .autosave import AutoSaver
from .cache import ALL_POSTS_KEY, ResponseCache, post_key
from .config import StorageConfig
from .errors import (
    NetworkError,
    NotFoundError,
    OfflineError,
    PostStorageError,
    RequestTimeoutError,
    UnknownError,
    error_for_status,
)
from .notifications import Notifier, NotificationLevel
from .validation import ensure_valid

logger = logging.getLogger(__name__)

RECENT_POSTS_LIMIT = 5


def is_persisted_id(value: Any) -> bool:
    """True for ids the backend could have assigned (positive integers)."""
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, PostStorageError) and exc.retryable


def _error_message(response: httpx.Response) -> str:
    """Pull the server's error text out of an error response."""
    try:
        body = response.json()
    except ValueError:
        body = response.text

    if isinstance(body, dict):
        detail = body.get("message") or body.get("error")
        if detail:
            return str(detail)
    elif isinstance(body, str) and body:
        return body
    return f"HTTP {response.status_code}"


class PostStorageService:
    """
    Single entry point for post operations.

    Args:
        config: Service settings (defaults to StorageConfig())
        http_client: Preconfigured httpx.AsyncClient; the service creates and
            owns one when not given
        notifier: Notification sink (a new Notifier if not given)
        clock: Monotonic clock used for cache ageing
        sleep: Coroutine used for retry backoff
        online: Initial network status
    """

    def __init__(
        self,
        config: Optional[StorageConfig] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        notifier: Optional[Notifier] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep=asyncio.sleep,
        online: bool = True,
    ):
        self.config = config or StorageConfig()
        self.notifier = notifier or Notifier()
        self.cache = ResponseCache(ttl=self.config.cache_ttl, clock=clock)
        self.is_online = online
        self.autosaver: Optional[AutoSaver] = None
        self._sleep = sleep
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout,
        )

    async def __aenter__(self) -> "PostStorageService":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        self.stop_autosave()
        if self._owns_client:
            await self._client.aclose()

    # ============ Network status ============

    def set_online(self, online: bool) -> None:
        """Record a platform network-status change."""
        if online == self.is_online:
            return

        self.is_online = online
        if online:
            logger.info("[PostStorage] Network connection restored")
            self.notifier.notify("Connection restored", NotificationLevel.SUCCESS)
        else:
            logger.warning("[PostStorage] Network connection lost")
            self.notifier.notify("You are offline. Some features may not work.", NotificationLevel.WARNING)

    # ============ Transport ============

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        json: Any = None,
        params: Optional[dict] = None,
    ) -> Any:
        """
        Send a request with retry.

        Network errors, timeouts and 5xx responses are retried with
        exponential backoff; everything else fails on the first attempt.

        Raises:
            PostStorageError: Classified failure after retries are exhausted
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.config.max_retries + 1),
            wait=wait_exponential(multiplier=self.config.retry_delay, exp_base=2),
            retry=retry_if_exception(_is_retryable),
            sleep=self._sleep,
            before_sleep=self._log_retry,
            reraise=True,
        )

        async for attempt in retrying:
            with attempt:
                logger.debug(
                    f"[PostStorage] {method} {endpoint} (attempt {attempt.retry_state.attempt_number})"
                )
                result = await self._send(method, endpoint, json=json, params=params)
        return result

    async def _send(self, method: str, endpoint: str, *, json: Any = None, params: Optional[dict] = None) -> Any:
        if not self.is_online:
            raise OfflineError(endpoint=endpoint, method=method)

        try:
            response = await self._client.request(method, endpoint, json=json, params=params)
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(f"Request timed out: {e}", endpoint=endpoint, method=method) from e
        except httpx.RequestError as e:
            raise NetworkError(str(e) or type(e).__name__, endpoint=endpoint, method=method) from e

        if response.is_error:
            raise error_for_status(
                response.status_code,
                _error_message(response),
                endpoint=endpoint,
                method=method,
            )

        try:
            return response.json()
        except ValueError as e:
            raise UnknownError(
                f"Invalid JSON response: {e}",
                status=response.status_code,
                endpoint=endpoint,
                method=method,
            ) from e

    def _log_retry(self, retry_state) -> None:
        error = retry_state.outcome.exception()
        logger.warning(
            f"[PostStorage] Request failed (attempt {retry_state.attempt_number}): {error}. "
            f"Retrying in {retry_state.next_action.sleep:g}s"
        )

    def _handle_error(self, error: PostStorageError, context: str) -> PostStorageError:
        """Log a failure and tell the operator about it."""
        logger.error(f"[PostStorage] Error in {context}: [{error.kind.value}] {error.message}")
        self.notifier.notify(error.user_message, NotificationLevel.ERROR)
        return error

    # ============ Reads ============

    async def check_server_health(self) -> dict:
        """Ping /health; never raises."""
        try:
            health = await self._request("GET", "/health")
        except PostStorageError as e:
            logger.error(f"[PostStorage] Backend server is not available: {e.message}")
            return {"is_healthy": False, "error": e.user_message, "details": e}

        logger.info(f"[PostStorage] Backend server is healthy: {health}")
        return {"is_healthy": True, "data": health}

    async def get_all_posts(self, **filters) -> list[dict]:
        """
        List posts.

        The unfiltered list is cached; filtered queries (status, category,
        search, limit) always hit the backend.
        """
        filters = {key: value for key, value in filters.items() if value is not None}
        try:
            if not filters:
                cached = self.cache.get(ALL_POSTS_KEY)
                if cached is not None:
                    logger.debug("[PostStorage] Returning cached posts list")
                    return cached

            posts = await self._request("GET", "/posts", params=filters or None)
        except PostStorageError as e:
            self._handle_error(e, "get_all_posts")
            raise

        if not filters:
            self.cache.set(ALL_POSTS_KEY, posts)
        logger.info(f"[PostStorage] Retrieved {len(posts)} posts from backend")
        return posts

    async def get_post(self, post_id) -> dict:
        try:
            return await self._load_post(post_id)
        except PostStorageError as e:
            self._handle_error(e, f"get_post({post_id})")
            raise

    async def get_post_by_slug(self, slug: str) -> dict:
        try:
            return await self._request("GET", f"/posts/slug/{slug}")
        except PostStorageError as e:
            self._handle_error(e, f"get_post_by_slug({slug})")
            raise

    async def get_published_posts(self) -> list[dict]:
        try:
            return await self._request("GET", "/posts/published")
        except PostStorageError as e:
            self._handle_error(e, "get_published_posts")
            raise

    async def search_posts(
        self,
        query: str,
        category: Optional[str] = None,
        status: Optional[str] = None,
    ) -> list[dict]:
        params = {"q": query, "category": category, "status": status}
        try:
            posts = await self._request(
                "GET",
                "/posts/search",
                params={key: value for key, value in params.items() if value},
            )
        except PostStorageError as e:
            self._handle_error(e, "search_posts")
            raise

        logger.info(f"[PostStorage] Search found {len(posts)} posts")
        return posts

    async def _load_post(self, post_id) -> dict:
        key = post_key(post_id)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"[PostStorage] Returning cached post: {post_id}")
            return cached

        post = await self._request("GET", f"/posts/{post_id}")
        self.cache.set(key, post)
        logger.info(f"[PostStorage] Retrieved post: {post.get('title') or post_id}")
        return post

    # ============ Writes ============

    async def create_post(self, data: dict[str, Any]) -> dict:
        """Validate and create a post."""
        try:
            return await self._create(data)
        except PostStorageError as e:
            self._handle_error(e, "create_post")
            raise

    async def update_post(self, post_id, data: dict[str, Any]) -> dict:
        """Validate and update a post."""
        try:
            return await self._update(post_id, data)
        except PostStorageError as e:
            self._handle_error(e, f"update_post({post_id})")
            raise

    async def delete_post(self, post_id) -> dict:
        try:
            result = await self._request("DELETE", f"/posts/{post_id}")
        except PostStorageError as e:
            self._handle_error(e, f"delete_post({post_id})")
            raise

        self.cache.invalidate()
        logger.info(f"[PostStorage] Deleted post: {post_id}")
        self.notifier.notify("Post deleted successfully!", NotificationLevel.SUCCESS)
        return result

    async def bulk_delete_posts(self, post_ids: list) -> dict:
        try:
            result = await self._request("POST", "/posts/bulk-delete", json={"postIds": list(post_ids)})
        except PostStorageError as e:
            self._handle_error(e, "bulk_delete_posts")
            raise

        self.cache.invalidate()
        deleted = len(result.get("deleted", []))
        logger.info(f"[PostStorage] Bulk deleted {deleted} posts")
        self.notifier.notify(f"{deleted} posts deleted successfully!", NotificationLevel.SUCCESS)
        return result

    async def save_post(self, data: dict[str, Any]) -> dict:
        """
        Create or update depending on the id.

        A positive integer id is looked up: an existing post is updated, a
        missing one is created without the id. Any other id (none, or a
        provisional client-side value) always creates.
        """
        post_id = data.get("id")
        payload = {key: value for key, value in data.items() if key != "id"}

        try:
            ensure_valid(data)

            if not is_persisted_id(post_id):
                return await self._create(payload)

            try:
                await self._load_post(post_id)
            except NotFoundError:
                logger.info(f"[PostStorage] Post {post_id} not found, creating new post instead")
                return await self._create(payload)

            return await self._update(post_id, data)

        except PostStorageError as e:
            self._handle_error(e, "save_post")
            raise

    async def _create(self, data: dict[str, Any]) -> dict:
        ensure_valid(data)
        post = await self._request("POST", "/posts", json=data)

        self.cache.invalidate(ALL_POSTS_KEY)
        logger.info(f"[PostStorage] Created new post: {post.get('title') or post.get('id')}")
        self.notifier.notify(f'Post "{post.get("title")}" created successfully!', NotificationLevel.SUCCESS)
        return post

    async def _update(self, post_id, data: dict[str, Any]) -> dict:
        ensure_valid(data)
        post = await self._request("PUT", f"/posts/{post_id}", json=data)

        self.cache.set(post_key(post_id), post)
        self.cache.invalidate(ALL_POSTS_KEY)
        logger.info(f"[PostStorage] Updated post: {post.get('title') or post_id}")
        self.notifier.notify(f'Post "{post.get("title")}" updated successfully!', NotificationLevel.SUCCESS)
        return post

    # ============ Auto-save ============

    def setup_autosave(self, snapshot: Callable[[], dict[str, Any]], interval: Optional[float] = None) -> AutoSaver:
        """
        Start auto-saving the editor snapshot.

        Args:
            snapshot: Returns the current post data when called
            interval: Seconds between ticks (config default if not given)

        Returns:
            The running AutoSaver
        """
        self.stop_autosave()
        self.autosaver = AutoSaver(
            self,
            snapshot,
            interval=interval if interval is not None else self.config.autosave_interval,
            max_failures=self.config.autosave_max_failures,
        )
        self.autosaver.start()
        return self.autosaver

    def stop_autosave(self) -> None:
        if self.autosaver is not None:
            self.autosaver.stop()

    # ============ Import / export ============

    async def import_posts(self, records) -> dict:
        """Create each record as a new post; failures are collected, not raised."""
        records = records if isinstance(records, list) else [records]
        results = {"imported": [], "errors": []}

        for record in records:
            payload = {key: value for key, value in record.items() if key != "id"}
            try:
                results["imported"].append(await self._create(payload))
            except PostStorageError as e:
                results["errors"].append({"post": record.get("title") or "Unknown", "error": e.message})

        logger.info(f"[PostStorage] Imported {len(results['imported'])} posts")
        if results["errors"]:
            self.notifier.notify(
                f"{len(results['errors'])} posts could not be imported",
                NotificationLevel.WARNING,
            )
        return results

    async def export_posts(self, post_ids: Optional[list] = None) -> list[dict]:
        """Fetch full posts (all of them when post_ids is empty); unreadable ones are skipped."""
        if not post_ids:
            post_ids = [meta["id"] for meta in await self.get_all_posts()]

        posts = []
        for post_id in post_ids:
            try:
                posts.append(await self._load_post(post_id))
            except PostStorageError as e:
                logger.warning(f"[PostStorage] Skipping post {post_id}: {e.message}")

        logger.info(f"[PostStorage] Exported {len(posts)} posts")
        return posts

    # ============ Statistics ============

    async def get_post_statistics(self) -> dict:
        """Counts by status, category and author; zeroed stats on failure."""
        try:
            posts = await self.get_all_posts()
        except PostStorageError:
            return {
                "total": 0,
                "by_status": {"draft": 0, "published": 0},
                "by_category": {},
                "by_author": {},
                "total_read_time": 0,
                "avg_read_time": 0,
                "recent_posts": [],
                "error": True,
            }

        stats = {
            "total": len(posts),
            "by_status": {},
            "by_category": {},
            "by_author": {},
            "total_read_time": 0,
            "avg_read_time": 0,
            "recent_posts": posts[:RECENT_POSTS_LIMIT],
        }

        for post in posts:
            status = post.get("status") or "draft"
            category = post.get("category") or "Uncategorized"
            author = post.get("author") or "Unknown"
            stats["by_status"][status] = stats["by_status"].get(status, 0) + 1
            stats["by_category"][category] = stats["by_category"].get(category, 0) + 1
            stats["by_author"][author] = stats["by_author"].get(author, 0) + 1
            stats["total_read_time"] += post.get("readTime") or 0

        if posts:
            stats["avg_read_time"] = round(stats["total_read_time"] / len(posts))
        return stats

    # ============ Cache ============

    def cache_stats(self) -> dict:
        return self.cache.stats()

    def clear_cache(self, key: Optional[str] = None) -> None:
        self.cache.invalidate(key)
