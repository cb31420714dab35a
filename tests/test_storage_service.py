"""
Tests for the post storage client (PostStorageService).
"""

import json

import httpx
import pytest

from client import (
    ClientError,
    NetworkError,
    NotFoundError,
    NotificationLevel,
    OfflineError,
    RequestTimeoutError,
    ServerError,
    ValidationError,
)
from client.errors import ErrorKind, error_for_status
from client.validation import validate_post_data

CONTENT = {"blocks": [{"type": "paragraph", "data": {"text": "Body"}}]}


def post_json(post_id=1, title="Hello World", **fields):
    return {"id": post_id, "title": title, "slug": "hello-world", "status": "draft", **fields}


def request_body(route):
    return json.loads(route.calls.last.request.content)


class TestValidation:
    """Local validation test cases."""

    def test_valid_post(self):
        assert validate_post_data({"title": "Ok", "content": CONTENT}) == []

    def test_all_violations_reported(self):
        assert validate_post_data({"title": "   "}) == ["Title is required", "Content is required"]

    def test_empty_blocks(self):
        assert validate_post_data({"title": "Ok", "content": {"blocks": []}}) == ["Content is required"]

    def test_title_too_long(self):
        errors = validate_post_data({"title": "x" * 201, "content": CONTENT})
        assert errors == ["Title is too long (max 200 characters)"]

    def test_title_at_limit(self):
        assert validate_post_data({"title": "x" * 200, "content": CONTENT}) == []


class TestErrorClassification:
    """HTTP status to error kind test cases."""

    @pytest.mark.parametrize(
        "status, kind",
        [
            (500, ErrorKind.SERVER_ERROR),
            (503, ErrorKind.SERVER_ERROR),
            (404, ErrorKind.NOT_FOUND),
            (401, ErrorKind.AUTH_ERROR),
            (403, ErrorKind.AUTH_ERROR),
            (400, ErrorKind.CLIENT_ERROR),
            (422, ErrorKind.CLIENT_ERROR),
        ],
    )
    def test_status_kinds(self, status, kind):
        error = error_for_status(status, "boom", endpoint="/posts", method="GET")
        assert error.kind == kind
        assert error.status == status
        assert error.endpoint == "/posts"

    def test_only_transient_errors_retryable(self):
        assert error_for_status(502, "x").retryable
        assert not error_for_status(404, "x").retryable
        assert not error_for_status(400, "x").retryable


class TestCaching:
    """Response cache test cases."""

    @pytest.mark.asyncio
    async def test_list_cached_until_ttl(self, storage, api_mock, clock):
        route = api_mock.get("/posts").mock(return_value=httpx.Response(200, json=[post_json()]))

        first = await storage.get_all_posts()
        clock.advance(299.999)
        second = await storage.get_all_posts()

        assert first == second == [post_json()]
        assert route.call_count == 1

        clock.advance(0.002)
        await storage.get_all_posts()
        assert route.call_count == 2

    @pytest.mark.asyncio
    async def test_cached_list_unaffected_by_caller_changes(self, storage, api_mock):
        route = api_mock.get("/posts").mock(return_value=httpx.Response(200, json=[post_json()]))

        first = await storage.get_all_posts()
        first.append({"id": 99})
        first[0]["title"] = "Edited locally"
        second = await storage.get_all_posts()
        second.clear()

        assert await storage.get_all_posts() == [post_json()]
        assert route.call_count == 1

    @pytest.mark.asyncio
    async def test_filtered_list_not_cached(self, storage, api_mock):
        route = api_mock.get("/posts").mock(return_value=httpx.Response(200, json=[]))

        await storage.get_all_posts(status="published")
        await storage.get_all_posts(status="published")

        assert route.call_count == 2
        assert route.calls.last.request.url.params["status"] == "published"
        assert "all_posts" not in storage.cache

    @pytest.mark.asyncio
    async def test_single_post_cached(self, storage, api_mock):
        route = api_mock.get("/posts/1").mock(return_value=httpx.Response(200, json=post_json()))

        await storage.get_post(1)
        await storage.get_post(1)

        assert route.call_count == 1
        assert storage.cache_stats()["totalEntries"] == 1

    @pytest.mark.asyncio
    async def test_create_invalidates_list(self, storage, api_mock):
        list_route = api_mock.get("/posts").mock(return_value=httpx.Response(200, json=[]))
        api_mock.post("/posts").mock(return_value=httpx.Response(201, json=post_json()))

        await storage.get_all_posts()
        await storage.create_post({"title": "Hello World", "content": CONTENT})
        await storage.get_all_posts()

        assert list_route.call_count == 2

    @pytest.mark.asyncio
    async def test_update_refreshes_post_entry(self, storage, api_mock):
        get_route = api_mock.get("/posts/1").mock(return_value=httpx.Response(200, json=post_json()))
        api_mock.put("/posts/1").mock(return_value=httpx.Response(200, json=post_json(title="Renamed")))

        await storage.update_post(1, {"title": "Renamed", "content": CONTENT})
        post = await storage.get_post(1)

        assert post["title"] == "Renamed"
        assert get_route.call_count == 0

    @pytest.mark.asyncio
    async def test_delete_clears_cache(self, storage, api_mock):
        api_mock.get("/posts/1").mock(return_value=httpx.Response(200, json=post_json()))
        api_mock.get("/posts").mock(return_value=httpx.Response(200, json=[post_json()]))
        api_mock.delete("/posts/1").mock(return_value=httpx.Response(200, json={"success": True, "deletedId": 1}))

        await storage.get_post(1)
        await storage.get_all_posts()
        result = await storage.delete_post(1)

        assert result == {"success": True, "deletedId": 1}
        assert storage.cache_stats()["totalEntries"] == 0

    @pytest.mark.asyncio
    async def test_clear_cache(self, storage, api_mock):
        api_mock.get("/posts/1").mock(return_value=httpx.Response(200, json=post_json()))
        await storage.get_post(1)

        storage.clear_cache("post_1")
        assert storage.cache_stats() == {"totalEntries": 0, "entries": []}


class TestRetries:
    """Retry and error classification test cases."""

    @pytest.mark.asyncio
    async def test_server_errors_retried_with_backoff(self, storage, api_mock, sleeps):
        route = api_mock.get("/posts").mock(
            side_effect=[
                httpx.Response(503),
                httpx.Response(503),
                httpx.Response(200, json=[post_json()]),
            ]
        )

        posts = await storage.get_all_posts()

        assert posts == [post_json()]
        assert route.call_count == 3
        assert sleeps == [1, 2]

    @pytest.mark.asyncio
    async def test_retries_exhausted(self, storage, api_mock, sleeps, notifications):
        route = api_mock.get("/posts/1").mock(return_value=httpx.Response(500, json={"error": "db down"}))

        with pytest.raises(ServerError) as exc_info:
            await storage.get_post(1)

        assert route.call_count == 4
        assert sleeps == [1, 2, 4]
        assert exc_info.value.message == "db down"
        assert notifications[-1].level == NotificationLevel.ERROR
        assert notifications[-1].message == "Server error occurred. Please try again in a few moments."

    @pytest.mark.asyncio
    async def test_not_found_not_retried(self, storage, api_mock, sleeps):
        route = api_mock.get("/posts/9").mock(return_value=httpx.Response(404, json={"error": "Post not found"}))

        with pytest.raises(NotFoundError):
            await storage.get_post(9)

        assert route.call_count == 1
        assert sleeps == []

    @pytest.mark.asyncio
    async def test_client_error_message_from_body(self, storage, api_mock):
        api_mock.post("/posts").mock(
            return_value=httpx.Response(400, json={"error": 'Slug "taken" already exists'})
        )

        with pytest.raises(ClientError) as exc_info:
            await storage.create_post({"title": "Copy", "slug": "taken", "content": CONTENT})

        assert exc_info.value.message == 'Slug "taken" already exists'
        assert exc_info.value.status == 400

    @pytest.mark.asyncio
    async def test_timeout_classified(self, storage, api_mock, sleeps):
        route = api_mock.get("/posts").mock(side_effect=httpx.ReadTimeout)

        with pytest.raises(RequestTimeoutError):
            await storage.get_all_posts()

        assert route.call_count == 4
        assert len(sleeps) == 3

    @pytest.mark.asyncio
    async def test_connect_error_classified(self, storage, api_mock, notifications):
        api_mock.get("/posts").mock(side_effect=httpx.ConnectError)

        with pytest.raises(NetworkError) as exc_info:
            await storage.get_all_posts()

        assert exc_info.value.kind == ErrorKind.NETWORK_ERROR
        assert notifications[-1].message == (
            "Unable to connect to the server. Please check your internet connection."
        )

    @pytest.mark.asyncio
    async def test_offline_fails_without_request(self, storage, api_mock, sleeps):
        route = api_mock.get("/posts").mock(return_value=httpx.Response(200, json=[]))
        storage.set_online(False)

        with pytest.raises(OfflineError) as exc_info:
            await storage.get_all_posts()

        assert exc_info.value.message == "No internet connection"
        assert exc_info.value.kind == ErrorKind.NETWORK_ERROR
        assert route.call_count == 0
        assert sleeps == []


class TestSavePost:
    """Create-vs-update resolution test cases."""

    @pytest.mark.asyncio
    async def test_existing_post_updated(self, storage, api_mock, notifications):
        api_mock.get("/posts/5").mock(return_value=httpx.Response(200, json=post_json(5)))
        put_route = api_mock.put("/posts/5").mock(return_value=httpx.Response(200, json=post_json(5)))
        post_route = api_mock.post("/posts")

        await storage.save_post({"id": 5, "title": "Hello World", "content": CONTENT})

        assert put_route.call_count == 1
        assert post_route.call_count == 0
        assert notifications[-1].message == 'Post "Hello World" updated successfully!'

    @pytest.mark.asyncio
    async def test_missing_post_created_without_id(self, storage, api_mock, notifications):
        api_mock.get("/posts/5").mock(return_value=httpx.Response(404, json={"error": "Post not found"}))
        post_route = api_mock.post("/posts").mock(return_value=httpx.Response(201, json=post_json(12)))

        post = await storage.save_post({"id": 5, "title": "Hello World", "content": CONTENT})

        assert post["id"] == 12
        assert "id" not in request_body(post_route)
        assert [n.message for n in notifications] == ['Post "Hello World" created successfully!']

    @pytest.mark.asyncio
    @pytest.mark.parametrize("provisional_id", [None, "post_1700000000000_x1y2z3", 0, -3, True])
    async def test_non_persisted_id_creates(self, storage, api_mock, provisional_id):
        post_route = api_mock.post("/posts").mock(return_value=httpx.Response(201, json=post_json(1)))

        await storage.save_post({"id": provisional_id, "title": "Hello World", "content": CONTENT})

        assert post_route.call_count == 1
        assert len(api_mock.calls) == 1
        assert "id" not in request_body(post_route)

    @pytest.mark.asyncio
    async def test_invalid_data_sends_nothing(self, storage, api_mock, notifications):
        with pytest.raises(ValidationError) as exc_info:
            await storage.save_post({"id": 5, "title": ""})

        assert exc_info.value.errors == ["Title is required", "Content is required"]
        assert not api_mock.calls
        assert notifications[-1].message == (
            "Please fix the following issues: Title is required, Content is required"
        )


class TestNotifications:
    """Notification test cases."""

    @pytest.mark.asyncio
    async def test_create_notifies_success(self, storage, api_mock, notifications):
        api_mock.post("/posts").mock(return_value=httpx.Response(201, json=post_json(title="Fresh")))

        await storage.create_post({"title": "Fresh", "content": CONTENT})

        assert notifications[-1].level == NotificationLevel.SUCCESS
        assert notifications[-1].message == 'Post "Fresh" created successfully!'
        assert notifications[-1].duration == 5.0

    @pytest.mark.asyncio
    async def test_delete_notifies(self, storage, api_mock, notifications):
        api_mock.delete("/posts/3").mock(return_value=httpx.Response(200, json={"success": True, "deletedId": 3}))

        await storage.delete_post(3)
        assert notifications[-1].message == "Post deleted successfully!"

    @pytest.mark.asyncio
    async def test_online_transitions(self, storage, notifications):
        storage.set_online(True)
        assert notifications == []

        storage.set_online(False)
        storage.set_online(True)

        assert [(n.level, n.message) for n in notifications] == [
            (NotificationLevel.WARNING, "You are offline. Some features may not work."),
            (NotificationLevel.SUCCESS, "Connection restored"),
        ]

    @pytest.mark.asyncio
    async def test_unsubscribe_and_broken_listener(self, storage, notifications):
        received = []

        def broken(notification):
            raise RuntimeError("listener bug")

        storage.notifier.subscribe(broken)
        unsubscribe = storage.notifier.subscribe(received.append)
        storage.notifier.notify("one")
        unsubscribe()
        storage.notifier.notify("two")

        assert [n.message for n in received] == ["one"]
        assert [n.message for n in notifications] == ["one", "two"]


class TestExtras:
    """Health, search, import/export and statistics test cases."""

    @pytest.mark.asyncio
    async def test_health_ok(self, storage, api_mock):
        api_mock.get("/health").mock(return_value=httpx.Response(200, json={"status": "OK"}))

        result = await storage.check_server_health()
        assert result == {"is_healthy": True, "data": {"status": "OK"}}

    @pytest.mark.asyncio
    async def test_health_down(self, storage, api_mock):
        api_mock.get("/health").mock(side_effect=httpx.ConnectError)

        result = await storage.check_server_health()
        assert result["is_healthy"] is False
        assert isinstance(result["details"], NetworkError)

    @pytest.mark.asyncio
    async def test_search_drops_empty_filters(self, storage, api_mock):
        route = api_mock.get("/posts/search").mock(return_value=httpx.Response(200, json=[post_json()]))

        await storage.search_posts("hello", category="News")

        params = route.calls.last.request.url.params
        assert params["q"] == "hello"
        assert params["category"] == "News"
        assert "status" not in params

    @pytest.mark.asyncio
    async def test_bulk_delete(self, storage, api_mock, notifications):
        route = api_mock.post("/posts/bulk-delete").mock(
            return_value=httpx.Response(200, json={"deleted": [1, 2], "errors": []})
        )

        result = await storage.bulk_delete_posts([1, 2])

        assert result["deleted"] == [1, 2]
        assert request_body(route) == {"postIds": [1, 2]}
        assert notifications[-1].message == "2 posts deleted successfully!"

    @pytest.mark.asyncio
    async def test_import_collects_errors(self, storage, api_mock):
        api_mock.post("/posts").mock(return_value=httpx.Response(201, json=post_json(7)))

        result = await storage.import_posts([
            {"id": "old_1", "title": "Good", "content": CONTENT},
            {"title": "No content"},
        ])

        assert len(result["imported"]) == 1
        assert result["errors"] == [
            {"post": "No content", "error": "Validation failed: Content is required"}
        ]

    @pytest.mark.asyncio
    async def test_export_skips_unreadable(self, storage, api_mock):
        api_mock.get("/posts/1").mock(return_value=httpx.Response(200, json=post_json(1)))
        api_mock.get("/posts/2").mock(return_value=httpx.Response(404, json={"error": "Post not found"}))

        posts = await storage.export_posts([1, 2])
        assert [p["id"] for p in posts] == [1]

    @pytest.mark.asyncio
    async def test_statistics(self, storage, api_mock):
        api_mock.get("/posts").mock(
            return_value=httpx.Response(
                200,
                json=[
                    post_json(1, status="published", category="News", author="Ann", readTime=4),
                    post_json(2, status="draft", category="News", author="Ann", readTime=3),
                    post_json(3, status="draft", category="Tech", author="Bo", readTime=0),
                ],
            )
        )

        stats = await storage.get_post_statistics()

        assert stats["total"] == 3
        assert stats["by_status"] == {"published": 1, "draft": 2}
        assert stats["by_category"] == {"News": 2, "Tech": 1}
        assert stats["by_author"] == {"Ann": 2, "Bo": 1}
        assert stats["total_read_time"] == 7
        assert stats["avg_read_time"] == 2
        assert len(stats["recent_posts"]) == 3

    @pytest.mark.asyncio
    async def test_statistics_on_failure(self, storage, api_mock):
        api_mock.get("/posts").mock(return_value=httpx.Response(404))

        stats = await storage.get_post_statistics()
        assert stats["error"] is True
        assert stats["total"] == 0
