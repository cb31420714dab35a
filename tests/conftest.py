"""
Pytest configuration and fixtures.
"""

import json
import pytest
import pytest_asyncio
import respx
from django.test import Client

from apps.blog.repository import PostRepository
from client import PostStorageService, StorageConfig


class APIClient:
    """Wrapper around Django test client for API testing."""

    def __init__(self):
        self.client = Client()

    def _make_request(self, method, path, data=None, headers=None):
        """Make HTTP request."""
        kwargs = {"content_type": "application/json"}

        if headers:
            kwargs.update(headers)

        if data is not None:
            kwargs["data"] = json.dumps(data)

        # Prepend /api if not present
        if not path.startswith("/api"):
            path = f"/api{path}"

        response = getattr(self.client, method.lower())(path, **kwargs)
        return APIResponse(response)

    def get(self, path, headers=None, **kwargs):
        return self._make_request("GET", path, headers=headers)

    def post(self, path, json=None, headers=None, **kwargs):
        return self._make_request("POST", path, data=json, headers=headers)

    def put(self, path, json=None, headers=None, **kwargs):
        return self._make_request("PUT", path, data=json, headers=headers)

    def delete(self, path, headers=None, **kwargs):
        return self._make_request("DELETE", path, headers=headers)


class APIResponse:
    """Wrapper around Django response for easier testing."""

    def __init__(self, response):
        self._response = response
        self.status_code = response.status_code

    def json(self):
        return json.loads(self._response.content)


@pytest.fixture
def api_client():
    """API test client."""
    return APIClient()


@pytest.fixture
def repository(db):
    """Post repository backed by the test database."""
    return PostRepository()


@pytest.fixture
def sample_content():
    """Editor block content."""
    return {
        "time": 1700000000000,
        "blocks": [
            {"type": "header", "data": {"text": "Hello", "level": 2}},
            {"type": "paragraph", "data": {"text": "First paragraph of the post."}},
        ],
        "version": "2.28.0",
    }


@pytest.fixture
def make_post(repository, sample_content):
    """Factory creating posts through the repository."""

    def _make_post(title="Hello World", **fields):
        fields.setdefault("content", sample_content)
        return repository.create({"title": title, **fields})

    return _make_post


# ============ Storage client fixtures ============

BASE_URL = "http://blog.test/api"


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sleeps():
    """Backoff delays requested by the retry loop."""
    return []


@pytest.fixture
def notifications():
    return []


@pytest.fixture
def api_mock():
    """respx router for the storage client's base URL."""
    with respx.mock(base_url=BASE_URL, assert_all_called=False) as router:
        yield router


@pytest_asyncio.fixture
async def storage(clock, sleeps, notifications):
    """PostStorageService with a fake clock and instant retries."""

    async def fake_sleep(seconds):
        sleeps.append(seconds)

    service = PostStorageService(StorageConfig(base_url=BASE_URL), clock=clock, sleep=fake_sleep)
    service.notifier.subscribe(notifications.append)
    yield service
    await service.aclose()
