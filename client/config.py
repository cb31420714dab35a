"""
Configuration for the post storage façade.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass
class StorageConfig:
    """Settings for PostStorageService."""
    base_url: str = "http://localhost:3001/api"
    cache_ttl: float = 300.0          # seconds a cached response stays fresh
    max_retries: int = 3              # retries after the first attempt
    retry_delay: float = 1.0          # first backoff delay, doubled per retry
    timeout: float = 10.0             # per-attempt request timeout
    autosave_interval: float = 30.0
    autosave_max_failures: int = 3

    @classmethod
    def from_env(cls) -> "StorageConfig":
        """Build config from POST_STORAGE_* environment variables."""
        load_dotenv()
        defaults = cls()
        return cls(
            base_url=os.getenv("POST_STORAGE_BASE_URL", defaults.base_url),
            cache_ttl=float(os.getenv("POST_STORAGE_CACHE_TTL", defaults.cache_ttl)),
            max_retries=int(os.getenv("POST_STORAGE_MAX_RETRIES", defaults.max_retries)),
            retry_delay=float(os.getenv("POST_STORAGE_RETRY_DELAY", defaults.retry_delay)),
            timeout=float(os.getenv("POST_STORAGE_TIMEOUT", defaults.timeout)),
            autosave_interval=float(os.getenv("POST_STORAGE_AUTOSAVE_INTERVAL", defaults.autosave_interval)),
            autosave_max_failures=int(
                os.getenv("POST_STORAGE_AUTOSAVE_MAX_FAILURES", defaults.autosave_max_failures)
            ),
        )
