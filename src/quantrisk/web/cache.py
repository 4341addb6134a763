"""In-memory cache for deterministic (seeded) analysis responses."""

import hashlib
import json
import logging
from typing import Any

from cachetools import TTLCache

logger = logging.getLogger(__name__)


class CacheService:
    """TTL-bounded response cache keyed on a request fingerprint."""

    def __init__(self, ttl: int = 300, maxsize: int = 256):
        self._ttl = ttl
        self._memory = TTLCache(maxsize=maxsize, ttl=ttl)

    @staticmethod
    def make_key(prefix: str, payload: dict[str, Any]) -> str:
        """Stable key from a JSON-serialisable request payload."""
        digest = hashlib.sha256(
            json.dumps(payload, sort_keys=True, default=str).encode()
        ).hexdigest()
        return f"{prefix}:{digest}"

    async def get(self, key: str) -> Any | None:
        """Get cached value by key."""
        return self._memory.get(key)

    async def set(self, key: str, value: Any) -> None:
        """Set cached value."""
        self._memory[key] = value
