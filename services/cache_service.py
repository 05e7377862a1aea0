import json
from typing import Any, Callable, Optional

from config.redis_config import UpstashRedisSync
from utils.logging_utils import get_sanitized_logger

logger = get_sanitized_logger(__name__)


class CacheService:
    """
    JSON values over the Upstash REST client.

    Keys look like ``products:list:page:1:limit:20:...``. Every failure
    degrades to a cache miss; the cache never breaks a request. Without a
    configured client every call is a no-op.
    """

    def __init__(self, client: Optional[UpstashRedisSync] = None, default_ttl: int = 300, enabled: bool = True):
        self.redis_client = client
        self.enabled = enabled and client is not None and client.enabled
        self.default_ttl = default_ttl

    def is_available(self) -> bool:
        return self.enabled

    def ping(self) -> bool:
        return self.enabled and self.redis_client.is_available()

    def get(self, key: str) -> Optional[Any]:
        if not self.enabled:
            return None
        raw = self.redis_client.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning(f"⚠️ Ignoring unreadable cache entry {key}: {e}")
            return None

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        if not self.enabled:
            return False
        try:
            payload = value if isinstance(value, str) else json.dumps(value)
        except (TypeError, ValueError) as e:
            logger.error(f"Cannot cache {key}: {e}")
            return False
        return self.redis_client.set(key, payload, ttl=ttl or self.default_ttl)

    def delete(self, key: str) -> bool:
        return self.enabled and self.redis_client.delete(key) > 0

    def delete_pattern(self, pattern: str) -> int:
        """Delete every key matching a Redis glob; returns how many went."""
        if not self.enabled:
            return 0
        matching = self.redis_client.keys(pattern)
        return self.redis_client.delete(*matching) if matching else 0

    def get_or_set(self, key: str, callback: Callable[[], Any], ttl: Optional[int] = None):
        cached = self.get(key)
        if cached is not None:
            logger.debug(f"Cache HIT: {key}")
            return cached

        logger.debug(f"Cache MISS: {key}")
        value = callback()
        self.set(key, value, ttl)
        return value

    @staticmethod
    def build_key(*parts, **fields) -> str:
        """``build_key("products", "id", id="001")`` -> ``products:id:id:001``; None renders empty."""
        segments = [str(part) for part in parts]
        for name, value in fields.items():
            segments.extend((name, "" if value is None else str(value)))
        return ":".join(segments)
