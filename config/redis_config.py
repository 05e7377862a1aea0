"""
Upstash Redis configuration: sync REST client.
Uses the Upstash REST API through ``requests`` instead of a Redis socket.
"""
from typing import List, Optional

import requests

from utils.logging_utils import get_sanitized_logger

logger = get_sanitized_logger(__name__)


class UpstashRedisSync:
    """Synchronous wrapper for Upstash Redis (REST API)."""

    def __init__(self, raw_url: Optional[str], token: Optional[str], timeout: float = 2.0):
        self.timeout = timeout

        if not raw_url or not token:
            logger.warning("⚠️ Upstash Redis NOT configured")
            self.enabled = False
            return

        self.url = raw_url.rstrip("/")
        self.token = token
        self.session = requests.Session()

        logger.info("✅ Upstash Redis REST client configured")
        self.enabled = True

    # ---- PRIVATE HEADER ----
    def _headers(self):
        return {"Authorization": f"Bearer {self.token}"}

    def _command(self, *args):
        """POST a Redis command as a JSON array, return its ``result``."""
        r = self.session.post(self.url, headers=self._headers(), json=list(args), timeout=self.timeout)
        r.raise_for_status()
        return r.json().get("result")

    # ---- GET ----
    def get(self, key: str) -> Optional[str]:
        if not self.enabled:
            return None

        try:
            return self._command("GET", key)
        except Exception as e:
            logger.error(f"Redis GET error: {e}")
            return None

    # ---- SET ----
    def set(self, key: str, value: str, ttl: Optional[int] = None) -> bool:
        if not self.enabled:
            return False

        try:
            if ttl:
                self._command("SET", key, value, "EX", ttl)
            else:
                self._command("SET", key, value)
            return True
        except Exception as e:
            logger.error(f"Redis SET error: {e}")
            return False

    # ---- DELETE ----
    def delete(self, *keys: str) -> int:
        if not self.enabled or not keys:
            return 0

        try:
            return int(self._command("DEL", *keys) or 0)
        except Exception as e:
            logger.error(f"Redis DEL error: {e}")
            return 0

    # ---- KEYS ----
    def keys(self, pattern: str) -> List[str]:
        if not self.enabled:
            return []

        try:
            return list(self._command("KEYS", pattern) or [])
        except Exception as e:
            logger.error(f"Redis KEYS error: {e}")
            return []

    # ---- HEALTH CHECK ----
    def is_available(self) -> bool:
        if not self.enabled:
            return False

        try:
            return self._command("PING") == "PONG"
        except Exception:
            return False
