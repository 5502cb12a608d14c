import json
import logging
import os
import threading
from pathlib import Path
from typing import Dict, Optional

import redis
from redis.exceptions import RedisError

from storefront.core.config import settings
from storefront.interfaces.IKeyValueStore import IKeyValueStore

logger = logging.getLogger(__name__)


class MemoryKeyValueStore(IKeyValueStore):
    """Process-local storage. Used by tests and as the Redis fallback."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def clear(self, key: str) -> None:
        self._data.pop(key, None)


class FileKeyValueStore(IKeyValueStore):
    """
    All keys in one JSON object on disk, the device-local counterpart of a
    browser's localStorage. Writes go through a temp file and a rename.
    """

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read_all(self) -> Dict[str, str]:
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Storage file {self.path} unreadable ({e}); starting empty")
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(data, f)
        os.replace(tmp, self.path)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read_all()
            data[key] = value
            self._write_all(data)

    def clear(self, key: str) -> None:
        with self._lock:
            data = self._read_all()
            if data.pop(key, None) is not None:
                self._write_all(data)


class RedisKeyValueStore(IKeyValueStore):
    """
    Keys live under ``shopper:<session_id>:<key>`` with a TTL.
    When Redis is unreachable the store keeps working from RAM.
    """

    def __init__(
        self,
        session_id: str,
        url: Optional[str] = settings.REDIS_URL,
        ttl: int = settings.CART_SESSION_TTL,
        client: Optional[redis.Redis] = None,
    ):
        self.session_id = session_id
        self.ttl = ttl
        self._memory_store = MemoryKeyValueStore()
        self.redis_available = False

        # 1. Primary Memory (Redis)
        if client is not None:
            self.redis = client
            self.redis_available = True
        elif url:
            try:
                self.redis = redis.from_url(
                    url,
                    decode_responses=True,
                    socket_connect_timeout=1  # Fail fast if Redis is down
                )
                self.redis.ping()
                self.redis_available = True
                logger.info("✅ RedisKeyValueStore: Connected to Redis.")
            except RedisError as e:
                logger.warning(f"⚠️ RedisKeyValueStore: Redis unreachable ({e}). Using RAM fallback.")
        else:
            logger.info("RedisKeyValueStore: no REDIS_URL configured. Using RAM.")

    def _key(self, key: str) -> str:
        return f"shopper:{self.session_id}:{key}"

    def get(self, key: str) -> Optional[str]:
        if self.redis_available:
            try:
                value = self.redis.get(self._key(key))
                if value is not None:
                    return value
            except RedisError as e:
                self._handle_redis_error(e)
        return self._memory_store.get(key)

    def set(self, key: str, value: str) -> None:
        if self.redis_available:
            try:
                self.redis.setex(self._key(key), self.ttl, value)
            except RedisError as e:
                self._handle_redis_error(e)
        # Always write to RAM so a later Redis failure doesn't lose the value
        self._memory_store.set(key, value)

    def clear(self, key: str) -> None:
        if self.redis_available:
            try:
                self.redis.delete(self._key(key))
            except RedisError as e:
                self._handle_redis_error(e)
        self._memory_store.clear(key)

    def _handle_redis_error(self, e: RedisError) -> None:
        """Log and stop using Redis for the rest of this store's life."""
        logger.error(f"❌ Redis Error: {e}. Switching to RAM mode.")
        self.redis_available = False
