"""Durable key-value stores for persisted state slices.

Values are opaque strings (the persistence adapter writes JSON). Writes are
last-writer-wins per key; there is no cross-key transaction.
"""
from typing import Dict, Optional, Protocol

import redis

from app.core.logging import get_logger

logger = get_logger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> bool: ...

    def delete(self, key: str) -> bool: ...


class InMemoryKeyValueStore:
    """Process-local store; contents are lost on restart."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> bool:
        self._data[key] = value
        return True

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def __contains__(self, key: str) -> bool:
        return key in self._data


class RedisKeyValueStore:
    """Redis-backed store with an optional key prefix.

    Example:
        >>> store = RedisKeyValueStore(create_redis_client(), key_prefix="vm:")
        >>> store.set("voicementor_user", '{"id": "u-1"}')
        True
    """

    def __init__(self, redis_client: redis.Redis, key_prefix: str = ""):
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _make_key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if absent or Redis fails."""
        try:
            data = self.redis.get(self._make_key(key))
            if data is None:
                logger.debug(f"Key not found: {key}", extra={"key": key})
                return None
            return data.decode("utf-8") if isinstance(data, bytes) else data
        except redis.RedisError as e:
            logger.error(f"Error reading {key}: {e}", extra={"key": key}, exc_info=True)
            return None

    def set(self, key: str, value: str) -> bool:
        try:
            self.redis.set(self._make_key(key), value)
            logger.debug(f"Key saved: {key}", extra={"key": key})
            return True
        except redis.RedisError as e:
            logger.error(f"Error saving {key}: {e}", extra={"key": key}, exc_info=True)
            return False

    def delete(self, key: str) -> bool:
        try:
            return bool(self.redis.delete(self._make_key(key)))
        except redis.RedisError as e:
            logger.error(f"Error deleting {key}: {e}", extra={"key": key}, exc_info=True)
            return False
