"""Repositories for users, mentors and sessions.

Handlers never touch module-level collections; they receive a repository.
``InMemoryRepository`` keeps items in insertion order for the life of the
process, ``RedisRepository`` stores one JSON document per item in a Redis
hash so the data survives restarts.
"""
from typing import Dict, Generic, List, Optional, Protocol, Type, TypeVar

import redis
from pydantic import BaseModel

from app.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)


class Repository(Protocol[T]):
    def add(self, item: T) -> T: ...

    def get(self, item_id: str) -> Optional[T]: ...

    def replace(self, item: T) -> T: ...

    def delete(self, item_id: str) -> Optional[T]: ...

    def list(self) -> List[T]: ...


class InMemoryRepository(Generic[T]):
    """Dict-backed repository keyed by the item's ``id``."""

    def __init__(self, items: Optional[List[T]] = None):
        self._items: Dict[str, T] = {item.id: item for item in items or []}

    def add(self, item: T) -> T:
        self._items[item.id] = item
        return item

    def get(self, item_id: str) -> Optional[T]:
        return self._items.get(item_id)

    def replace(self, item: T) -> T:
        self._items[item.id] = item
        return item

    def delete(self, item_id: str) -> Optional[T]:
        return self._items.pop(item_id, None)

    def list(self) -> List[T]:
        return list(self._items.values())


class RedisRepository(Generic[T]):
    """Repository storing items as JSON values of one Redis hash.

    Example:
        >>> users = RedisRepository(User, create_redis_client(), "users")
        >>> users.add(User(name="Meena", phone="+91981234"))
    """

    def __init__(self, model: Type[T], redis_client: redis.Redis, name: str, key_prefix: str = "voicementor:"):
        self.model = model
        self.redis = redis_client
        self.key = f"{key_prefix}{name}"

    def _load(self, raw) -> T:
        return self.model.model_validate_json(raw)

    def add(self, item: T) -> T:
        self.redis.hset(self.key, item.id, item.model_dump_json(by_alias=True))
        return item

    def get(self, item_id: str) -> Optional[T]:
        raw = self.redis.hget(self.key, item_id)
        return self._load(raw) if raw is not None else None

    def replace(self, item: T) -> T:
        return self.add(item)

    def delete(self, item_id: str) -> Optional[T]:
        item = self.get(item_id)
        if item is not None:
            self.redis.hdel(self.key, item_id)
            logger.debug(f"Deleted {item_id} from {self.key}")
        return item

    def list(self) -> List[T]:
        return [self._load(raw) for raw in self.redis.hvals(self.key)]
