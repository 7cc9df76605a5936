from __future__ import annotations

import json
import logging
import threading
from typing import Any, Protocol

import redis
from redis.exceptions import RedisError

from .config import DEFAULT_SERVICE_CONFIG, ServiceConfig
from .errors import BackendError
from .models import Restaurant

logger = logging.getLogger(__name__)


class RestaurantCache(Protocol):
    def get(self, name: str) -> Restaurant | None: ...

    def set(self, name: str, restaurant: Restaurant) -> None: ...

    def delete(self, name: str) -> None: ...

    def get_stats(self) -> dict[str, Any]: ...


class _HitCounter:
    def __init__(self) -> None:
        self.hits = 0
        self.misses = 0
        self._lock = threading.Lock()

    def record(self, hit: bool) -> None:
        with self._lock:
            if hit:
                self.hits += 1
            else:
                self.misses += 1

    def stats(self, size: int | None) -> dict[str, Any]:
        total = self.hits + self.misses
        return {
            "size": size,
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": round(self.hits / total * 100, 1) if total > 0 else 0.0,
        }

    def reset(self) -> None:
        with self._lock:
            self.hits = 0
            self.misses = 0


class RedisRestaurantCache:
    """Full-record mirror in Redis. Entries never expire."""

    def __init__(self, client: redis.Redis, key_prefix: str = "restaurant:"):
        self._client = client
        self._key_prefix = key_prefix
        self._counter = _HitCounter()

    @classmethod
    def from_config(cls, config: ServiceConfig = DEFAULT_SERVICE_CONFIG) -> "RedisRestaurantCache":
        client = redis.Redis.from_url(config.cache_endpoint, decode_responses=True)
        return cls(client, key_prefix=config.cache_key_prefix)

    def _key(self, name: str) -> str:
        return f"{self._key_prefix}{name}"

    def get(self, name: str) -> Restaurant | None:
        try:
            raw = self._client.get(self._key(name))
        except RedisError as exc:
            raise BackendError("Error reading cache", str(exc)) from exc

        if raw is None:
            self._counter.record(hit=False)
            return None
        try:
            restaurant = Restaurant.from_item(json.loads(raw))
        except ValueError as exc:
            raise BackendError("Error decoding cached restaurant", str(exc)) from exc
        self._counter.record(hit=True)
        return restaurant

    def set(self, name: str, restaurant: Restaurant) -> None:
        try:
            self._client.set(self._key(name), json.dumps(restaurant.to_item()))
        except RedisError as exc:
            raise BackendError("Error writing cache", str(exc)) from exc

    def delete(self, name: str) -> None:
        try:
            self._client.delete(self._key(name))
        except RedisError as exc:
            raise BackendError("Error deleting from cache", str(exc)) from exc

    def get_stats(self) -> dict[str, Any]:
        # Key count is not tracked on a shared cluster.
        return self._counter.stats(size=None)

    def reset_stats(self) -> None:
        self._counter.reset()


class InMemoryRestaurantCache:
    def __init__(self) -> None:
        self._entries: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()
        self._counter = _HitCounter()

    def get(self, name: str) -> Restaurant | None:
        with self._lock:
            item = self._entries.get(name)
        self._counter.record(hit=item is not None)
        return Restaurant.from_item(item) if item is not None else None

    def set(self, name: str, restaurant: Restaurant) -> None:
        with self._lock:
            self._entries[name] = restaurant.to_item()

    def delete(self, name: str) -> None:
        with self._lock:
            self._entries.pop(name, None)

    def get_stats(self) -> dict[str, Any]:
        with self._lock:
            size = len(self._entries)
        return self._counter.stats(size=size)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        self._counter.reset()
