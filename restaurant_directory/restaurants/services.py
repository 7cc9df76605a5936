from __future__ import annotations

from .cache import InMemoryRestaurantCache, RedisRestaurantCache, RestaurantCache
from .config import DEFAULT_SERVICE_CONFIG, ServiceConfig
from .coordinator import RestaurantDirectory
from .data_store import DynamoRecordStore, InMemoryRecordStore, RecordStore
from .query import RestaurantQueryService

_store: RecordStore | None = None
_directory: RestaurantDirectory | None = None
_query_service: RestaurantQueryService | None = None


def build_store(config: ServiceConfig = DEFAULT_SERVICE_CONFIG) -> RecordStore:
    if config.store_backend == "memory":
        return InMemoryRecordStore()
    if config.store_backend == "dynamodb":
        return DynamoRecordStore.from_config(config)
    raise ValueError(f"Unknown store backend: {config.store_backend!r}")


def build_cache(config: ServiceConfig = DEFAULT_SERVICE_CONFIG) -> RestaurantCache | None:
    """Return the configured cache, or None when caching is off."""
    if not config.use_cache:
        return None
    if config.cache_backend == "memory":
        return InMemoryRestaurantCache()
    if config.cache_backend == "redis":
        return RedisRestaurantCache.from_config(config)
    raise ValueError(f"Unknown cache backend: {config.cache_backend!r}")


def _get_store() -> RecordStore:
    global _store
    if _store is None:
        _store = build_store()
    return _store


def get_config() -> ServiceConfig:
    return DEFAULT_SERVICE_CONFIG


def get_directory() -> RestaurantDirectory:
    """Return the process-wide directory, building it on first call."""
    global _directory
    if _directory is None:
        _directory = RestaurantDirectory(
            _get_store(),
            build_cache(),
            use_cache=DEFAULT_SERVICE_CONFIG.use_cache,
        )
    return _directory


def get_query_service() -> RestaurantQueryService:
    global _query_service
    if _query_service is None:
        _query_service = RestaurantQueryService(_get_store())
    return _query_service
