"""
Cache-aside coordination for single-restaurant operations.

The durable store is always the source of truth. The cache mirrors full
records and is written through after every successful mutation:

* create  - cache hit short-circuits as duplicate; otherwise the store
            decides. The new record is then written to the cache.
* get     - a cache hit is returned as-is. A miss reads the store and
            does not repopulate the cache.
* delete  - the cache entry is invalidated before the store delete.
* rate    - read-modify-write against the store, then the merged record
            overwrites the cache entry.

Concurrent ``rate`` calls on the same name can lose an update: both may
read the same base record and the last store write wins.
"""

from __future__ import annotations

import logging
import math

from .cache import RestaurantCache
from .data_store import RecordStore
from .errors import BackendError, DuplicateError, NotFoundError
from .models import Restaurant, RestaurantView

logger = logging.getLogger(__name__)


def updated_mean(current: float, count: int, submitted: float) -> tuple[float, int]:
    """Fold one more rating into a running mean of ``count`` ratings."""
    return (current * count + submitted) / (count + 1), count + 1


class RestaurantDirectory:
    def __init__(
        self,
        store: RecordStore,
        cache: RestaurantCache | None = None,
        use_cache: bool = False,
    ):
        self.store = store
        self.cache = cache
        self.use_cache = use_cache and cache is not None

    # -- cache helpers ----------------------------------------------------

    def _cache_lookup(self, name: str) -> Restaurant | None:
        """Cache read where any failure counts as a miss."""
        if not self.use_cache:
            return None
        try:
            return self.cache.get(name)
        except BackendError:
            logger.warning("Cache read failed for %r, treating as miss", name, exc_info=True)
            return None

    def _cache_write_through(self, restaurant: Restaurant) -> None:
        if not self.use_cache:
            return
        try:
            self.cache.set(restaurant.name, restaurant)
        except BackendError:
            logger.warning(
                "Cache write failed for %r, record is durable", restaurant.name, exc_info=True
            )

    # -- operations -------------------------------------------------------

    def create(self, name: str, cuisine: str, region: str) -> Restaurant:
        if self._cache_lookup(name) is not None:
            raise DuplicateError(name)

        if self.store.get(name) is not None:
            raise DuplicateError(name)

        restaurant = Restaurant(name=name, cuisine=cuisine, region=region, rating=0.0)
        self.store.put(restaurant)
        logger.info("Created restaurant %r", name)

        self._cache_write_through(restaurant)
        return restaurant

    def get(self, name: str) -> RestaurantView:
        cached = self._cache_lookup(name)
        if cached is not None:
            logger.debug("Cache hit for %r", name)
            return cached.to_view()

        restaurant = self.store.get(name)
        if restaurant is None:
            raise NotFoundError(name)
        return restaurant.to_view()

    def delete(self, name: str) -> None:
        # Invalidate first so no reader can see the entry after the record is gone.
        # Unlike write-through, a failed invalidation is not swallowed: it aborts
        # with BackendError before the store is touched, so a stale hit cannot
        # outlive the record.
        if self.use_cache:
            self.cache.delete(name)

        if not self.store.delete(name):
            raise NotFoundError(name)
        logger.info("Deleted restaurant %r", name)

    def rate(self, name: str, rating: float) -> Restaurant:
        if not math.isfinite(rating):
            raise BackendError("Error updating rating", "rating must be a finite number")

        current = self.store.get(name)
        if current is None:
            raise NotFoundError(name)

        new_rating, new_count = updated_mean(current.rating, current.num_ratings, rating)
        self.store.update(name, {"rating": new_rating, "numRatings": new_count})
        logger.info("Rated %r: %.3f over %d ratings", name, new_rating, new_count)

        merged = current.model_copy(update={"rating": new_rating, "num_ratings": new_count})
        self._cache_write_through(merged)
        return merged

    def cache_stats(self) -> dict:
        if self.cache is None:
            stats = {"size": None, "hits": 0, "misses": 0, "hit_rate": 0.0}
        else:
            stats = self.cache.get_stats()
        return {"enabled": self.use_cache, **stats}
