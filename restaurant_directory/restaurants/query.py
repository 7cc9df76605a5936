from __future__ import annotations

from .data_store import RecordStore
from .models import RestaurantView

MIN_LIMIT = 10
MAX_LIMIT = 100


def clamp_limit(limit: int | None) -> int | None:
    """Clamp a requested limit into [MIN_LIMIT, MAX_LIMIT]; None means no limit."""
    if limit is None:
        return None
    return max(MIN_LIMIT, min(MAX_LIMIT, limit))


class RestaurantQueryService:
    """Filtered listings straight from the durable store. Never cached."""

    def __init__(self, store: RecordStore):
        self.store = store

    def query(
        self,
        cuisine: str | None = None,
        region: str | None = None,
        limit: int | None = None,
    ) -> list[RestaurantView]:
        filters: dict[str, str] = {}
        if cuisine is not None:
            filters["cuisine"] = cuisine
        if region is not None:
            filters["region"] = region

        restaurants = self.store.scan(filters)
        restaurants.sort(key=lambda r: r.rating, reverse=True)

        effective = clamp_limit(limit)
        if effective is not None:
            restaurants = restaurants[:effective]
        return [r.to_view() for r in restaurants]
