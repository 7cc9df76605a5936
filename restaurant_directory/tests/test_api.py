from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from restaurant_directory.app import app
from restaurant_directory.restaurants.cache import InMemoryRestaurantCache
from restaurant_directory.restaurants.config import ServiceConfig
from restaurant_directory.restaurants.coordinator import RestaurantDirectory
from restaurant_directory.restaurants.data_store import InMemoryRecordStore
from restaurant_directory.restaurants.errors import BackendError
from restaurant_directory.restaurants.models import Restaurant
from restaurant_directory.restaurants.query import RestaurantQueryService
from restaurant_directory.restaurants.services import get_config, get_directory, get_query_service

client = TestClient(app)

_store = InMemoryRecordStore()
_cache = InMemoryRestaurantCache()


def _install(use_cache: bool = True, store=None) -> None:
    """Point the app at fresh in-memory backends."""
    _store.clear()
    _cache.clear()
    store = store or _store
    directory = RestaurantDirectory(store, _cache, use_cache=use_cache)
    queries = RestaurantQueryService(store)
    app.dependency_overrides[get_directory] = lambda: directory
    app.dependency_overrides[get_query_service] = lambda: queries


def _create(name, cuisine="Italian", region="North"):
    return client.post("/restaurants", json={"name": name, "cuisine": cuisine, "region": region})


# ── Public endpoints ─────────────────────────────────────────────────────


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_service_info_reports_configuration():
    app.dependency_overrides[get_config] = lambda: ServiceConfig(
        table_name="restaurants-test",
        aws_region="eu-west-1",
        cache_endpoint="redis://cache:6379/0",
    )
    try:
        resp = client.get("/")
    finally:
        del app.dependency_overrides[get_config]
    assert resp.status_code == 200
    assert resp.json() == {
        "cache_endpoint": "redis://cache:6379/0",
        "table_name": "restaurants-test",
        "aws_region": "eu-west-1",
    }


# ── Restaurant lifecycle ─────────────────────────────────────────────────


@pytest.mark.parametrize("use_cache", [True, False])
def test_restaurant_lifecycle(use_cache):
    _install(use_cache)

    assert _create("Pasta House").json() == {"success": True}

    resp = _create("Pasta House")
    assert resp.status_code == 409
    assert resp.json() == {"success": False, "message": "Restaurant already exists"}

    resp = client.post("/restaurants/rating", json={"name": "Pasta House", "rating": 4})
    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    assert _store.get("Pasta House").rating == 4.0
    assert _store.get("Pasta House").num_ratings == 1

    client.post("/restaurants/rating", json={"name": "Pasta House", "rating": 2})
    assert _store.get("Pasta House").num_ratings == 2

    resp = client.get("/restaurants/Pasta House")
    assert resp.status_code == 200
    assert resp.json() == {"name": "Pasta House", "cuisine": "Italian", "rating": 3.0, "region": "North"}

    resp = client.delete("/restaurants/Pasta House")
    assert resp.status_code == 200
    assert resp.json() == {"success": True}

    resp = client.get("/restaurants/Pasta House")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "message": "Restaurant not found"}


@pytest.mark.parametrize("use_cache", [True, False])
def test_delete_unknown_is_404(use_cache):
    _install(use_cache)
    resp = client.delete("/restaurants/Nowhere")
    assert resp.status_code == 404


@pytest.mark.parametrize("use_cache", [True, False])
def test_rate_unknown_is_404(use_cache):
    _install(use_cache)
    resp = client.post("/restaurants/rating", json={"name": "Nowhere", "rating": 3})
    assert resp.status_code == 404
    assert resp.json()["message"] == "Restaurant not found"


def test_rate_backend_failure_is_400():
    store = MagicMock()
    store.get.return_value = Restaurant(name="Pasta House", cuisine="Italian", region="North")
    store.update.side_effect = BackendError("Error updating restaurant", "ValidationException")
    _install(use_cache=False, store=store)

    resp = client.post("/restaurants/rating", json={"name": "Pasta House", "rating": 3})

    assert resp.status_code == 400
    assert resp.json() == {
        "success": False,
        "message": "Error updating restaurant",
        "error": "ValidationException",
    }


def test_create_validation_rejects_empty_name():
    _install()
    resp = client.post("/restaurants", json={"name": "", "cuisine": "Italian", "region": "North"})
    assert resp.status_code == 422


def test_create_validation_requires_cuisine_and_region():
    _install()
    resp = client.post("/restaurants", json={"name": "Pasta House"})
    assert resp.status_code == 422


def test_rate_validation_rejects_non_numeric_rating():
    _install()
    _create("Pasta House")
    resp = client.post("/restaurants/rating", json={"name": "Pasta House", "rating": "great"})
    assert resp.status_code == 422


@pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
def test_rate_rejects_non_finite_rating(literal):
    _install()
    _create("Pasta House")
    client.post("/restaurants/rating", json={"name": "Pasta House", "rating": 4})

    # Raw body: JSON encoders refuse to emit these literals themselves.
    resp = client.post(
        "/restaurants/rating",
        content=f'{{"name": "Pasta House", "rating": {literal}}}',
        headers={"Content-Type": "application/json"},
    )

    assert resp.status_code == 422
    assert resp.json()["detail"][0]["loc"] == ["body", "rating"]
    assert _store.get("Pasta House").num_ratings == 1
    assert client.get("/restaurants/Pasta House").json()["rating"] == 4.0


# ── Listings ─────────────────────────────────────────────────────────────


def _seed_listing() -> None:
    for i in range(15):
        _store.put(Restaurant(name=f"North-Italian-{i}", cuisine="Italian", region="North", rating=i % 5))
    for i in range(5):
        _store.put(Restaurant(name=f"South-Italian-{i}", cuisine="Italian", region="South", rating=4.5))
    for i in range(3):
        _store.put(Restaurant(name=f"North-Thai-{i}", cuisine="Thai", region="North", rating=1.0))


def test_list_by_cuisine_sorted_and_limited():
    _install()
    _seed_listing()

    resp = client.get("/restaurants/cuisine/Italian", params={"limit": 12})

    assert resp.status_code == 200
    body = resp.json()
    assert len(body) == 12
    ratings = [r["rating"] for r in body]
    assert ratings == sorted(ratings, reverse=True)
    assert set(body[0]) == {"name", "cuisine", "rating", "region"}


def test_list_small_limit_is_raised_to_ten():
    _install()
    _seed_listing()
    resp = client.get("/restaurants/cuisine/Italian", params={"limit": 2})
    assert len(resp.json()) == 10


def test_list_without_limit_returns_all():
    _install()
    _seed_listing()
    resp = client.get("/restaurants/cuisine/Italian")
    assert len(resp.json()) == 20


def test_list_by_region():
    _install()
    _seed_listing()
    body = client.get("/restaurants/region/North").json()
    assert len(body) == 18
    assert all(r["region"] == "North" for r in body)


def test_list_by_region_and_cuisine():
    _install()
    _seed_listing()
    body = client.get("/restaurants/region/North/cuisine/Thai", params={"limit": 50}).json()
    assert len(body) == 3
    assert all(r["cuisine"] == "Thai" and r["region"] == "North" for r in body)


def test_list_unknown_cuisine_is_empty():
    _install()
    resp = client.get("/restaurants/cuisine/Martian")
    assert resp.status_code == 200
    assert resp.json() == []


def test_list_backend_failure_is_400():
    store = MagicMock()
    store.scan.side_effect = BackendError("Error getting restaurants", "throttled")
    _install(store=store)

    resp = client.get("/restaurants/region/North")

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "Error getting restaurants", "error": "throttled"}


def test_listing_ignores_cache():
    _install(use_cache=True)
    _create("Pasta House")
    client.post("/restaurants/rating", json={"name": "Pasta House", "rating": 5})
    # Stale cache entry must not leak into listings.
    _cache.set("Pasta House", Restaurant(name="Pasta House", cuisine="Italian", region="North", rating=1.0))

    body = client.get("/restaurants/cuisine/Italian").json()
    assert body[0]["rating"] == 5.0


# ── Cache stats ──────────────────────────────────────────────────────────


def test_cache_stats_counts_hits():
    _install(use_cache=True)
    _create("Pasta House")
    client.get("/restaurants/Pasta House")
    client.get("/restaurants/Pasta House")

    resp = client.get("/cache/stats")

    assert resp.status_code == 200
    body = resp.json()
    assert body["enabled"] is True
    assert body["hits"] == 2
    assert body["size"] == 1
    assert "hit_rate" in body


def test_cache_stats_when_disabled():
    _install(use_cache=False)
    _create("Pasta House")
    client.get("/restaurants/Pasta House")
    body = client.get("/cache/stats").json()
    assert body["enabled"] is False
    assert body["hits"] == 0
