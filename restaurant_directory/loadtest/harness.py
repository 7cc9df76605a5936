from __future__ import annotations

import argparse
import logging
import random
import time
from dataclasses import dataclass, field
from typing import Any

import httpx

logger = logging.getLogger(__name__)


@dataclass
class LoadTestReport:
    timings_ms: dict[str, float] = field(default_factory=dict)
    failures: list[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.failures


def generate_restaurants(count: int) -> list[dict[str, str]]:
    return [
        {"name": f"TestRestaurant{i}", "cuisine": "Italian", "region": "North"}
        for i in range(1, count + 1)
    ]


def generate_ratings(
    restaurants: list[dict[str, str]],
    rng: random.Random | None = None,
) -> list[dict[str, Any]]:
    """One random rating in [0, 5], to one decimal, per restaurant."""
    rng = rng or random.Random()
    return [{"name": r["name"], "rating": round(rng.uniform(0, 5), 1)} for r in restaurants]


def _expect_status(
    report: LoadTestReport,
    response: httpx.Response,
    expected: int,
    label: str,
) -> bool:
    if response.status_code != expected:
        report.failures.append(f"{label}: expected {expected}, got {response.status_code}")
        return False
    return True


def _check_sorted_listing(report: LoadTestReport, response: httpx.Response, limit: int, label: str) -> None:
    if not _expect_status(report, response, 200, label):
        return
    data = response.json()
    if len(data) > limit:
        report.failures.append(f"{label}: expected at most {limit} restaurants, got {len(data)}")
    ratings = [r["rating"] for r in data]
    if ratings != sorted(ratings, reverse=True):
        report.failures.append(f"{label}: restaurants are not sorted by rating descending")


def run_load_test(
    client: httpx.Client,
    count: int = 100,
    cuisine: str = "Italian",
    cuisine_limit: int = 12,
    region: str = "North",
    region_limit: int = 15,
    rng: random.Random | None = None,
) -> LoadTestReport:
    """
    Drive a full create/rate/get/query/delete cycle through the HTTP API.

    ``client`` must already point at the service (``base_url``). Failures
    are collected in the report rather than raised so one run shows every
    broken step.
    """
    report = LoadTestReport()
    restaurants = generate_restaurants(count)

    start = time.time()
    for r in restaurants:
        _expect_status(report, client.post("/restaurants", json=r), 200, f"POST /restaurants {r['name']}")
    report.timings_ms["create"] = round((time.time() - start) * 1000, 1)

    start = time.time()
    for rating in generate_ratings(restaurants, rng):
        resp = client.post("/restaurants/rating", json=rating)
        _expect_status(report, resp, 200, f"POST /restaurants/rating {rating['name']}")
    report.timings_ms["rate"] = round((time.time() - start) * 1000, 1)

    start = time.time()
    for r in restaurants:
        label = f"GET /restaurants/{r['name']}"
        resp = client.get(f"/restaurants/{r['name']}")
        if not _expect_status(report, resp, 200, label):
            continue
        body = resp.json()
        for key in ("name", "cuisine", "region"):
            if body.get(key) != r[key]:
                report.failures.append(f"{label}: expected {key}={r[key]!r}, got {body.get(key)!r}")
    report.timings_ms["get"] = round((time.time() - start) * 1000, 1)
    logger.info("Total time to complete all reads: %s ms", report.timings_ms["get"])

    start = time.time()
    resp = client.get(f"/restaurants/cuisine/{cuisine}", params={"limit": cuisine_limit})
    _check_sorted_listing(report, resp, cuisine_limit, f"GET /restaurants/cuisine/{cuisine}")
    resp = client.get(f"/restaurants/region/{region}", params={"limit": region_limit})
    _check_sorted_listing(report, resp, region_limit, f"GET /restaurants/region/{region}")
    report.timings_ms["query"] = round((time.time() - start) * 1000, 1)

    start = time.time()
    for r in restaurants:
        path = f"/restaurants/{r['name']}"
        if _expect_status(report, client.delete(path), 200, f"DELETE {path}"):
            _expect_status(report, client.get(path), 404, f"GET {path} after delete")
    report.timings_ms["delete"] = round((time.time() - start) * 1000, 1)

    return report


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    parser = argparse.ArgumentParser(description="Load test a restaurant directory deployment")
    parser.add_argument("base_url")
    parser.add_argument("--count", type=int, default=100)
    args = parser.parse_args()

    with httpx.Client(base_url=args.base_url, timeout=10.0) as http_client:
        result = run_load_test(http_client, count=args.count)

    for step, ms in result.timings_ms.items():
        print(f"{step}: {ms} ms")
    for failure in result.failures:
        print(f"FAIL {failure}")
    raise SystemExit(0 if result.passed else 1)
