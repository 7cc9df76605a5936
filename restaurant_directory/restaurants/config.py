from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class ServiceConfig:
    table_name: str = os.getenv("TABLE_NAME", "restaurants")
    aws_region: str = os.getenv("AWS_REGION", "us-east-1")
    dynamodb_endpoint_url: str | None = os.getenv("DYNAMODB_ENDPOINT_URL") or None
    cache_endpoint: str = os.getenv("CACHE_ENDPOINT", "redis://localhost:6379/0")
    # Only the literal string "true" turns the cache on.
    use_cache: bool = os.getenv("USE_CACHE") == "true"
    store_backend: str = os.getenv("STORE_BACKEND", "dynamodb")
    cache_backend: str = os.getenv("CACHE_BACKEND", "redis")
    cache_key_prefix: str = os.getenv("CACHE_KEY_PREFIX", "restaurant:")


DEFAULT_SERVICE_CONFIG = ServiceConfig()
