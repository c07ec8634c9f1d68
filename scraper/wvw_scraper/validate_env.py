"""Fail-fast environment validation for the snapshot worker and beat scheduler."""

from __future__ import annotations

import os
from functools import lru_cache
from urllib.parse import urlparse

ALLOWED_ENVIRONMENTS = {"development", "staging", "production"}
ALLOWED_SCRAPER_ROLES = {"worker", "beat"}


def require_env(name: str) -> str:
    """Fetch an environment variable or raise RuntimeError if missing."""
    value = os.getenv(name)
    if value is None or not value.strip():
        raise RuntimeError(f"{name} is required and must be set before startup.")
    return value.strip()


def validate_environment_value(environment: str) -> None:
    """Ensure ENVIRONMENT is one of the allowed values."""
    if environment not in ALLOWED_ENVIRONMENTS:
        allowed = ", ".join(sorted(ALLOWED_ENVIRONMENTS))
        raise RuntimeError(f"ENVIRONMENT must be one of: {allowed}.")


def validate_non_local_url(name: str, value: str) -> None:
    """Ensure a URL does not point to localhost in production."""
    parsed = urlparse(value)
    host = parsed.hostname
    if not host:
        raise RuntimeError(f"{name} must be a valid URL (missing hostname).")
    if host in {"localhost", "127.0.0.1"}:
        raise RuntimeError(f"{name} must not point to localhost in production.")


@lru_cache(maxsize=1)
def validate_env() -> None:
    """Validate required environment variables before the worker starts.

    Both roles talk to Redis (the snapshot log and the Celery broker), so
    REDIS_URL is always required. Production additionally rejects local
    Redis hosts and unknown SCRAPER_ROLE values.
    """
    environment = require_env("ENVIRONMENT")
    validate_environment_value(environment)

    redis_url = require_env("REDIS_URL")

    if environment == "production":
        validate_non_local_url("REDIS_URL", redis_url)

        role = os.getenv("SCRAPER_ROLE", "worker")
        if role not in ALLOWED_SCRAPER_ROLES:
            allowed = ", ".join(sorted(ALLOWED_SCRAPER_ROLES))
            raise RuntimeError(f"SCRAPER_ROLE must be one of: {allowed}.")
