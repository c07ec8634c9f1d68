"""Tests for role-based environment validation (validate_env)."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from wvw_scraper.validate_env import (
    ALLOWED_SCRAPER_ROLES,
    require_env,
    validate_env,
)


def _prod_base_env() -> dict[str, str]:
    """Minimal env vars that every production worker needs."""
    return {
        "ENVIRONMENT": "production",
        "REDIS_URL": "redis://redis.prod:6379/3",
    }


@pytest.fixture(autouse=True)
def _clear_cache():
    validate_env.cache_clear()
    yield
    validate_env.cache_clear()


class TestValidateEnvCommon:
    def test_environment_is_required(self):
        with patch.dict(os.environ, {"REDIS_URL": "redis://localhost:6379/0"}, clear=True):
            with pytest.raises(RuntimeError, match="ENVIRONMENT"):
                validate_env()

    def test_unknown_environment(self):
        env = {"ENVIRONMENT": "qa", "REDIS_URL": "redis://localhost:6379/0"}
        with patch.dict(os.environ, env, clear=True):
            with pytest.raises(RuntimeError, match="ENVIRONMENT must be one of"):
                validate_env()

    def test_redis_url_is_required(self):
        with patch.dict(os.environ, {"ENVIRONMENT": "development"}, clear=True):
            with pytest.raises(RuntimeError, match="REDIS_URL"):
                validate_env()

    def test_development_allows_localhost(self):
        env = {"ENVIRONMENT": "development", "REDIS_URL": "redis://localhost:6379/0"}
        with patch.dict(os.environ, env, clear=True):
            validate_env()  # should not raise

    def test_blank_value_counts_as_missing(self):
        with patch.dict(os.environ, {"REDIS_URL": "   "}, clear=True):
            with pytest.raises(RuntimeError):
                require_env("REDIS_URL")


class TestValidateEnvProduction:
    """Production rejects local Redis and unknown roles."""

    def test_worker_passes(self):
        with patch.dict(os.environ, _prod_base_env(), clear=True):
            validate_env()  # should not raise

    def test_beat_passes(self):
        env = {**_prod_base_env(), "SCRAPER_ROLE": "beat"}
        with patch.dict(os.environ, env, clear=True):
            validate_env()  # should not raise

    def test_localhost_redis_rejected(self):
        env = {**_prod_base_env(), "REDIS_URL": "redis://localhost:6379/3"}
        with patch.dict(os.environ, env, clear=True):
            with pytest.raises(RuntimeError, match="must not point to localhost"):
                validate_env()

    def test_redis_url_without_host_rejected(self):
        env = {**_prod_base_env(), "REDIS_URL": "not-a-url"}
        with patch.dict(os.environ, env, clear=True):
            with pytest.raises(RuntimeError, match="missing hostname"):
                validate_env()

    def test_unknown_role_rejected(self):
        env = {**_prod_base_env(), "SCRAPER_ROLE": "social"}
        with patch.dict(os.environ, env, clear=True):
            with pytest.raises(RuntimeError, match="SCRAPER_ROLE"):
                validate_env()

    def test_allowed_roles(self):
        assert ALLOWED_SCRAPER_ROLES == {"worker", "beat"}
