"""
Tests for settings parsing and cache backend selection.
"""

import pytest
from pydantic import ValidationError

from anistream.config.settings import Settings


def test_settings_defaults_to_no_cache():
    settings = Settings(_env_file=None, REDIS_HOST=None, CACHE_BACKEND=None)
    assert settings.CACHE_BACKEND == "none"
    assert settings.CACHE_TTL_LONG == settings.CACHE_TTL * 24


def test_settings_selects_redis_when_host_set():
    settings = Settings(_env_file=None, REDIS_HOST="localhost", CACHE_BACKEND=None)
    assert settings.CACHE_BACKEND == "redis"
    assert settings.get_redis_url() == "redis://localhost:6379"


def test_settings_rejects_unknown_backend():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, CACHE_BACKEND="memcached")


def test_settings_normalizes_values():
    settings = Settings(_env_file=None, ANITAKU_URL="https://anitaku.example/", LOG_LEVEL="debug", CACHE_BACKEND="Database")
    assert settings.ANITAKU_URL == "https://anitaku.example"
    assert settings.LOG_LEVEL == "DEBUG"
    assert settings.CACHE_BACKEND == "database"


def test_settings_log_file_defaults():
    settings = Settings(_env_file=None, LOG_FILE="logs/anistream.log")
    assert settings.LOG_FILE == "logs/anistream.log"
    assert settings.LOG_ROTATION == "10 MB"
    assert settings.LOG_RETENTION == "7 days"
