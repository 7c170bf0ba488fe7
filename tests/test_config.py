# =============================================================================
# tests/test_config.py - Settings Tests
# =============================================================================

import pytest
from pydantic import ValidationError

from app.config import Settings


class TestSettings:
    """Tests for Settings defaults and parsing."""

    def test_defaults(self, monkeypatch):
        for name in ("MONGO_URI", "FRONTEND_URL", "DB_UNAVAILABLE_MODE", "DB_HEALTH_CHECK_INTERVAL_SECONDS"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.MONGO_URI is None
        assert settings.FRONTEND_URL == "http://localhost:5173"
        assert settings.DB_UNAVAILABLE_MODE == "strict"
        assert settings.is_strict_unavailable_mode
        assert settings.DB_HEALTH_CHECK_INTERVAL_SECONDS == 30.0

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("MONGO_URI", "mongodb://db.internal:27017")
        monkeypatch.setenv("FRONTEND_URL", "https://app.example.com")

        settings = Settings(_env_file=None)

        assert settings.MONGO_URI == "mongodb://db.internal:27017"
        assert settings.FRONTEND_URL == "https://app.example.com"

    def test_empty_uri_counts_as_unset(self, monkeypatch):
        monkeypatch.setenv("MONGO_URI", "")

        assert Settings(_env_file=None).MONGO_URI is None

    def test_mongo_client_options(self):
        settings = Settings(_env_file=None, MONGO_SERVER_SELECTION_TIMEOUT_MS=1500)

        assert settings.mongo_client_options == {
            "maxPoolSize": 1,
            "minPoolSize": 1,
            "serverSelectionTimeoutMS": 1500,
            "socketTimeoutMS": 45000,
            "retryWrites": True,
            "w": "majority",
            "journal": True,
        }

    def test_exempt_paths_parsing(self):
        settings = Settings(_env_file=None, CONNECTION_GUARD_EXEMPT_PATHS=" /health/live, /version ,,")

        assert settings.guard_exempt_paths == frozenset({"/health/live", "/version"})

    def test_invalid_mode_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, DB_UNAVAILABLE_MODE="lenient")

    def test_negative_interval_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, DB_HEALTH_CHECK_INTERVAL_SECONDS=-1)

    def test_min_pool_above_max_rejected(self):
        with pytest.raises(ValidationError, match="MONGO_MIN_POOL_SIZE"):
            Settings(_env_file=None, MONGO_MIN_POOL_SIZE=2, MONGO_MAX_POOL_SIZE=1)

    def test_larger_pool_accepted(self):
        settings = Settings(_env_file=None, MONGO_MIN_POOL_SIZE=2, MONGO_MAX_POOL_SIZE=10)

        assert settings.mongo_client_options["minPoolSize"] == 2
        assert settings.mongo_client_options["maxPoolSize"] == 10
