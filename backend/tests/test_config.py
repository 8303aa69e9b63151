"""
Tests for spatialsql.config — Settings, properties, and factory.
"""
from __future__ import annotations

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError


class TestSettings:
    """Tests for the Settings pydantic-settings model."""

    def _make_settings(self, **overrides):
        """Create a fresh Settings instance with optional overrides via env vars.

        ``_env_file=None`` keeps a local .env file from interfering with
        assertions about built-in defaults.
        """
        env = {f"SPATIALSQL_{k.upper()}": str(v) for k, v in overrides.items()}
        # Remove any SPATIALSQL_* env vars that could leak from the host
        clean_env = {k: v for k, v in os.environ.items() if not k.startswith("SPATIALSQL_")}
        clean_env.update(env)
        with patch.dict(os.environ, clean_env, clear=True):
            from spatialsql.config import Settings
            return Settings(_env_file=None)

    # ── Defaults ──────────────────────────────────────────────

    def test_default_app_name(self):
        assert self._make_settings().app_name == "spatialsql"

    def test_default_debug(self):
        assert self._make_settings().debug is False

    def test_default_database_url(self):
        assert self._make_settings().database_url == "sqlite:///spatialsql.db"

    def test_default_precision(self):
        assert self._make_settings().coordinate_precision == 10

    def test_default_authority_database(self):
        assert self._make_settings().use_authority_database is True

    def test_default_extent_validation(self):
        assert self._make_settings().extent_validation == "strict"

    def test_default_partitions(self):
        assert self._make_settings().default_partitions == 4

    def test_default_request_limit(self):
        assert self._make_settings().max_geometries_per_request == 10_000

    def test_default_cors_origins(self):
        assert "localhost:5173" in self._make_settings().cors_origins

    # ── Properties ────────────────────────────────────────────

    def test_cors_origins_list(self):
        origins = self._make_settings().cors_origins_list
        assert isinstance(origins, list)
        assert "http://localhost:5173" in origins
        assert "http://localhost:3000" in origins

    def test_cors_origins_list_empty_entries(self):
        s = self._make_settings()
        s.cors_origins = "http://a.com, , http://b.com, "
        assert s.cors_origins_list == ["http://a.com", "http://b.com"]

    # ── Env overrides ─────────────────────────────────────────

    def test_override_debug(self):
        assert self._make_settings(debug="true").debug is True

    def test_override_database_url(self):
        s = self._make_settings(database_url="sqlite://")
        assert s.database_url == "sqlite://"

    def test_override_precision(self):
        assert self._make_settings(coordinate_precision="3").coordinate_precision == 3

    def test_override_lenient(self):
        s = self._make_settings(extent_validation="lenient")
        assert s.extent_validation == "lenient"

    def test_override_table_only(self):
        s = self._make_settings(use_authority_database="false")
        assert s.use_authority_database is False

    def test_invalid_policy_rejected(self):
        with pytest.raises(ValidationError):
            self._make_settings(extent_validation="sloppy")


class TestGetSettings:
    """Tests for the get_settings cached factory."""

    def test_returns_settings_instance(self):
        from spatialsql.config import Settings, get_settings
        get_settings.cache_clear()
        assert isinstance(get_settings(), Settings)

    def test_caching(self):
        from spatialsql.config import get_settings
        get_settings.cache_clear()
        assert get_settings() is get_settings()

    def test_cache_clear_returns_fresh(self):
        from spatialsql.config import get_settings
        get_settings.cache_clear()
        s1 = get_settings()
        get_settings.cache_clear()
        assert s1 is not get_settings()
