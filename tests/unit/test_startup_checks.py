"""Tests for startup validation checks."""

from __future__ import annotations

import logging

import pytest

from skinscores.core.config import AppSettings, AuthConfig, ExportConfig, PersistenceConfig
from skinscores.core.startup_checks import validate_settings


class TestPersistenceChecks:
    def test_dynamodb_requires_table_name(self) -> None:
        settings = AppSettings(persistence=PersistenceConfig(backend="dynamodb", table_name=""))
        with pytest.raises(ValueError, match="SKINSCORES_PERSISTENCE_TABLE_NAME is required"):
            validate_settings(settings)

    def test_dynamodb_with_table_passes(self) -> None:
        validate_settings(AppSettings(persistence=PersistenceConfig(backend="dynamodb", table_name="docs")))

    def test_warns_on_local_store_in_container(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        monkeypatch.setenv("KUBERNETES_SERVICE_HOST", "10.0.0.1")
        with caplog.at_level(logging.WARNING, logger="skinscores.core.startup_checks"):
            validate_settings(AppSettings(persistence=PersistenceConfig(backend="file")))
        assert "container environment" in caplog.text


class TestAuthChecks:
    def test_disabled_auth_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="skinscores.core.startup_checks"):
            validate_settings(AppSettings(auth=AuthConfig(enabled=False)))
        assert "X-User-Id" in caplog.text

    def test_enabled_without_key_material_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="skinscores.core.startup_checks"):
            validate_settings(AppSettings(auth=AuthConfig(enabled=True)))
        assert "will not be verified" in caplog.text

    def test_empty_uid_claim_rejected(self) -> None:
        with pytest.raises(ValueError, match="SKINSCORES_AUTH_UID_CLAIM"):
            validate_settings(AppSettings(auth=AuthConfig(enabled=True, jwt_secret="x", uid_claim="")))


class TestExportChecks:
    def test_chunk_size_bounds_enforced_by_config(self) -> None:
        with pytest.raises(ValueError):
            ExportConfig(chunk_size=31)
        with pytest.raises(ValueError):
            ExportConfig(chunk_size=0)

    def test_chunk_size_above_in_query_limit_rejected(self) -> None:
        settings = AppSettings()
        settings.export.chunk_size = 40
        with pytest.raises(ValueError, match="'in' query"):
            validate_settings(settings)


class TestConfigFromEnvironment:
    def test_group_prefixes(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SKINSCORES_PERSISTENCE_BACKEND", "file")
        monkeypatch.setenv("SKINSCORES_EXPORT_CHUNK_SIZE", "5")
        monkeypatch.setenv("SKINSCORES_AUTH_ENABLED", "true")
        settings = AppSettings()
        assert settings.persistence.backend == "file"
        assert settings.export.chunk_size == 5
        assert settings.auth.enabled is True

    def test_defaults(self) -> None:
        settings = AppSettings()
        assert settings.export.chunk_size == 10
        assert settings.export.max_session_ids == 25
        assert settings.auth.admin_role == "admin"
