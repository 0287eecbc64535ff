"""Tests for settings loading and derived values."""

from __future__ import annotations

import pytest

from pydantic import ValidationError

from sunsama_relay.core.constants import (
    AUTH_ERROR_MESSAGE_MARKERS,
    Settings,
    clear_settings_cache,
    get_settings,
    reload_settings,
)


class TestSettings:
    """Tests for the Settings model."""

    def test_defaults(self) -> None:
        settings = Settings(api_key=None, sunsama_email=None, sunsama_password=None)
        assert settings.port == 3000
        assert settings.api_host == "0.0.0.0"
        assert settings.api_key is None
        assert settings.upstream_operations_list == []
        assert settings.cors_origins_list == ["*"]

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SUNSAMA_EMAIL", "me@example.com")
        monkeypatch.setenv("SUNSAMA_PASSWORD", "hunter2")
        monkeypatch.setenv("API_KEY", "s3cr3t")
        monkeypatch.setenv("PORT", "8080")

        settings = Settings()

        assert settings.sunsama_email == "me@example.com"
        assert settings.sunsama_password is not None
        assert settings.sunsama_password.get_secret_value() == "hunter2"
        assert settings.api_key is not None
        assert settings.api_key.get_secret_value() == "s3cr3t"
        assert settings.port == 8080

    def test_secrets_hidden_in_repr(self) -> None:
        settings = Settings(sunsama_password="hunter2", api_key="s3cr3t")
        text = repr(settings)
        assert "hunter2" not in text
        assert "s3cr3t" not in text

    def test_blank_values_treated_as_missing(self) -> None:
        settings = Settings(sunsama_email="  ", sunsama_password="", api_key="", upstream_client_factory="")
        assert settings.sunsama_email is None
        assert settings.sunsama_password is None
        assert settings.api_key is None
        assert settings.upstream_client_factory is None

    def test_invalid_factory_path(self) -> None:
        with pytest.raises(ValidationError):
            Settings(upstream_client_factory="just_a_module")

    def test_invalid_app_env(self) -> None:
        with pytest.raises(ValidationError):
            Settings(app_env="staging")

    def test_operations_list_excludes_reserved_and_private(self) -> None:
        settings = Settings(upstream_operations="get_user, login ,logout,_internal,,get_tasks_backlog")
        assert settings.upstream_operations_list == ["get_user", "get_tasks_backlog"]


class TestSettingsManager:
    """Tests for cached settings access."""

    def test_get_settings_is_cached(self) -> None:
        assert get_settings() is get_settings()

    def test_reload_picks_up_rotated_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("API_KEY", "old")
        first = get_settings()
        monkeypatch.setenv("API_KEY", "new")

        assert get_settings() is first
        reloaded = reload_settings()

        assert reloaded.api_key is not None
        assert reloaded.api_key.get_secret_value() == "new"

    def test_hot_reload_rereads_every_call(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CONFIG_HOT_RELOAD", "true")
        monkeypatch.setenv("API_KEY", "old")
        clear_settings_cache()
        get_settings()
        monkeypatch.setenv("API_KEY", "new")

        api_key = get_settings().api_key
        assert api_key is not None
        assert api_key.get_secret_value() == "new"


def test_auth_markers() -> None:
    assert set(AUTH_ERROR_MESSAGE_MARKERS) == {"unauthorized", "unauthenticated", "session", "login required"}
