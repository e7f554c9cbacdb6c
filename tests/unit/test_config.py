"""Tests for settings validation and config stores."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from eventbrite_fluentcrm.config import (
    DEFAULT_SETTINGS,
    ChainConfigStore,
    ConfigStore,
    EnvConfigStore,
    JsonFileConfigStore,
    Settings,
    load_settings,
    parse_list,
)


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.api_token == ""
        assert settings.default_tags == []
        assert settings.debug_mode is False
        assert settings.require_signature is False
        assert settings.request_timeout == 30.0

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("eventbrite, attendee", ["eventbrite", "attendee"]),
            (" a ,, b ,", ["a", "b"]),
            ("", []),
            (["x", " ", "y "], ["x", "y"]),
            (None, []),
        ],
    )
    def test_list_parsing(self, raw: object, expected: list[str]) -> None:
        assert parse_list(raw) == expected
        assert Settings.model_validate({"default_lists": raw}).default_lists == expected

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("1", True), ("true", True), ("On", True), (True, True),
         ("0", False), ("", False), ("no", False), (None, False)],
    )
    def test_flag_parsing(self, raw: object, expected: bool) -> None:
        assert Settings.model_validate({"debug_mode": raw}).debug_mode is expected

    def test_secrets_trimmed(self) -> None:
        settings = Settings.model_validate({"api_token": "  tok \n", "webhook_secret": None})
        assert settings.api_token == "tok"
        assert settings.webhook_secret == ""

    def test_non_positive_timeout_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings.model_validate({"request_timeout": 0})

    def test_masked_hides_credentials(self) -> None:
        masked = Settings(api_token="tok", webhook_secret="").masked()
        assert masked["api_token"] == "********"
        assert masked["webhook_secret"] == ""


class TestJsonFileConfigStore:
    def test_missing_file_reads_empty(self, tmp_path: Path) -> None:
        store = JsonFileConfigStore(str(tmp_path / "settings.json"))
        assert store.get("api_token") is None
        assert load_settings(store) == Settings()

    def test_set_persists(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "settings.json"
        store = JsonFileConfigStore(str(path))

        store.set("default_tags", ["eventbrite"])
        store.set("api_token", "tok")

        assert json.loads(path.read_text()) == {"default_tags": ["eventbrite"], "api_token": "tok"}
        assert isinstance(store, ConfigStore)

    def test_unknown_key_rejected(self, tmp_path: Path) -> None:
        store = JsonFileConfigStore(str(tmp_path / "settings.json"))
        with pytest.raises(KeyError):
            store.set("colour", "blue")

    def test_non_object_file_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.json"
        path.write_text("[1, 2]")
        with pytest.raises(ValueError):
            JsonFileConfigStore(str(path)).as_dict()

    def test_initialize_defaults_keeps_existing(self, tmp_path: Path) -> None:
        store = JsonFileConfigStore(str(tmp_path / "settings.json"))
        store.set("api_token", "tok")

        written = store.initialize_defaults()

        assert "api_token" not in written
        assert store.get("api_token") == "tok"
        assert store.get("debug_mode") == DEFAULT_SETTINGS["debug_mode"]
        assert store.initialize_defaults() == []

    def test_settings_reloaded_on_each_load(self, tmp_path: Path) -> None:
        store = JsonFileConfigStore(str(tmp_path / "settings.json"))
        store.set("webhook_secret", "one")
        assert load_settings(store).webhook_secret == "one"

        store.set("webhook_secret", "two")
        assert load_settings(store).webhook_secret == "two"

    def test_load_reads_file_once(self, tmp_path: Path) -> None:
        store = JsonFileConfigStore(str(tmp_path / "settings.json"))
        store.update({"api_token": "tok", "default_tags": "a,b", "request_timeout": 5})

        with patch.object(store, "as_dict", wraps=store.as_dict) as as_dict:
            settings = load_settings(store)

        as_dict.assert_called_once_with()
        assert settings.api_token == "tok"
        assert settings.default_tags == ["a", "b"]
        assert settings.request_timeout == 5

    def test_get_many_skips_missing_and_null(self, tmp_path: Path) -> None:
        store = JsonFileConfigStore(str(tmp_path / "settings.json"))
        store.update({"api_token": "tok", "webhook_secret": None})

        values = store.get_many(["api_token", "webhook_secret", "debug_mode"])

        assert values == {"api_token": "tok"}


class TestEnvAndChainStores:
    def test_env_store_reads_prefixed_keys(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EVENTBRITE_FLUENTCRM_API_TOKEN", "env-token")
        monkeypatch.setenv("EVENTBRITE_FLUENTCRM_DEFAULT_TAGS", "a,b")

        settings = load_settings(EnvConfigStore())

        assert settings.api_token == "env-token"
        assert settings.default_tags == ["a", "b"]

    def test_chain_prefers_first_store(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        file_store = JsonFileConfigStore(str(tmp_path / "settings.json"))
        file_store.update({"api_token": "file-token", "webhook_secret": "file-secret"})
        monkeypatch.setenv("EVENTBRITE_FLUENTCRM_API_TOKEN", "env-token")
        monkeypatch.delenv("EVENTBRITE_FLUENTCRM_WEBHOOK_SECRET", raising=False)

        settings = load_settings(ChainConfigStore(EnvConfigStore(), file_store))

        assert settings.api_token == "env-token"
        assert settings.webhook_secret == "file-secret"

    def test_chain_get_many_merges_first_hit(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        file_store = JsonFileConfigStore(str(tmp_path / "settings.json"))
        file_store.update({"api_token": "file-token", "debug_mode": "1"})
        monkeypatch.setenv("EVENTBRITE_FLUENTCRM_API_TOKEN", "env-token")
        monkeypatch.delenv("EVENTBRITE_FLUENTCRM_DEBUG_MODE", raising=False)
        monkeypatch.delenv("EVENTBRITE_FLUENTCRM_WEBHOOK_SECRET", raising=False)

        values = ChainConfigStore(EnvConfigStore(), file_store).get_many(
            ["api_token", "debug_mode", "webhook_secret"],
        )

        assert values == {"api_token": "env-token", "debug_mode": "1"}
