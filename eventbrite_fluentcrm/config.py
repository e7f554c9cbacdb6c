"""Typed settings and the flat key-value stores they are read from.

The stores are owned outside the request pipeline (a JSON file managed with
the CLI, or the process environment). ``load_settings`` validates a fresh
``Settings`` from a store and is called once per webhook delivery.
"""

from __future__ import annotations

import fcntl
import json
import os
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, field_validator

SETTING_KEYS = (
    "api_token",
    "webhook_secret",
    "default_tags",
    "default_lists",
    "debug_mode",
    "require_signature",
    "request_timeout",
)

# Written for missing keys on `init`
DEFAULT_SETTINGS: dict[str, Any] = {
    "api_token": "",
    "webhook_secret": "",
    "default_tags": [],
    "default_lists": [],
    "debug_mode": "0",
}

_TRUTHY = {"1", "true", "yes", "on"}


def parse_list(value: Any) -> list[str]:
    """Split a comma-separated string (or list) into trimmed, non-empty items."""
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = [str(v) for v in value]
    else:
        items = [str(value)]
    return [item.strip() for item in items if item.strip()]


def parse_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUTHY


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    api_token: str = ""
    webhook_secret: str = ""
    default_tags: list[str] = Field(default_factory=list)
    default_lists: list[str] = Field(default_factory=list)
    debug_mode: bool = False
    require_signature: bool = False
    request_timeout: float = Field(default=30.0, gt=0)

    @field_validator("api_token", "webhook_secret", mode="before")
    @classmethod
    def _strip_secret(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()

    @field_validator("default_tags", "default_lists", mode="before")
    @classmethod
    def _split_list(cls, value: Any) -> list[str]:
        return parse_list(value)

    @field_validator("debug_mode", "require_signature", mode="before")
    @classmethod
    def _flag(cls, value: Any) -> bool:
        return parse_flag(value)

    def masked(self) -> dict[str, Any]:
        """Settings as a dict with credentials replaced by a marker."""
        data = self.model_dump()
        for key in ("api_token", "webhook_secret"):
            data[key] = "********" if data[key] else ""
        return data


@runtime_checkable
class ConfigStore(Protocol):
    def get(self, key: str) -> Any: ...

    def get_many(self, keys: Iterable[str]) -> dict[str, Any]: ...


class EnvConfigStore:
    """Reads ``<PREFIX><KEY>`` environment variables."""

    def __init__(self, prefix: str = "EVENTBRITE_FLUENTCRM_") -> None:
        self._prefix = prefix

    def get(self, key: str) -> Any:
        return os.environ.get(f"{self._prefix}{key.upper()}")

    def get_many(self, keys: Iterable[str]) -> dict[str, Any]:
        values = {key: self.get(key) for key in keys}
        return {k: v for k, v in values.items() if v is not None}


class ChainConfigStore:
    """Returns the first value found across several stores."""

    def __init__(self, *stores: ConfigStore) -> None:
        self._stores = stores

    def get(self, key: str) -> Any:
        for store in self._stores:
            value = store.get(key)
            if value is not None:
                return value
        return None

    def get_many(self, keys: Iterable[str]) -> dict[str, Any]:
        keys = list(keys)
        merged: dict[str, Any] = {}
        for store in reversed(self._stores):
            merged.update(store.get_many(keys))
        return merged


class JsonFileConfigStore:
    """Flat key-value settings persisted as a JSON object on disk."""

    def __init__(self, path: str) -> None:
        self.path = Path(path)

    def as_dict(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        text = self.path.read_text().strip()
        if not text:
            return {}
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError(f"Settings file must contain a JSON object: {self.path}")
        return data

    def get(self, key: str) -> Any:
        return self.as_dict().get(key)

    def get_many(self, keys: Iterable[str]) -> dict[str, Any]:
        data = self.as_dict()
        return {key: data[key] for key in keys if data.get(key) is not None}

    def set(self, key: str, value: Any) -> None:
        self.update({key: value})

    def update(self, values: dict[str, Any]) -> None:
        unknown = set(values) - set(SETTING_KEYS)
        if unknown:
            raise KeyError(f"Unknown setting(s): {', '.join(sorted(unknown))}")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        lock_file = self.path.parent / f".{self.path.name}.lock"
        with open(lock_file, "w") as lf:
            fcntl.flock(lf, fcntl.LOCK_EX)
            try:
                data = self.as_dict()
                data.update(values)
                tmp = self.path.with_suffix(self.path.suffix + ".tmp")
                tmp.write_text(json.dumps(data, indent=2) + "\n")
                tmp.replace(self.path)
            finally:
                fcntl.flock(lf, fcntl.LOCK_UN)

    def initialize_defaults(self) -> list[str]:
        """Write defaults for keys that are not yet stored. Returns the keys written."""
        current = self.as_dict()
        missing = {k: v for k, v in DEFAULT_SETTINGS.items() if k not in current}
        if missing:
            self.update(missing)
        return sorted(missing)


def load_settings(store: ConfigStore) -> Settings:
    return Settings.model_validate(store.get_many(SETTING_KEYS))
