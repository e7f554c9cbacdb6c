"""Shared test fixtures for eventbrite-fluentcrm."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest

from eventbrite_fluentcrm.audit.logger import AuditLogger
from eventbrite_fluentcrm.config import Settings

API_URL = "https://api.example/orders/1"


def make_settings(**kwargs: Any) -> Settings:
    """Factory for Settings with a token configured and no secret."""
    defaults: dict[str, Any] = {"api_token": "eb-token"}
    defaults.update(kwargs)
    return Settings.model_validate(defaults)


def make_envelope(
    api_url: str | None = API_URL,
    action: str | None = "order.placed",
) -> dict[str, Any]:
    body: dict[str, Any] = {}
    if api_url is not None:
        body["api_url"] = api_url
    if action is not None:
        body["config"] = {"action": action}
    return body


def eventbrite_transport(
    payload: Any,
    status_code: int = 200,
    calls: list[httpx.Request] | None = None,
) -> httpx.MockTransport:
    """MockTransport answering every GET with ``payload`` (bytes sent as-is)."""

    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        if isinstance(payload, bytes):
            return httpx.Response(status_code, content=payload)
        return httpx.Response(status_code, content=json.dumps(payload).encode())

    return httpx.MockTransport(handler)


@pytest.fixture
def mock_audit_logger() -> MagicMock:
    return MagicMock(spec=AuditLogger)


@pytest.fixture
def profile_payload() -> Callable[..., dict[str, Any]]:
    def _make(**profile: Any) -> dict[str, Any]:
        defaults: dict[str, Any] = {"email": "a@b.com", "first_name": "A"}
        defaults.update(profile)
        return {"id": "1", "profile": defaults}

    return _make
