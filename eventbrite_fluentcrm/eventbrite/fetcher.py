"""Eventbrite API client used to enrich webhook notifications.

Webhooks only carry an ``api_url``; the order or attendee itself is fetched
with the account's private token. A single attempt is made per delivery:
Eventbrite redelivers webhooks that fail, so retries are left to it.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from eventbrite_fluentcrm.errors import (
    InvalidResponseError,
    NoApiTokenError,
    TransportError,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15.0


class EventbriteFetcher:
    """Fetches full event/attendee JSON for a webhook's api_url."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport

    async def fetch(self, url: str, api_token: str) -> dict[str, Any]:
        if not api_token:
            raise NoApiTokenError()

        headers = {
            "Authorization": f"Bearer {api_token}",
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(transport=self._transport, verify=True) as client:
                resp = await client.get(url, headers=headers, timeout=self._timeout)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(str(exc) or exc.__class__.__name__) from exc

        if resp.status_code >= 400:
            logger.warning("Eventbrite API returned HTTP %s for %s", resp.status_code, url)

        return self._decode(resp.content)

    @staticmethod
    def _decode(content: bytes) -> dict[str, Any]:
        if not content.strip():
            raise InvalidResponseError()
        try:
            data = json.loads(content)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise InvalidResponseError() from exc
        if not data or not isinstance(data, dict):
            raise InvalidResponseError()
        return data
