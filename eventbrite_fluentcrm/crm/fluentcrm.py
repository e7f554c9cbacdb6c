"""FluentCRM REST API contacts implementation.

Uses ``POST /wp-json/fluent-crm/v2/subscribers`` with ``__force_update`` so an
existing subscriber with the same email is updated instead of rejected.
Authentication is a WordPress application password (HTTP basic auth).
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from eventbrite_fluentcrm.models import CrmContact

logger = logging.getLogger(__name__)

_SUBSCRIBERS_PATH = "/wp-json/fluent-crm/v2/subscribers"


class FluentCrmApiError(Exception):
    """Raised when the FluentCRM API rejects a request."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        super().__init__(f"FluentCRM API error ({status_code}): {message}")


class FluentCrmRestContacts:
    """ContactsApi backed by a remote FluentCRM installation."""

    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._username = username
        self._password = password
        self._timeout = timeout
        self._transport = transport

    def is_active(self) -> bool:
        return bool(self._base_url and self._username and self._password)

    async def create_or_update(self, fields: dict[str, Any]) -> CrmContact:
        url = f"{self._base_url}{_SUBSCRIBERS_PATH}"
        body = {**fields, "__force_update": "yes"}

        async with httpx.AsyncClient(
            transport=self._transport,
            auth=(self._username, self._password),
            verify=True,
        ) as client:
            resp = await client.post(url, json=body, timeout=self._timeout)

        try:
            data = resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            data = None

        if resp.status_code >= 400:
            raise FluentCrmApiError(resp.status_code, _error_message(data, resp.text))

        contact = data.get("contact") if isinstance(data, dict) else None
        if not isinstance(contact, dict):
            raise FluentCrmApiError(resp.status_code, "response did not include a contact")
        logger.debug("FluentCRM upsert for %s returned id %s", fields.get("email"), contact.get("id"))
        return CrmContact.model_validate(contact)


def _error_message(data: Any, fallback: str) -> str:
    if isinstance(data, dict):
        message = data.get("message")
        if message:
            return str(message)
        errors = data.get("errors")
        if errors:
            return json.dumps(errors)
    return fallback or "empty response"
