"""In-process contact store for dry runs."""

from __future__ import annotations

from typing import Any

from eventbrite_fluentcrm.models import CrmContact


class InMemoryContacts:
    """ContactsApi keeping contacts in a dict keyed by lower-cased email.

    Updates overwrite names and phone when provided and add tags/lists to
    the existing ones.
    """

    def __init__(self, default_status: str = "subscribed") -> None:
        self._default_status = default_status
        self._contacts: dict[str, dict[str, Any]] = {}
        self._next_id = 1

    def is_active(self) -> bool:
        return True

    async def create_or_update(self, fields: dict[str, Any]) -> CrmContact:
        email = str(fields["email"]).strip()
        key = email.lower()
        existing = self._contacts.get(key)
        if existing is None:
            existing = {
                "id": self._next_id,
                "email": email,
                "status": fields.get("status", self._default_status),
                "tags": [],
                "lists": [],
            }
            self._next_id += 1
            self._contacts[key] = existing

        for name in ("first_name", "last_name", "phone"):
            if fields.get(name):
                existing[name] = fields[name]
        for name in ("tags", "lists"):
            for item in fields.get(name) or []:
                if item not in existing[name]:
                    existing[name].append(item)

        return CrmContact(id=existing["id"], email=existing["email"], status=existing["status"])

    def get(self, email: str) -> dict[str, Any] | None:
        contact = self._contacts.get(email.strip().lower())
        return dict(contact) if contact else None

    def __len__(self) -> int:
        return len(self._contacts)
