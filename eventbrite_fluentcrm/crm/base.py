"""CRM contacts capability required by the sync client."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from eventbrite_fluentcrm.models import CrmContact


@runtime_checkable
class ContactsApi(Protocol):
    """Create-or-update access to a CRM's contact store, keyed by email.

    Implementations raise on failure; merge semantics for tags and lists are
    owned by the CRM.
    """

    def is_active(self) -> bool: ...

    async def create_or_update(self, fields: dict[str, Any]) -> CrmContact: ...
