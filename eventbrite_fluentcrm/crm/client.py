"""CRM sync client: idempotent contact upsert."""

from __future__ import annotations

import logging

from eventbrite_fluentcrm.crm.base import ContactsApi
from eventbrite_fluentcrm.errors import ConfigurationError, CrmNotActiveError, CrmSyncError
from eventbrite_fluentcrm.models import ContactRecord, SyncResult

logger = logging.getLogger(__name__)


class CrmSyncClient:
    """Writes ContactRecords to the CRM through an injected ContactsApi."""

    def __init__(self, contacts: ContactsApi | None) -> None:
        if contacts is None or not isinstance(contacts, ContactsApi):
            raise ConfigurationError(
                "CRM sync client requires a ContactsApi implementation",
            )
        self._contacts = contacts

    def is_active(self) -> bool:
        return self._contacts.is_active()

    async def sync_contact(self, record: ContactRecord) -> SyncResult:
        if not self._contacts.is_active():
            raise CrmNotActiveError()

        try:
            contact = await self._contacts.create_or_update(record.to_crm_fields())
        except Exception as exc:  # CRM failures of any kind end the delivery with 500
            logger.error("FluentCRM sync error for %s: %s", record.email, exc)
            raise CrmSyncError(str(exc) or exc.__class__.__name__) from exc

        logger.info("Contact synced to FluentCRM: %s", contact.email)
        return SyncResult(
            contact_id=contact.id,
            email=contact.email,
            status=contact.status,
        )
