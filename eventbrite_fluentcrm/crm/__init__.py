"""CRM integration for eventbrite-fluentcrm.

- ContactsApi capability protocol
- CrmSyncClient (error conversion around the upsert)
- FluentCRM REST and in-memory implementations
"""

from eventbrite_fluentcrm.crm.base import ContactsApi
from eventbrite_fluentcrm.crm.client import CrmSyncClient
from eventbrite_fluentcrm.crm.fluentcrm import FluentCrmApiError, FluentCrmRestContacts
from eventbrite_fluentcrm.crm.memory import InMemoryContacts

__all__ = [
    "ContactsApi",
    "CrmSyncClient",
    "FluentCrmApiError",
    "FluentCrmRestContacts",
    "InMemoryContacts",
]
