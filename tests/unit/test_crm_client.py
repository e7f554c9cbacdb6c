"""Tests for the CRM sync client and the in-memory contact store."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from eventbrite_fluentcrm.crm.client import CrmSyncClient
from eventbrite_fluentcrm.crm.memory import InMemoryContacts
from eventbrite_fluentcrm.errors import ConfigurationError, CrmNotActiveError, CrmSyncError
from eventbrite_fluentcrm.models import ContactRecord, CrmContact


def _record(**kwargs: object) -> ContactRecord:
    defaults: dict[str, object] = {"email": "a@b.com", "first_name": "A", "last_name": ""}
    defaults.update(kwargs)
    return ContactRecord(**defaults)  # type: ignore[arg-type]


def _mock_contacts(active: bool = True) -> MagicMock:
    contacts = MagicMock()
    # assigned explicitly so the ContactsApi isinstance check sees both members
    contacts.is_active = MagicMock(return_value=active)
    contacts.create_or_update = AsyncMock(
        return_value=CrmContact(id=7, email="a@b.com", status="subscribed"),
    )
    return contacts


class TestConstruction:
    def test_none_is_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError):
            CrmSyncClient(None)

    def test_object_without_capability_is_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError):
            CrmSyncClient(object())  # type: ignore[arg-type]

    def test_in_memory_contacts_accepted(self) -> None:
        assert CrmSyncClient(InMemoryContacts()).is_active() is True


class TestSyncContact:
    @pytest.mark.asyncio
    async def test_success_returns_sync_result(self) -> None:
        contacts = _mock_contacts()
        client = CrmSyncClient(contacts)

        result = await client.sync_contact(_record(tags=["eventbrite"]))

        assert result.contact_id == 7
        assert result.email == "a@b.com"
        assert result.status == "subscribed"
        contacts.create_or_update.assert_awaited_once_with({
            "email": "a@b.com", "first_name": "A", "last_name": "", "tags": ["eventbrite"],
        })

    @pytest.mark.asyncio
    async def test_inactive_crm_raises_not_active(self) -> None:
        contacts = _mock_contacts(active=False)
        client = CrmSyncClient(contacts)

        with pytest.raises(CrmNotActiveError) as exc_info:
            await client.sync_contact(_record())

        assert exc_info.value.status == 500
        contacts.create_or_update.assert_not_called()

    @pytest.mark.asyncio
    async def test_upsert_exception_converted(self) -> None:
        contacts = _mock_contacts()
        contacts.create_or_update.side_effect = RuntimeError("database gone")
        client = CrmSyncClient(contacts)

        with pytest.raises(CrmSyncError, match="database gone") as exc_info:
            await client.sync_contact(_record())

        assert exc_info.value.code == "fluentcrm_error"
        assert exc_info.value.status == 500


class TestInMemoryContacts:
    @pytest.mark.asyncio
    async def test_same_record_twice_is_one_contact(self) -> None:
        contacts = InMemoryContacts()
        client = CrmSyncClient(contacts)
        record = _record(tags=["eventbrite"])

        first = await client.sync_contact(record)
        second = await client.sync_contact(record)

        assert first.email == second.email == "a@b.com"
        assert first.contact_id == second.contact_id
        assert len(contacts) == 1

    @pytest.mark.asyncio
    async def test_email_match_is_case_insensitive(self) -> None:
        contacts = InMemoryContacts()
        await contacts.create_or_update({"email": "A@B.com"})
        await contacts.create_or_update({"email": "a@b.com"})

        assert len(contacts) == 1

    @pytest.mark.asyncio
    async def test_update_merges_tags_and_keeps_phone(self) -> None:
        contacts = InMemoryContacts()
        await contacts.create_or_update(
            {"email": "a@b.com", "first_name": "A", "phone": "123", "tags": ["one"]},
        )
        await contacts.create_or_update(
            {"email": "a@b.com", "first_name": "Alice", "tags": ["two", "one"], "lists": ["3"]},
        )

        stored = contacts.get("a@b.com")
        assert stored is not None
        assert stored["first_name"] == "Alice"
        assert stored["phone"] == "123"
        assert stored["tags"] == ["one", "two"]
        assert stored["lists"] == ["3"]

    @pytest.mark.asyncio
    async def test_new_contacts_get_distinct_ids(self) -> None:
        contacts = InMemoryContacts()
        a = await contacts.create_or_update({"email": "a@b.com"})
        b = await contacts.create_or_update({"email": "c@d.com"})

        assert a.id != b.id
        assert a.status == "subscribed"
