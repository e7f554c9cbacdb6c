"""Maps Eventbrite attendee/order data onto a CRM contact record."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from eventbrite_fluentcrm.errors import NoEmailError
from eventbrite_fluentcrm.models import ContactRecord


def _text(profile: dict[str, Any], key: str) -> str:
    value = profile.get(key)
    if value is None:
        return ""
    return str(value).strip()


def map_attendee(
    payload: dict[str, Any],
    default_tags: Sequence[str] = (),
    default_lists: Sequence[str] = (),
) -> ContactRecord:
    """Build a ContactRecord from ``payload["profile"]``.

    Optional fields (phone, tags, lists) are left unset when their source is
    empty so existing CRM values are never overwritten with blanks.
    """
    profile = payload.get("profile")
    if not isinstance(profile, dict):
        profile = {}

    email = _text(profile, "email")
    if not email:
        raise NoEmailError()

    fields: dict[str, Any] = {
        "email": email,
        "first_name": _text(profile, "first_name"),
        "last_name": _text(profile, "last_name"),
    }
    phone = _text(profile, "cell_phone")
    if phone:
        fields["phone"] = phone
    if default_tags:
        fields["tags"] = list(default_tags)
    if default_lists:
        fields["lists"] = list(default_lists)
    return ContactRecord(**fields)
