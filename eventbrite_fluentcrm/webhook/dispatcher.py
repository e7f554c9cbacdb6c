"""Webhook dispatcher: parses Eventbrite notifications and runs the sync.

Pipeline stages:
1. Parse the envelope (api_url is mandatory)
2. Fetch the full order/attendee from the Eventbrite API
3. Route on config.action
4. Map the profile onto a contact record
5. Create-or-update the contact in FluentCRM
6. Audit log
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from eventbrite_fluentcrm.errors import InvalidPayloadError, SyncError
from eventbrite_fluentcrm.models import (
    AuditEvent,
    AuditEventType,
    RiskLevel,
    WebhookEnvelope,
    WebhookResult,
)
from eventbrite_fluentcrm.sync.mapper import map_attendee

if TYPE_CHECKING:
    from eventbrite_fluentcrm.audit.logger import AuditLogger
    from eventbrite_fluentcrm.config import Settings
    from eventbrite_fluentcrm.crm.client import CrmSyncClient
    from eventbrite_fluentcrm.eventbrite.fetcher import EventbriteFetcher

logger = logging.getLogger(__name__)

DEFAULT_ACTION = "order.placed"
HANDLED_ACTIONS = frozenset({"order.placed", "attendee.updated"})


def parse_envelope(raw_body: bytes) -> WebhookEnvelope:
    try:
        data = json.loads(raw_body) if raw_body.strip() else None
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidPayloadError("Webhook body is not valid JSON") from exc
    if not isinstance(data, dict):
        raise InvalidPayloadError()
    try:
        return WebhookEnvelope.model_validate(data)
    except ValidationError as exc:
        raise InvalidPayloadError() from exc


class WebhookDispatcher:
    """Runs one webhook delivery from raw body to CRM write."""

    def __init__(
        self,
        fetcher: EventbriteFetcher,
        sync_client: CrmSyncClient,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._sync = sync_client
        self._audit = audit_logger

    async def handle(
        self,
        raw_body: bytes,
        settings: Settings,
        source_ip: str | None = None,
    ) -> WebhookResult:
        envelope = parse_envelope(raw_body)
        _debug(settings, "Received webhook: %s", envelope.model_dump())

        try:
            event_data = await self._fetcher.fetch(envelope.api_url, settings.api_token)
        except SyncError as exc:
            _debug(settings, "Error fetching Eventbrite data: %s", exc.message)
            self._log(AuditEventType.SYNC_FAILED, "fetch", "failure", RiskLevel.MEDIUM,
                      source_ip, {"api_url": envelope.api_url, "code": exc.code})
            raise

        action = envelope.config.action
        if action is None:
            action = DEFAULT_ACTION
        if action not in HANDLED_ACTIONS:
            _debug(settings, "Unhandled webhook action: %s", action)
            self._log(AuditEventType.WEBHOOK_IGNORED, action, "ignored", RiskLevel.INFO,
                      source_ip, {"api_url": envelope.api_url})
            return WebhookResult(success=True, message="Webhook received but not processed")

        try:
            record = map_attendee(event_data, settings.default_tags, settings.default_lists)
            result = await self._sync.sync_contact(record)
        except SyncError as exc:
            _debug(settings, "Sync failed for %s: %s", envelope.api_url, exc.message)
            self._log(AuditEventType.SYNC_FAILED, action, "failure", RiskLevel.MEDIUM,
                      source_ip, {"api_url": envelope.api_url, "code": exc.code})
            raise

        self._log(AuditEventType.CONTACT_SYNCED, action, "success", RiskLevel.INFO,
                  source_ip, {"email": result.email, "contact_id": result.contact_id})
        return WebhookResult(success=True, message="Contact synced to FluentCRM", data=result)

    def _log(
        self,
        event_type: AuditEventType,
        action: str,
        result: str,
        risk_level: RiskLevel,
        source_ip: str | None,
        details: dict[str, Any],
    ) -> None:
        if self._audit:
            self._audit.log(AuditEvent(
                event_type=event_type,
                source_ip=source_ip,
                action=action,
                result=result,
                risk_level=risk_level,
                details=details,
            ))


def _debug(settings: Settings, msg: str, *args: object) -> None:
    """Per-delivery tracing, only emitted when debug_mode is enabled."""
    if settings.debug_mode:
        logger.info(msg, *args)
