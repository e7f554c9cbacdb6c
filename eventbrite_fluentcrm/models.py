"""Shared Pydantic data models for eventbrite-fluentcrm."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# --- Enums ---


class AuditEventType(str, Enum):
    WEBHOOK_RECEIVED = "webhook_received"
    SIGNATURE_FAILURE = "signature_failure"
    CONTACT_SYNCED = "contact_synced"
    WEBHOOK_IGNORED = "webhook_ignored"
    SYNC_FAILED = "sync_failed"


class RiskLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


# --- Webhook Models ---


class WebhookConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    action: str | None = None

    @field_validator("action", mode="before")
    @classmethod
    def _action_text(cls, value: Any) -> Any:
        return value if value is None or isinstance(value, str) else str(value)


class WebhookEnvelope(BaseModel):
    """Inbound Eventbrite notification body."""

    model_config = ConfigDict(extra="ignore")

    api_url: str = Field(min_length=1)
    config: WebhookConfig = Field(default_factory=WebhookConfig)

    @field_validator("api_url")
    @classmethod
    def _strip_api_url(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("api_url must not be empty")
        return value

    @field_validator("config", mode="before")
    @classmethod
    def _object_config(cls, value: Any) -> Any:
        # Eventbrite test deliveries may send "config": null
        return value if isinstance(value, (dict, WebhookConfig)) else {}


# --- Contact Models ---


class ContactRecord(BaseModel):
    """Contact fields handed to the CRM, keyed by email."""

    model_config = ConfigDict(frozen=True)

    email: str = Field(min_length=1)
    first_name: str = ""
    last_name: str = ""
    phone: str | None = None
    tags: list[str] | None = None
    lists: list[str] | None = None

    def to_crm_fields(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class CrmContact(BaseModel):
    """Contact as stored by the CRM after a create-or-update."""

    id: int | str
    email: str
    status: str | None = None


class SyncResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    contact_id: int | str
    email: str
    status: str | None = None


class WebhookResult(BaseModel):
    success: bool
    message: str
    data: SyncResult | None = None

    def to_response(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class ErrorBody(BaseModel):
    code: str
    message: str


# --- Audit Models ---


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class AuditEvent(BaseModel):
    timestamp: str = Field(default_factory=_now_iso)
    event_type: AuditEventType
    source_ip: str | None = None
    action: str
    result: str  # "success" | "failure" | "ignored"
    risk_level: RiskLevel
    details: dict[str, object] | None = None
