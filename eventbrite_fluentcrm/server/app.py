"""FastAPI application receiving Eventbrite webhooks."""

from __future__ import annotations

import asyncio
import logging
import os

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from eventbrite_fluentcrm.audit.logger import AuditLogger
from eventbrite_fluentcrm.config import (
    ChainConfigStore,
    ConfigStore,
    EnvConfigStore,
    JsonFileConfigStore,
    Settings,
    load_settings,
)
from eventbrite_fluentcrm.crm.base import ContactsApi
from eventbrite_fluentcrm.crm.client import CrmSyncClient
from eventbrite_fluentcrm.crm.fluentcrm import FluentCrmRestContacts
from eventbrite_fluentcrm.crm.memory import InMemoryContacts
from eventbrite_fluentcrm.errors import (
    InvalidConfigurationError,
    InvalidSignatureError,
    RequestTimeoutError,
    SyncError,
)
from eventbrite_fluentcrm.eventbrite.fetcher import EventbriteFetcher
from eventbrite_fluentcrm.logging_setup import configure_logging
from eventbrite_fluentcrm.models import AuditEvent, AuditEventType, RiskLevel
from eventbrite_fluentcrm.webhook.dispatcher import WebhookDispatcher
from eventbrite_fluentcrm.webhook.verifier import SIGNATURE_HEADER, SignatureVerifier

logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/eventbrite-fluentcrm/v1/webhook"
STATUS_PATH = "/eventbrite-fluentcrm/v1/status"


def build_config_store(settings_path: str) -> ConfigStore:
    """Environment variables take precedence over the settings file."""
    return ChainConfigStore(EnvConfigStore(), JsonFileConfigStore(settings_path))


def create_app_from_env(
    settings_path: str | None = None,
    dry_run: bool = False,
) -> FastAPI:
    """Factory for uvicorn --factory: reads wiring from environment variables."""
    settings_path = settings_path or os.environ.get(
        "EVENTBRITE_FLUENTCRM_SETTINGS_PATH", "data/settings.json",
    )
    config_store = build_config_store(settings_path)
    configure_logging(load_settings(config_store).debug_mode)

    contacts: ContactsApi
    if dry_run:
        logger.warning("Dry run: contacts are kept in memory and not sent to FluentCRM")
        contacts = InMemoryContacts()
    else:
        contacts = FluentCrmRestContacts(
            base_url=os.environ.get("FLUENTCRM_BASE_URL", ""),
            username=os.environ.get("FLUENTCRM_USERNAME", ""),
            password=os.environ.get("FLUENTCRM_PASSWORD", ""),
        )
    audit_log = os.environ.get("AUDIT_LOG_PATH")
    audit_logger = AuditLogger.from_env(audit_log) if audit_log else None
    sync_client = CrmSyncClient(contacts)
    dispatcher = WebhookDispatcher(
        fetcher=EventbriteFetcher(),
        sync_client=sync_client,
        audit_logger=audit_logger,
    )
    return create_app(
        dispatcher, config_store, audit_logger=audit_logger, crm_client=sync_client,
    )


def create_app(
    dispatcher: WebhookDispatcher,
    config_store: ConfigStore,
    verifier: SignatureVerifier | None = None,
    audit_logger: AuditLogger | None = None,
    crm_client: CrmSyncClient | None = None,
) -> FastAPI:
    """Create the webhook app. All collaborators are built by the caller."""
    app = FastAPI(docs_url=None, redoc_url=None)
    signature_verifier = verifier or SignatureVerifier()

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get(STATUS_PATH, response_model=None)
    async def status(request: Request) -> dict[str, object] | JSONResponse:
        try:
            settings = _load_settings(config_store)
        except InvalidConfigurationError as exc:
            return _error_response(exc)
        base_url = str(request.base_url).rstrip("/")
        return {
            "webhook_url": f"{base_url}{WEBHOOK_PATH}",
            "api_token_configured": bool(settings.api_token),
            "webhook_secret_configured": bool(settings.webhook_secret),
            "require_signature": settings.require_signature,
            "crm_active": crm_client.is_active() if crm_client else None,
        }

    @app.post(WEBHOOK_PATH)
    async def webhook(request: Request) -> JSONResponse:
        try:
            settings = _load_settings(config_store)
        except InvalidConfigurationError as exc:
            return _error_response(exc)
        body = await request.body()
        source_ip = request.client.host if request.client else None

        try:
            signature_verifier.verify(
                body,
                request.headers.get(SIGNATURE_HEADER),
                settings.webhook_secret,
                require_signature=settings.require_signature,
            )
        except InvalidSignatureError as exc:
            if audit_logger:
                audit_logger.log(AuditEvent(
                    event_type=AuditEventType.SIGNATURE_FAILURE,
                    source_ip=source_ip,
                    action=f"POST {WEBHOOK_PATH}",
                    result="failure",
                    risk_level=RiskLevel.HIGH,
                    details={"reason": exc.message},
                ))
            return _error_response(exc)

        if audit_logger:
            audit_logger.log(AuditEvent(
                event_type=AuditEventType.WEBHOOK_RECEIVED,
                source_ip=source_ip,
                action=f"POST {WEBHOOK_PATH}",
                result="success",
                risk_level=RiskLevel.INFO,
                details={"bytes": len(body)},
            ))

        try:
            result = await asyncio.wait_for(
                dispatcher.handle(body, settings, source_ip=source_ip),
                timeout=settings.request_timeout,
            )
        except TimeoutError:
            logger.error("Webhook processing exceeded %ss", settings.request_timeout)
            return _error_response(RequestTimeoutError())
        except SyncError as exc:
            return _error_response(exc)

        return JSONResponse(result.to_response(), status_code=200)

    return app


def _load_settings(config_store: ConfigStore) -> Settings:
    # pydantic ValidationError and json.JSONDecodeError are both ValueErrors
    try:
        return load_settings(config_store)
    except (ValueError, OSError) as exc:
        logger.error("Cannot load settings: %s", exc)
        raise InvalidConfigurationError() from exc


def _error_response(exc: SyncError) -> JSONResponse:
    return JSONResponse(exc.to_body().model_dump(), status_code=exc.status)
