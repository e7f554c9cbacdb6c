"""Error taxonomy for the webhook intake and sync pipeline.

Every failure that can end a webhook delivery is a ``SyncError`` carrying a
machine-readable code, a human message and the HTTP status returned to
Eventbrite. The webhook route is the only place these are turned into
responses.
"""

from __future__ import annotations

from eventbrite_fluentcrm.models import ErrorBody


class ConfigurationError(Exception):
    """Raised at startup when collaborators are wired incorrectly."""


class SyncError(Exception):
    code = "sync_error"
    status = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_body(self) -> ErrorBody:
        return ErrorBody(code=self.code, message=self.message)


class InvalidSignatureError(SyncError):
    code = "invalid_signature"
    status = 403

    def __init__(self, message: str = "Invalid webhook signature") -> None:
        super().__init__(message)


class InvalidPayloadError(SyncError):
    code = "invalid_data"
    status = 400

    def __init__(self, message: str = "Missing api_url in webhook payload") -> None:
        super().__init__(message)


class NoApiTokenError(SyncError):
    code = "no_api_token"
    status = 500

    def __init__(self, message: str = "Eventbrite API token not configured") -> None:
        super().__init__(message)


class TransportError(SyncError):
    """Network failure while reaching the Eventbrite API."""

    code = "transport_error"
    status = 502


class InvalidResponseError(SyncError):
    code = "invalid_response"
    status = 500

    def __init__(self, message: str = "Invalid response from Eventbrite API") -> None:
        super().__init__(message)


class NoEmailError(SyncError):
    code = "no_email"
    status = 400

    def __init__(self, message: str = "No email address found in attendee data") -> None:
        super().__init__(message)


class CrmNotActiveError(SyncError):
    code = "fluentcrm_not_active"
    status = 500

    def __init__(self, message: str = "FluentCRM is not active") -> None:
        super().__init__(message)


class CrmSyncError(SyncError):
    code = "fluentcrm_error"
    status = 500


class RequestTimeoutError(SyncError):
    code = "request_timeout"
    status = 504

    def __init__(self, message: str = "Webhook processing timed out") -> None:
        super().__init__(message)


class InvalidConfigurationError(SyncError):
    """Stored settings could not be read or failed validation."""

    code = "invalid_configuration"
    status = 500

    def __init__(self, message: str = "Stored settings are invalid") -> None:
        super().__init__(message)
