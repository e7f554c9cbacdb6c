"""Eventbrite webhook signature verification.

The ``x-eventbrite-signature`` header carries the hex HMAC-SHA256 of the raw
request body keyed by the shared webhook secret.

Two permissive paths exist for first-time setup and are logged as warnings:
no secret configured, and a secret configured but no signature sent. The
second one can be closed with ``require_signature``.
"""

from __future__ import annotations

import hashlib
import hmac
import logging

from eventbrite_fluentcrm.errors import InvalidSignatureError

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "x-eventbrite-signature"


def compute_signature(body: bytes, secret: str) -> str:
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


class SignatureVerifier:
    """Validates inbound webhook bodies against the shared secret."""

    def verify(
        self,
        raw_body: bytes,
        signature_header: str | None,
        secret: str,
        *,
        require_signature: bool = False,
    ) -> bool:
        """Return True if the request is accepted, raise InvalidSignatureError otherwise.

        Constant-time comparison via hmac.compare_digest.
        """
        if not secret:
            logger.warning("No webhook secret configured; request accepted without verification")
            return True

        signature = (signature_header or "").strip().lower()
        if not signature:
            if require_signature:
                logger.warning("Webhook rejected: signature header missing")
                raise InvalidSignatureError("Missing webhook signature")
            logger.warning("Webhook secret configured but no signature sent; request accepted")
            return True

        expected = compute_signature(raw_body, secret)
        if not hmac.compare_digest(signature.encode(), expected.encode()):
            logger.warning("Webhook signature verification failed")
            raise InvalidSignatureError()
        return True
