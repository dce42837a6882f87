"""
Webhook verification and event decoding.

Lyft signs each webhook delivery with HMAC-SHA256 over the raw request
body, keyed by the verification token from the developer portal, and
sends the base64 digest in the ``X-Lyft-Signature`` header prefixed with
``sha256=``.

Example:
    >>> event = decode_event(request.body, request.headers, secret)
    >>> if event.event_type == RIDE_STATUS_UPDATED:
    ...     print(event.detail.status)
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
from collections.abc import Mapping
from typing import BinaryIO

from pydantic import ValidationError

from .errors import DecodeError, LyftError
from .models import SANDBOX_EVENT_PREFIX, Event

logger = logging.getLogger("lyft.webhook")

# Event types.
RIDE_STATUS_UPDATED = "ride.status.updated"
RIDE_RECEIPT_READY = "ride.receipt.ready"

SIGNATURE_HEADER = "X-Lyft-Signature"
SIGNATURE_PREFIX = "sha256="

__all__ = [
    "RIDE_RECEIPT_READY",
    "RIDE_STATUS_UPDATED",
    "SANDBOX_EVENT_PREFIX",
    "SIGNATURE_HEADER",
    "VerificationError",
    "decode_event",
    "generate_signature",
    "signature",
    "verify",
]


class VerificationError(LyftError):
    """The request could not be verified to have originated from Lyft."""


def _to_bytes(value: bytes | str) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else bytes(value)


def signature(headers: Mapping[str, str]) -> str:
    """
    Get the signature from an incoming webhook request's headers.

    The header name is matched case-insensitively and the ``sha256=``
    prefix is removed.
    """
    for key, value in headers.items():
        if key.lower() == SIGNATURE_HEADER.lower():
            return value.removeprefix(SIGNATURE_PREFIX)
    return ""


def generate_signature(body: bytes | str, secret: bytes | str) -> str:
    """Compute the base64 HMAC-SHA256 signature Lyft sends for ``body``."""
    digest = hmac.new(_to_bytes(secret), _to_bytes(body), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify(body: bytes | str, sig: str, secret: bytes | str) -> bool:
    """
    Check whether a webhook request body was signed by Lyft.

    Uses a timing-safe comparison.

    Args:
        body: The raw, unmodified request body.
        sig: The X-Lyft-Signature header value, with or without ``sha256=``.
        secret: The verification token.

    Returns:
        True if the signature is valid.
    """
    expected = generate_signature(body, secret).encode("ascii")
    return hmac.compare_digest(expected, sig.removeprefix(SIGNATURE_PREFIX).encode("utf-8"))


def _drain(body: bytes | str | BinaryIO) -> bytes:
    if isinstance(body, (bytes, bytearray, str)):
        return _to_bytes(body)
    try:
        return body.read()
    finally:
        body.close()


def decode_event(
    body: bytes | str | BinaryIO,
    headers: Mapping[str, str],
    secret: bytes | str,
) -> Event:
    """
    Verify an incoming webhook request and decode its body into an Event.

    A file-like ``body`` is always read to the end and closed, even when an
    error is raised.

    Raises:
        VerificationError: If the signature does not match.
        DecodeError: If the verified body is not a valid event.
    """
    payload = _drain(body)

    if not verify(payload, signature(headers), secret):
        logger.debug("webhook signature mismatch for %d byte body", len(payload))
        raise VerificationError("failed to verify request")

    try:
        return Event.decode(payload)
    except ValidationError as e:
        raise DecodeError(f"decoding webhook event: {e}") from e
