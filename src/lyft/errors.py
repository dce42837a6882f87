"""
Error types for the Lyft client.

When the HTTP round trip succeeds but the status code signals an
application-level failure, operations raise :class:`StatusError` or one of
its endpoint-specific subclasses. Network failures are not wrapped: the
underlying ``httpx.RequestError`` propagates as-is.

Every error raised after a response was received carries that response's
headers, so the ``Request-ID`` and rate-limit headers remain available for
diagnostics.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import httpx
from pydantic import BaseModel, ValidationError

from .models import CancellationFee, CostTokenInfo

# Known values for the reason slug.
INVALID_TOKEN = "invalid_token"
TOKEN_EXPIRED = "token_expired"
INSUFFICIENT_SCOPE = "insufficient_scope"
UNSUPPORTED_GRANT_TYPE = "unsupported_grant_type"

# Non-standard response header that overrides the body's reason.
ERROR_HEADER = "error"


class LyftError(Exception):
    """Base exception for all Lyft client errors."""


class ConfigurationError(LyftError):
    """Raised when a client is constructed without usable settings."""


class DecodeError(LyftError):
    """A response body could not be decoded into its documented shape."""

    def __init__(self, message: str, headers: httpx.Headers | None = None) -> None:
        self.headers = headers if headers is not None else httpx.Headers()
        super().__init__(message)


class _APIErrorBody(BaseModel):
    error: str | None = None
    error_detail: list[dict[str, str]] | None = None
    error_description: str | None = None


@dataclass(frozen=True)
class ErrorInfo:
    """Best-effort details about a failed request. Fields may be empty."""

    reason: str = ""
    details: list[dict[str, str]] = field(default_factory=list)
    description: str = ""


def parse_error_info(body: bytes, headers: httpx.Headers) -> ErrorInfo:
    """
    Extract the reason, details and description for an error response.

    The ``error`` header wins over the body's ``error`` field when present.
    A body that fails to decode only leaves the corresponding fields empty.
    """
    try:
        decoded: _APIErrorBody | None = _APIErrorBody.model_validate_json(body)
    except ValidationError:
        decoded = None

    header_values = headers.get_list(ERROR_HEADER)
    if header_values:
        reason = header_values[0]
    elif decoded is not None:
        reason = decoded.error or ""
    else:
        reason = ""

    if decoded is None:
        return ErrorInfo(reason=reason)
    return ErrorInfo(
        reason=reason,
        details=decoded.error_detail or [],
        description=decoded.error_description or "",
    )


class StatusError(LyftError):
    """
    The HTTP round trip succeeded but the status code indicated an error.

    Attributes:
        status_code: HTTP status code of the response.
        body: The raw response body, byte-for-byte.
        headers: The response headers.
        info: Parsed error details (reason slug, detail entries, description).
        kind: Discriminant tag; ``"status"`` for the generic error.
    """

    kind = "status"

    def __init__(
        self,
        status_code: int,
        body: bytes,
        headers: httpx.Headers,
        info: ErrorInfo,
    ) -> None:
        self.status_code = status_code
        self.body = body
        self.headers = headers
        self.info = info
        super().__init__(self._message())

    @property
    def reason(self) -> str:
        return self.info.reason

    @property
    def details(self) -> list[dict[str, str]]:
        return self.info.details

    @property
    def description(self) -> str:
        return self.info.description

    def _message(self) -> str:
        if self.reason:
            return f"{self.reason}: status code={self.status_code}"
        return f"status code={self.status_code}"


class _ConfirmationError(StatusError):
    """Shared message formatting for errors that need a follow-up request."""

    fallback_message = "<error>"

    def _message(self) -> str:
        if self.reason and self.description:
            return f"{self.reason}: {self.description}"
        if self.reason:
            return self.reason
        if self.description:
            return self.description
        return self.fallback_message


class RideRequestError(_ConfirmationError):
    """
    Raised by ``request_ride`` on a 400 response.

    Further action, such as accepting the quoted cost, is needed before the
    ride can be created. ``cost`` holds the confirmation details when the
    body carried them, otherwise ``None``.
    """

    kind = "ride_request"
    fallback_message = "<ride request error>"

    def __init__(
        self,
        status_code: int,
        body: bytes,
        headers: httpx.Headers,
        info: ErrorInfo,
        cost: CostTokenInfo | None = None,
    ) -> None:
        self.cost = cost
        super().__init__(status_code, body, headers, info)


class CancelRideError(_ConfirmationError):
    """
    Raised by ``cancel_ride`` on a 400 response.

    Cancelling requires accepting a fee. ``fee`` carries the amount and the
    token to send back, or ``None`` when the body could not be decoded.
    """

    kind = "cancel_ride"
    fallback_message = "<cancel ride error>"

    def __init__(
        self,
        status_code: int,
        body: bytes,
        headers: httpx.Headers,
        info: ErrorInfo,
        fee: CancellationFee | None = None,
    ) -> None:
        self.fee = fee
        super().__init__(status_code, body, headers, info)


def _body(response: httpx.Response) -> bytes:
    # read() returns the cached content when the body was already consumed.
    return bytes(response.read())


def status_error_from_response(response: httpx.Response) -> StatusError:
    """Build the generic :class:`StatusError` for a response. Never fails."""
    body = _body(response)
    return StatusError(
        status_code=response.status_code,
        body=body,
        headers=response.headers,
        info=parse_error_info(body, response.headers),
    )


def ride_request_error_from_response(response: httpx.Response) -> RideRequestError:
    """Build a :class:`RideRequestError`, decoding the cost details separately."""
    body = _body(response)
    info = parse_error_info(body, response.headers)
    try:
        cost: CostTokenInfo | None = CostTokenInfo.decode(body)
    except ValidationError:
        cost = None
    return RideRequestError(response.status_code, body, response.headers, info, cost=cost)


def cancel_ride_error_from_response(response: httpx.Response) -> CancelRideError:
    """Build a :class:`CancelRideError`, decoding the fee details separately."""
    body = _body(response)
    info = parse_error_info(body, response.headers)
    try:
        fee: CancellationFee | None = CancellationFee.decode(body)
    except ValidationError:
        fee = None
    return CancelRideError(response.status_code, body, response.headers, info, fee=fee)


def is_rate_limit(err: BaseException) -> bool:
    """Whether the error arose from running into a rate limit."""
    return isinstance(err, StatusError) and err.status_code == 429


def is_token_expired(err: BaseException) -> bool:
    """
    Whether the error arose because the access token expired.

    The API has no canonical signal for this, so a 401 with an empty body
    is treated as expiry too. Expect false negatives.
    """
    if not isinstance(err, StatusError):
        return False
    return (err.status_code == 401 and len(err.body) == 0) or err.reason == TOKEN_EXPIRED
