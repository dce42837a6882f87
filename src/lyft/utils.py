"""
Utility functions for the Lyft client.

Includes accessors for Lyft's diagnostic response headers, display names
for ride types and statuses, and the query-string formatting the API
expects.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import datetime, timezone
from decimal import Decimal

# Ride types. May not be an exhaustive list.
RIDE_TYPE_LYFT = "lyft"
RIDE_TYPE_PLUS = "lyft_plus"
RIDE_TYPE_LINE = "lyft_line"
RIDE_TYPE_PREMIER = "lyft_premier"
RIDE_TYPE_LUX = "lyft_lux"
RIDE_TYPE_LUX_SUV = "lyft_luxsuv"

_RIDE_TYPE_DISPLAY = {
    RIDE_TYPE_LYFT: "Lyft",
    RIDE_TYPE_PLUS: "Lyft Plus",
    RIDE_TYPE_LINE: "Lyft Line",
    RIDE_TYPE_PREMIER: "Lyft Premier",
    RIDE_TYPE_LUX: "Lyft Lux",
    RIDE_TYPE_LUX_SUV: "Lyft Lux SUV",
}

# Ride statuses.
STATUS_PENDING = "pending"
STATUS_ACCEPTED = "accepted"
STATUS_ARRIVED = "arrived"
STATUS_PICKED_UP = "pickedUp"
STATUS_DROPPED_OFF = "droppedOff"
STATUS_CANCELED = "canceled"
STATUS_UNKNOWN = "unknown"

_STATUS_DISPLAY = {
    STATUS_PENDING: "Pending",
    STATUS_ACCEPTED: "Accepted",
    STATUS_ARRIVED: "Arrived",
    STATUS_PICKED_UP: "Picked up",
    STATUS_DROPPED_OFF: "Dropped off",
    STATUS_CANCELED: "Canceled",
    STATUS_UNKNOWN: "Unknown",
}

# Ride profiles.
PROFILE_BUSINESS = "business"
PROFILE_PERSONAL = "personal"

REQUEST_ID_HEADER = "Request-ID"
RATE_REMAINING_HEADER = "X-Ratelimit-Remaining"
RATE_LIMIT_HEADER = "X-Ratelimit-Limit"

# Layout for ride history query times, always in UTC.
HISTORY_TIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

_INTEGER = re.compile(r"[+-]?\d+")


def ride_type_display(ride_type: str) -> str:
    """Return a display name for a ride type, or the ride type itself."""
    return _RIDE_TYPE_DISPLAY.get(ride_type, ride_type)


def ride_status_display(status: str) -> str:
    """Return a display name for a ride status, or the status itself."""
    return _STATUS_DISPLAY.get(status, status)


def request_id(headers: Mapping[str, str]) -> str:
    """Get the unique Request-ID Lyft assigns to a response."""
    return headers.get(REQUEST_ID_HEADER) or ""


def rate_remaining(headers: Mapping[str, str]) -> tuple[int, bool]:
    """
    Get the value of X-Ratelimit-Remaining.

    Returns:
        ``(n, True)`` when the header holds an integer, else ``(0, False)``.
    """
    return _int_header(headers, RATE_REMAINING_HEADER)


def rate_limit(headers: Mapping[str, str]) -> tuple[int, bool]:
    """Get the value of X-Ratelimit-Limit, as ``(n, ok)``."""
    return _int_header(headers, RATE_LIMIT_HEADER)


def _int_header(headers: Mapping[str, str], key: str) -> tuple[int, bool]:
    value = headers.get(key)
    if value is None:
        return 0, False
    # Repeated headers are comma-joined; the first value wins.
    value = value.split(",")[0].strip()
    if not _INTEGER.fullmatch(value):
        return 0, False
    return int(value), True


def format_float(value: float) -> str:
    """Format a coordinate with the fewest digits that round-trip, no exponent."""
    text = format(Decimal(repr(float(value))), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_time(value: datetime) -> str:
    """Format a time for history queries. Naive datetimes are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(HISTORY_TIME_FORMAT)
