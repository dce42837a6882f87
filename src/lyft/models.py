"""
Data models for Lyft API requests and responses.

The API encodes a few values idiosyncratically. The models normalize them
while decoding:

- durations sent as a number of seconds become ``timedelta``;
- durations sent as a *string* of seconds are parsed as base-10 integers;
- timestamps are RFC 3339 strings, where an empty string means "absent"
  and decodes to ``None``;
- OAuth scopes arrive space-delimited and become an ordered list.

A JSON ``null`` leaves a field at its default, so partial payloads (such as
the ride details embedded in webhook events) still decode.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Annotated, Any, Self

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    model_validator,
)

_RFC3339 = re.compile(
    r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})"
)
_INTEGER = re.compile(r"[+-]?\d+")

SANDBOX_EVENT_PREFIX = "sandboxevent"


def _duration(seconds: int | float) -> timedelta:
    try:
        return timedelta(seconds=seconds)
    except OverflowError:
        raise ValueError(f"duration of {seconds!r} seconds is out of range") from None


def _seconds(value: Any) -> timedelta:
    if value is None:
        return timedelta(0)
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"expected a number of seconds, got {value!r}")
    return _duration(value)


def _string_seconds(value: Any) -> timedelta | None:
    if value is None or value == "":
        return None
    if isinstance(value, timedelta):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return _duration(value)
    if isinstance(value, str) and _INTEGER.fullmatch(value):
        return _duration(int(value))
    raise ValueError(f"expected a base-10 integer string of seconds, got {value!r}")


def _timestamp(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not _RFC3339.fullmatch(value):
        raise ValueError(f"expected an RFC 3339 timestamp, got {value!r}")
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def _scopes(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    if isinstance(value, list):
        return [str(scope) for scope in value]
    raise ValueError(f"expected a space-delimited scope string, got {value!r}")


Seconds = Annotated[timedelta, BeforeValidator(_seconds)]
StringSeconds = Annotated[timedelta | None, BeforeValidator(_string_seconds)]
Timestamp = Annotated[datetime | None, BeforeValidator(_timestamp)]
Scopes = Annotated[list[str], BeforeValidator(_scopes)]


class LyftModel(BaseModel):
    """Base for all API models."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data

    @classmethod
    def decode(cls, raw: bytes | str | dict[str, Any]) -> Self:
        """Decode a raw JSON payload. Raises ``pydantic.ValidationError``."""
        if isinstance(raw, (bytes, bytearray, str)):
            return cls.model_validate_json(raw)
        return cls.model_validate(raw)


# =============================================================================
# Auth
# =============================================================================


class Token(LyftModel):
    """
    OAuth credential returned by the token endpoints.

    Tokens are immutable: refreshing produces a new ``Token`` value that
    keeps the original refresh token.
    """

    access_token: str = ""
    refresh_token: str | None = None
    token_type: str = ""
    expires: Seconds = Field(default=timedelta(0), alias="expires_in")
    scopes: Scopes = Field(default_factory=list, alias="scope")

    def to_wire(self) -> dict[str, Any]:
        """Encode the token in the same shape the token endpoint returns."""
        data: dict[str, Any] = {
            "access_token": self.access_token,
            "token_type": self.token_type,
            "expires_in": int(self.expires.total_seconds()),
            "scope": " ".join(self.scopes),
        }
        if self.refresh_token is not None:
            data["refresh_token"] = self.refresh_token
        return data


# =============================================================================
# Availability
# =============================================================================


class Pricing(LyftModel):
    base: int = Field(default=0, alias="base_charge")
    per_mile: int = Field(default=0, alias="cost_per_mile")
    per_minute: int = Field(default=0, alias="cost_per_minute")
    minimum: int = Field(default=0, alias="cost_minimum")
    trust_and_service: int = 0
    currency: str = ""
    cancel_penalty: int = Field(default=0, alias="cancel_penalty_amount")


class RideType(LyftModel):
    """Returned by ``ride_types``."""

    display_name: str = ""
    ride_type: str = ""
    image_url: str = ""
    pricing: Pricing = Field(default_factory=Pricing, alias="pricing_details")
    seats: int = 0


class CostEstimate(LyftModel):
    """Estimated cost, distance and duration of a ride. Costs are in cents."""

    ride_type: str = ""
    display_name: str = ""
    maximum_cost: int = Field(default=0, alias="estimated_cost_cents_max")
    minimum_cost: int = Field(default=0, alias="estimated_cost_cents_min")
    distance: float = Field(default=0.0, alias="estimated_distance_miles")
    duration: Seconds = Field(default=timedelta(0), alias="estimated_duration_seconds")
    # Deprecated upstream in favour of cost_token.
    primetime_token: str = Field(default="", alias="primetime_confirmation_token")
    cost_token: str = ""
    # If false, maximum_cost and minimum_cost may be invalid.
    valid: bool = Field(default=False, alias="is_valid_estimate")


class ETAEstimate(LyftModel):
    ride_type: str = ""
    display_name: str = ""
    eta: Seconds = Field(default=timedelta(0), alias="eta_seconds")
    valid: bool = Field(default=False, alias="is_valid_estimate")


class LatLng(LyftModel):
    latitude: float = Field(default=0.0, alias="lat")
    longitude: float = Field(default=0.0, alias="lng")


class Driver(LyftModel):
    locations: list[LatLng] = Field(default_factory=list)


class NearbyDriver(LyftModel):
    """Returned by ``drivers_nearby``."""

    drivers: list[Driver] = Field(default_factory=list)
    ride_type: str = ""


class RideTypesResponse(LyftModel):
    ride_types: list[RideType] = Field(default_factory=list)


class CostEstimatesResponse(LyftModel):
    cost_estimates: list[CostEstimate] = Field(default_factory=list)


class ETAEstimatesResponse(LyftModel):
    eta_estimates: list[ETAEstimate] = Field(default_factory=list)


class NearbyDriversResponse(LyftModel):
    nearby_drivers: list[NearbyDriver] = Field(default_factory=list)


# =============================================================================
# Rides
# =============================================================================


class Location(LyftModel):
    """A point for requesting rides. ``address`` is optional."""

    latitude: float = Field(alias="lat")
    longitude: float = Field(alias="lng")
    address: str = ""


class RideRequest(LyftModel):
    """Parameters for ``request_ride``."""

    origin: Location
    ride_type: str
    destination: Location | None = None
    cost_token: str | None = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Person(LyftModel):
    user_id: str = ""
    first_name: str = ""
    last_name: str = ""
    image_url: str = ""
    rating: str = ""
    phone: str = Field(default="", alias="phone_number")


class CreatedRide(LyftModel):
    """Returned by ``request_ride``. The passenger's phone is not set."""

    ride_id: str = ""
    status: str = ""
    ride_type: str = ""
    origin: Location | None = None
    destination: Location | None = None
    passenger: Person = Field(default_factory=Person)


class RideLocation(LyftModel):
    """
    A location attached to a ride.

    Lyft's documentation disagrees with itself about which locations carry
    an ``eta`` and which carry a ``time``: some places give requested
    locations (origin, destination) an ``eta`` and actual ones (pickup,
    dropoff) a ``time``, others the reverse. Both fields are optional.
    """

    latitude: float = Field(default=0.0, alias="lat")
    longitude: float = Field(default=0.0, alias="lng")
    address: str = ""
    eta: Seconds = Field(default=timedelta(0), alias="eta_seconds")
    time: Timestamp = None


class VehicleLocation(LyftModel):
    latitude: float = Field(default=0.0, alias="lat")
    longitude: float = Field(default=0.0, alias="lng")
    bearing: float = 0.0  # degrees


class Vehicle(LyftModel):
    make: str = ""
    model: str = ""
    year: int = 0
    license_plate: str = ""
    license_plate_state: str = ""
    color: str = ""
    image_url: str = ""


class Price(LyftModel):
    amount: int = 0
    currency: str = ""
    description: str = ""


class LineItem(LyftModel):
    amount: int = 0
    currency: str = ""
    description: str = Field(default="", alias="type")


class Charge(LyftModel):
    amount: int = 0
    currency: str = ""
    payment_method: str = ""


class CancellationPrice(LyftModel):
    amount: int = 0
    currency: str = ""
    token: str = ""
    token_duration: Seconds = timedelta(0)


class RideDetail(LyftModel):
    """
    Returned by ``ride_detail`` and ``ride_history``, and embedded in
    webhook events. Many fields are only populated for certain ride states.
    """

    ride_id: str = ""
    status: str = ""
    ride_type: str = ""
    origin: RideLocation = Field(default_factory=RideLocation)
    pickup: RideLocation = Field(default_factory=RideLocation)
    destination: RideLocation = Field(default_factory=RideLocation)
    dropoff: RideLocation = Field(default_factory=RideLocation)
    location: VehicleLocation = Field(default_factory=VehicleLocation)
    passenger: Person = Field(default_factory=Person)
    driver: Person = Field(default_factory=Person)
    vehicle: Vehicle = Field(default_factory=Vehicle)
    primetime_percentage: str = ""
    distance: float = Field(default=0.0, alias="distance_miles")
    duration: Seconds = Field(default=timedelta(0), alias="duration_seconds")
    price: Price = Field(default_factory=Price)
    line_items: list[LineItem] = Field(default_factory=list)
    requested: Timestamp = Field(default=None, alias="requested_at")
    ride_profile: str = ""
    beacon_color: str = Field(default="", alias="beacon_string")
    pricing_details_url: str = ""
    route_url: str = ""
    can_cancel: list[str] = Field(default_factory=list)
    canceled_by: str = ""
    cancellation_price: CancellationPrice = Field(default_factory=CancellationPrice)
    rating: int = 0
    feedback: str = ""


class RideHistoryResponse(LyftModel):
    ride_history: list[RideDetail] = Field(default_factory=list)


class RideReceipt(LyftModel):
    """Returned by ``ride_receipt``."""

    ride_id: str = ""
    price: Price = Field(default_factory=Price)
    line_items: list[LineItem] = Field(default_factory=list)
    charges: list[Charge] = Field(default_factory=list)
    requested: Timestamp = Field(default=None, alias="requested_at")
    ride_profile: str = ""


class CostTokenInfo(LyftModel):
    """Cost confirmation details carried by a ``RideRequestError``."""

    primetime_percentage: str = ""
    primetime_multiplier: float = 0.0
    primetime_token: str = Field(default="", alias="primetime_confirmation_token")
    cost_token: str = ""
    # Sent as a string of seconds.
    token_duration: StringSeconds = None
    error_uri: str = ""


class CancellationFee(LyftModel):
    """Fee details carried by a ``CancelRideError``."""

    amount: float = 0.0
    currency: str = ""
    token: str = ""
    token_duration: Seconds = timedelta(0)


# =============================================================================
# Users
# =============================================================================


class UserProfile(LyftModel):
    """Returned by ``user_profile``."""

    id: str = ""
    first_name: str = ""
    last_name: str = ""
    # Whether the user has taken at least one ride.
    ridden: bool = Field(default=False, alias="has_taken_a_ride")


# =============================================================================
# Webhooks
# =============================================================================


class Event(LyftModel):
    """An incoming webhook event. Some ``detail`` fields may not be set."""

    event_id: str = ""
    url: str = Field(default="", alias="href")
    occurred: Timestamp = Field(default=None, alias="occurred_at")
    event_type: str = ""
    detail: RideDetail = Field(default_factory=RideDetail, alias="event")

    @property
    def is_sandbox(self) -> bool:
        return self.event_id.startswith(SANDBOX_EVENT_PREFIX)


# =============================================================================
# Configuration
# =============================================================================


class ClientConfig(LyftModel):
    """Snapshot of a client's settings."""

    access_token: str
    base_url: str
    timeout: float | None = None
    debug: bool = False
    headers: dict[str, list[str]] = Field(default_factory=dict)
