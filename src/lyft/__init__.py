"""
Lyft API client for Python.

A client for Lyft's v1 HTTP API covering OAuth, ride requests and status,
availability lookups and webhooks.

Example:
    >>> from lyft import Client, auth
    >>>
    >>> token, _ = auth.client_credentials_token(client_id, client_secret)
    >>> client = Client(token.access_token)
    >>> ride_types, headers = client.ride_types(37.7, -122.2)
"""

from . import auth, flows, utils, webhook
from .client import BASE_URL, AsyncClient, Client
from .errors import (
    CancelRideError,
    ConfigurationError,
    DecodeError,
    ErrorInfo,
    LyftError,
    RideRequestError,
    StatusError,
    is_rate_limit,
    is_token_expired,
    status_error_from_response,
)
from .flows import CancellationFlow, CancelState, call_with_refresh
from .interfaces import NotFoundError
from .models import (
    CancellationFee,
    CancellationPrice,
    Charge,
    ClientConfig,
    CostEstimate,
    CostTokenInfo,
    CreatedRide,
    Driver,
    ETAEstimate,
    Event,
    LatLng,
    LineItem,
    Location,
    NearbyDriver,
    Person,
    Price,
    Pricing,
    RideDetail,
    RideLocation,
    RideReceipt,
    RideRequest,
    RideType,
    Token,
    UserProfile,
    Vehicle,
    VehicleLocation,
)
from .utils import rate_limit, rate_remaining, request_id
from .webhook import VerificationError

__version__ = "0.1.0"

__all__ = [
    # Clients
    "AsyncClient",
    "BASE_URL",
    "Client",
    # Submodules
    "auth",
    "flows",
    "utils",
    "webhook",
    # Errors
    "CancelRideError",
    "ConfigurationError",
    "DecodeError",
    "ErrorInfo",
    "LyftError",
    "NotFoundError",
    "RideRequestError",
    "StatusError",
    "VerificationError",
    "is_rate_limit",
    "is_token_expired",
    "status_error_from_response",
    # Flows
    "CancelState",
    "CancellationFlow",
    "call_with_refresh",
    # Models
    "CancellationFee",
    "CancellationPrice",
    "Charge",
    "ClientConfig",
    "CostEstimate",
    "CostTokenInfo",
    "CreatedRide",
    "Driver",
    "ETAEstimate",
    "Event",
    "LatLng",
    "LineItem",
    "Location",
    "NearbyDriver",
    "Person",
    "Price",
    "Pricing",
    "RideDetail",
    "RideLocation",
    "RideReceipt",
    "RideRequest",
    "RideType",
    "Token",
    "UserProfile",
    "Vehicle",
    "VehicleLocation",
    # Headers
    "rate_limit",
    "rate_remaining",
    "request_id",
]
