"""
Lyft API client.

This module provides the :class:`Client` and :class:`AsyncClient` classes
for calling Lyft's v1 HTTP API.

Results and Headers
-------------------
Operations return a ``(value, headers)`` tuple, where ``headers`` is the
HTTP response header. It is useful for reading the rate-limit headers and
the unique ``Request-ID`` Lyft sets (see :mod:`lyft.utils`).

Errors raised after a response was received (:class:`~lyft.errors.StatusError`,
its endpoint-specific subclasses and :class:`~lyft.errors.DecodeError`)
carry the same headers in their ``headers`` attribute. Network errors
propagate as ``httpx.RequestError``.

Token Expiry
------------
The client never refreshes tokens or retries on its own. Use
:func:`lyft.errors.is_token_expired` to detect expiry, obtain a new token
(see :mod:`lyft.auth`) and call :meth:`Client.set_access_token`, or use the
helpers in :mod:`lyft.flows`.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any

import httpx

from . import _http
from .errors import (
    ConfigurationError,
    cancel_ride_error_from_response,
    ride_request_error_from_response,
)
from .models import (
    ClientConfig,
    CostEstimate,
    CostEstimatesResponse,
    CreatedRide,
    ETAEstimate,
    ETAEstimatesResponse,
    Location,
    NearbyDriver,
    NearbyDriversResponse,
    RideDetail,
    RideHistoryResponse,
    RideReceipt,
    RideRequest,
    RideType,
    RideTypesResponse,
    UserProfile,
)
from .utils import format_float, format_time

logger = logging.getLogger("lyft.client")

BASE_URL = "https://api.lyft.com"
DEFAULT_TIMEOUT = 30.0

# Largest page size documented for ride history.
HISTORY_MAX_LIMIT = 50


def _normalize_headers(
    headers: Mapping[str, str | Sequence[str]] | None,
) -> list[tuple[str, str]]:
    items: list[tuple[str, str]] = []
    for key, values in (headers or {}).items():
        if isinstance(values, str):
            values = [values]
        for value in values:
            items.append((key, value))
    return items


def _location_params(
    lat: float,
    lng: float,
    end_lat: float | None,
    end_lng: float | None,
    ride_type: str | None,
    *,
    keys: tuple[str, str, str, str],
) -> dict[str, str]:
    params = {keys[0]: format_float(lat), keys[1]: format_float(lng)}
    if end_lat is not None:
        params[keys[2]] = format_float(end_lat)
    if end_lng is not None:
        params[keys[3]] = format_float(end_lng)
    if ride_type:
        params["ride_type"] = ride_type
    return params


def _history_params(start: datetime, end: datetime | None, limit: int) -> dict[str, str]:
    params = {"start_time": format_time(start)}
    if end is not None:
        params["end_time"] = format_time(end)
    if limit == -1:
        limit = HISTORY_MAX_LIMIT
    params["limit"] = str(limit)
    return params


def _cancel_body(cancel_token: str | None) -> dict[str, Any] | None:
    if cancel_token:
        return {"cancel_confirmation_token": cancel_token}
    return None


class _BaseClient:
    """Configuration and request preparation shared by both clients."""

    def __init__(
        self,
        access_token: str | None,
        base_url: str | None,
        headers: Mapping[str, str | Sequence[str]] | None,
        timeout: float | None,
        debug: bool,
    ) -> None:
        self._access_token = access_token or os.environ.get("LYFT_ACCESS_TOKEN")
        if not self._access_token:
            raise ConfigurationError(
                "Access token is required. Pass it directly or set LYFT_ACCESS_TOKEN environment variable."
            )

        self._base_url = (
            base_url or os.environ.get("LYFT_API_URL") or BASE_URL
        ).rstrip("/")
        self._timeout = timeout
        self._extra_headers = _normalize_headers(headers)
        self._debug = debug

    @property
    def config(self) -> ClientConfig:
        """Get the current configuration."""
        headers: dict[str, list[str]] = {}
        for key, value in self._extra_headers:
            headers.setdefault(key, []).append(value)
        return ClientConfig(
            access_token=self._access_token,
            base_url=self._base_url,
            timeout=self._timeout,
            debug=self._debug,
            headers=headers,
        )

    def set_access_token(self, access_token: str) -> None:
        """
        Replace the bearer token, typically after a refresh.

        Do not call this while requests are in flight on the same client.
        """
        if not access_token:
            raise ConfigurationError("Access token must not be empty.")
        self._access_token = access_token

    def authorize(self, headers: httpx.Headers) -> None:
        """Set the Authorization header the API expects on ``headers``."""
        headers["Authorization"] = f"Bearer {self._access_token}"

    def _build(
        self,
        client: httpx.Client | httpx.AsyncClient,
        method: str,
        path: str,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> httpx.Request:
        kwargs: dict[str, Any] = {}
        if self._timeout is not None:
            kwargs["timeout"] = self._timeout
        return client.build_request(
            method,
            self._base_url + path,
            params=params,
            json=json,
            **kwargs,
        )

    def _prepare(self, request: httpx.Request) -> None:
        # Extra headers are added alongside existing values, never replacing them.
        items = list(request.headers.multi_items())
        items.extend(self._extra_headers)
        request.headers = httpx.Headers(items)
        self.authorize(request.headers)

        if self._debug:
            logger.debug("%s", _http.dump_request(request))
        elif logger.isEnabledFor(logging.DEBUG):
            logger.debug("lyft request: %s %s", request.method, request.url)

    def _trace(self, response: httpx.Response) -> None:
        if self._debug:
            logger.debug("%s", _http.dump_response(response))
        elif logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "lyft response: %s %s status=%d",
                response.request.method,
                response.request.url,
                response.status_code,
            )


class Client(_BaseClient):
    """
    Client for Lyft's v1 HTTP API.

    Methods are safe to call from multiple threads as long as the client's
    configuration is not modified at the same time.

    Example:
        >>> from lyft import Client, utils
        >>>
        >>> client = Client(access_token="...")
        >>> ride_types, headers = client.ride_types(37.7, -122.2)
        >>> print(utils.request_id(headers))
    """

    def __init__(
        self,
        access_token: str | None = None,
        *,
        base_url: str | None = None,
        http_client: httpx.Client | None = None,
        headers: Mapping[str, str | Sequence[str]] | None = None,
        timeout: float | None = None,
        debug: bool = False,
    ) -> None:
        """
        Initialize the client.

        Args:
            access_token: OAuth access token. If not provided, reads from the
                          LYFT_ACCESS_TOKEN environment variable.
            base_url: Base URL for the API. Defaults to https://api.lyft.com.
                      Can also be set via LYFT_API_URL environment variable.
            http_client: httpx client to send requests with, for custom
                         timeout, proxy or TLS settings. The caller keeps
                         ownership and must close it.
            headers: Extra headers added to every request. A value may be a
                     list, in which case every value is sent.
            timeout: Per-request timeout in seconds. Defaults to 30 when the
                     client creates its own httpx client.
            debug: Log full requests and responses to the ``lyft.client``
                   logger at DEBUG level.

        Raises:
            ConfigurationError: If no access token is provided or found in environment.
        """
        super().__init__(access_token, base_url, headers, timeout, debug)
        self._owns_http = http_client is None
        self._http = http_client or httpx.Client(timeout=timeout or DEFAULT_TIMEOUT)

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client if this client created it."""
        if self._owns_http:
            self._http.close()

    # =========================================================================
    # Transport
    # =========================================================================

    def do(self, request: httpx.Request) -> httpx.Response:
        """
        Execute a request with credentials and extra headers added.

        The response body is fully read and the connection released before
        returning. Status codes are not inspected.
        """
        self._prepare(request)
        response = _http.send(self._http, request)
        self._trace(response)
        return response

    def _call(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
        success: int = 200,
        decode: Any = None,
        special: Any = None,
    ) -> tuple[Any, httpx.Headers]:
        request = self._build(self._http, method, path, params=params, json=json)
        response = self.do(request)
        return _http.handle(response, success=success, decode=decode, special=special)

    # =========================================================================
    # Availability
    # =========================================================================

    def ride_types(
        self, lat: float, lng: float, ride_type: str | None = None
    ) -> tuple[list[RideType], httpx.Headers]:
        """
        Get the ride types available at a location.

        Args:
            lat: Latitude.
            lng: Longitude.
            ride_type: If set, only details for this ride type are returned.

        Returns:
            The ride types and the response headers. If no ride types are
            available, a StatusError is raised.
        """
        params = {"lat": format_float(lat), "lng": format_float(lng)}
        if ride_type:
            params["ride_type"] = ride_type
        result, headers = self._call(
            "GET", "/v1/ridetypes", params=params, decode=RideTypesResponse.decode
        )
        return result.ride_types, headers

    def cost_estimates(
        self,
        start_lat: float,
        start_lng: float,
        end_lat: float | None = None,
        end_lng: float | None = None,
        ride_type: str | None = None,
    ) -> tuple[list[CostEstimate], httpx.Headers]:
        """
        Estimate the cost, distance and duration of a ride.

        The end coordinates and ride type are optional.
        """
        params = _location_params(
            start_lat, start_lng, end_lat, end_lng, ride_type,
            keys=("start_lat", "start_lng", "end_lat", "end_lng"),
        )
        result, headers = self._call(
            "GET", "/v1/cost", params=params, decode=CostEstimatesResponse.decode
        )
        return result.cost_estimates, headers

    def driver_eta(
        self,
        lat: float,
        lng: float,
        end_lat: float | None = None,
        end_lng: float | None = None,
        ride_type: str | None = None,
    ) -> tuple[list[ETAEstimate], httpx.Headers]:
        """Estimate the time for the nearest driver to reach a location."""
        params = _location_params(
            lat, lng, end_lat, end_lng, ride_type,
            keys=("lat", "lng", "destination_lat", "destination_lng"),
        )
        result, headers = self._call(
            "GET", "/v1/eta", params=params, decode=ETAEstimatesResponse.decode
        )
        return result.eta_estimates, headers

    def drivers_nearby(
        self, lat: float, lng: float
    ) -> tuple[list[NearbyDriver], httpx.Headers]:
        """Get the locations of drivers near a location."""
        params = {"lat": format_float(lat), "lng": format_float(lng)}
        result, headers = self._call(
            "GET", "/v1/drivers", params=params, decode=NearbyDriversResponse.decode
        )
        return result.nearby_drivers, headers

    # =========================================================================
    # Rides
    # =========================================================================

    def request_ride(self, req: RideRequest) -> tuple[CreatedRide, httpx.Headers]:
        """
        Request a ride for the user.

        Raises:
            RideRequestError: On a 400 response, when further action (such
                as confirming the cost) is needed. Resubmit with
                ``cost_token`` set from ``err.cost``.
            StatusError: For any other failure status.
        """
        return self._call(
            "POST",
            "/v1/rides",
            json=req.to_wire(),
            success=201,
            decode=CreatedRide.decode,
            special=ride_request_error_from_response,
        )

    def set_destination(
        self, ride_id: str, location: Location
    ) -> tuple[Location, httpx.Headers]:
        """Update the ride's destination. The location's address is optional."""
        return self._call(
            "PUT",
            f"/v1/rides/{ride_id}/destination",
            json=location.model_dump(by_alias=True),
            decode=Location.decode,
        )

    def ride_receipt(self, ride_id: str) -> tuple[RideReceipt, httpx.Headers]:
        """Get the receipt for a ride."""
        return self._call("GET", f"/v1/rides/{ride_id}/receipt", decode=RideReceipt.decode)

    def cancel_ride(self, ride_id: str, cancel_token: str | None = None) -> httpx.Headers:
        """
        Cancel a ride.

        Args:
            ride_id: The ride ID.
            cancel_token: Cancellation confirmation token, from a previous
                          CancelRideError's ``fee.token``.

        Raises:
            CancelRideError: On a 400 response, when a cancellation fee must
                be accepted first.
            StatusError: For any other failure status.
        """
        _, headers = self._call(
            "POST",
            f"/v1/rides/{ride_id}/cancel",
            json=_cancel_body(cancel_token),
            success=204,
            special=cancel_ride_error_from_response,
        )
        return headers

    def ride_detail(self, ride_id: str) -> tuple[RideDetail, httpx.Headers]:
        """Get the details of a ride."""
        return self._call("GET", f"/v1/rides/{ride_id}", decode=RideDetail.decode)

    def ride_history(
        self, start: datetime, end: datetime | None = None, limit: int = -1
    ) -> tuple[list[RideDetail], httpx.Headers]:
        """
        Get the user's current and past rides.

        Args:
            start: Earliest ride time. Naive datetimes are taken as UTC.
            end: Latest ride time, optional.
            limit: Maximum number of rides. -1 requests the documented
                   maximum (50).
        """
        result, headers = self._call(
            "GET",
            "/v1/rides",
            params=_history_params(start, end, limit),
            decode=RideHistoryResponse.decode,
        )
        return result.ride_history, headers

    # =========================================================================
    # Users
    # =========================================================================

    def user_profile(self) -> tuple[UserProfile, httpx.Headers]:
        """Get the user's profile."""
        return self._call("GET", "/v1/profile", decode=UserProfile.decode)


class AsyncClient(_BaseClient):
    """
    Async version of the Lyft client.

    Provides the same API as Client but with async/await support. Calls can
    be bounded with ``asyncio.timeout`` or cancelled like any other task.

    Example:
        >>> async with AsyncClient(access_token="...") as client:
        ...     profile, _ = await client.user_profile()
    """

    def __init__(
        self,
        access_token: str | None = None,
        *,
        base_url: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        headers: Mapping[str, str | Sequence[str]] | None = None,
        timeout: float | None = None,
        debug: bool = False,
    ) -> None:
        """Initialize the async client. Arguments match :class:`Client`."""
        super().__init__(access_token, base_url, headers, timeout, debug)
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout or DEFAULT_TIMEOUT)

    async def __aenter__(self) -> AsyncClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client if this client created it."""
        if self._owns_http:
            await self._http.aclose()

    async def do(self, request: httpx.Request) -> httpx.Response:
        """Execute a request with credentials and extra headers added."""
        self._prepare(request)
        response = await _http.asend(self._http, request)
        self._trace(response)
        return response

    async def _call(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
        success: int = 200,
        decode: Any = None,
        special: Any = None,
    ) -> tuple[Any, httpx.Headers]:
        request = self._build(self._http, method, path, params=params, json=json)
        response = await self.do(request)
        return _http.handle(response, success=success, decode=decode, special=special)

    async def ride_types(
        self, lat: float, lng: float, ride_type: str | None = None
    ) -> tuple[list[RideType], httpx.Headers]:
        """Get the ride types available at a location."""
        params = {"lat": format_float(lat), "lng": format_float(lng)}
        if ride_type:
            params["ride_type"] = ride_type
        result, headers = await self._call(
            "GET", "/v1/ridetypes", params=params, decode=RideTypesResponse.decode
        )
        return result.ride_types, headers

    async def cost_estimates(
        self,
        start_lat: float,
        start_lng: float,
        end_lat: float | None = None,
        end_lng: float | None = None,
        ride_type: str | None = None,
    ) -> tuple[list[CostEstimate], httpx.Headers]:
        """Estimate the cost, distance and duration of a ride."""
        params = _location_params(
            start_lat, start_lng, end_lat, end_lng, ride_type,
            keys=("start_lat", "start_lng", "end_lat", "end_lng"),
        )
        result, headers = await self._call(
            "GET", "/v1/cost", params=params, decode=CostEstimatesResponse.decode
        )
        return result.cost_estimates, headers

    async def driver_eta(
        self,
        lat: float,
        lng: float,
        end_lat: float | None = None,
        end_lng: float | None = None,
        ride_type: str | None = None,
    ) -> tuple[list[ETAEstimate], httpx.Headers]:
        """Estimate the time for the nearest driver to reach a location."""
        params = _location_params(
            lat, lng, end_lat, end_lng, ride_type,
            keys=("lat", "lng", "destination_lat", "destination_lng"),
        )
        result, headers = await self._call(
            "GET", "/v1/eta", params=params, decode=ETAEstimatesResponse.decode
        )
        return result.eta_estimates, headers

    async def drivers_nearby(
        self, lat: float, lng: float
    ) -> tuple[list[NearbyDriver], httpx.Headers]:
        """Get the locations of drivers near a location."""
        params = {"lat": format_float(lat), "lng": format_float(lng)}
        result, headers = await self._call(
            "GET", "/v1/drivers", params=params, decode=NearbyDriversResponse.decode
        )
        return result.nearby_drivers, headers

    async def request_ride(self, req: RideRequest) -> tuple[CreatedRide, httpx.Headers]:
        """Request a ride for the user."""
        return await self._call(
            "POST",
            "/v1/rides",
            json=req.to_wire(),
            success=201,
            decode=CreatedRide.decode,
            special=ride_request_error_from_response,
        )

    async def set_destination(
        self, ride_id: str, location: Location
    ) -> tuple[Location, httpx.Headers]:
        """Update the ride's destination."""
        return await self._call(
            "PUT",
            f"/v1/rides/{ride_id}/destination",
            json=location.model_dump(by_alias=True),
            decode=Location.decode,
        )

    async def ride_receipt(self, ride_id: str) -> tuple[RideReceipt, httpx.Headers]:
        """Get the receipt for a ride."""
        return await self._call(
            "GET", f"/v1/rides/{ride_id}/receipt", decode=RideReceipt.decode
        )

    async def cancel_ride(
        self, ride_id: str, cancel_token: str | None = None
    ) -> httpx.Headers:
        """Cancel a ride."""
        _, headers = await self._call(
            "POST",
            f"/v1/rides/{ride_id}/cancel",
            json=_cancel_body(cancel_token),
            success=204,
            special=cancel_ride_error_from_response,
        )
        return headers

    async def ride_detail(self, ride_id: str) -> tuple[RideDetail, httpx.Headers]:
        """Get the details of a ride."""
        return await self._call("GET", f"/v1/rides/{ride_id}", decode=RideDetail.decode)

    async def ride_history(
        self, start: datetime, end: datetime | None = None, limit: int = -1
    ) -> tuple[list[RideDetail], httpx.Headers]:
        """Get the user's current and past rides."""
        result, headers = await self._call(
            "GET",
            "/v1/rides",
            params=_history_params(start, end, limit),
            decode=RideHistoryResponse.decode,
        )
        return result.ride_history, headers

    async def user_profile(self) -> tuple[UserProfile, httpx.Headers]:
        """Get the user's profile."""
        return await self._call("GET", "/v1/profile", decode=UserProfile.decode)
