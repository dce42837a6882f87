"""
Tests for error parsing and classification.
"""

import httpx
import pytest

from lyft.errors import (
    CancelRideError,
    ErrorInfo,
    LyftError,
    RideRequestError,
    StatusError,
    cancel_ride_error_from_response,
    is_rate_limit,
    is_token_expired,
    parse_error_info,
    ride_request_error_from_response,
    status_error_from_response,
)


def make_response(status: int, content: bytes = b"", headers: dict | None = None) -> httpx.Response:
    request = httpx.Request("GET", "https://api.lyft.com/v1/profile")
    return httpx.Response(status, content=content, headers=headers, request=request)


class TestParseErrorInfo:
    def test_full_body(self) -> None:
        body = (
            b'{"error": "invalid_request", "error_description": "missing lat",'
            b' "error_detail": [{"lat": "required"}]}'
        )
        info = parse_error_info(body, httpx.Headers())
        assert info == ErrorInfo(
            reason="invalid_request",
            details=[{"lat": "required"}],
            description="missing lat",
        )

    def test_header_wins(self) -> None:
        headers = httpx.Headers([("Error", "token_expired"), ("Error", "other")])
        info = parse_error_info(b'{"error": "invalid_token"}', headers)
        assert info.reason == "token_expired"

    def test_header_without_body(self) -> None:
        info = parse_error_info(b"<html>oops</html>", httpx.Headers({"error": "invalid_token"}))
        assert info == ErrorInfo(reason="invalid_token")

    def test_undecodable_body_is_empty(self) -> None:
        assert parse_error_info(b"", httpx.Headers()) == ErrorInfo()
        assert parse_error_info(b"[1, 2]", httpx.Headers()) == ErrorInfo()


class TestStatusError:
    def test_from_response(self) -> None:
        response = make_response(
            500, b'{"error": "server_error"}', headers={"Request-ID": "r1"}
        )
        err = status_error_from_response(response)
        assert isinstance(err, LyftError)
        assert err.status_code == 500
        assert err.body == b'{"error": "server_error"}'
        assert err.headers["request-id"] == "r1"
        assert str(err) == "server_error: status code=500"

    @pytest.mark.parametrize("status", [200, 400, 401, 403, 404, 500, 503])
    def test_only_429_is_rate_limit(self, status: int) -> None:
        assert not is_rate_limit(status_error_from_response(make_response(status)))

    def test_429_is_rate_limit(self) -> None:
        assert is_rate_limit(status_error_from_response(make_response(429)))

    def test_token_expired_by_reason_any_status(self) -> None:
        err = status_error_from_response(make_response(400, b'{"error": "token_expired"}'))
        assert is_token_expired(err)

    def test_401_with_body_is_not_expired(self) -> None:
        err = status_error_from_response(make_response(401, b'{"error": "invalid_token"}'))
        assert not is_token_expired(err)

    def test_predicates_reject_other_exceptions(self) -> None:
        assert not is_rate_limit(ValueError("x"))
        assert not is_token_expired(httpx.ConnectError("refused"))


class TestRideRequestError:
    def test_cost_decoded_independently(self) -> None:
        body = (
            b'{"error": "primetime_confirmation_required",'
            b' "error_description": "Prime Time is in effect",'
            b' "primetime_percentage": "25%", "primetime_multiplier": 1.25,'
            b' "cost_token": "ct_9", "token_duration": "120"}'
        )
        err = ride_request_error_from_response(make_response(400, body))

        assert isinstance(err, StatusError)
        assert err.body == body
        assert err.cost is not None
        assert err.cost.primetime_multiplier == 1.25
        assert err.cost.token_duration is not None
        assert err.cost.token_duration.total_seconds() == 120
        assert str(err) == "primetime_confirmation_required: Prime Time is in effect"

    def test_bad_token_duration_leaves_cost_empty(self) -> None:
        body = b'{"error": "confirmation_required", "token_duration": "two minutes"}'
        err = ride_request_error_from_response(make_response(400, body))
        assert err.cost is None
        assert err.reason == "confirmation_required"

    def test_fallback_message(self) -> None:
        err = ride_request_error_from_response(make_response(400, b"not json"))
        assert str(err) == "<ride request error>"
        assert err.cost is None

    def test_description_only_message(self) -> None:
        err = ride_request_error_from_response(
            make_response(400, b'{"error_description": "try again"}')
        )
        assert str(err) == "try again"


class TestCancelRideError:
    def test_fee(self) -> None:
        body = b'{"amount": 5.0, "currency": "USD", "token": "tok123", "token_duration": 300}'
        err = cancel_ride_error_from_response(make_response(400, body))
        assert isinstance(err, CancelRideError)
        assert err.kind == "cancel_ride"
        assert err.fee is not None
        assert err.fee.token_duration.total_seconds() == 300

    def test_undecodable_fee(self) -> None:
        err = cancel_ride_error_from_response(make_response(400, b'{"amount": "five"}'))
        assert err.fee is None

    def test_kinds(self) -> None:
        assert StatusError.kind == "status"
        assert RideRequestError.kind == "ride_request"
        assert CancelRideError.kind == "cancel_ride"


class TestOutOfRangePayloads:
    @pytest.mark.parametrize(
        "body",
        [
            b'{"error": "confirmation_required", "cost_token": "abc", "token_duration": "99999999999999999999"}',
            b'{"error": "confirmation_required", "cost_token": "abc", "token_duration": 100000000000000}',
        ],
    )
    def test_ride_request_cost_degrades_to_none(self, body: bytes) -> None:
        err = ride_request_error_from_response(make_response(400, body))
        assert isinstance(err, RideRequestError)
        assert err.cost is None
        assert err.reason == "confirmation_required"
        assert err.body == body

    @pytest.mark.parametrize("duration", [b"100000000000000", b"1e20"])
    def test_cancel_fee_degrades_to_none(self, duration: bytes) -> None:
        body = b'{"error": "fee", "token": "t", "token_duration": ' + duration + b"}"
        err = cancel_ride_error_from_response(make_response(400, body))
        assert isinstance(err, CancelRideError)
        assert err.fee is None
        assert err.reason == "fee"
