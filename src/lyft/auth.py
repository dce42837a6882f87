"""
OAuth flows for the Lyft API.

Two flows are supported:

**Two-legged (client credentials)** for public endpoints such as ride
types and estimates: :func:`client_credentials_token`.

**Three-legged (authorization code)** for user-specific endpoints such as
requesting rides: send the user to :func:`authorization_url`, extract the
code from the redirect with :func:`authorization_code`, then call
:func:`exchange_code`. Keep the refresh token to call
:func:`refresh_token` when the access token expires, and
:func:`revoke_token` when it is no longer needed.

Every function takes an optional ``http_client``; when omitted a
short-lived ``httpx.Client`` is used for the one request.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import parse_qs, urlencode, urlsplit

import httpx

from . import _http
from .client import BASE_URL, DEFAULT_TIMEOUT
from .models import Token

logger = logging.getLogger("lyft.auth")

# Scopes.
PUBLIC = "public"
RIDES_READ = "rides.read"
OFFLINE = "offline"
RIDES_REQUEST = "rides.request"
PROFILE = "profile"

TOKEN_PATH = "/oauth/token"
REVOKE_PATH = "/oauth/revoke_refresh_token"
AUTHORIZE_PATH = "/oauth/authorize"


def all_scopes() -> list[str]:
    return [PUBLIC, RIDES_READ, OFFLINE, RIDES_REQUEST, PROFILE]


def sandbox_secret(client_secret: str) -> str:
    """Return the sandboxed form of a non-sandboxed client secret."""
    return "SANDBOX-" + client_secret


def authorization_url(
    client_id: str,
    scopes: list[str],
    state: str = "",
    base_url: str = BASE_URL,
) -> str:
    """
    Build the URL a user visits to grant the requested permissions.

    Args:
        client_id: Your application's client ID.
        scopes: Scopes to request, e.g. ``[PUBLIC, RIDES_REQUEST]``.
        state: Opaque value echoed back in the redirect.
    """
    query = urlencode(
        {
            "client_id": client_id,
            "response_type": "code",
            "scope": " ".join(scopes),
            "state": state,
        }
    )
    return f"{base_url.rstrip('/')}{AUTHORIZE_PATH}?{query}"


def authorization_code(redirect_url: str) -> str:
    """Get the authorization code from the URL Lyft redirected the user to."""
    values = parse_qs(urlsplit(redirect_url).query).get("code")
    return values[0] if values else ""


def _post(
    path: str,
    client_id: str,
    client_secret: str,
    payload: dict[str, Any],
    http_client: httpx.Client | None,
    base_url: str,
) -> httpx.Response:
    auth = httpx.BasicAuth(client_id, client_secret)
    url = base_url.rstrip("/") + path
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("lyft auth request: POST %s grant_type=%s", url, payload.get("grant_type"))

    if http_client is None:
        with httpx.Client(timeout=DEFAULT_TIMEOUT) as client:
            return _http.send(client, client.build_request("POST", url, json=payload), auth=auth)
    return _http.send(http_client, http_client.build_request("POST", url, json=payload), auth=auth)


def _token_request(
    client_id: str,
    client_secret: str,
    payload: dict[str, Any],
    http_client: httpx.Client | None,
    base_url: str,
) -> tuple[Token, httpx.Headers]:
    response = _post(TOKEN_PATH, client_id, client_secret, payload, http_client, base_url)
    return _http.handle(response, success=200, decode=Token.decode)


def client_credentials_token(
    client_id: str,
    client_secret: str,
    *,
    http_client: httpx.Client | None = None,
    base_url: str = BASE_URL,
) -> tuple[Token, httpx.Headers]:
    """
    Create an access token for public endpoints (two-legged flow).

    The returned token has no refresh token.

    Raises:
        StatusError: If the token endpoint does not respond with 200.
        DecodeError: If the token response is malformed.
    """
    payload = {"grant_type": "client_credentials", "scope": PUBLIC}
    return _token_request(client_id, client_secret, payload, http_client, base_url)


def exchange_code(
    client_id: str,
    client_secret: str,
    code: str,
    *,
    http_client: httpx.Client | None = None,
    base_url: str = BASE_URL,
) -> tuple[Token, httpx.Headers]:
    """
    Create access and refresh tokens from an authorization code
    (three-legged flow).
    """
    payload = {"grant_type": "authorization_code", "code": code}
    return _token_request(client_id, client_secret, payload, http_client, base_url)


def refresh_token(
    client_id: str,
    client_secret: str,
    refresh_token: str,
    *,
    http_client: httpx.Client | None = None,
    base_url: str = BASE_URL,
) -> tuple[Token, httpx.Headers]:
    """
    Get a new access token for a refresh token.

    The returned Token always carries the refresh token that was passed
    in; any refresh token in the response is ignored.
    """
    payload = {"grant_type": "refresh_token", "refresh_token": refresh_token}
    token, headers = _token_request(client_id, client_secret, payload, http_client, base_url)
    token = token.model_copy(update={"refresh_token": refresh_token})
    return token, headers


def revoke_token(
    client_id: str,
    client_secret: str,
    access_token: str,
    *,
    http_client: httpx.Client | None = None,
    base_url: str = BASE_URL,
) -> httpx.Headers:
    """Revoke an access token."""
    # The API reference is inconsistent about whether this takes the access
    # or the refresh token.
    response = _post(
        REVOKE_PATH, client_id, client_secret, {"token": access_token}, http_client, base_url
    )
    _, headers = _http.handle(response, success=200)
    return headers
