"""
Request execution helpers shared by the clients and the auth functions.

Responses are always sent in streaming mode, read to completion and closed
before anything inspects them. After that the body is an immutable
``bytes`` value, so decoding it more than once is safe.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

import httpx
from pydantic import ValidationError

from .errors import DecodeError, StatusError, status_error_from_response

T = TypeVar("T")

_REDACTED = {"authorization"}


def send(client: httpx.Client, request: httpx.Request, **kwargs: Any) -> httpx.Response:
    """Send a request and drain and release the response body."""
    response = client.send(request, stream=True, **kwargs)
    try:
        response.read()
    finally:
        response.close()
    return response


async def asend(
    client: httpx.AsyncClient, request: httpx.Request, **kwargs: Any
) -> httpx.Response:
    """Async counterpart of :func:`send`."""
    response = await client.send(request, stream=True, **kwargs)
    try:
        await response.aread()
    finally:
        await response.aclose()
    return response


def handle(
    response: httpx.Response,
    *,
    success: int,
    decode: Callable[[bytes], T] | None = None,
    special: Callable[[httpx.Response], StatusError] | None = None,
) -> tuple[T | None, httpx.Headers]:
    """
    Interpret a drained response.

    Args:
        response: Response whose body was already read.
        success: The one status code that means success for this endpoint.
        decode: Converts the success body. ``None`` skips decoding.
        special: Builds the endpoint-specific error for a 400 response.

    Returns:
        The decoded value (or ``None``) and the response headers.

    Raises:
        StatusError: For any other status code.
        DecodeError: If the success body does not match its schema.
    """
    headers = response.headers
    if response.status_code == success:
        if decode is None:
            return None, headers
        try:
            return decode(response.content), headers
        except ValidationError as e:
            raise DecodeError(
                f"decoding {response.request.method} {response.request.url.path} response: {e}",
                headers=headers,
            ) from e

    if special is not None and response.status_code == 400:
        raise special(response)
    raise status_error_from_response(response)


def dump_request(request: httpx.Request) -> str:
    lines = [f"> {request.method} {request.url}"]
    for key, value in request.headers.multi_items():
        if key.lower() in _REDACTED:
            value = "<redacted>"
        lines.append(f"> {key}: {value}")
    lines.append(">")
    try:
        content = request.content
    except httpx.RequestNotRead:
        lines.append("<streaming body>")
    else:
        if content:
            lines.append(content.decode("utf-8", errors="replace"))
    return "\n".join(lines)


def dump_response(response: httpx.Response) -> str:
    lines = [f"< {response.http_version} {response.status_code} {response.reason_phrase}"]
    for key, value in response.headers.multi_items():
        lines.append(f"< {key}: {value}")
    lines.append("<")
    if response.content:
        lines.append(response.content.decode("utf-8", errors="replace"))
    return "\n".join(lines)
