"""
Call-site helpers for the two follow-up patterns the API requires.

The client never retries on its own. These helpers put the retry decision
in the caller's hands with an explicit budget:

- :func:`call_with_refresh` retries an operation once after refreshing an
  expired access token.
- :class:`CancellationFlow` walks a ride cancellation through fee
  confirmation.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import Any, TypeVar

import httpx

from .client import Client
from .errors import CancelRideError, StatusError, is_token_expired

logger = logging.getLogger("lyft.flows")

T = TypeVar("T")


def call_with_refresh(
    client: Client,
    refresh: Callable[[], str],
    operation: Callable[..., T],
    *args: Any,
    **kwargs: Any,
) -> T:
    """
    Run ``operation``; if the token expired, refresh it and retry once.

    Args:
        client: The client whose token is replaced on refresh.
        refresh: Returns a new access token.
        operation: Usually a bound method of ``client``.
    """
    try:
        return operation(*args, **kwargs)
    except StatusError as err:
        if not is_token_expired(err):
            raise
        logger.debug("access token expired, refreshing and retrying once")
    client.set_access_token(refresh())
    return operation(*args, **kwargs)


class CancelState(str, Enum):
    INITIAL = "initial"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    RETRIED = "retried"
    CANCELED = "canceled"
    DECLINED = "declined"
    FAILED = "failed"


TERMINAL_STATES = {CancelState.CANCELED, CancelState.DECLINED, CancelState.FAILED}


class CancellationFlow:
    """
    Cancel a ride, confirming a cancellation fee if the API asks for one.

    The first attempt is sent without a token. A ``CancelRideError`` moves
    the flow to AWAITING_CONFIRMATION and ``confirm`` is asked whether to
    accept the fee; if it does, the cancellation is retried with the fee's
    token. An expired access token is refreshed at most once.

    Example:
        >>> flow = CancellationFlow(
        ...     client, ride_id,
        ...     confirm=lambda err: input(f"Pay {err.fee.amount}? ") == "y",
        ... )
        >>> flow.run()
        >>> flow.state
        <CancelState.CANCELED: 'canceled'>
    """

    def __init__(
        self,
        client: Client,
        ride_id: str,
        confirm: Callable[[CancelRideError], bool],
        refresh: Callable[[], str] | None = None,
        max_confirmations: int = 1,
    ) -> None:
        self.client = client
        self.ride_id = ride_id
        self.confirm = confirm
        self.refresh = refresh
        self.max_confirmations = max_confirmations
        self.state = CancelState.INITIAL
        self.history: list[CancelState] = [CancelState.INITIAL]

    def _transition(self, state: CancelState) -> None:
        logger.debug("cancel ride %s: %s -> %s", self.ride_id, self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def run(self) -> httpx.Headers | None:
        """
        Drive the flow to a terminal state.

        Returns:
            The headers of the successful cancellation, or ``None`` if the
            fee was declined.

        Raises:
            StatusError: If the ride could not be cancelled within budget.
                The flow is left in FAILED.
        """
        if self.state in TERMINAL_STATES:
            raise RuntimeError(f"flow already finished in state {self.state.value}")

        token: str | None = None
        confirmations = 0
        refreshed = False

        while True:
            try:
                headers = self.client.cancel_ride(self.ride_id, token)
            except CancelRideError as err:
                if (
                    confirmations >= self.max_confirmations
                    or err.fee is None
                    or not err.fee.token
                ):
                    self._transition(CancelState.FAILED)
                    raise
                self._transition(CancelState.AWAITING_CONFIRMATION)
                if not self.confirm(err):
                    self._transition(CancelState.DECLINED)
                    return None
                confirmations += 1
                token = err.fee.token
                self._transition(CancelState.RETRIED)
                continue
            except StatusError as err:
                if is_token_expired(err) and self.refresh is not None and not refreshed:
                    refreshed = True
                    self.client.set_access_token(self.refresh())
                    self._transition(CancelState.RETRIED)
                    continue
                self._transition(CancelState.FAILED)
                raise

            self._transition(CancelState.CANCELED)
            return headers
