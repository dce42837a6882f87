"""
Interfaces for the services an application built on this client needs
but the client does not implement itself: geocoding, local persistence of
credentials and saved places, and desktop notifications.

The client's operations take already-resolved coordinates and return
tokens to the caller; nothing in the client reads or writes files.
"""

from __future__ import annotations

from typing import NamedTuple, Protocol, runtime_checkable

from .errors import LyftError
from .models import Location, Token


class NotFoundError(LyftError):
    """A stored credential, saved place or address could not be found."""


class GeocodeResult(NamedTuple):
    latitude: float
    longitude: float
    formatted_address: str


@runtime_checkable
class Geocoder(Protocol):
    def geocode(self, address: str) -> GeocodeResult:
        """Resolve a street address. Raises NotFoundError on zero results."""
        ...


@runtime_checkable
class CredentialStore(Protocol):
    def load_credential(self) -> Token:
        """Raises NotFoundError when no credential was saved."""
        ...

    def save_credential(self, token: Token) -> None: ...


@runtime_checkable
class PlaceStore(Protocol):
    def load_named_location(self, name: str) -> Location:
        """Raises NotFoundError for an unknown name."""
        ...

    def save_named_location(self, name: str, location: Location) -> None: ...


@runtime_checkable
class Notifier(Protocol):
    def notify(self, message: str, title: str = "", subtitle: str = "") -> None:
        """Fire and forget. Platforms without notifications do nothing."""
        ...
