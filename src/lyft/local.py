"""
Local implementations of the persistence and notification interfaces.

:class:`FileStore` keeps the credential and saved places as JSON files in a
directory (``~/.lyft`` by default). :class:`DesktopNotifier` shows macOS
notifications and does nothing elsewhere.
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import Any

from .interfaces import NotFoundError
from .models import Location, Token

logger = logging.getLogger("lyft.local")

CREDENTIAL_FILE = "internal.json"
PLACES_FILE = "places.json"

DIR_MODE = 0o740
FILE_MODE = 0o640


class FileStore:
    """
    JSON file persistence for a credential and named locations.

    Implements both ``CredentialStore`` and ``PlaceStore``.
    """

    def __init__(self, root: str | Path | None = None) -> None:
        self.root = Path(root) if root is not None else Path.home() / ".lyft"

    def _read(self, name: str) -> Any:
        path = self.root / name
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            raise NotFoundError(f"{path} does not exist") from None

    def _write(self, name: str, data: Any) -> None:
        self.root.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
        path = self.root / name
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True)

    # -- credentials ----------------------------------------------------------

    def load_credential(self) -> Token:
        return Token.decode(self._read(CREDENTIAL_FILE))

    def save_credential(self, token: Token) -> None:
        self._write(CREDENTIAL_FILE, token.to_wire())

    # -- places ---------------------------------------------------------------

    def named_locations(self) -> dict[str, Location]:
        """All saved places, empty if none were saved."""
        try:
            raw = self._read(PLACES_FILE)
        except NotFoundError:
            return {}
        return {name: Location.decode(value) for name, value in raw.items()}

    def load_named_location(self, name: str) -> Location:
        places = self.named_locations()
        if name not in places:
            raise NotFoundError(f"place {name!r} not found")
        return places[name]

    def save_named_location(self, name: str, location: Location) -> None:
        """Save a place. An existing place with the same name is replaced."""
        places = self.named_locations()
        places[name] = location
        self._write_places(places)

    def remove_named_location(self, name: str) -> None:
        places = self.named_locations()
        if name not in places:
            raise NotFoundError(f"place {name!r} not found")
        del places[name]
        self._write_places(places)

    def _write_places(self, places: dict[str, Location]) -> None:
        self._write(
            PLACES_FILE,
            {name: loc.model_dump(by_alias=True) for name, loc in places.items()},
        )


def _quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


class DesktopNotifier:
    """Show notifications through ``osascript`` on macOS."""

    def __init__(self, platform: str | None = None) -> None:
        self.platform = platform or sys.platform

    def script(self, message: str, title: str = "", subtitle: str = "") -> str:
        script = f"display notification {_quote(message)}"
        if title:
            script += f" with title {_quote(title)}"
            if subtitle:
                script += f" subtitle {_quote(subtitle)}"
        return script

    def notify(self, message: str, title: str = "", subtitle: str = "") -> None:
        if self.platform != "darwin":
            return
        try:
            subprocess.run(
                ["osascript", "-e", self.script(message, title, subtitle)],
                check=False,
                capture_output=True,
            )
        except OSError as e:
            logger.debug("notification not shown: %s", e)
