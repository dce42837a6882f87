"""
Tests for local persistence and notifications.
"""

import stat
import subprocess
from datetime import timedelta

import pytest

from lyft.interfaces import CredentialStore, Notifier, NotFoundError, PlaceStore
from lyft.local import DesktopNotifier, FileStore
from lyft.models import Location, Token


@pytest.fixture
def store(tmp_path):
    return FileStore(tmp_path / "lyft")


class TestFileStore:
    def test_implements_protocols(self, store: FileStore) -> None:
        assert isinstance(store, CredentialStore)
        assert isinstance(store, PlaceStore)

    def test_missing_credential(self, store: FileStore) -> None:
        with pytest.raises(NotFoundError):
            store.load_credential()

    def test_credential_round_trip(self, store: FileStore) -> None:
        token = Token(
            access_token="a",
            refresh_token="r",
            token_type="Bearer",
            expires=timedelta(hours=1),
            scopes=["public", "offline"],
        )
        store.save_credential(token)
        assert store.load_credential() == token

        path = store.root / "internal.json"
        assert path.exists()
        assert stat.S_IMODE(path.stat().st_mode) & 0o007 == 0

    def test_places(self, store: FileStore) -> None:
        assert store.named_locations() == {}
        home = Location(latitude=37.7, longitude=-122.4, address="Home")
        store.save_named_location("home", home)
        store.save_named_location("work", Location(latitude=37.8, longitude=-122.3))

        assert store.load_named_location("home") == home
        assert sorted(store.named_locations()) == ["home", "work"]

    def test_replace_and_remove_place(self, store: FileStore) -> None:
        store.save_named_location("home", Location(latitude=1.0, longitude=2.0))
        store.save_named_location("home", Location(latitude=3.0, longitude=4.0))
        assert store.load_named_location("home").latitude == 3.0

        store.remove_named_location("home")
        with pytest.raises(NotFoundError):
            store.load_named_location("home")
        with pytest.raises(NotFoundError):
            store.remove_named_location("home")


class TestDesktopNotifier:
    def test_implements_protocol(self) -> None:
        assert isinstance(DesktopNotifier(), Notifier)

    def test_script_escapes_quotes(self) -> None:
        script = DesktopNotifier("darwin").script('Driver "Sam" arrived', "Lyft", "Ride r1")
        assert script == (
            'display notification "Driver \\"Sam\\" arrived"'
            ' with title "Lyft" subtitle "Ride r1"'
        )

    def test_noop_off_darwin(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def fail(*args, **kwargs):
            raise AssertionError("should not run")

        monkeypatch.setattr(subprocess, "run", fail)
        DesktopNotifier("linux").notify("hello")

    def test_runs_osascript_on_darwin(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls = []
        monkeypatch.setattr(subprocess, "run", lambda args, **kwargs: calls.append(args))
        DesktopNotifier("darwin").notify("hello", "Lyft")
        assert calls == [["osascript", "-e", 'display notification "hello" with title "Lyft"']]

    def test_missing_osascript_is_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def missing(*args, **kwargs):
            raise FileNotFoundError("osascript")

        monkeypatch.setattr(subprocess, "run", missing)
        DesktopNotifier("darwin").notify("hello")
