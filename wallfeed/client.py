"""The Walltaker link client: reacts to server frames and keeps settings in sync."""

from __future__ import annotations

import argparse
import logging
import os
import shutil
import sys
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Protocol, Sequence

import requests

from wallfeed import protocol
from wallfeed.protocol import LinkMessage, Welcome, parse_incoming
from wallfeed.settings import (
    InvalidIdsError,
    Settings,
    parse_ids,
    read_settings,
    save_settings,
    startup_dir,
)

log = logging.getLogger(__name__)

SERVER_URL = "wss://walltaker.joi.how/cable"
APP_NAME = "wallfeed"
WALLPAPER_FILE = f"{APP_NAME}-current"
POLL_TIMEOUT = 0.05


class Connection(Protocol):
    def send(self, payload: str) -> Any: ...

    def recv(self) -> Any: ...


def download(url: str, dest: os.PathLike | str) -> None:
    """Fetch ``url`` and write its body to ``dest``."""
    with open(dest, "wb") as out:
        with requests.get(url, stream=True, timeout=60) as response:
            response.raise_for_status()
            for chunk in response.iter_content(chunk_size=65536):
                if chunk:
                    out.write(chunk)


def sync_run_on_boot(enabled: bool, startup: Path, executable: Path) -> Path:
    """Install or remove a copy of ``executable`` in ``startup``; return its path."""
    target = Path(startup) / Path(executable).name
    if enabled:
        Path(startup).mkdir(parents=True, exist_ok=True)
        shutil.copyfile(executable, target)
    else:
        try:
            target.unlink()
        except FileNotFoundError:
            pass
    return target


def _show_wallpaper(path: Path) -> None:
    print(f"Wallpaper updated: {path}")


class WalltakerClient:
    """Holds the connection and settings and applies incoming updates."""

    def __init__(
        self,
        connection: Connection,
        settings: Settings,
        settings_path: os.PathLike | str,
        wallpaper_path: os.PathLike | str,
        set_wallpaper: Callable[[Path], Any] = _show_wallpaper,
        fetch: Callable[[str, Path], Any] = download,
    ) -> None:
        self.connection = connection
        self.settings = settings
        self.settings_path = Path(settings_path)
        self.wallpaper_path = Path(wallpaper_path)
        self.set_wallpaper = set_wallpaper
        self.fetch = fetch
        self.executable = Path(sys.argv[0]).resolve()
        self.platform: Optional[str] = None
        self.environ: Optional[Mapping[str, str]] = None

    def handle_message(self, text: str) -> protocol.Incoming:
        """Act on one server frame and return what it decoded to."""
        print(f"<= {text}")
        message = parse_incoming(text)
        if isinstance(message, Welcome):
            for link_id in sorted(self.settings.ids):
                protocol.subscribe_to(self.connection, link_id)
        elif isinstance(message, LinkMessage):
            url = message.message.post_url
            if url is not None:
                self.fetch(url, self.wallpaper_path)
                self.set_wallpaper(self.wallpaper_path)
        return message

    def update_settings(self, new: Settings) -> None:
        """Resubscribe for changed ids, apply run-on-boot and persist ``new``."""
        for link_id in sorted(self.settings.ids - new.ids):
            protocol.unsubscribe_from(self.connection, link_id)
        for link_id in sorted(new.ids - self.settings.ids):
            protocol.subscribe_to(self.connection, link_id)

        try:
            startup = startup_dir(self.platform, self.environ)
        except LookupError as exc:
            log.warning("Couldn't determine system startup dir: %s", exc)
        else:
            if new.run_on_boot:
                sync_run_on_boot(True, startup, self.executable)
            else:
                try:
                    sync_run_on_boot(False, startup, self.executable)
                except OSError as exc:
                    target = startup / self.executable.name
                    log.warning("Couldn't disable run on boot: %s; check %s", exc, target)

        self.settings = new
        save_settings(self.settings, self.settings_path)

    def refresh(self) -> None:
        """Ask the server for the current wallpaper of one subscribed link."""
        if not self.settings.ids:
            raise LookupError("No links are set")
        protocol.check(self.connection, min(self.settings.ids))

    def poll(self) -> Optional[protocol.Incoming]:
        """Read at most one frame; return what was handled, or None."""
        try:
            frame = self.connection.recv()
        except TimeoutError:
            return None
        except Exception as exc:
            if type(exc).__name__ == "WebSocketTimeoutException":
                return None
            raise
        if isinstance(frame, (bytes, bytearray)):
            frame = bytes(frame).decode("utf-8")
        if not frame:
            return None
        try:
            return self.handle_message(frame)
        except (ValueError, OSError, requests.RequestException) as exc:
            log.error("Couldn't communicate with walltaker: %s", exc)
            return None


def _app_dirs() -> tuple[Path, Path]:
    """The (config, data) directories of the application."""
    home = Path.home()
    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA") or home / "AppData" / "Roaming") / APP_NAME
        return base / "config", base / "data"
    if sys.platform == "darwin":
        base = home / "Library" / "Application Support" / APP_NAME
        return base, base
    config = Path(os.environ.get("XDG_CONFIG_HOME") or home / ".config")
    data = Path(os.environ.get("XDG_DATA_HOME") or home / ".local" / "share")
    return config / APP_NAME, data / APP_NAME


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME, description="Follow Walltaker links and apply their wallpapers."
    )
    parser.add_argument("--ids", help="whitespace-separated link ids to follow")
    boot = parser.add_mutually_exclusive_group()
    boot.add_argument("--run-on-boot", dest="run_on_boot", action="store_true", default=None)
    boot.add_argument("--no-run-on-boot", dest="run_on_boot", action="store_false")
    parser.add_argument("--save-current", metavar="DEST", help="copy the current wallpaper")
    parser.add_argument("--data-dir", action="store_true", help="print the data directory")
    parser.add_argument("--refresh", action="store_true", help="request the current wallpaper")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parser().parse_args(argv)

    config_dir, data_dir = _app_dirs()
    config_dir.mkdir(parents=True, exist_ok=True)
    data_dir.mkdir(parents=True, exist_ok=True)
    wallpaper_path = data_dir / WALLPAPER_FILE
    settings_path = config_dir / "settings.json"

    if args.data_dir:
        print(data_dir)
        return 0
    if args.save_current:
        try:
            shutil.copyfile(wallpaper_path, args.save_current)
        except OSError as exc:
            print(f"Couldn't save wallpaper: {exc}", file=sys.stderr)
            return 1
        return 0

    settings = read_settings(settings_path)
    new = Settings(ids=set(settings.ids), run_on_boot=settings.run_on_boot)
    if args.ids is not None:
        try:
            new.ids = parse_ids(args.ids)
        except InvalidIdsError as exc:
            print(exc, file=sys.stderr)
            return 2
    if args.run_on_boot is not None:
        new.run_on_boot = args.run_on_boot

    import websocket

    connection = websocket.create_connection(SERVER_URL, timeout=POLL_TIMEOUT)
    client = WalltakerClient(connection, settings, settings_path, wallpaper_path)
    try:
        if new != settings:
            client.update_settings(new)
        refresh_pending = args.refresh
        while True:
            message = client.poll()
            if refresh_pending and isinstance(message, Welcome):
                refresh_pending = False
                try:
                    client.refresh()
                except LookupError as exc:
                    print(exc, file=sys.stderr)
    except KeyboardInterrupt:
        return 0
    finally:
        connection.close()


if __name__ == "__main__":
    sys.exit(main())