"""Messages exchanged with the Walltaker link channel over its websocket."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol, Union

CHANNEL = "LinkChannel"
CLIENT_VERSION = "0.1.3"
CLIENT = f"wallfeed/{CLIENT_VERSION}"

_UINT_MAX = 2**64 - 1


class ProtocolError(ValueError):
    """Raised when a server message cannot be understood."""


class Writer(Protocol):
    def send(self, payload: str) -> Any: ...


@dataclass(frozen=True)
class WallpaperUpdate:
    """The state of a link as pushed by the server."""

    id: int
    post_url: Optional[str] = None
    set_by: Optional[str] = None


@dataclass(frozen=True)
class Welcome:
    """Sent by the server once the connection is ready."""


@dataclass(frozen=True)
class Ping:
    message: int


@dataclass(frozen=True)
class ConfirmSubscription:
    identifier: str


@dataclass(frozen=True)
class Disconnect:
    reason: str
    reconnect: bool


@dataclass(frozen=True)
class LinkMessage:
    """A wallpaper update for a subscribed link."""

    identifier: str
    message: WallpaperUpdate


Incoming = Union[Welcome, Ping, ConfirmSubscription, Disconnect, LinkMessage]


def _dumps(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"))


def _require(data: dict, key: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise ProtocolError(f"missing field {key!r}") from None


def _str(data: dict, key: str) -> str:
    value = _require(data, key)
    if not isinstance(value, str):
        raise ProtocolError(f"field {key!r} must be a string")
    return value


def _bool(data: dict, key: str) -> bool:
    value = _require(data, key)
    if not isinstance(value, bool):
        raise ProtocolError(f"field {key!r} must be a boolean")
    return value


def _uint(data: dict, key: str) -> int:
    value = _require(data, key)
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= _UINT_MAX:
        raise ProtocolError(f"field {key!r} must be an unsigned integer")
    return value


def _optional_str(data: dict, key: str) -> Optional[str]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ProtocolError(f"field {key!r} must be a string or null")
    return value


def _wallpaper_update(value: Any) -> WallpaperUpdate:
    if not isinstance(value, dict):
        raise ProtocolError("wallpaper update must be an object")
    return WallpaperUpdate(
        id=_uint(value, "id"),
        post_url=_optional_str(value, "post_url"),
        set_by=_optional_str(value, "set_by"),
    )


def _link_message(data: dict) -> LinkMessage:
    return LinkMessage(
        identifier=_str(data, "identifier"),
        message=_wallpaper_update(_require(data, "message")),
    )


_TAGGED: dict[str, Callable[[dict], Incoming]] = {
    "welcome": lambda data: Welcome(),
    "ping": lambda data: Ping(message=_uint(data, "message")),
    "confirm_subscription": lambda data: ConfirmSubscription(
        identifier=_str(data, "identifier")
    ),
    "disconnect": lambda data: Disconnect(
        reason=_str(data, "reason"), reconnect=_bool(data, "reconnect")
    ),
}


def parse_incoming(text: str) -> Incoming:
    """Decode one server frame into a message object."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ProtocolError(f"Parsing {text!r}: {exc}") from exc
    if not isinstance(data, dict):
        raise ProtocolError(f"Parsing {text!r}: expected an object")

    tag = data.get("type")
    builder = _TAGGED.get(tag) if isinstance(tag, str) else None
    if builder is not None:
        try:
            return builder(data)
        except ProtocolError:
            pass
    try:
        return _link_message(data)
    except ProtocolError as exc:
        raise ProtocolError(f"Parsing {text!r}: {exc}") from exc


def identifier(link_id: int) -> str:
    """The channel identifier string for a link."""
    if isinstance(link_id, bool) or not isinstance(link_id, int) or not 0 <= link_id <= _UINT_MAX:
        raise ValueError(f"invalid link id: {link_id!r}")
    return _dumps({"channel": CHANNEL, "id": link_id})


def subscribe_message(link_id: int) -> str:
    return _dumps({"command": "subscribe", "identifier": identifier(link_id)})


def unsubscribe_message(link_id: int) -> str:
    return _dumps({"command": "unsubscribe", "identifier": identifier(link_id)})


def check_message(link_id: int) -> str:
    return _dumps(
        {
            "data": _dumps({"action": "check"}),
            "identifier": identifier(link_id),
            "command": "message",
        }
    )


def announce_message(link_id: int) -> str:
    return _dumps(
        {
            "command": "message",
            "data": _dumps({"client": CLIENT, "action": "announce_client"}),
            "identifier": identifier(link_id),
        }
    )


def send(writer: Writer, message: str) -> None:
    """Log and send one text frame."""
    print(f"=> {message}")
    writer.send(message)


def subscribe_to(writer: Writer, link_id: int) -> None:
    """Subscribe to a link and announce this client on it."""
    send(writer, subscribe_message(link_id))
    send(writer, announce_message(link_id))


def unsubscribe_from(writer: Writer, link_id: int) -> None:
    send(writer, unsubscribe_message(link_id))


def check(writer: Writer, link_id: int) -> None:
    """Ask the server to resend the current state of a link."""
    send(writer, check_message(link_id))