import json

import pytest

from wallfeed.protocol import (
    ConfirmSubscription,
    Disconnect,
    LinkMessage,
    Ping,
    ProtocolError,
    WallpaperUpdate,
    Welcome,
    announce_message,
    check,
    check_message,
    identifier,
    parse_incoming,
    send,
    subscribe_message,
    subscribe_to,
    unsubscribe_from,
    unsubscribe_message,
)


class FakeWriter:
    def __init__(self):
        self.sent = []

    def send(self, payload):
        self.sent.append(payload)


def test_identifier_exact():
    assert identifier(5) == '{"channel":"LinkChannel","id":5}'


def test_identifier_rejects_negative():
    with pytest.raises(ValueError):
        identifier(-1)


def test_subscribe_message_exact():
    assert subscribe_message(5) == (
        '{"command":"subscribe","identifier":"{\\"channel\\":\\"LinkChannel\\",\\"id\\":5}"}'
    )


def test_unsubscribe_message_structure():
    msg = unsubscribe_message(12)
    decoded = json.loads(msg)
    assert list(decoded) == ["command", "identifier"]
    assert decoded["command"] == "unsubscribe"
    assert json.loads(decoded["identifier"]) == {"channel": "LinkChannel", "id": 12}
    assert " " not in msg


def test_check_message_structure():
    decoded = json.loads(check_message(3))
    assert list(decoded) == ["data", "identifier", "command"]
    assert decoded["command"] == "message"
    assert json.loads(decoded["data"]) == {"action": "check"}
    assert decoded["identifier"] == identifier(3)


def test_announce_message_structure():
    decoded = json.loads(announce_message(9))
    assert list(decoded) == ["command", "data", "identifier"]
    assert decoded["command"] == "message"
    data = json.loads(decoded["data"])
    assert list(data) == ["client", "action"]
    assert data["action"] == "announce_client"
    assert decoded["identifier"] == identifier(9)


def test_send_prints_and_sends(capsys):
    writer = FakeWriter()
    send(writer, "hello")
    assert writer.sent == ["hello"]
    assert capsys.readouterr().out == "=> hello\n"


def test_subscribe_to_sends_subscribe_then_announce():
    writer = FakeWriter()
    subscribe_to(writer, 4)
    assert writer.sent == [subscribe_message(4), announce_message(4)]


def test_unsubscribe_and_check():
    writer = FakeWriter()
    unsubscribe_from(writer, 4)
    check(writer, 4)
    assert writer.sent == [unsubscribe_message(4), check_message(4)]


def test_parse_welcome():
    assert parse_incoming('{"type":"welcome"}') == Welcome()


def test_parse_ping():
    assert parse_incoming('{"type":"ping","message":1700000000}') == Ping(1700000000)


def test_parse_confirm_subscription():
    ident = identifier(1)
    text = json.dumps({"type": "confirm_subscription", "identifier": ident})
    assert parse_incoming(text) == ConfirmSubscription(ident)


def test_parse_disconnect():
    text = json.dumps({"type": "disconnect", "reason": "server_restart", "reconnect": True})
    assert parse_incoming(text) == Disconnect("server_restart", True)


def test_parse_link_message():
    ident = identifier(2)
    text = json.dumps(
        {
            "identifier": ident,
            "message": {"id": 2, "post_url": "https://example.com/a.png", "set_by": "someone"},
        }
    )
    assert parse_incoming(text) == LinkMessage(
        ident, WallpaperUpdate(2, "https://example.com/a.png", "someone")
    )


def test_parse_link_message_optional_fields():
    text = json.dumps({"identifier": "x", "message": {"id": 7, "post_url": None}})
    result = parse_incoming(text)
    assert result == LinkMessage("x", WallpaperUpdate(7, None, None))


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        "[1, 2]",
        '{"type":"ping","message":-1}',
        '{"type":"disconnect","reason":"r"}',
        '{"identifier":"x","message":{"post_url":"u"}}',
        '{"identifier":"x","message":{"id":1,"post_url":5}}',
        '{"type":"unknown"}',
    ],
)
def test_parse_errors(text):
    with pytest.raises(ProtocolError):
        parse_incoming(text)