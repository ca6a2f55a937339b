import json

import pytest
import websockets

from awaybot.bus.events import (
    AssistPrompt,
    ConnectionUpdate,
    InboundMessage,
    OutboundMessage,
    PresenceUpdate,
    PromptOption,
    ReceiptUpdate,
)
from awaybot.bus.payloads import PlainText
from awaybot.bus.queue import MessageBus
from awaybot.channels.whatsapp import WhatsAppChannel, is_logged_out, parse_presence
from awaybot.config.schema import BridgeConfig
from awaybot.engine.presence import PresenceTracker
from awaybot.errors import LoggedOutError, TransportError


class _FakeWebSocket:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.frames: list[dict] = []

    async def send(self, raw: str) -> None:
        if self.fail:
            raise ConnectionError("socket closed")
        self.frames.append(json.loads(raw))

    async def close(self) -> None:
        pass


@pytest.fixture
def bus():
    return MessageBus()


@pytest.fixture
def channel(bus):
    return WhatsAppChannel(BridgeConfig(), bus)


@pytest.mark.asyncio
async def test_direct_message_frame(channel, bus):
    await channel._handle_bridge_message(json.dumps({
        "type": "message",
        "id": "ABC",
        "chat": "628111@s.whatsapp.net",
        "fromMe": False,
        "timestamp": 1714550400,
        "pushName": "Andi",
        "message": {"conversation": "halo"},
    }))

    event = await bus.consume()
    assert isinstance(event, InboundMessage)
    assert event.sender_id == "628111"
    assert event.message_id == "ABC"
    assert event.payload == PlainText("halo")
    assert event.is_group is False
    assert event.timestamp == 1714550400.0
    assert event.metadata == {"push_name": "Andi"}


@pytest.mark.asyncio
async def test_group_message_uses_participant_as_sender(channel, bus):
    await channel._handle_bridge_message(json.dumps({
        "type": "message",
        "id": "G1",
        "chat": "120363@g.us",
        "participant": "628222:3@s.whatsapp.net",
        "message": {"conversation": "halo"},
    }))

    event = await bus.consume()
    assert event.is_group is True
    assert event.sender_id == "628222"


@pytest.mark.asyncio
async def test_status_broadcast_counts_as_group(channel, bus):
    await channel._handle_bridge_message(json.dumps({
        "type": "message", "id": "S1", "chat": "status@broadcast",
        "participant": "628333@s.whatsapp.net", "message": {"conversation": "x"},
    }))

    assert (await bus.consume()).is_group is True


@pytest.mark.asyncio
async def test_malformed_frames_are_dropped(channel, bus):
    await channel._handle_bridge_message("not json")
    await channel._handle_bridge_message(json.dumps(["list"]))
    await channel._handle_bridge_message(json.dumps({"type": "message", "chat": "628111@s.whatsapp.net"}))
    await channel._handle_bridge_message(json.dumps({"type": "qr", "qr": "xyz"}))

    assert bus.size == 0


@pytest.mark.asyncio
async def test_receipt_status_code_maps_to_read(channel, bus):
    await channel._handle_bridge_message(json.dumps({"type": "receipt", "id": "M", "status": 4}))

    event = await bus.consume()
    assert isinstance(event, ReceiptUpdate)
    assert event.status == "read"
    assert event.from_self is False


def test_presence_frame_keeps_each_participant_state():
    updates = parse_presence({
        "type": "presence",
        "id": "120363@g.us",
        "presences": {
            "628000:2@s.whatsapp.net": {"lastKnownPresence": "unavailable"},
            "628111@s.whatsapp.net": {"lastKnownPresence": "available"},
        },
    })

    assert all(isinstance(u, PresenceUpdate) for u in updates)
    by_subject = {u.subject_ids: u for u in updates}
    assert set(by_subject) == {("628000",), ("628111",)}
    assert by_subject[("628000",)].available is False
    assert by_subject[("628111",)].available is True


def test_presence_frame_without_map_uses_top_level_id():
    updates = parse_presence({"type": "presence", "id": "628000@s.whatsapp.net", "presence": "available"})

    assert len(updates) == 1
    assert updates[0].subject_ids == ("628000",)
    assert updates[0].available is True


@pytest.mark.asyncio
async def test_other_participant_online_does_not_mark_owner_online(channel, bus):
    tracker = PresenceTracker(owner_id="628000")

    await channel._handle_bridge_message(json.dumps({
        "type": "presence",
        "id": "120363@g.us",
        "presences": {
            "628000@s.whatsapp.net": {"lastKnownPresence": "unavailable"},
            "628111@s.whatsapp.net": {"lastKnownPresence": "composing"},
        },
    }))
    while bus.size:
        tracker.on_presence(await bus.consume(), now=100.0)

    assert tracker.owner_online is False


@pytest.mark.asyncio
async def test_connection_open_records_owner(channel, bus):
    await channel._handle_bridge_message(json.dumps({
        "type": "connection", "state": "open",
        "me": {"id": "628000:5@s.whatsapp.net", "name": "Budi"},
    }))

    event = await bus.consume()
    assert isinstance(event, ConnectionUpdate)
    assert event.owner_id == "628000"
    assert event.owner_name == "Budi"
    assert channel.is_connected is True
    assert channel.owner_id == "628000"


@pytest.mark.asyncio
async def test_logout_publishes_then_raises(channel, bus):
    channel._connected = True

    with pytest.raises(LoggedOutError):
        await channel._handle_bridge_message(json.dumps({
            "type": "connection", "state": "close", "reason": "loggedOut",
        }))

    event = await bus.consume()
    assert event.state == "close"
    assert event.reason == "loggedOut"
    assert channel.is_connected is False


@pytest.mark.asyncio
async def test_transient_close_does_not_raise(channel, bus):
    await channel._handle_bridge_message(json.dumps({
        "type": "connection", "state": "close", "reason": "connectionLost",
    }))

    assert (await bus.consume()).state == "close"


def test_logged_out_reasons():
    assert is_logged_out("loggedOut")
    assert is_logged_out(401)
    assert not is_logged_out("restartRequired")
    assert not is_logged_out(None)


@pytest.mark.asyncio
async def test_send_without_connection_returns_false(channel):
    msg = OutboundMessage(channel="whatsapp", chat_id="628111@s.whatsapp.net", content="hi")
    assert await channel.send(msg) is False


@pytest.mark.asyncio
async def test_send_plain_and_prompt(channel):
    ws = _FakeWebSocket()
    channel._ws = ws
    prompt = AssistPrompt(
        footer="Apakah Terbantu?",
        options=(PromptOption("assist_yes", "Iya"), PromptOption("assist_no", "Tidak")),
    )

    assert await channel.send(OutboundMessage(channel="whatsapp", chat_id="a@s.whatsapp.net", content="x"))
    assert await channel.send(
        OutboundMessage(channel="whatsapp", chat_id="a@s.whatsapp.net", content="y", prompt=prompt)
    )

    assert ws.frames[0] == {"type": "send", "to": "a@s.whatsapp.net", "text": "x"}
    assert ws.frames[1]["footer"] == "Apakah Terbantu?"
    assert ws.frames[1]["buttons"] == [
        {"id": "assist_yes", "label": "Iya"},
        {"id": "assist_no", "label": "Tidak"},
    ]


@pytest.mark.asyncio
async def test_send_failure_returns_false(channel):
    channel._ws = _FakeWebSocket(fail=True)
    msg = OutboundMessage(channel="whatsapp", chat_id="a@s.whatsapp.net", content="x")

    assert await channel.send(msg) is False


class _ScriptedSocket:
    """Bridge socket that yields a fixed list of frames, then closes."""

    def __init__(self, frames: list[dict]):
        self._frames = [json.dumps(f) for f in frames]
        self.sent: list[dict] = []

    async def send(self, raw: str) -> None:
        self.sent.append(json.loads(raw))

    async def close(self) -> None:
        pass

    def __aiter__(self):
        return self

    async def __anext__(self) -> str:
        if not self._frames:
            raise StopAsyncIteration
        return self._frames.pop(0)


class _FakeConnect:
    """Stands in for ``websockets.connect``; each call plays the next script."""

    def __init__(self, *scripts):
        self.scripts = list(scripts)
        self.urls: list[str] = []
        self.sockets: list[_ScriptedSocket] = []

    def __call__(self, url: str):
        self.urls.append(url)
        script = self.scripts.pop(0) if self.scripts else OSError("connection refused")
        return _Session(self, script)


class _Session:
    def __init__(self, connect: _FakeConnect, script):
        self.connect = connect
        self.script = script

    async def __aenter__(self):
        if isinstance(self.script, Exception):
            raise self.script
        ws = _ScriptedSocket(self.script)
        self.connect.sockets.append(ws)
        return ws

    async def __aexit__(self, *exc):
        return False


def _bridge(**kwargs) -> BridgeConfig:
    return BridgeConfig(url="ws://bridge.test", reconnect_delay_seconds=0.01, **kwargs)


@pytest.mark.asyncio
async def test_start_gives_up_after_max_reconnect_attempts(bus, monkeypatch):
    connect = _FakeConnect()
    monkeypatch.setattr(websockets, "connect", connect)
    channel = WhatsAppChannel(_bridge(max_reconnect_attempts=2), bus)

    with pytest.raises(TransportError):
        await channel.start()

    assert len(connect.urls) == 3
    assert channel.is_running is False
    assert channel.is_connected is False


@pytest.mark.asyncio
async def test_start_reconnects_after_dropped_connection(bus, monkeypatch):
    connect = _FakeConnect(
        OSError("connection refused"),
        [{"type": "connection", "state": "open", "me": {"id": "628000@s.whatsapp.net"}}],
        [{"type": "connection", "state": "close", "reason": "loggedOut"}],
    )
    monkeypatch.setattr(websockets, "connect", connect)
    channel = WhatsAppChannel(_bridge(token="secret"), bus)

    with pytest.raises(LoggedOutError):
        await channel.start()

    assert connect.urls == ["ws://bridge.test"] * 3
    assert [ws.sent[0] for ws in connect.sockets] == [{"type": "auth", "token": "secret"}] * 2
    assert (await bus.consume()).state == "open"
    assert (await bus.consume()).state == "close"


@pytest.mark.asyncio
async def test_logout_stops_without_retry(bus, monkeypatch):
    connect = _FakeConnect(
        [{"type": "connection", "state": "close", "reason": "loggedOut"}],
        [{"type": "connection", "state": "open"}],
    )
    monkeypatch.setattr(websockets, "connect", connect)
    channel = WhatsAppChannel(_bridge(), bus)

    with pytest.raises(LoggedOutError):
        await channel.start()

    assert len(connect.urls) == 1
    assert channel.is_running is False
    assert channel.is_connected is False
