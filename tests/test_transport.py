"""
Tests for the Transport Session

Tests for URL resolution and the reader/writer loops, using a mock
WebSocket in place of a real connection.
"""

import asyncio
import ssl

import pytest

from rocketterm import TransportSession, resolve_ws_url
from rocketterm import transport as transport_module
from rocketterm.errors import ChannelClosed


class MockWebSocket:
    """Mock WebSocket for testing."""

    def __init__(self, incoming=None, hold_open=True):
        self.incoming = list(incoming or [])
        self.hold_open = hold_open
        self.sent_messages = []
        self.closed = False
        self._released = asyncio.Event()

    async def send(self, message):
        self.sent_messages.append(message)

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for frame in self.incoming:
            yield frame
        if self.hold_open:
            await self._released.wait()

    async def close(self):
        self.closed = True
        self._released.set()


def factory_for(websocket, calls=None):
    async def factory(url, **kwargs):
        if calls is not None:
            calls.append((url, kwargs))
        return websocket

    return factory


async def wait_until(predicate, timeout=1.0):
    for _ in range(int(timeout / 0.01)):
        if predicate():
            return
        await asyncio.sleep(0.01)
    raise AssertionError("condition not reached")


class TestResolveWsUrl:
    """Tests for realtime endpoint resolution."""

    def test_https_becomes_wss(self):
        url, context = resolve_ws_url("https://chat.example.com")
        assert url == "wss://chat.example.com/websocket"
        assert isinstance(context, ssl.SSLContext)
        assert context.verify_mode == ssl.CERT_REQUIRED

    def test_http_becomes_ws(self):
        url, context = resolve_ws_url("http://localhost:3000/some/path")
        assert url == "ws://localhost:3000/websocket"
        assert context is None

    def test_no_ssl_verify(self):
        _, context = resolve_ws_url("https://chat.example.com", ssl_verify=False)
        assert context.verify_mode == ssl.CERT_NONE
        assert context.check_hostname is False

    def test_bad_url(self):
        with pytest.raises(ConnectionError):
            resolve_ws_url("not a url")


@pytest.mark.asyncio
async def test_open_passes_ssl_only_for_secure_urls():
    calls = []
    session = TransportSession(
        "ws://localhost/websocket",
        websocket_factory=factory_for(MockWebSocket(), calls),
    )
    await session.open()
    await session.close()
    assert calls == [("ws://localhost/websocket", {})]

    context = ssl.create_default_context()
    calls.clear()
    session = TransportSession(
        "wss://example.com/websocket",
        context,
        websocket_factory=factory_for(MockWebSocket(), calls),
    )
    await session.open()
    await session.close()
    assert calls[0][1] == {"ssl": context}


@pytest.mark.asyncio
async def test_open_failure_raises_connection_error():
    async def failing_factory(url, **kwargs):
        raise OSError("Connection refused")

    session = TransportSession("ws://localhost/websocket", None, failing_factory)
    with pytest.raises(ConnectionError):
        await session.open()
    assert not session.is_open


@pytest.mark.asyncio
async def test_open_timeout_raises_connection_error(monkeypatch):
    monkeypatch.setattr(transport_module, "CONNECT_TIMEOUT", 0.01)

    async def hanging_factory(url, **kwargs):
        await asyncio.sleep(10)

    session = TransportSession("ws://localhost/websocket", None, hanging_factory)
    with pytest.raises(ConnectionError):
        await session.open()


@pytest.mark.asyncio
async def test_writer_sends_in_order():
    websocket = MockWebSocket()
    session = TransportSession(
        "ws://localhost/websocket", websocket_factory=factory_for(websocket)
    )
    outbound, _ = await session.open()

    for frame in ("one", "two", "three"):
        outbound.put_nowait(frame)
    await wait_until(lambda: len(websocket.sent_messages) == 3)

    assert websocket.sent_messages == ["one", "two", "three"]
    await session.close()
    assert websocket.closed


@pytest.mark.asyncio
async def test_reader_delivers_frames():
    websocket = MockWebSocket(incoming=["a", "b"])
    session = TransportSession(
        "ws://localhost/websocket", websocket_factory=factory_for(websocket)
    )
    _, inbound = await session.open()

    assert await inbound.get() == "a"
    assert await inbound.get() == "b"
    assert session.is_open
    await session.close()
    assert not session.is_open


@pytest.mark.asyncio
async def test_peer_close_closes_both_queues():
    websocket = MockWebSocket(incoming=["last"], hold_open=False)
    session = TransportSession(
        "ws://localhost/websocket", websocket_factory=factory_for(websocket)
    )
    outbound, inbound = await session.open()

    assert await inbound.get() == "last"
    with pytest.raises(ChannelClosed):
        await inbound.get()
    assert outbound.closed
    await session.close()


@pytest.mark.asyncio
async def test_write_error_closes_both_queues():
    class BrokenWebSocket(MockWebSocket):
        async def send(self, message):
            raise OSError("Broken pipe")

    session = TransportSession(
        "ws://localhost/websocket",
        websocket_factory=factory_for(BrokenWebSocket()),
    )
    outbound, inbound = await session.open()
    outbound.put_nowait("frame")

    with pytest.raises(ChannelClosed):
        await inbound.get()
    await session.close()
