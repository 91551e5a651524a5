"""
Unit tests for the reconnecting connection manager.

Uses httpx.MockTransport as the server and a recording sleep so backoff is
observed without waiting.
"""

import asyncio
from collections.abc import Callable

import httpx
import pytest

from taios_library.config.settings import ClientSettings
from taios_library.models.notifications import ConnectionState
from taios_library.notifications.connection import ConnectionManager
from taios_library.notifications.connection import backoff_delay
from taios_library.streaming.framing import connection_established
from taios_library.streaming.framing import format_frame
from taios_library.streaming.framing import heartbeat

STREAM_URL = "http://taiosd.test/api/admin/notifications/stream"


def sse_response(*frames: str) -> httpx.Response:
    return httpx.Response(
        200,
        headers={"content-type": "text/event-stream; charset=utf-8"},
        content="".join(frames).encode(),
    )


class RecordingSleep:
    """Sleep double that records delays and blocks from call ``block_at`` on."""

    def __init__(self, block_at: int | None = None) -> None:
        self.delays: list[float] = []
        self.block_at = block_at
        self.blocked = asyncio.Event()

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        if self.block_at is not None and len(self.delays) >= self.block_at:
            self.blocked.set()
            await asyncio.Event().wait()


def make_manager(
    handler: Callable[[httpx.Request], httpx.Response],
    client: httpx.AsyncClient,
    sleep: RecordingSleep,
    **kwargs,
) -> tuple[ConnectionManager, list[str], list[ConnectionState]]:
    messages: list[str] = []
    states: list[ConnectionState] = []
    manager = ConnectionManager(
        STREAM_URL,
        "admin-1",
        on_message=messages.append,
        on_state_change=states.append,
        client=client,
        sleep=sleep,
        **kwargs,
    )
    return manager, messages, states


@pytest.mark.unit
class TestBackoffDelay:
    """Test the backoff schedule."""

    def test_schedule(self) -> None:
        """Test delays double from one second and cap at thirty."""
        assert [backoff_delay(n) for n in range(7)] == [1.0, 2.0, 4.0, 8.0, 16.0, 30.0, 30.0]

    def test_custom_base_and_cap(self) -> None:
        """Test base and cap are honored."""
        assert backoff_delay(3, base_delay=0.5, max_delay=3.0) == 3.0
        assert backoff_delay(1, base_delay=0.5, max_delay=3.0) == 1.0


@pytest.mark.unit
class TestConnectionManagerReconnect:
    """Test the reconnect loop against a failing server."""

    async def test_gives_up_after_five_reconnects(self) -> None:
        """Test an always-failing server sees six connects and five backoffs."""
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(503)

        sleep = RecordingSleep()
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            manager, _, states = make_manager(handler, client, sleep)

            await manager.start()
            await manager.wait()

        assert len(requests) == 6
        assert sleep.delays == [1.0, 2.0, 4.0, 8.0, 16.0]
        assert manager.state == ConnectionState.ERROR
        assert manager.reconnect_attempts == 5
        assert not manager.is_running
        assert states[:2] == [ConnectionState.CONNECTING, ConnectionState.ERROR]
        assert states[-1] == ConnectionState.ERROR

    async def test_transport_errors_reconnect(self) -> None:
        """Test network failures follow the same schedule."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        sleep = RecordingSleep()
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            manager, _, _ = make_manager(handler, client, sleep, max_reconnect_attempts=2)

            await manager.start()
            await manager.wait()

        assert sleep.delays == [1.0, 2.0]
        assert manager.state == ConnectionState.ERROR

    async def test_wrong_content_type_is_an_error(self) -> None:
        """Test a 200 that is not an event stream is refused."""
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(200, json={"status": "ok"})

        sleep = RecordingSleep()
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            manager, messages, _ = make_manager(handler, client, sleep, max_reconnect_attempts=0)

            await manager.start()
            await manager.wait()

        assert calls == 1
        assert sleep.delays == []
        assert messages == []
        assert manager.state == ConnectionState.ERROR

    async def test_successful_open_resets_attempts(self) -> None:
        """Test the counter restarts after a stream opens."""
        responses = iter(
            [
                httpx.Response(503),
                httpx.Response(503),
                sse_response(format_frame(connection_established())),
            ]
        )

        def handler(request: httpx.Request) -> httpx.Response:
            return next(responses, httpx.Response(503))

        sleep = RecordingSleep(block_at=3)
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            manager, _, states = make_manager(handler, client, sleep)

            await manager.start()
            await asyncio.wait_for(sleep.blocked.wait(), timeout=5)

            assert sleep.delays == [1.0, 2.0, 1.0]
            assert manager.reconnect_attempts == 1
            assert ConnectionState.CONNECTED in states

            await manager.stop()

        assert manager.state == ConnectionState.DISCONNECTED


@pytest.mark.unit
class TestConnectionManagerStream:
    """Test message delivery and lifecycle."""

    async def test_delivers_message_data_and_sends_admin_id(self) -> None:
        """Test data of unnamed events reaches on_message in order."""
        seen_requests: list[httpx.Request] = []
        first = connection_established("2024-01-01T00:00:00.000Z")
        second = heartbeat("2024-01-01T00:00:30.000Z")

        def handler(request: httpx.Request) -> httpx.Response:
            seen_requests.append(request)
            return sse_response(
                ": ping\n\n",
                format_frame(first),
                "event: custom\ndata: ignored\n\n",
                format_frame(second),
            )

        sleep = RecordingSleep(block_at=1)
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            manager, messages, states = make_manager(handler, client, sleep)

            await manager.start()
            await asyncio.wait_for(sleep.blocked.wait(), timeout=5)

            assert messages == [first.to_json(), second.to_json()]
            assert states[:3] == [ConnectionState.CONNECTING, ConnectionState.CONNECTED, ConnectionState.ERROR]
            assert manager.last_message_at is not None

            await manager.stop()

        request = seen_requests[0]
        assert request.url.params["adminId"] == "admin-1"
        assert request.headers["accept"] == "text/event-stream"

    async def test_handler_errors_do_not_break_loop(self) -> None:
        """Test a raising on_message does not tear down the stream."""
        frames = [format_frame(heartbeat()), format_frame(heartbeat())]
        received: list[str] = []

        def on_message(data: str) -> None:
            received.append(data)
            raise RuntimeError("consumer bug")

        def handler(request: httpx.Request) -> httpx.Response:
            return sse_response(*frames)

        sleep = RecordingSleep(block_at=1)
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            manager = ConnectionManager(STREAM_URL, "admin-1", on_message=on_message, client=client, sleep=sleep)

            await manager.start()
            await asyncio.wait_for(sleep.blocked.wait(), timeout=5)
            await manager.stop()

        assert len(received) == 2

    async def test_stop_cancels_pending_reconnect(self) -> None:
        """Test stop during backoff ends the loop and goes DISCONNECTED."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        sleep = RecordingSleep(block_at=1)
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            manager, _, states = make_manager(handler, client, sleep)

            await manager.start()
            await asyncio.wait_for(sleep.blocked.wait(), timeout=5)
            await manager.stop()

        assert not manager.is_running
        assert manager.state == ConnectionState.DISCONNECTED
        assert states[-1] == ConnectionState.DISCONNECTED
        assert sleep.delays == [1.0]

    async def test_start_is_idempotent_while_running(self) -> None:
        """Test a second start does not open a second transport."""
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(503)

        sleep = RecordingSleep(block_at=1)
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            manager, _, _ = make_manager(handler, client, sleep)

            await manager.start()
            await manager.start()
            await asyncio.wait_for(sleep.blocked.wait(), timeout=5)
            await manager.stop()

        assert calls == 1

    async def test_restart_after_giving_up(self) -> None:
        """Test start after exhaustion begins a fresh attempt cycle."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        sleep = RecordingSleep()
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            manager, _, _ = make_manager(handler, client, sleep, max_reconnect_attempts=1)

            await manager.start()
            await manager.wait()
            await manager.start()
            await manager.wait()

        assert sleep.delays == [1.0, 1.0]


@pytest.mark.unit
class TestConnectionManagerSettings:
    """Test construction from settings."""

    def test_from_settings(self) -> None:
        """Test settings values are carried over."""
        settings = ClientSettings(admin_id="admin-9", stream_url=STREAM_URL, max_reconnect_attempts=3)

        manager = ConnectionManager.from_settings(settings, on_message=lambda data: None)

        assert manager.admin_id == "admin-9"
        assert manager.url == STREAM_URL
        assert manager.max_reconnect_attempts == 3
        assert manager.state == ConnectionState.DISCONNECTED

    def test_from_settings_requires_admin_id(self) -> None:
        """Test a missing admin identity is refused."""
        with pytest.raises(ValueError):
            ConnectionManager.from_settings(ClientSettings(admin_id=None), on_message=lambda data: None)
