"""Connection manager for the admin notification stream.

Owns exactly one streaming HTTP connection at a time and the reconnect loop
around it. Consumers receive raw event data through ``on_message`` and
connection state through ``on_state_change``; neither callback can break the
loop.

Reconnect policy:
- Opening the stream resets the attempt counter
- Any transport failure, refused stream or server-side close moves to ERROR
- While attempts remain, sleep ``min(base * 2**attempt, cap)`` and reconnect
- Once ``max_reconnect_attempts`` reconnects have been scheduled, stay in ERROR
"""

import asyncio
import contextlib
import logging
import time
from collections.abc import Awaitable
from collections.abc import Callable

import httpx

from taios_library.config.settings import ClientSettings
from taios_library.exceptions import NotificationStreamError
from taios_library.exceptions import StreamOpenError
from taios_library.models.notifications import ConnectionState
from taios_library.streaming.decoder import SSEDecoder

logger = logging.getLogger(__name__)

MessageHandler = Callable[[str], None]
StateHandler = Callable[[ConnectionState], None]
Sleep = Callable[[float], Awaitable[None]]


def backoff_delay(attempt: int, base_delay: float = 1.0, max_delay: float = 30.0) -> float:
    """Capped exponential backoff.

    Args:
        attempt: Reconnects already scheduled (0 for the first)
        base_delay: Delay for attempt 0, in seconds
        max_delay: Upper bound, in seconds

    Returns:
        Delay in seconds

    Example:
        >>> [backoff_delay(n) for n in range(6)]
        [1.0, 2.0, 4.0, 8.0, 16.0, 30.0]
    """
    return min(base_delay * 2**attempt, max_delay)


class ConnectionManager:
    """Maintains a single reconnecting notification stream."""

    def __init__(
        self,
        url: str,
        admin_id: str,
        on_message: MessageHandler,
        on_state_change: StateHandler | None = None,
        *,
        max_reconnect_attempts: int = 5,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        timeout: httpx.Timeout | None = None,
        client: httpx.AsyncClient | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """Initialize connection manager.

        Args:
            url: Notification stream endpoint
            admin_id: Admin identity sent as the ``adminId`` query parameter
            on_message: Called with the data of every dispatched message
            on_state_change: Called whenever the connection state changes
            max_reconnect_attempts: Reconnects scheduled before giving up
            base_delay: First backoff delay in seconds
            max_delay: Backoff cap in seconds
            timeout: httpx timeout for clients created by the manager
            client: Shared httpx client (not closed by the manager)
            sleep: Awaitable delay used between reconnects
        """
        self.url = url
        self.admin_id = admin_id
        self.max_reconnect_attempts = max_reconnect_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay

        self._on_message = on_message
        self._on_state_change = on_state_change
        self._timeout = timeout or httpx.Timeout(10.0, read=90.0)
        self._client = client
        self._owns_client = client is None
        self._sleep = sleep

        self._task: asyncio.Task[None] | None = None
        self._state = ConnectionState.DISCONNECTED
        self.reconnect_attempts = 0
        self.last_message_at: float | None = None

    @classmethod
    def from_settings(
        cls,
        settings: ClientSettings,
        on_message: MessageHandler,
        on_state_change: StateHandler | None = None,
        **kwargs,
    ) -> "ConnectionManager":
        """Build a manager from client settings.

        Raises:
            ValueError: If settings carry no admin identity
        """
        if not settings.admin_id:
            raise ValueError("An admin id is required to open a notification stream")

        return cls(
            url=settings.stream_url,
            admin_id=settings.admin_id,
            on_message=on_message,
            on_state_change=on_state_change,
            max_reconnect_attempts=settings.max_reconnect_attempts,
            base_delay=settings.reconnect_base_delay,
            max_delay=settings.reconnect_max_delay,
            timeout=httpx.Timeout(settings.connect_timeout, read=settings.idle_timeout),
            **kwargs,
        )

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state == ConnectionState.CONNECTED

    @property
    def is_running(self) -> bool:
        """Whether the connect/reconnect loop is still alive."""
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the connection loop.

        No-op while a loop is already running, so at most one transport is
        ever open. Starting again after the loop gave up begins with a fresh
        attempt counter.
        """
        if self.is_running:
            logger.debug(f"Notification stream for {self.admin_id} already running")
            return

        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)

        self.reconnect_attempts = 0
        self._task = asyncio.create_task(self._run(), name=f"notification-stream:{self.admin_id}")

    async def stop(self) -> None:
        """Close the transport, cancel any pending reconnect and go DISCONNECTED."""
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

        self._set_state(ConnectionState.DISCONNECTED)

    async def wait(self) -> None:
        """Wait until the loop ends (stopped or reconnects exhausted)."""
        if self._task is not None:
            await asyncio.wait({self._task})

    async def _run(self) -> None:
        while True:
            self._set_state(ConnectionState.CONNECTING)

            try:
                await self._stream_once()
                logger.warning(f"Notification stream for {self.admin_id} closed by server")
            except asyncio.CancelledError:
                raise
            except (httpx.HTTPError, NotificationStreamError) as e:
                logger.warning(f"Notification stream error for {self.admin_id}: {e!r}")
            except Exception:
                logger.exception(f"Unexpected notification stream failure for {self.admin_id}")

            self._set_state(ConnectionState.ERROR)

            if self.reconnect_attempts >= self.max_reconnect_attempts:
                logger.error(
                    f"Notification stream for {self.admin_id} gave up after {self.reconnect_attempts} reconnect attempts"
                )
                return

            delay = backoff_delay(self.reconnect_attempts, self.base_delay, self.max_delay)
            self.reconnect_attempts += 1
            logger.info(
                f"Reconnecting notification stream in {delay:.1f}s "
                f"(attempt {self.reconnect_attempts}/{self.max_reconnect_attempts})"
            )
            await self._sleep(delay)

    async def _stream_once(self) -> None:
        """Open one stream and pump it until it ends.

        The ``async with`` block closes the transport on every exit path.
        """
        assert self._client is not None

        async with self._client.stream(
            "GET",
            self.url,
            params={"adminId": self.admin_id},
            headers={"Accept": "text/event-stream", "Cache-Control": "no-cache"},
        ) as response:
            content_type = response.headers.get("content-type", "")
            if response.status_code != 200 or not content_type.startswith("text/event-stream"):
                raise StreamOpenError(response.status_code, content_type or None)

            self.reconnect_attempts = 0
            self._set_state(ConnectionState.CONNECTED)
            logger.info(f"Real-time notifications connected for {self.admin_id}")

            decoder = SSEDecoder()
            async for line in response.aiter_lines():
                self.last_message_at = time.monotonic()
                event = decoder.feed_line(line)
                if event is None:
                    continue
                if event.event != "message":
                    logger.debug(f"Ignoring named event '{event.event}'")
                    continue
                self._deliver(event.data)

    def _deliver(self, data: str) -> None:
        try:
            self._on_message(data)
        except Exception:
            logger.exception("Notification message handler failed")

    def _set_state(self, state: ConnectionState) -> None:
        if state == self._state:
            return

        logger.debug(f"Notification stream {self.admin_id}: {self._state.value} -> {state.value}")
        self._state = state

        if self._on_state_change is not None:
            try:
                self._on_state_change(state)
            except Exception:
                logger.exception("Connection state handler failed")
