"""Real-time admin notification client.

``RealTimeNotifications`` is what a UI layer talks to: it owns the
notification store, decodes stream messages into notifications and exposes
the connection status. It never raises for transport problems; failures only
show up through ``connection_status``.

Example:
    >>> async with RealTimeNotifications(ClientSettings(admin_id="admin-1")) as feed:
    ...     feed.add_listener(lambda f: print(f.unread_count))
    ...     await asyncio.sleep(60)
"""

import asyncio
import json
import logging
from collections.abc import Callable

import httpx
from pydantic import ValidationError

from taios_library.config.settings import ClientSettings
from taios_library.models.events import EventKind
from taios_library.models.events import StreamMessage
from taios_library.models.notifications import AdminNotification
from taios_library.models.notifications import ConnectionState

from .connection import ConnectionManager
from .connection import Sleep
from .mapping import build_notification
from .store import NotificationStore

logger = logging.getLogger(__name__)

Listener = Callable[["RealTimeNotifications"], None]


class RealTimeNotifications:
    """Notification feed for one admin, kept current by a reconnecting stream."""

    def __init__(
        self,
        settings: ClientSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """Initialize the feed without connecting.

        Args:
            settings: Client settings (default: loaded from environment)
            client: Shared httpx client passed to the connection manager
            sleep: Awaitable delay used between reconnects
        """
        self.settings = settings or ClientSettings()
        self.store = NotificationStore(self.settings.max_notifications)
        self.last_server_timestamp: str | None = None

        self._client = client
        self._sleep = sleep
        self._connection: ConnectionManager | None = None
        self._listeners: list[Listener] = []

    # --- Public API ---

    @property
    def notifications(self) -> list[AdminNotification]:
        """Notifications, most recent first."""
        return self.store.notifications

    @property
    def unread_count(self) -> int:
        return self.store.unread_count

    @property
    def connection_status(self) -> ConnectionState:
        if self._connection is None:
            return ConnectionState.DISCONNECTED
        return self._connection.state

    @property
    def is_connected(self) -> bool:
        return self.connection_status == ConnectionState.CONNECTED

    @property
    def connection(self) -> ConnectionManager | None:
        return self._connection

    def mark_as_read(self, notification_id: str) -> None:
        if self.store.mark_as_read(notification_id):
            self._notify()

    def mark_all_as_read(self) -> None:
        self.store.mark_all_as_read()
        self._notify()

    def clear_notification(self, notification_id: str) -> None:
        if self.store.clear(notification_id):
            self._notify()

    def clear_all_notifications(self) -> None:
        self.store.clear_all()
        self._notify()

    def add_listener(self, listener: Listener) -> None:
        """Register a callback invoked after every store or connection change."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # --- Lifecycle ---

    async def start(self) -> None:
        """Connect, unless there is no admin identity to connect as."""
        if not self.settings.admin_id:
            logger.info("No admin identity available, notification stream not started")
            return

        if self._connection is None:
            self._connection = ConnectionManager.from_settings(
                self.settings,
                on_message=self.handle_data,
                on_state_change=self._on_state_change,
                client=self._client,
                sleep=self._sleep,
            )
        await self._connection.start()

    async def stop(self) -> None:
        if self._connection is not None:
            await self._connection.stop()

    async def remount(self, admin_id: str | None) -> None:
        """Switch identity: tear down, forget notifications and reconnect.

        Args:
            admin_id: New admin identity (None leaves the feed disconnected)
        """
        await self.stop()
        self._connection = None
        self.store.clear_all()
        self.settings = self.settings.model_copy(update={"admin_id": admin_id})
        self._notify()
        await self.start()

    async def __aenter__(self) -> "RealTimeNotifications":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    # --- Decoding ---

    def handle_data(self, data: str) -> AdminNotification | None:
        """Decode the data of one stream message.

        Malformed data is logged and dropped; it never raises and never
        touches connection state.

        Args:
            data: JSON text from a ``data:`` frame

        Returns:
            The notification created, if any
        """
        try:
            raw = json.loads(data)
        except json.JSONDecodeError as e:
            logger.error(f"Error parsing real-time event: {e} (data={data[:200]!r})")
            return None

        if not isinstance(raw, dict):
            logger.error(f"Real-time event is not a JSON object: {data[:200]!r}")
            return None

        try:
            message = StreamMessage.model_validate(raw)
        except ValidationError as e:
            logger.error(f"Invalid real-time event: {e.errors()}")
            return None

        return self.handle_message(message)

    def handle_message(self, message: StreamMessage) -> AdminNotification | None:
        """Apply one decoded stream message.

        Transport messages only update bookkeeping; domain events become
        notifications at the head of the store.
        """
        if message.is_transport:
            self.last_server_timestamp = message.timestamp
            return None

        try:
            kind = EventKind(message.type)
        except ValueError:
            logger.warning(f"Unknown event type: {message.type}")
            return None

        notification = build_notification(kind, message.timestamp, message.payload)
        self.store.add(notification)
        self.last_server_timestamp = message.timestamp
        self._notify()
        return notification

    def _on_state_change(self, state: ConnectionState) -> None:
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Notification listener failed")
