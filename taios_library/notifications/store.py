"""Bounded in-memory notification store."""

import logging
from collections import deque
from collections.abc import Callable
from collections.abc import Iterator

from taios_library.models.notifications import AdminNotification

logger = logging.getLogger(__name__)

DEFAULT_MAX_NOTIFICATIONS = 100


class NotificationStore:
    """Most-recent-first list of notifications with read/unread state.

    Holds at most ``max_notifications`` entries; adding beyond that evicts the
    oldest. Owned by a single client on a single event loop, so no locking.
    """

    def __init__(self, max_notifications: int = DEFAULT_MAX_NOTIFICATIONS) -> None:
        """Initialize an empty store.

        Args:
            max_notifications: Retention bound (must be positive)
        """
        if max_notifications < 1:
            raise ValueError("max_notifications must be at least 1")
        self._items: deque[AdminNotification] = deque(maxlen=max_notifications)

    @property
    def max_notifications(self) -> int:
        return self._items.maxlen or DEFAULT_MAX_NOTIFICATIONS

    @property
    def notifications(self) -> list[AdminNotification]:
        """Snapshot of stored notifications, most recent first."""
        return list(self._items)

    @property
    def unread_count(self) -> int:
        return sum(1 for item in self._items if not item.is_read)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[AdminNotification]:
        return iter(list(self._items))

    def get(self, notification_id: str) -> AdminNotification | None:
        for item in self._items:
            if item.id == notification_id:
                return item
        return None

    def add(self, notification: AdminNotification) -> None:
        """Prepend a notification, evicting the oldest when full."""
        if len(self._items) == self._items.maxlen:
            evicted = self._items[-1]
            logger.debug(f"Notification store full, evicting {evicted.id}")
        self._items.appendleft(notification)

    def mark_as_read(self, notification_id: str) -> bool:
        """Mark one notification read.

        Returns:
            True if a notification with that id exists
        """
        if self.get(notification_id) is None:
            return False
        self._mark_read(lambda item: item.id == notification_id)
        return True

    def mark_all_as_read(self) -> None:
        self._mark_read(lambda item: True)

    def clear(self, notification_id: str) -> bool:
        """Remove every notification with the given id.

        Returns:
            True if anything was removed
        """
        kept = [item for item in self._items if item.id != notification_id]
        removed = len(kept) != len(self._items)
        if removed:
            self._items = deque(kept, maxlen=self._items.maxlen)
        return removed

    def clear_all(self) -> None:
        self._items.clear()

    def _mark_read(self, selector: Callable[[AdminNotification], bool]) -> None:
        self._items = deque(
            (
                item.model_copy(update={"is_read": True}) if selector(item) and not item.is_read else item
                for item in self._items
            ),
            maxlen=self._items.maxlen,
        )
