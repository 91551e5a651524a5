"""Mapping from domain event kinds to admin notifications.

The whole mapping lives in ``NOTIFICATION_TEMPLATES``; every ``EventKind``
has exactly one entry.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from taios_library.models.events import EventKind
from taios_library.models.notifications import AdminNotification
from taios_library.models.notifications import NotificationType


class _PayloadFields(dict):
    """Format source that renders missing payload keys as empty strings."""

    def __init__(self, payload: Mapping[str, Any]) -> None:
        super().__init__(payload)
        self.missing: set[str] = set()

    def __missing__(self, key: str) -> str:
        self.missing.add(key)
        return ""


@dataclass(frozen=True)
class NotificationTemplate:
    """How one event kind becomes a notification.

    Attributes:
        id_prefix: Prefix joined with the event timestamp to form the id
        title: Fixed title
        message: ``str.format`` template over payload keys
        action_url: ``str.format`` template over payload keys
        type: Default notification type
        escalate_on: ``(payload key, value)`` that raises the type to ERROR
    """

    id_prefix: str
    title: str
    message: str
    action_url: str
    type: NotificationType = NotificationType.INFO
    escalate_on: tuple[str, str] | None = None

    def resolve_type(self, payload: Mapping[str, Any]) -> NotificationType:
        if self.escalate_on is not None:
            key, value = self.escalate_on
            if payload.get(key) == value:
                return NotificationType.ERROR
        return self.type

    def render_message(self, payload: Mapping[str, Any]) -> str:
        return self.message.format_map(_PayloadFields(payload))

    def render_action_url(self, payload: Mapping[str, Any]) -> str | None:
        fields = _PayloadFields(payload)
        url = self.action_url.format_map(fields)
        # A link with a hole in it points nowhere useful
        if fields.missing:
            return None
        return url


NOTIFICATION_TEMPLATES: dict[EventKind, NotificationTemplate] = {
    EventKind.USER_CREATED: NotificationTemplate(
        id_prefix="user",
        title="New User Created",
        message="User {email} has been created",
        action_url="/admin/users/{userId}",
    ),
    EventKind.USER_UPDATED: NotificationTemplate(
        id_prefix="user-update",
        title="User Updated",
        message="User {email} has been updated",
        action_url="/admin/users/{userId}",
    ),
    EventKind.ROLE_CHANGED: NotificationTemplate(
        id_prefix="role",
        title="Role Change Request",
        message="Role change requested for {userEmail}",
        action_url="/admin/users/{userId}",
        type=NotificationType.WARNING,
    ),
    EventKind.SYSTEM_ALERT: NotificationTemplate(
        id_prefix="alert",
        title="System Alert",
        message="{message}",
        action_url="/admin/system-health",
        type=NotificationType.WARNING,
        escalate_on=("severity", "critical"),
    ),
    EventKind.AUDIT_EVENT: NotificationTemplate(
        id_prefix="audit",
        title="Audit Event",
        message="{action} on {resource}",
        action_url="/admin/audit",
    ),
    EventKind.INTEGRATION_STATUS: NotificationTemplate(
        id_prefix="integration",
        title="Integration Status",
        message="{name}: {status}",
        action_url="/admin/integrations",
        escalate_on=("status", "failed"),
    ),
}


def notification_id(kind: EventKind, timestamp: str) -> str:
    """Derive the notification id for an event.

    The same kind and timestamp always yield the same id, so a redelivered
    event maps onto the same notification.
    """
    return f"{NOTIFICATION_TEMPLATES[kind].id_prefix}-{timestamp}"


def build_notification(
    kind: EventKind,
    timestamp: str,
    payload: Mapping[str, Any] | None = None,
) -> AdminNotification:
    """Materialize a notification from a decoded domain event.

    Args:
        kind: Event kind
        timestamp: Server timestamp of the stream message
        payload: Event payload (retained as metadata)

    Returns:
        Unread AdminNotification
    """
    payload = dict(payload or {})
    template = NOTIFICATION_TEMPLATES[kind]

    return AdminNotification(
        id=notification_id(kind, timestamp),
        type=template.resolve_type(payload),
        title=template.title,
        message=template.render_message(payload),
        created_at=timestamp,
        is_read=False,
        action_url=template.render_action_url(payload),
        metadata=payload,
    )
