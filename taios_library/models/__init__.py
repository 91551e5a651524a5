"""Shared models for the admin notification pipeline."""

from .base import CamelCaseModel
from .events import TRANSPORT_KINDS
from .events import AuditEvent
from .events import AuditPayload
from .events import DomainEvent
from .events import EventKind
from .events import IntegrationStatusEvent
from .events import IntegrationStatusPayload
from .events import RoleChangedEvent
from .events import RoleChangePayload
from .events import StreamMessage
from .events import SystemAlertEvent
from .events import SystemAlertPayload
from .events import TransportKind
from .events import UserCreatedEvent
from .events import UserPayload
from .events import UserUpdatedEvent
from .notifications import AdminNotification
from .notifications import ConnectionState
from .notifications import NotificationType

__all__ = [
    "CamelCaseModel",
    "EventKind",
    "TransportKind",
    "TRANSPORT_KINDS",
    "StreamMessage",
    "DomainEvent",
    "UserCreatedEvent",
    "UserUpdatedEvent",
    "RoleChangedEvent",
    "SystemAlertEvent",
    "AuditEvent",
    "IntegrationStatusEvent",
    "UserPayload",
    "RoleChangePayload",
    "SystemAlertPayload",
    "AuditPayload",
    "IntegrationStatusPayload",
    "AdminNotification",
    "NotificationType",
    "ConnectionState",
]
