"""Stream and domain event models.

A ``StreamMessage`` is the unit framed onto the wire. Its ``type`` is either a
transport kind (connection bookkeeping only) or an ``EventKind`` naming a
domain event. Domain events published to the daemon are validated against a
tagged union (``DomainEvent``) keyed on ``type``, one payload model per kind.
"""

from enum import Enum
from typing import Annotated
from typing import Any
from typing import Literal

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

from .base import CamelCaseModel


class EventKind(str, Enum):
    """Closed set of domain events the notification pipeline understands."""

    USER_CREATED = "user_created"
    USER_UPDATED = "user_updated"
    ROLE_CHANGED = "role_changed"
    SYSTEM_ALERT = "system_alert"
    AUDIT_EVENT = "audit_event"
    INTEGRATION_STATUS = "integration_status"


class TransportKind(str, Enum):
    """Stream message kinds that carry no notification content."""

    CONNECTION_ESTABLISHED = "connection_established"
    HEARTBEAT = "heartbeat"


TRANSPORT_KINDS = frozenset(kind.value for kind in TransportKind)


class StreamMessage(BaseModel):
    """Self-contained message written to an admin notification stream.

    Attributes:
        type: Transport kind or event kind value
        timestamp: ISO-8601 emission time assigned by the server
        payload: Kind-specific data (domain events only)
        message: Human-readable note (connection_established only)
    """

    model_config = ConfigDict(extra="allow")

    type: str
    timestamp: str
    payload: dict[str, Any] | None = None
    message: str | None = None

    @property
    def is_transport(self) -> bool:
        """Whether this message only carries connection bookkeeping."""
        return self.type in TRANSPORT_KINDS

    def to_json(self) -> str:
        """Serialize as a single line of compact JSON, omitting unset fields."""
        return self.model_dump_json(exclude_none=True)


# --- Domain event payloads ---


class _Payload(CamelCaseModel):
    model_config = ConfigDict(extra="allow")


class UserPayload(_Payload):
    """Payload for user_created and user_updated."""

    user_id: str
    email: str


class RoleChangePayload(_Payload):
    """Payload for role_changed."""

    user_id: str
    user_email: str
    requested_role: str | None = None


class SystemAlertPayload(_Payload):
    """Payload for system_alert."""

    severity: Literal["low", "medium", "high", "critical"] = "medium"
    message: str


class AuditPayload(_Payload):
    """Payload for audit_event."""

    action: str
    resource: str
    actor: str | None = None


class IntegrationStatusPayload(_Payload):
    """Payload for integration_status."""

    name: str
    status: str


class _DomainEventBase(CamelCaseModel):
    """Fields shared by every domain event variant."""

    audience: list[str] | None = Field(
        default=None,
        description="Admin ids that should receive the event (None = every connected admin)",
    )

    def to_stream_message(self, timestamp: str) -> StreamMessage:
        """Frame this event as a stream message stamped with ``timestamp``."""
        payload = self.payload.model_dump(mode="json", by_alias=True, exclude_none=True)  # type: ignore[attr-defined]
        return StreamMessage(type=self.type, timestamp=timestamp, payload=payload)  # type: ignore[attr-defined]


class UserCreatedEvent(_DomainEventBase):
    type: Literal["user_created"] = "user_created"
    payload: UserPayload


class UserUpdatedEvent(_DomainEventBase):
    type: Literal["user_updated"] = "user_updated"
    payload: UserPayload


class RoleChangedEvent(_DomainEventBase):
    type: Literal["role_changed"] = "role_changed"
    payload: RoleChangePayload


class SystemAlertEvent(_DomainEventBase):
    type: Literal["system_alert"] = "system_alert"
    payload: SystemAlertPayload


class AuditEvent(_DomainEventBase):
    type: Literal["audit_event"] = "audit_event"
    payload: AuditPayload


class IntegrationStatusEvent(_DomainEventBase):
    type: Literal["integration_status"] = "integration_status"
    payload: IntegrationStatusPayload


DomainEvent = Annotated[
    UserCreatedEvent
    | UserUpdatedEvent
    | RoleChangedEvent
    | SystemAlertEvent
    | AuditEvent
    | IntegrationStatusEvent,
    Field(discriminator="type"),
]
