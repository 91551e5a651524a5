"""Request models for taiosd API."""

from pydantic import RootModel

from taios_library.models.events import DomainEvent


class PublishEventRequest(RootModel[DomainEvent]):
    """Body of a publish call: one domain event, discriminated by ``type``.

    Example:
        {"type": "role_changed",
         "payload": {"userId": "u-1", "userEmail": "a@b.c", "requestedRole": "hr"},
         "audience": ["admin-1"]}
    """
