"""Admin event bus for in-process domain event publishing.

This service provides a singleton EventQueueEmitter that every admin
notification stream subscribes to. Anything in the daemon that produces a
domain event (the publish endpoint, background jobs) goes through
``publish_event``.
"""

import logging

from taios_library.models.events import DomainEvent
from taios_library.models.events import StreamMessage
from taios_library.streaming.framing import iso_timestamp
from taiosd.streaming import EventQueueEmitter

logger = logging.getLogger(__name__)


class AdminEventBus:
    """Singleton service for admin event emission."""

    _instance: EventQueueEmitter | None = None

    @classmethod
    def get_instance(cls) -> EventQueueEmitter:
        """Get the singleton EventQueueEmitter instance."""
        if cls._instance is None:
            cls._instance = EventQueueEmitter()
        return cls._instance

    @classmethod
    def publish(cls, event: DomainEvent) -> tuple[StreamMessage, int]:
        """Publish a domain event to every matching stream.

        Args:
            event: The event to publish

        Returns:
            The framed message and the number of streams it was queued for
        """
        return publish_event(cls.get_instance(), event)

    @classmethod
    def reset(cls) -> None:
        """Close every stream and drop the singleton."""
        if cls._instance is not None:
            cls._instance.close_all()
        cls._instance = None


def publish_event(emitter: EventQueueEmitter, event: DomainEvent) -> tuple[StreamMessage, int]:
    """Stamp, frame and fan out one domain event.

    Args:
        emitter: Emitter to publish on
        event: Validated domain event

    Returns:
        The framed message and the number of streams it was queued for
    """
    message = event.to_stream_message(iso_timestamp())
    delivered = emitter.emit(message, event.audience)
    logger.info(f"Published {message.type} to {delivered} stream(s)")
    return message, delivered


def get_event_bus() -> EventQueueEmitter:
    """Convenience function for dependency injection.

    Returns:
        The singleton EventQueueEmitter instance
    """
    return AdminEventBus.get_instance()
