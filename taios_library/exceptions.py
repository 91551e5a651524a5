"""Exceptions raised inside the notification client.

None of these reach callers of the public notification API; the connection
manager converts them into connection state.
"""


class NotificationStreamError(RuntimeError):
    """Base error for notification stream transport failures."""

    pass


class StreamOpenError(NotificationStreamError):
    """Raised when the server answers but does not open an event stream."""

    def __init__(self, status_code: int, content_type: str | None = None) -> None:
        self.status_code = status_code
        self.content_type = content_type
        super().__init__(f"Notification stream not opened (status={status_code}, content-type={content_type})")
