"""Incremental decoder for server-sent event streams.

Follows the EventSource parsing rules: ``data`` lines accumulate until a blank
line dispatches the event, lines starting with ``:`` are comments, and
unknown fields are ignored.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class SSEEvent:
    """A dispatched server-sent event."""

    data: str
    event: str = "message"
    id: str | None = None


class SSEDecoder:
    """Turns stream lines (or raw text chunks) into ``SSEEvent`` objects."""

    def __init__(self) -> None:
        self._data_lines: list[str] = []
        self._event: str | None = None
        self._buffer = ""
        self.last_event_id: str | None = None
        self.retry: int | None = None

    def feed_line(self, line: str) -> SSEEvent | None:
        """Consume one line without its terminator.

        Args:
            line: Line read from the stream

        Returns:
            The dispatched event when ``line`` is blank and data is pending, else None
        """
        line = line.rstrip("\r\n")

        if not line:
            return self._dispatch()

        if line.startswith(":"):
            return None

        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]

        if field == "data":
            self._data_lines.append(value)
        elif field == "event":
            self._event = value
        elif field == "id":
            if "\0" not in value:
                self.last_event_id = value
        elif field == "retry":
            if value.isdigit():
                self.retry = int(value)

        return None

    def feed(self, chunk: str) -> list[SSEEvent]:
        """Consume an arbitrary text chunk.

        Partial trailing lines are buffered until the next call.

        Args:
            chunk: Raw text from the stream

        Returns:
            Events completed by this chunk, in order
        """
        text = self._buffer + chunk
        # A trailing CR may be the first half of a CRLF split across chunks
        held = ""
        if text.endswith("\r"):
            text, held = text[:-1], "\r"

        *lines, rest = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
        self._buffer = rest + held

        events = []
        for line in lines:
            event = self.feed_line(line)
            if event is not None:
                events.append(event)
        return events

    def _dispatch(self) -> SSEEvent | None:
        if not self._data_lines:
            self._event = None
            return None

        event = SSEEvent(
            data="\n".join(self._data_lines),
            event=self._event or "message",
            id=self.last_event_id,
        )
        self._data_lines = []
        self._event = None
        return event
