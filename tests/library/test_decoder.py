"""
Unit tests for the SSE decoder.

Tests line handling, chunk buffering and comment skipping.
"""

import pytest

from taios_library.streaming.decoder import SSEDecoder
from taios_library.streaming.decoder import SSEEvent


@pytest.mark.unit
class TestSSEDecoderLines:
    """Test feeding whole lines."""

    def test_dispatches_on_blank_line(self) -> None:
        """Test data is held until the blank line."""
        decoder = SSEDecoder()

        assert decoder.feed_line('data: {"type":"heartbeat"}') is None
        event = decoder.feed_line("")

        assert event == SSEEvent(data='{"type":"heartbeat"}')

    def test_multiple_data_lines_join_with_newline(self) -> None:
        """Test consecutive data lines join into one payload."""
        decoder = SSEDecoder()
        decoder.feed_line("data: first")
        decoder.feed_line("data: second")

        event = decoder.feed_line("")

        assert event is not None
        assert event.data == "first\nsecond"

    def test_comments_are_ignored(self) -> None:
        """Test ': ping' comment lines produce nothing."""
        decoder = SSEDecoder()

        assert decoder.feed_line(": ping - 2024-01-01 00:00:00") is None
        assert decoder.feed_line("") is None

    def test_blank_line_without_data_dispatches_nothing(self) -> None:
        """Test empty blocks are skipped."""
        decoder = SSEDecoder()
        decoder.feed_line("event: custom")

        assert decoder.feed_line("") is None

    def test_named_event_and_id(self) -> None:
        """Test event and id fields are captured."""
        decoder = SSEDecoder()
        decoder.feed_line("event: custom")
        decoder.feed_line("id: 7")
        decoder.feed_line("data: x")

        event = decoder.feed_line("")

        assert event == SSEEvent(data="x", event="custom", id="7")
        assert decoder.last_event_id == "7"

    def test_retry_field(self) -> None:
        """Test numeric retry is recorded and non-numeric ignored."""
        decoder = SSEDecoder()
        decoder.feed_line("retry: 1500")
        decoder.feed_line("retry: soon")

        assert decoder.retry == 1500

    def test_value_without_leading_space(self) -> None:
        """Test 'data:x' is equivalent to 'data: x'."""
        decoder = SSEDecoder()
        decoder.feed_line("data:x")

        event = decoder.feed_line("")

        assert event is not None
        assert event.data == "x"


@pytest.mark.unit
class TestSSEDecoderChunks:
    """Test feeding arbitrary chunks."""

    def test_frame_split_across_chunks(self) -> None:
        """Test a frame split mid-line is reassembled."""
        decoder = SSEDecoder()

        assert decoder.feed('data: {"type":"hea') == []
        events = decoder.feed('rtbeat"}\n\n')

        assert [event.data for event in events] == ['{"type":"heartbeat"}']

    def test_several_frames_in_one_chunk(self) -> None:
        """Test every complete frame in a chunk is returned in order."""
        decoder = SSEDecoder()

        events = decoder.feed("data: 1\n\ndata: 2\n\ndata: 3")

        assert [event.data for event in events] == ["1", "2"]
        assert [event.data for event in decoder.feed("\n\n")] == ["3"]

    def test_crlf_split_across_chunks(self) -> None:
        """Test a CR at a chunk edge does not produce a spurious blank line."""
        decoder = SSEDecoder()

        assert decoder.feed("data: a\r") == []
        events = decoder.feed("\ndata: b\r\n\r\n")

        assert [event.data for event in events] == ["a\nb"]
