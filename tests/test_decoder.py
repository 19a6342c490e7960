"""Unit tests for the event-stream decoder."""
import pytest
from hypothesis import given
from hypothesis import strategies as st

from wxve_chat.protocol import SSEDecoder, decode_all

STREAM = (
    'data: {"type":"text","content":"Wave 3 of (5) \\u2014 \\u00e9l\\u00e8ve"}\n\n'
    ": keep-alive\n\n"
    'data: {"type":"tool_start","name":"getSecurityStructures"}\n\n'
    'data:{"type":"text","content":"Élan → \U0001F4C8"}\r\n\r\n'
    'data: {"type":"done"}\n\n'
).encode("utf-8")

EXPECTED = [
    '{"type":"text","content":"Wave 3 of (5) \\u2014 \\u00e9l\\u00e8ve"}',
    '{"type":"tool_start","name":"getSecurityStructures"}',
    '{"type":"text","content":"Élan → \U0001F4C8"}',
    '{"type":"done"}',
]


def split_at(data: bytes, cuts: list[int]) -> list[bytes]:
    points = sorted(set(cuts))
    pieces = []
    start = 0
    for point in points:
        pieces.append(data[start:point])
        start = point
    pieces.append(data[start:])
    return pieces


class TestSSEDecoder:
    """Tests for SSEDecoder framing."""

    def test_single_fragment(self):
        """Test decoding the whole stream in one fragment."""
        assert decode_all([STREAM]) == EXPECTED

    def test_each_data_line_is_a_record(self):
        """Test that consecutive data lines are not joined into one event."""
        body = b'data: {"type":"text","content":"A"}\ndata: {"type":"done"}\n'

        assert decode_all([body]) == ['{"type":"text","content":"A"}', '{"type":"done"}']

    def test_record_emitted_only_after_line_break(self):
        """Test that a record is held back until its terminator arrives."""
        decoder = SSEDecoder()

        assert decoder.feed(b'data: {"type":"do') == []
        assert decoder.pending == 'data: {"type":"do'
        assert decoder.feed(b'ne"}') == []
        assert decoder.feed(b"\n") == ['{"type":"done"}']
        assert decoder.pending == ""

    def test_multibyte_character_split_across_fragments(self):
        """Test that a UTF-8 character split between fragments decodes intact."""
        data = 'data: {"content":"€"}\n'.encode("utf-8")
        euro_start = data.index("€".encode("utf-8"))

        pieces = [data[:euro_start + 1], data[euro_start + 1:euro_start + 2], data[euro_start + 2:]]

        assert decode_all(pieces) == ['{"content":"€"}']

    def test_accepts_text_fragments(self):
        """Test that already-decoded text is framed the same way."""
        assert decode_all([STREAM.decode("utf-8")]) == EXPECTED

    def test_ignores_comments_and_other_fields(self, log_recorder):
        """Test that non-data lines carry no records."""
        decoder = SSEDecoder(debug_callback=log_recorder)

        records = decoder.feed(b": ping\nevent: message\nid: 7\n\ndata: {}\n")

        assert records == ["{}"]
        assert len(log_recorder.at("debug")) == 2

    def test_data_prefix_without_space(self):
        """Test that the space after 'data:' is optional."""
        assert decode_all([b"data:{}\n"]) == ["{}"]

    def test_only_one_leading_space_removed(self):
        """Test that payload whitespace beyond the first space is kept."""
        assert decode_all([b"data:   x\n"]) == ["  x"]

    def test_finish_discards_unterminated_record(self, log_recorder):
        """Test that a trailing partial record is dropped with a warning."""
        decoder = SSEDecoder(debug_callback=log_recorder)

        assert decoder.feed(b'data: {"type":"done"}\ndata: {"type":"te') == ['{"type":"done"}']
        decoder.finish()

        assert decoder.pending == ""
        assert len(log_recorder.at("warning")) == 1

    def test_finish_is_quiet_for_clean_end(self, log_recorder):
        """Test that a cleanly terminated stream logs nothing on finish."""
        decoder = SSEDecoder(debug_callback=log_recorder)
        decoder.feed(b'data: {"type":"done"}\n\n')
        decoder.finish()

        assert log_recorder.entries == []

    @pytest.mark.asyncio
    async def test_decode_async_fragments(self):
        """Test decoding an async fragment stream."""
        async def fragments():
            for piece in split_at(STREAM, [3, 17, 40, 41, 90]):
                yield piece

        records = [record async for record in SSEDecoder().decode(fragments())]

        assert records == EXPECTED

    @given(st.lists(st.integers(min_value=0, max_value=len(STREAM)), max_size=30))
    def test_fragmentation_invariance(self, cuts: list[int]):
        """Property test: Any split of the input yields the same records."""
        assert decode_all(split_at(STREAM, cuts)) == EXPECTED

    @given(st.integers(min_value=0, max_value=len(STREAM)))
    def test_truncation_drops_only_partial_record(self, length: int):
        """Property test: A truncated stream yields the complete records before the cut."""
        truncated = STREAM[:length]
        last_break = truncated.rfind(b"\n")
        complete_part = truncated[:last_break + 1]

        assert decode_all([truncated]) == decode_all([complete_part])
