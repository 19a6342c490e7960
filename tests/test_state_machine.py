"""Unit tests for the response state machine and state snapshots."""
import json

import pytest
from hypothesis import given
from hypothesis import strategies as st

from wxve_chat.protocol import (
    CancellationError,
    ChartChunk,
    DoneChunk,
    ErrorChunk,
    Role,
    TextChunk,
    ToolEndChunk,
    ToolStartChunk,
    TransportError,
    parse_chunk,
)
from wxve_chat.state import FailureKind, ResponseState, ResponseStateMachine, ResponseStatus


def run(chunks, debug_callback=None) -> ResponseStateMachine:
    machine = ResponseStateMachine(debug_callback=debug_callback)
    for chunk in chunks:
        machine.apply(chunk)
    return machine


text_chunks = st.builds(TextChunk, content=st.text(max_size=20))
tool_names = st.sampled_from(["getSecurityStructures", "getQuote", "getNews"])
tool_chunks = st.one_of(
    st.builds(ToolStartChunk, name=tool_names),
    st.builds(ToolEndChunk, name=tool_names),
)
body_chunks = st.lists(
    st.one_of(text_chunks, tool_chunks, st.builds(ChartChunk, symbol=st.just("AMZN"), html=st.just("<p/>"))),
    max_size=25,
)


class TestResponseState:
    """Tests for ResponseState snapshots."""

    def test_initial_state(self):
        """Test the idle default snapshot."""
        state = ResponseState()

        assert state.status == ResponseStatus.IDLE
        assert state.accumulated_text == ""
        assert state.active_tool is None
        assert state.is_live
        assert not state.is_terminal

    def test_display_text_separates_segments(self):
        """Test that text on either side of a tool call is shown as separate paragraphs."""
        state = ResponseState(segments=("Before.", "After."))
        assert state.display_text == "Before.\n\nAfter."

    def test_snapshots_are_immutable(self):
        """Test that snapshots cannot be mutated."""
        state = ResponseState()
        with pytest.raises(ValueError):
            state.accumulated_text = "x"  # type: ignore[misc]


class TestResponseStateMachine:
    """Tests for ResponseStateMachine transitions."""

    def test_tool_turn_completes(self, amzn_chunks):
        """Test a turn with one tool call from first token to done."""
        machine = run(parse_chunk(json.dumps(c)) for c in amzn_chunks)
        state = machine.state

        assert state.status == ResponseStatus.COMPLETE
        assert state.message is not None
        assert state.message.role == Role.ASSISTANT
        assert state.message.content == "AMZN in wave 3..."
        assert state.display_text == "AMZN\n\n in wave 3..."
        assert state.active_tool is None

    def test_first_chunk_starts_streaming(self):
        """Test that the first chunk moves idle to streaming."""
        machine = ResponseStateMachine()
        state = machine.apply(ToolStartChunk(name="getQuote"))

        assert state.status == ResponseStatus.STREAMING
        assert state.active_tool == "getQuote"

    def test_text_accumulates(self):
        """Test that text chunks append to the accumulated text."""
        machine = run([TextChunk(content="Wave "), TextChunk(content="3")])

        assert machine.state.accumulated_text == "Wave 3"
        assert machine.state.segments == ("Wave 3",)

    def test_tool_end_sets_separator(self):
        """Test that a finished tool marks a pending paragraph break."""
        machine = run([
            TextChunk(content="Looking up"),
            ToolStartChunk(name="getQuote"),
            ToolEndChunk(name="getQuote"),
        ])

        assert machine.state.separator_pending
        assert machine.state.active_tool is None

        machine.apply(TextChunk(content="Done"))
        assert not machine.state.separator_pending
        assert machine.state.segments == ("Looking up", "Done")

    def test_error_after_text(self):
        """Test that an error chunk discards partial text."""
        machine = run([TextChunk(content="Hi"), ErrorChunk(message="upstream timeout")])
        state = machine.state

        assert state.status == ResponseStatus.ERRORED
        assert state.error == "upstream timeout"
        assert state.failure == FailureKind.SERVER
        assert state.accumulated_text == ""
        assert state.message is None

    def test_mismatched_tool_end_clears_active_tool(self, log_recorder):
        """Test that a tool end with another name still clears the active tool."""
        machine = run([
            ToolStartChunk(name="getQuote"),
            ToolEndChunk(name="getNews"),
            TextChunk(content="ok"),
            DoneChunk(),
        ], log_recorder)

        assert machine.state.status == ResponseStatus.COMPLETE
        assert machine.state.message.content == "ok"
        assert any("does not match" in message for message in log_recorder.at("warning"))

    def test_tool_end_without_start(self, log_recorder):
        """Test that a tool end with no active tool is a harmless clear."""
        machine = run([ToolEndChunk(name="getQuote")], log_recorder)

        assert machine.state.status == ResponseStatus.STREAMING
        assert machine.state.active_tool is None
        assert log_recorder.at("warning") == []

    def test_nested_tool_start_replaces_active_tool(self, log_recorder):
        """Test that a second tool start takes over the indicator."""
        machine = run([ToolStartChunk(name="getQuote"), ToolStartChunk(name="getNews")], log_recorder)

        assert machine.state.active_tool == "getNews"
        assert len(log_recorder.at("warning")) == 1

    def test_charts_attached_to_message(self):
        """Test that chart chunks end up on the final message."""
        machine = run([
            TextChunk(content="Chart below"),
            ChartChunk(symbol="AMZN", html="<div>AMZN</div>"),
            DoneChunk(),
        ])

        charts = machine.state.message.charts
        assert [chart.symbol for chart in charts] == ["AMZN"]
        assert charts[0].html == "<div>AMZN</div>"

    def test_chunks_after_done_ignored(self, log_recorder):
        """Test that input after a terminal state changes nothing."""
        machine = run([TextChunk(content="A"), DoneChunk()], log_recorder)
        final = machine.state

        assert machine.apply(TextChunk(content="B")) is final
        assert machine.apply(ErrorChunk(message="late")) is final
        assert len([m for m in log_recorder.at("warning") if "Protocol violation" in m]) == 2

    def test_chunks_after_error_ignored(self):
        """Test that a done after an error does not complete the turn."""
        machine = run([ErrorChunk(), DoneChunk()])

        assert machine.state.status == ResponseStatus.ERRORED
        assert machine.state.error == "Unknown error"

    def test_fail_transport(self):
        """Test that a transport failure errors a live turn."""
        machine = run([TextChunk(content="partial")])
        state = machine.fail(TransportError("Connection dropped"))

        assert state.status == ResponseStatus.ERRORED
        assert state.failure == FailureKind.TRANSPORT
        assert state.error == "Connection dropped"
        assert state.accumulated_text == ""

    def test_fail_cancelled(self):
        """Test that cancellation is classified separately from transport failures."""
        machine = run([TextChunk(content="partial")])
        state = machine.fail(CancellationError())

        assert state.failure == FailureKind.CANCELLED
        assert state.error == "Request cancelled"

    def test_fail_after_terminal_ignored(self):
        """Test that failing a finished turn keeps it complete."""
        machine = run([DoneChunk()])
        state = machine.fail(TransportError("late drop"))

        assert state.status == ResponseStatus.COMPLETE

    def test_snapshots_are_distinct(self):
        """Test that every transition publishes a new snapshot."""
        machine = ResponseStateMachine()
        first = machine.apply(TextChunk(content="A"))
        second = machine.apply(TextChunk(content="B"))

        assert first is not second
        assert first.accumulated_text == "A"

    @given(body_chunks)
    def test_message_is_concatenation_of_text(self, chunks):
        """Property test: The final message is every text chunk joined in order."""
        machine = run([*chunks, DoneChunk()])
        expected = "".join(c.content for c in chunks if isinstance(c, TextChunk))

        assert machine.state.status == ResponseStatus.COMPLETE
        assert machine.state.message.content == expected

    @given(body_chunks, st.one_of(st.none(), st.text(min_size=1, max_size=20)))
    def test_error_always_terminates_errored(self, chunks, message):
        """Property test: An error chunk always ends errored with no message."""
        error = ErrorChunk(message=message) if message is not None else ErrorChunk()
        machine = run([*chunks, error, DoneChunk()])

        assert machine.state.status == ResponseStatus.ERRORED
        assert machine.state.message is None
        assert machine.state.accumulated_text == ""

    @given(body_chunks)
    def test_display_text_is_prefix_stable(self, chunks):
        """Property test: Streaming display text only ever grows at the end."""
        machine = ResponseStateMachine()
        previous = ""
        for chunk in chunks:
            current = machine.apply(chunk).display_text
            assert current.startswith(previous)
            previous = current
