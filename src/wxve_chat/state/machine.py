"""Response state machine for a single conversational turn.

Hidden design decisions:
- Transition rules for each chunk variant
- How tool boundaries are recorded for display separators
- How failures are classified and what happens to partial text
- Tolerance of protocol violations (logged, never fatal)

States: idle -> streaming -> complete | errored
"""

from typing import Any, assert_never

from ..protocol.errors import CancellationError, ChatClientError
from ..protocol.models import (
    ChartChunk,
    DoneChunk,
    ErrorChunk,
    Message,
    Role,
    StreamChunk,
    TextChunk,
    ToolEndChunk,
    ToolStartChunk,
)
from .models import FailureKind, ResponseState, ResponseStatus


class ResponseStateMachine:
    """Folds the ordered chunk sequence of one turn into a ResponseState.

    A machine is never reused: every turn gets a fresh instance, and once
    it reaches a terminal state no further input changes it.
    """

    def __init__(self, debug_callback: Any | None = None):
        """Initialize in the idle state.

        Args:
            debug_callback: Optional callable(level, component, message)
        """
        self._state = ResponseState()
        self._debug_callback = debug_callback

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "State", message)

    @property
    def state(self) -> ResponseState:
        """The current snapshot."""
        return self._state

    @property
    def is_terminal(self) -> bool:
        return self._state.is_terminal

    def apply(self, chunk: StreamChunk) -> ResponseState:
        """Apply one chunk and return the resulting snapshot.

        Args:
            chunk: The next chunk in arrival order

        Returns:
            The new state (unchanged if the chunk was ignored)
        """
        if self._state.is_terminal:
            self._debug(
                "warning",
                f"Protocol violation: '{chunk.type}' chunk after turn ended "
                f"({self._state.status.value}); ignored"
            )
            return self._state

        if self._state.status == ResponseStatus.IDLE:
            self._state = self._state.model_copy(update={"status": ResponseStatus.STREAMING})

        if isinstance(chunk, TextChunk):
            self._state = self._append_text(chunk.content)
        elif isinstance(chunk, ToolStartChunk):
            self._state = self._start_tool(chunk.name)
        elif isinstance(chunk, ToolEndChunk):
            self._state = self._end_tool(chunk.name)
        elif isinstance(chunk, ChartChunk):
            self._state = self._state.model_copy(
                update={"charts": (*self._state.charts, chunk.to_chart())}
            )
        elif isinstance(chunk, DoneChunk):
            self._state = self._finalize()
        elif isinstance(chunk, ErrorChunk):
            self._state = self._errored(chunk.message, FailureKind.SERVER)
        else:
            assert_never(chunk)

        return self._state

    def fail(self, error: ChatClientError) -> ResponseState:
        """Move a live turn to errored because of a client-side failure.

        Args:
            error: A TransportError, CancellationError or other client error

        Returns:
            The new state (unchanged if the turn had already ended)
        """
        if self._state.is_terminal:
            self._debug("debug", f"Ignoring failure after turn ended: {error}")
            return self._state

        if isinstance(error, CancellationError):
            kind = FailureKind.CANCELLED
        else:
            kind = FailureKind.TRANSPORT
        self._state = self._errored(str(error), kind)
        return self._state

    def _append_text(self, content: str) -> ResponseState:
        state = self._state
        if state.separator_pending or not state.segments:
            segments = (*state.segments, content)
        else:
            segments = (*state.segments[:-1], state.segments[-1] + content)
        return state.model_copy(update={
            "accumulated_text": state.accumulated_text + content,
            "segments": segments,
            "separator_pending": False,
        })

    def _start_tool(self, name: str) -> ResponseState:
        if self._state.active_tool is not None:
            self._debug(
                "warning",
                f"Tool '{name}' started while '{self._state.active_tool}' still active"
            )
        self._debug("info", f"Tool started: {name}")
        return self._state.model_copy(update={"active_tool": name})

    def _end_tool(self, name: str) -> ResponseState:
        active = self._state.active_tool
        if active is None:
            self._debug("debug", f"Tool end '{name}' with no active tool")
        elif active != name:
            self._debug("warning", f"Tool end '{name}' does not match active tool '{active}'")
        else:
            self._debug("info", f"Tool finished: {name}")
        return self._state.model_copy(update={"active_tool": None, "separator_pending": True})

    def _finalize(self) -> ResponseState:
        state = self._state
        message = Message(
            role=Role.ASSISTANT,
            content=state.accumulated_text,
            charts=state.charts,
        )
        self._debug("info", f"Turn complete ({len(message.content)} chars)")
        return state.model_copy(update={
            "status": ResponseStatus.COMPLETE,
            "active_tool": None,
            "separator_pending": False,
            "message": message,
        })

    def _errored(self, error: str, kind: FailureKind) -> ResponseState:
        level = "info" if kind == FailureKind.CANCELLED else "error"
        self._debug(level, f"Turn {kind.value}: {error}")
        # Partial text is never promoted to a message
        return self._state.model_copy(update={
            "status": ResponseStatus.ERRORED,
            "accumulated_text": "",
            "segments": (),
            "active_tool": None,
            "separator_pending": False,
            "error": error,
            "failure": kind,
        })
