"""Data models for the per-turn response state.

These snapshots are immutable: the state machine publishes a new one after
every mutation, so observers can never see a half-applied chunk.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..protocol.models import Chart, Message

SEGMENT_SEPARATOR = "\n\n"


class ResponseStatus(str, Enum):
    """Lifecycle status of a turn."""

    IDLE = "idle"              # Request sent, nothing received yet
    STREAMING = "streaming"    # At least one chunk received
    COMPLETE = "complete"      # `done` received, message finalized
    ERRORED = "errored"        # Server error, transport failure or cancellation


class FailureKind(str, Enum):
    """Why a turn ended in the errored state."""

    SERVER = "server"          # `error` chunk from the service
    TRANSPORT = "transport"    # Connection failed, dropped or bad status
    CANCELLED = "cancelled"    # Aborted by the caller


class ResponseState(BaseModel):
    """Snapshot of one turn's response.

    Attributes:
        status: Current lifecycle status
        accumulated_text: Concatenation of every text chunk, in arrival order
        segments: The same text split at tool boundaries, for display
        active_tool: Name of the running tool, if any
        separator_pending: A tool just ended; the next text starts a new segment
        charts: Charts received so far
        error: Human-readable failure message (errored only)
        failure: Failure category (errored only)
        message: The finalized assistant message (complete only)
    """

    model_config = ConfigDict(frozen=True)

    status: ResponseStatus = ResponseStatus.IDLE
    accumulated_text: str = ""
    segments: tuple[str, ...] = ()
    active_tool: str | None = None
    separator_pending: bool = False
    charts: tuple[Chart, ...] = ()
    error: str | None = None
    failure: FailureKind | None = Field(default=None)
    message: Message | None = None

    @property
    def is_terminal(self) -> bool:
        """True once the turn has completed or errored."""
        return self.status in (ResponseStatus.COMPLETE, ResponseStatus.ERRORED)

    @property
    def is_live(self) -> bool:
        """True while the turn can still change."""
        return not self.is_terminal

    @property
    def display_text(self) -> str:
        """Response text with a blank line between tool-separated segments."""
        return SEGMENT_SEPARATOR.join(segment for segment in self.segments if segment)
