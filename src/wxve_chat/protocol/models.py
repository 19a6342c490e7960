"""Wire-level data models for the chat protocol.

Hidden design decisions:
- Field names and JSON shapes of the outbound request
- The closed set of streamed chunk variants and their discriminator
- Which Message fields travel over the wire (role and content only)
"""

import itertools
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

_message_ids = itertools.count()


def _next_message_id() -> int:
    return next(_message_ids)


class Role(str, Enum):
    """Author of a conversation message."""

    USER = "user"
    ASSISTANT = "assistant"


class Chart(BaseModel):
    """A rendered chart document pushed by the service for a symbol."""

    model_config = ConfigDict(frozen=True)

    symbol: str = Field(description="Ticker symbol the chart belongs to")
    html: str = Field(description="Self-contained HTML document")


class Message(BaseModel):
    """An immutable conversation turn record."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(default_factory=_next_message_id, description="Monotonic message id")
    role: Role = Field(description="Who wrote the message")
    content: str = Field(description="Message text (markdown for the assistant)")
    charts: tuple[Chart, ...] = Field(default=(), description="Charts attached to the reply")

    def to_wire(self) -> dict[str, str]:
        """Return the representation sent in a request's history."""
        return {"role": self.role.value, "content": self.content}


class ChatRequest(BaseModel):
    """Outbound payload for one turn.

    Attributes:
        message: The current user text
        history: Prior completed messages, oldest first
    """

    model_config = ConfigDict(frozen=True)

    message: str
    history: tuple[Message, ...] = ()

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON body for the chat endpoint."""
        return {
            "message": self.message,
            "history": [msg.to_wire() for msg in self.history],
        }


class TextChunk(BaseModel):
    """A token or fragment to append to the in-progress response."""

    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    content: str


class ToolStartChunk(BaseModel):
    """A tool invocation has begun on the service side."""

    model_config = ConfigDict(frozen=True)

    type: Literal["tool_start"] = "tool_start"
    name: str


class ToolEndChunk(BaseModel):
    """The named tool invocation has finished."""

    model_config = ConfigDict(frozen=True)

    type: Literal["tool_end"] = "tool_end"
    name: str


class ChartChunk(BaseModel):
    """A chart document to attach to the reply."""

    model_config = ConfigDict(frozen=True)

    type: Literal["chart"] = "chart"
    symbol: str
    html: str

    def to_chart(self) -> Chart:
        return Chart(symbol=self.symbol, html=self.html)


class DoneChunk(BaseModel):
    """The turn is complete; nothing follows."""

    model_config = ConfigDict(frozen=True)

    type: Literal["done"] = "done"


class ErrorChunk(BaseModel):
    """Terminal failure reported by the service; nothing follows."""

    model_config = ConfigDict(frozen=True)

    type: Literal["error"] = "error"
    message: str = "Unknown error"

    @field_validator("message", mode="before")
    @classmethod
    def _default_when_null(cls, value: Any) -> Any:
        # The service may send {"type": "error", "message": null}
        return "Unknown error" if value is None else value


StreamChunk = Annotated[
    Union[TextChunk, ToolStartChunk, ToolEndChunk, ChartChunk, DoneChunk, ErrorChunk],
    Field(discriminator="type"),
]

CHUNK_TYPES = frozenset({"text", "tool_start", "tool_end", "chart", "done", "error"})
