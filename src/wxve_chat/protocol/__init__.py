"""Streaming chat protocol: wire models, event decoding and chunk parsing."""

from .decoder import SSEDecoder, decode_all
from .errors import (
    CancellationError,
    ChatClientError,
    ConcurrentRequestError,
    DecodeError,
    ProtocolViolation,
    TransportError,
    UnknownChunkTypeError,
)
from .interpreter import interpret, parse_chunk
from .models import (
    Chart,
    ChartChunk,
    ChatRequest,
    DoneChunk,
    ErrorChunk,
    Message,
    Role,
    StreamChunk,
    TextChunk,
    ToolEndChunk,
    ToolStartChunk,
)

__all__ = [
    "CancellationError",
    "Chart",
    "ChartChunk",
    "ChatClientError",
    "ChatRequest",
    "ConcurrentRequestError",
    "DecodeError",
    "DoneChunk",
    "ErrorChunk",
    "Message",
    "ProtocolViolation",
    "Role",
    "SSEDecoder",
    "StreamChunk",
    "TextChunk",
    "ToolEndChunk",
    "ToolStartChunk",
    "TransportError",
    "UnknownChunkTypeError",
    "decode_all",
    "interpret",
    "parse_chunk",
]
