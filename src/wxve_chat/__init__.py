"""
wxve-chat: terminal client for the wxve.io market assistant.

Streams the assistant's answers over HTTP and renders them as they arrive.
Each module hides one design decision: wire format (protocol), turn state
(state), request lifecycle (client), conversation record (history) and
presentation (ui, cli).
"""

__version__ = "0.1.0"

from .client import ChatSession, ChatStreamClient, TurnHandle
from .history import ConversationHistory, InMemoryConversationHistory
from .protocol import (
    CancellationError,
    ChatClientError,
    ConcurrentRequestError,
    DecodeError,
    Message,
    ProtocolViolation,
    Role,
    TransportError,
)
from .state import FailureKind, ResponseState, ResponseStatus

__all__ = [
    "CancellationError",
    "ChatClientError",
    "ChatSession",
    "ChatStreamClient",
    "ConcurrentRequestError",
    "ConversationHistory",
    "DecodeError",
    "FailureKind",
    "InMemoryConversationHistory",
    "Message",
    "ProtocolViolation",
    "ResponseState",
    "ResponseStatus",
    "Role",
    "TransportError",
    "TurnHandle",
]
