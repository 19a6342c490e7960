"""Streaming chat client, per-turn handles and the chat session."""

from .config import DEFAULT_ENDPOINT
from .handler import TurnHandle
from .session import ChatSession
from .stream_client import ChatStreamClient

__all__ = [
    "DEFAULT_ENDPOINT",
    "ChatSession",
    "ChatStreamClient",
    "TurnHandle",
]
