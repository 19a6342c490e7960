"""Conversation history for the chat session.

Session-only storage of completed turns.
"""

from .base import ConversationHistory
from .in_memory import InMemoryConversationHistory

__all__ = [
    "ConversationHistory",
    "InMemoryConversationHistory",
]
