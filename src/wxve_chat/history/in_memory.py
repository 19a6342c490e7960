"""In-memory conversation history.

Data is lost when the application exits.
"""

from ..protocol.models import Message
from .base import ConversationHistory


class InMemoryConversationHistory(ConversationHistory):
    """List-backed history for a single session."""

    def __init__(self, messages: list[Message] | None = None):
        self._messages: list[Message] = list(messages or [])

    def append(self, message: Message) -> None:
        if self._messages and message.id <= self._messages[-1].id:
            raise ValueError(
                f"Message id {message.id} is not after last id {self._messages[-1].id}"
            )
        self._messages.append(message)

    def snapshot(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    def clear(self) -> None:
        self._messages.clear()

    def __len__(self) -> int:
        return len(self._messages)
