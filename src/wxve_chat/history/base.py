"""Abstract conversation history collaborator.

This module defines the interface the chat core uses to record finished
turns and to build the history sent with the next request.
The abstraction hides:
- How messages are stored
- How message ids are assigned
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from ..protocol.models import Chart, Message, Role


class ConversationHistory(ABC):
    """Ordered record of completed conversation messages.

    Messages are immutable once appended. History lives for the session
    only; nothing is persisted.
    """

    @abstractmethod
    def append(self, message: Message) -> None:
        """Append a finalized message."""

    @abstractmethod
    def snapshot(self) -> tuple[Message, ...]:
        """Return all messages, oldest first."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every message."""

    def add(self, role: Role, content: str, charts: Iterable[Chart] = ()) -> Message:
        """Create a message with the next id and append it.

        Args:
            role: Author of the message
            content: Message text
            charts: Charts attached to the message

        Returns:
            The appended message
        """
        message = Message(role=role, content=content, charts=tuple(charts))
        self.append(message)
        return message

    def last_response(self) -> Message | None:
        """Return the most recent assistant message, if any."""
        for message in reversed(self.snapshot()):
            if message.role == Role.ASSISTANT:
                return message
        return None

    def __len__(self) -> int:
        return len(self.snapshot())
