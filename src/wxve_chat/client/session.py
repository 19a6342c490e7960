"""Chat session: glue between the streaming client and conversation history.

Hides the rules for when a turn enters the history:
- History for a request is captured before the new user message exists
- A turn is committed (user + assistant message) only when it completes
- Errored and cancelled turns never reach the history
"""

from typing import Any

from ..history import ConversationHistory, InMemoryConversationHistory
from ..protocol.models import Message, Role
from ..state.models import ResponseState, ResponseStatus
from .handler import TurnHandle
from .stream_client import ChatStreamClient


class ChatSession:
    """One user's conversation with the assistant."""

    def __init__(
        self,
        client: ChatStreamClient,
        history: ConversationHistory | None = None,
        debug_callback: Any | None = None,
    ):
        self._client = client
        self._history = history if history is not None else InMemoryConversationHistory()
        self._debug_callback = debug_callback
        self._current: TurnHandle | None = None
        self._pending: Message | None = None

    @property
    def history(self) -> ConversationHistory:
        return self._history

    @property
    def client(self) -> ChatStreamClient:
        return self._client

    @property
    def busy(self) -> bool:
        """True while a turn is streaming."""
        return self._client.busy

    @property
    def current(self) -> TurnHandle | None:
        """Handle of the most recent turn."""
        return self._current

    @property
    def pending_message(self) -> Message | None:
        """User message of the most recent turn, until that turn ends."""
        return self._pending

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "Session", message)

    def submit(self, text: str) -> TurnHandle | None:
        """Send user input as a new turn.

        Args:
            text: Raw user input

        Returns:
            The turn handle, or None if the input was blank

        Raises:
            ConcurrentRequestError: If a turn is already streaming
        """
        text = text.strip()
        if not text:
            return None

        history = self._history.snapshot()
        user_message = Message(role=Role.USER, content=text)
        handle = self._client.send_message(text, history)
        handle.subscribe(
            lambda state: self._on_state(user_message, state),
            replay=False
        )
        self._current = handle
        self._pending = user_message
        return handle

    def abort(self, reason: str | None = None) -> bool:
        """Cancel the streaming turn, if any."""
        if self._current is None:
            return False
        return self._current.abort(reason)

    def _on_state(self, user_message: Message, state: ResponseState) -> None:
        if state.is_terminal and self._pending is user_message:
            self._pending = None
        if state.status == ResponseStatus.COMPLETE and state.message is not None:
            self._history.append(user_message)
            self._history.append(state.message)
            self._debug("info", f"Turn committed ({len(self._history)} messages in history)")
        elif state.status == ResponseStatus.ERRORED:
            self._debug("info", "Turn not committed to history")
