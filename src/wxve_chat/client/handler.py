"""Handle for one in-flight conversational turn."""

import asyncio
from collections.abc import Callable
from typing import Any

from ..protocol.models import ChatRequest
from ..state.models import ResponseState
from ..state.observable import StateCell


class TurnHandle(asyncio.Future):
    """Observable, awaitable handle for a single turn.

    Resolves to the terminal ResponseState. Awaiting it never raises for
    server errors, transport failures or cancellation: those all resolve to
    an errored state the UI can render.

    Usage:
        handle = client.send_message("What is AMZN doing?", history)
        handle.subscribe(render)
        state = await handle
    """

    def __init__(
        self,
        request: ChatRequest,
        cell: StateCell[ResponseState],
        *args: Any,
        **kwargs: Any
    ):
        """Initialize TurnHandle.

        Args:
            request: The request being sent for this turn
            cell: Cell the orchestrator publishes snapshots to
            *args: Additional positional arguments for asyncio.Future
            **kwargs: Additional keyword arguments for asyncio.Future
        """
        super().__init__(*args, **kwargs)
        self.request = request
        self.cell = cell
        self.abort_reason: str | None = None
        self._background_task: asyncio.Task | None = None
        self.add_done_callback(self._on_done)

    @property
    def background_task(self) -> asyncio.Task | None:
        return self._background_task

    @background_task.setter
    def background_task(self, task: asyncio.Task) -> None:
        self._background_task = task

    @property
    def state(self) -> ResponseState:
        """Latest published snapshot."""
        return self.cell.value

    @property
    def is_live(self) -> bool:
        """True until the turn reaches complete or errored."""
        return self.cell.value.is_live

    def subscribe(
        self,
        callback: Callable[[ResponseState], None],
        replay: bool = True
    ) -> Callable[[], None]:
        """Receive every published snapshot of this turn.

        Returns:
            A function that removes the subscription
        """
        return self.cell.subscribe(callback, replay=replay)

    def abort(self, reason: str | None = None) -> bool:
        """Cancel the turn.

        Byte consumption stops at the next await point, the state moves to
        errored with a cancellation message and the connection is released.

        Args:
            reason: Optional message to report instead of the default

        Returns:
            True if an in-flight turn was cancelled
        """
        task = self._background_task
        if task is None or task.done() or not self.is_live:
            return False
        self.abort_reason = reason
        return task.cancel()

    def _on_done(self, future: asyncio.Future) -> None:
        # Cancelling the handle itself (e.g. an awaiting task was cancelled)
        # must also stop the stream
        if future.cancelled():
            self.abort()
