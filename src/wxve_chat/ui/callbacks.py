"""Bridges between the chat core and the TUI widgets.

Hides the details of how the TUI receives updates:
- Response snapshots are subscribed to and rendered with throttling
- Debug callbacks from core components are routed to the log panel

Textual runs on the same asyncio loop as the streaming client, so widget
updates happen directly inside the callbacks.
"""

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from ..state.models import FailureKind, ResponseState, ResponseStatus
from .config import STREAM_RENDER_THRESHOLD, LogLevel
from .formatting import failure_text, save_chart

if TYPE_CHECKING:
    from .widgets import ChatHistoryWidget, ChatInputBar, DebugPanel


class DebugRouter:
    """Routes core debug callbacks to the log panel.

    Callable(level: str, component: str, message: str)
    """

    def __init__(self, panel: "DebugPanel") -> None:
        self.panel = panel

    def __call__(self, level: str, component: str, message: str) -> None:
        self.panel.write_entry(component, message, LogLevel.from_string(level))


class ResponseRenderer:
    """Subscriber that renders one turn's snapshots into the chat panel.

    Re-renders the live markdown every ~STREAM_RENDER_THRESHOLD characters,
    and immediately on tool transitions and terminal states.
    """

    def __init__(
        self,
        chat: "ChatHistoryWidget",
        input_bar: "ChatInputBar",
        charts_dir: Path | None = None,
        on_finished: Callable[[ResponseState], None] | None = None,
    ) -> None:
        self.chat = chat
        self.input_bar = input_bar
        self.charts_dir = charts_dir
        self.on_finished = on_finished
        self._rendered_chars = 0
        self._rendered_tool: str | None = None
        self._rendered_separator = False
        self._finished = False

    def __call__(self, state: ResponseState) -> None:
        if self._finished:
            return

        if state.is_terminal:
            self._finish(state)
            return

        if state.status == ResponseStatus.IDLE:
            return

        new_chars = len(state.accumulated_text) - self._rendered_chars
        if (
            new_chars >= STREAM_RENDER_THRESHOLD
            or (self._rendered_chars == 0 and new_chars > 0)
            or state.active_tool != self._rendered_tool
            or state.separator_pending != self._rendered_separator
        ):
            self.chat.update_response(state)
            self._rendered_chars = len(state.accumulated_text)
            self._rendered_tool = state.active_tool
            self._rendered_separator = state.separator_pending

    def _finish(self, state: ResponseState) -> None:
        self._finished = True
        self.chat.end_response()

        if state.status == ResponseStatus.COMPLETE and state.message is not None:
            self.chat.add_message(state.message, self._save_charts(state))
        else:
            title, text = failure_text(state)
            self.chat.add_notice(title, text, error=state.failure != FailureKind.CANCELLED)

        self.input_bar.set_busy(False)
        if self.on_finished is not None:
            self.on_finished(state)

    def _save_charts(self, state: ResponseState) -> list[Path]:
        message = state.message
        if self.charts_dir is None or message is None or not message.charts:
            return []
        return [
            save_chart(chart, self.charts_dir, message.id, index)
            for index, chart in enumerate(message.charts)
        ]
