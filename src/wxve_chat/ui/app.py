"""Main Textual TUI application.

Orchestrates the UI components and handles user interaction with the
chat session.
"""

import asyncio
import contextlib
from pathlib import Path

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Footer, Header

from ..client import ChatSession, ChatStreamClient
from ..protocol.errors import ConcurrentRequestError
from ..state.models import FailureKind, ResponseState, ResponseStatus
from .callbacks import DebugRouter, ResponseRenderer
from .config import APP_TITLE, DARK_THEME, LIGHT_THEME, LogLevel
from .styles import APP_CSS
from .themes import THEMES, toggled_theme
from .widgets import ChatHistoryWidget, ChatInputBar, DebugPanel


class WxveChatApp(App):
    """Textual TUI for chatting with the wxve.io assistant."""

    CSS = APP_CSS
    TITLE = APP_TITLE

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("escape", "cancel_response", "Cancel"),
        Binding("ctrl+t", "toggle_dark", "Theme"),
        Binding("ctrl+k", "clear_chat", "New Chat"),
        Binding("ctrl+r", "copy_last_response", "Copy Response"),
        Binding("ctrl+d", "toggle_debug", "Log"),
    ]

    def __init__(
        self,
        client: ChatStreamClient,
        charts_dir: Path | None = None,
        log_level: str | None = None,
        dark: bool = True,
    ) -> None:
        super().__init__()
        self._client = client
        self._charts_dir = charts_dir
        self._log_level = log_level
        self._dark = dark
        self._session: ChatSession | None = None

    @property
    def session(self) -> ChatSession | None:
        return self._session

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield ChatHistoryWidget(id="chat-history")
        yield DebugPanel(id="debug-panel")
        with Vertical(id="bottom-bar"):
            yield ChatInputBar(id="chat-input-bar")
        yield Footer()

    def on_mount(self) -> None:
        """Called when app is mounted."""
        for theme in THEMES:
            self.register_theme(theme)
        self.theme = DARK_THEME if self._dark else LIGHT_THEME

        log_panel = self.query_one("#debug-panel", DebugPanel)
        if self._log_level is not None:
            log_panel.log_level = LogLevel.from_string(self._log_level)
            log_panel.show()
            log_panel.write_entry("TUI", f"Log panel enabled with level: {self._log_level.upper()}", LogLevel.INFO)

        router = DebugRouter(log_panel)
        self._client.set_debug_callback(router)
        self._session = ChatSession(self._client, debug_callback=router)

        self.sub_title = self._client.endpoint
        self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    def on_unmount(self) -> None:
        """Abort any streaming turn when the app exits."""
        if self._session is not None:
            self._session.abort("Application closed")

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        """Handle user input submission."""
        if self._session is None:
            return

        try:
            handle = self._session.submit(event.value)
        except ConcurrentRequestError:
            self.notify("Still answering - press Esc to cancel", severity="warning", timeout=3)
            return
        if handle is None:
            return

        chat = self.query_one("#chat-history", ChatHistoryWidget)
        input_bar = self.query_one("#chat-input-bar", ChatInputBar)

        if self._session.pending_message is not None:
            chat.add_message(self._session.pending_message)
        chat.begin_response()
        input_bar.set_busy(True)

        handle.subscribe(ResponseRenderer(
            chat,
            input_bar,
            charts_dir=self._charts_dir,
            on_finished=self._on_turn_finished,
        ))

    def _on_turn_finished(self, state: ResponseState) -> None:
        if state.status == ResponseStatus.COMPLETE:
            return
        if state.failure == FailureKind.CANCELLED:
            self.notify("Cancelled", severity="warning", timeout=2)
        else:
            self.notify(f"Error: {(state.error or '')[:50]}", severity="error", timeout=5)

    def action_cancel_response(self) -> None:
        """Cancel the streaming response."""
        if self._session is not None and not self._session.abort():
            self.notify("Nothing to cancel", timeout=2)

    def action_toggle_dark(self) -> None:
        """Switch between dark and light mode."""
        self.theme = toggled_theme(self.theme)
        self._dark = self.theme == DARK_THEME

    def action_clear_chat(self) -> None:
        """Start a new conversation."""
        if self._session is None:
            return
        if self._session.busy:
            self.notify("Wait for the response to finish first", severity="warning", timeout=2)
            return
        self._session.history.clear()
        self.query_one("#chat-history", ChatHistoryWidget).clear_history()
        self.notify("Chat cleared", timeout=2)

    def action_toggle_debug(self) -> None:
        """Toggle the log panel visibility."""
        log_panel = self.query_one("#debug-panel", DebugPanel)
        is_visible = log_panel.toggle()
        self.notify(f"Log panel {'shown' if is_visible else 'hidden'}", timeout=2)

    def action_copy_last_response(self) -> None:
        """Copy last assistant response to clipboard."""
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        response = chat.get_last_response()
        if response:
            self.copy_to_clipboard(response)
            self.notify("Response copied")
        else:
            self.notify("No response to copy", severity="warning")


async def run_textual_tui(
    client: ChatStreamClient,
    charts_dir: Path | None = None,
    log_level: str | None = None,
    dark: bool = True,
) -> None:
    """Run the Textual TUI.

    Args:
        client: Streaming chat client (closed on exit)
        charts_dir: Directory to save chart documents into, None to skip
        log_level: Log level for panel (debug/info/warning/error), None to hide
        dark: Start in dark mode
    """
    app = WxveChatApp(
        client=client,
        charts_dir=charts_dir,
        log_level=log_level,
        dark=dark,
    )
    try:
        await app.run_async()
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
    finally:
        with contextlib.suppress(RuntimeError):
            await client.close()
