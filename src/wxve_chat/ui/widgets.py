"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Input history management
- Chat message rendering (markdown, charts, failure notices)
- The live response view and its tool indicator
- Log rendering and level filtering
"""

from datetime import datetime
from pathlib import Path

from rich.text import Text
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.events import Click
from textual.message import Message as TextualMessage
from textual.widgets import Button, Input, RichLog, Static

from ..protocol.models import Message, Role
from ..state.models import ResponseState
from .config import (
    INPUT_HISTORY_MAX_SIZE,
    INPUT_PLACEHOLDER,
    LOG_MAX_MESSAGE_LENGTH,
    LOG_TIMESTAMP_FORMAT,
    LogLevel,
)
from .formatting import chart_title, render_markdown, tool_indicator


class ClickableMessage(Vertical):
    """A chat message container that copies its content when clicked."""

    def __init__(self, content: str, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._content = content

    def on_click(self, event: Click) -> None:
        event.stop()
        self.app.copy_to_clipboard(self._content)
        self.app.notify("Copied to clipboard", timeout=2)


class HistoryInput(Input):
    """Input widget with command history support.

    Use Up/Down arrow keys to navigate through history.
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._history: list[str] = []
        self._history_index: int = -1
        self._current_input: str = ""

    def _on_key(self, event) -> None:
        """Handle key events for history navigation."""
        if event.key == "up":
            if self._history:
                if self._history_index == -1:
                    self._current_input = self.value
                    self._history_index = len(self._history) - 1
                elif self._history_index > 0:
                    self._history_index -= 1
                self.value = self._history[self._history_index]
                self.cursor_position = len(self.value)
            event.prevent_default()
            event.stop()
        elif event.key == "down":
            if self._history_index != -1:
                if self._history_index < len(self._history) - 1:
                    self._history_index += 1
                    self.value = self._history[self._history_index]
                else:
                    self._history_index = -1
                    self.value = self._current_input
                self.cursor_position = len(self.value)
            event.prevent_default()
            event.stop()

    def add_to_history(self, command: str) -> None:
        """Add a command to history."""
        if command and (not self._history or self._history[-1] != command):
            self._history.append(command)
            del self._history[:-INPUT_HISTORY_MAX_SIZE]
        self._history_index = -1
        self._current_input = ""


class ChatInputBar(Horizontal):
    """Chat input line with a Send button.

    Submitting while a response is streaming is ignored and the typed text
    is kept.
    """

    class Submitted(TextualMessage):
        """Message sent when user submits input."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._busy = False

    def compose(self):
        yield HistoryInput(placeholder=INPUT_PLACEHOLDER, id="chat-input")
        yield Button("Send", id="send-btn", variant="success")

    @property
    def busy(self) -> bool:
        return self._busy

    def set_busy(self, busy: bool) -> None:
        """Enable or disable submission while a response streams."""
        self._busy = busy
        self.query_one("#send-btn", Button).disabled = busy

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            event.stop()
            self._submit()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self._submit()

    def _submit(self) -> None:
        text_input = self.query_one("#chat-input", HistoryInput)
        value = text_input.value.strip()
        if not value or self._busy:
            return
        text_input.add_to_history(value)
        text_input.value = ""
        self.post_message(self.Submitted(value))

    def focus_input(self) -> None:
        """Focus the text input."""
        self.query_one("#chat-input", HistoryInput).focus()


class ResponseView(Vertical):
    """The assistant response currently streaming in."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._content = Static("", classes="message-content")
        self._indicator = Static("", classes="tool-indicator")
        self._indicator.display = False

    def compose(self):
        yield Static("< Assistant", classes="message-header")
        yield self._content
        yield self._indicator

    def show_state(self, state: ResponseState) -> None:
        """Render the latest snapshot of the turn."""
        self._content.update(render_markdown(state.display_text))
        if state.active_tool:
            self._indicator.update(tool_indicator(state.active_tool))
            self._indicator.display = True
        else:
            self._indicator.display = False


class ChatHistoryWidget(VerticalScroll):
    """Scrollable chat history with the live response at the end."""

    BORDER_TITLE = "Chat"
    BORDER_SUBTITLE = "Conversation history"
    ALLOW_MAXIMIZE = True

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._messages: list[Message] = []
        self._response_view: ResponseView | None = None

    @property
    def has_messages(self) -> bool:
        return bool(self._messages) or self._response_view is not None

    def add_message(self, message: Message, chart_paths: list[Path] | None = None) -> None:
        """Add a finalized message to the display.

        Args:
            message: The message to render
            chart_paths: Files the message's charts were saved to, if any
        """
        self._messages.append(message)
        self.mount(self._render_message(message, chart_paths or []))
        self.border_subtitle = f"{len(self._messages)} messages"
        self.scroll_end(animate=False)

    def add_notice(self, title: str, text: str, error: bool = False) -> None:
        """Show a notice that is not part of the conversation (errors, cancels)."""
        classes = "chat-message " + ("error-message" if error else "notice-message")
        self.mount(Vertical(
            Static(title, classes="message-header"),
            Static(Text(text), classes="message-content"),
            classes=classes,
        ))
        self.scroll_end(animate=False)

    def begin_response(self) -> ResponseView:
        """Mount a fresh live response view at the end of the history."""
        self.end_response()
        self._response_view = ResponseView()
        self.mount(self._response_view)
        self.scroll_end(animate=False)
        return self._response_view

    def update_response(self, state: ResponseState) -> None:
        if self._response_view is not None:
            self._response_view.show_state(state)
            self.scroll_end(animate=False)

    def end_response(self) -> None:
        """Remove the live response view, if any."""
        if self._response_view is not None:
            self._response_view.remove()
            self._response_view = None

    def get_last_response(self) -> str | None:
        """Get the last assistant response."""
        for msg in reversed(self._messages):
            if msg.role == Role.ASSISTANT:
                return msg.content
        return None

    def clear_history(self) -> None:
        """Clear the chat display."""
        self._messages.clear()
        self._response_view = None
        self.remove_children()
        self.border_subtitle = "Conversation history"

    def _render_message(self, msg: Message, chart_paths: list[Path]) -> ClickableMessage:
        timestamp = datetime.now().strftime("%H:%M:%S")
        if msg.role == Role.USER:
            header = f"> You [{timestamp}]"
            border_class = "user-message"
            body = Static(Text(msg.content), classes="message-content")
        else:
            header = f"< Assistant [{timestamp}]"
            border_class = "assistant-message"
            body = Static(render_markdown(msg.content), classes="message-content")

        children = [Static(header, classes="message-header"), body]
        for index, chart in enumerate(msg.charts):
            if index < len(chart_paths):
                label = f"{chart_title(chart)}: {chart_paths[index]}"
            else:
                label = f"{chart_title(chart)} (use --charts-dir to save)"
            children.append(Static(Text(label), classes="chart-link"))

        return ClickableMessage(msg.content, *children, classes=f"chat-message {border_class}")


class DebugPanel(RichLog):
    """Log panel for real-time tracing with level filtering.

    Shows timestamped log messages from all components.
    Supports standard log levels: DEBUG < INFO < WARNING < ERROR.
    Hidden by default, shown with --log-level flag or toggled with Ctrl+D.
    """

    BORDER_TITLE = "Log"
    BORDER_SUBTITLE = "Trace log"

    LEVEL_COLORS = {
        LogLevel.DEBUG: "dim white",
        LogLevel.INFO: "cyan",
        LogLevel.WARNING: "yellow",
        LogLevel.ERROR: "red",
    }

    COMPONENT_COLORS = {
        "TUI": "cyan",
        "Client": "green",
        "Decoder": "blue",
        "Interpreter": "magenta",
        "State": "bright_yellow",
        "Session": "bright_green",
    }

    def __init__(self, *args, log_level: int = LogLevel.DEBUG, **kwargs) -> None:
        super().__init__(
            *args,
            markup=True,
            highlight=False,
            auto_scroll=True,
            wrap=True,
            **kwargs
        )
        self._log_level = log_level

    @property
    def log_level(self) -> int:
        """Current log level threshold."""
        return self._log_level

    @log_level.setter
    def log_level(self, level: int) -> None:
        self._log_level = level
        self._update_subtitle()

    def _update_subtitle(self) -> None:
        if self.display:
            self.border_subtitle = f"Level: {LogLevel.name(self._log_level)}"
        else:
            self.border_subtitle = "Hidden"

    def on_mount(self) -> None:
        """Hide by default."""
        self.display = False

    def write_entry(self, component: str, message: str, level: int = LogLevel.DEBUG) -> None:
        """Add a log entry if it meets the current level threshold.

        Args:
            component: Component name (TUI, Client, Decoder, State, ...)
            message: Log message
            level: Log level (LogLevel.DEBUG, INFO, WARNING, ERROR)
        """
        if level < self._log_level:
            return

        if len(message) > LOG_MAX_MESSAGE_LENGTH:
            message = message[:LOG_MAX_MESSAGE_LENGTH] + "..."

        timestamp = datetime.now().strftime(LOG_TIMESTAMP_FORMAT)
        level_color = self.LEVEL_COLORS.get(level, "white")
        comp_color = self.COMPONENT_COLORS.get(component, "white")

        line = Text()
        line.append(f"{timestamp} ", style="dim")
        line.append(f"{LogLevel.name(level):<7} ", style=level_color)
        line.append(f"[{component}] ", style=comp_color)
        line.append(message)
        self.write(line)

    def show(self) -> None:
        self.display = True
        self._update_subtitle()

    def hide(self) -> None:
        self.display = False
        self._update_subtitle()

    def toggle(self) -> bool:
        """Toggle visibility. Returns new state."""
        if self.display:
            self.hide()
            return False
        self.show()
        return True
