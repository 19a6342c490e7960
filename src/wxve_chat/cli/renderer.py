"""Rich console output for the plain chat loop.

Hides how streamed snapshots become terminal output:
- Only the new suffix of the response text is printed
- Tool activity is shown on its own dimmed line
- Failures use the same wording as the TUI
"""

from pathlib import Path

from rich.console import Console
from rich.text import Text

from ..state.models import FailureKind, ResponseState, ResponseStatus
from ..ui.config import LogLevel
from ..ui.formatting import chart_title, failure_text, save_chart, tool_indicator


class ConsoleLogger:
    """Debug callback that prints log lines at or above a level.

    Callable(level: str, component: str, message: str)
    """

    LEVEL_STYLES = {
        LogLevel.DEBUG: "dim",
        LogLevel.INFO: "cyan",
        LogLevel.WARNING: "yellow",
        LogLevel.ERROR: "red",
    }

    def __init__(self, console: Console, level: str = "info") -> None:
        self.console = console
        self.level = LogLevel.from_string(level)

    def __call__(self, level: str, component: str, message: str) -> None:
        numeric = LogLevel.from_string(level)
        if numeric < self.level:
            return
        line = Text()
        line.append(f"{LogLevel.name(numeric):<7} ", style=self.LEVEL_STYLES.get(numeric, "white"))
        line.append(f"[{component}] ", style="bold")
        line.append(message)
        self.console.print(line)


class ConsoleRenderer:
    """Subscriber that streams one turn to the console."""

    def __init__(self, console: Console, charts_dir: Path | None = None) -> None:
        self.console = console
        self.charts_dir = charts_dir
        self._printed = 0
        self._tool: str | None = None
        self._at_line_start = True
        self._finished = False

    def _write(self, text: str) -> None:
        if not text:
            return
        self.console.print(text, end="", markup=False, highlight=False, soft_wrap=True)
        self._at_line_start = text.endswith("\n")

    def _newline(self) -> None:
        if not self._at_line_start:
            self.console.print()
            self._at_line_start = True

    def __call__(self, state: ResponseState) -> None:
        if self._finished or state.status == ResponseStatus.IDLE:
            return

        if state.status == ResponseStatus.ERRORED:
            self._finish_errored(state)
            return

        text = state.display_text
        self._write(text[self._printed:])
        self._printed = len(text)

        if state.active_tool and state.active_tool != self._tool:
            self._newline()
            self.console.print(f"[dim]{tool_indicator(state.active_tool)}[/dim]", highlight=False)
        self._tool = state.active_tool

        if state.status == ResponseStatus.COMPLETE:
            self._finish_complete(state)

    def _finish_complete(self, state: ResponseState) -> None:
        self._finished = True
        self._newline()
        message = state.message
        if message is None:
            return
        for index, chart in enumerate(message.charts):
            if self.charts_dir is None:
                self.console.print(f"[dim]{chart_title(chart)} (use --charts-dir to save)[/dim]")
            else:
                path = save_chart(chart, self.charts_dir, message.id, index)
                self.console.print(f"[cyan]{chart_title(chart)}:[/cyan] {path}", highlight=False)
        self.console.print()

    def _finish_errored(self, state: ResponseState) -> None:
        self._finished = True
        self._newline()
        title, text = failure_text(state)
        if state.failure == FailureKind.CANCELLED:
            self.console.print(f"[dim]{title}[/dim]\n")
        else:
            self.console.print(Text(f"{title}: {text}", style="red"))
            self.console.print()
