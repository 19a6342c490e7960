"""Text formatting utilities for the front ends.

Hides the details of markdown rendering, failure wording and how chart
documents are written to disk.
"""

import re
from pathlib import Path

from rich.markdown import Markdown

from ..protocol.models import Chart
from ..state.models import FailureKind, ResponseState
from .config import CHART_TITLE_FORMAT

_UNSAFE_FILENAME = re.compile(r"[^A-Za-z0-9._-]+")


def render_markdown(text: str) -> Markdown:
    """Render assistant text as markdown."""
    return Markdown(text)


def chart_title(chart: Chart) -> str:
    """Human-readable title for a chart."""
    return CHART_TITLE_FORMAT.format(symbol=chart.symbol)


def save_chart(chart: Chart, directory: Path, message_id: int, index: int = 0) -> Path:
    """Write a chart document to `directory` as a standalone HTML file.

    Args:
        chart: The chart to save
        directory: Target directory (created if missing)
        message_id: Id of the message the chart belongs to
        index: Position of the chart within the message

    Returns:
        Path of the written file
    """
    directory.mkdir(parents=True, exist_ok=True)
    symbol = _UNSAFE_FILENAME.sub("_", chart.symbol).strip("_") or "chart"
    path = directory / f"{symbol}-{message_id}-{index}.html"
    path.write_text(chart.html, encoding="utf-8")
    return path


def failure_text(state: ResponseState) -> tuple[str, str]:
    """Describe an errored turn for display.

    Cancellations get a neutral wording so the UI does not alarm the user.

    Returns:
        Tuple of (title, text)
    """
    error = state.error or "Unknown error"
    if state.failure == FailureKind.CANCELLED:
        return "Cancelled", error
    if state.failure == FailureKind.TRANSPORT:
        return "Connection error", error
    return "Error", error


def tool_indicator(name: str) -> str:
    """Status line shown while a tool runs."""
    return f"Using {name}..."
