"""Client factory functions for CLI.

Centralizes creation of the chat client from environment variables.
Hides configuration details from command implementations.
"""

import os
from typing import Any

import typer
from rich.console import Console

from ..client import ChatStreamClient
from ..client.config import DEFAULT_CONNECT_TIMEOUT, DEFAULT_ENDPOINT, DEFAULT_READ_TIMEOUT

# Default console for output
_console = Console()


def get_endpoint() -> str:
    """Chat endpoint from WXVE_CHAT_ENDPOINT, or the public service."""
    return os.getenv("WXVE_CHAT_ENDPOINT") or DEFAULT_ENDPOINT


def _get_seconds(name: str, default: float, console: Console) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        console.print(f"[red]Error: {name} must be a number of seconds, got '{raw}'[/red]")
        raise typer.Exit(code=1)
    if value <= 0:
        console.print(f"[red]Error: {name} must be positive, got '{raw}'[/red]")
        raise typer.Exit(code=1)
    return value


def get_timeouts(console: Console | None = None) -> tuple[float, float]:
    """Read and connect timeouts in seconds.

    Returns:
        Tuple of (read_timeout, connect_timeout)

    Raises:
        typer.Exit: If a timeout is not a positive number
    """
    con = console or _console
    return (
        _get_seconds("WXVE_CHAT_TIMEOUT", DEFAULT_READ_TIMEOUT, con),
        _get_seconds("WXVE_CHAT_CONNECT_TIMEOUT", DEFAULT_CONNECT_TIMEOUT, con),
    )


def get_client(
    console: Console | None = None,
    debug_callback: Any | None = None,
) -> ChatStreamClient:
    """Create the streaming chat client from environment variables.

    Args:
        console: Optional Rich console for output
        debug_callback: Optional callable(level, component, message)

    Returns:
        ChatStreamClient instance

    Raises:
        typer.Exit: If the configuration is invalid

    Environment variables:
        WXVE_CHAT_ENDPOINT: Chat endpoint URL (default: https://api.wxve.io/chat)
        WXVE_CHAT_TIMEOUT: Read timeout in seconds (default: 300)
        WXVE_CHAT_CONNECT_TIMEOUT: Connect timeout in seconds (default: 10)
    """
    con = console or _console
    timeout, connect_timeout = get_timeouts(con)
    try:
        return ChatStreamClient(
            endpoint=get_endpoint(),
            timeout=timeout,
            connect_timeout=connect_timeout,
            debug_callback=debug_callback,
        )
    except ValueError as e:
        con.print(f"[red]Error: WXVE_CHAT_ENDPOINT is invalid: {e}[/red]")
        raise typer.Exit(code=1)
