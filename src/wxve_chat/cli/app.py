"""Main CLI application using Typer."""
import asyncio
import contextlib
import signal
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from ..client import ChatSession
from ..protocol.errors import ConcurrentRequestError, TransportError
from ..ui.config import LogLevel
from .providers import get_client, get_endpoint, get_timeouts
from .renderer import ConsoleLogger, ConsoleRenderer

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="wxve-chat",
    help="Terminal client for the wxve.io Elliott Wave market assistant",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()

EXIT_COMMANDS = ("exit", "quit", "q")


def _check_log_level(log_level: str | None) -> str | None:
    if log_level is not None and log_level.lower() not in LogLevel.names():
        console.print(
            f"[red]Error: Unknown log level '{log_level}' "
            f"(choose from {', '.join(LogLevel.names())})[/red]"
        )
        raise typer.Exit(code=1)
    return log_level


LOG_LEVEL_OPTION = typer.Option(
    None,
    "--log-level",
    "-l",
    envvar="WXVE_CHAT_LOG_LEVEL",
    help="Show log output with level: debug (all), info, warning, or error",
)

CHARTS_DIR_OPTION = typer.Option(
    None,
    "--charts-dir",
    "-c",
    file_okay=False,
    dir_okay=True,
    help="Save chart documents attached to answers into this directory",
)


@contextlib.contextmanager
def _sigint_aborts(session: ChatSession):
    """Make Ctrl+C cancel the streaming turn instead of the whole chat.

    The handler is removed on exit, restoring KeyboardInterrupt for the prompt.
    """
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, session.abort, "Cancelled by user")
    except (NotImplementedError, RuntimeError):
        # No loop signal support (Windows, non-main thread)
        yield
        return
    try:
        yield
    finally:
        loop.remove_signal_handler(signal.SIGINT)


@app.command()
def chat(
    log_level: str | None = LOG_LEVEL_OPTION,
    charts_dir: Path | None = CHARTS_DIR_OPTION,
):
    """Interactive chat in the terminal."""
    log_level = _check_log_level(log_level)

    async def _ask(session: ChatSession, text: str) -> None:
        handle = session.submit(text)
        if handle is None:
            return
        handle.subscribe(ConsoleRenderer(console, charts_dir=charts_dir))
        with _sigint_aborts(session):
            await handle

    async def _chat():
        # Ctrl+C at the prompt raises KeyboardInterrupt instead of
        # cancelling the main task
        with contextlib.suppress(ValueError):
            signal.signal(signal.SIGINT, signal.default_int_handler)

        debug_callback = ConsoleLogger(console, log_level) if log_level else None
        client = get_client(console, debug_callback=debug_callback)
        session = ChatSession(client, debug_callback=debug_callback)

        try:
            console.print("[bold cyan]wxve.io chat[/bold cyan]")
            console.print(f"[dim]Endpoint: {client.endpoint}[/dim]")
            console.print("[dim]Type 'exit', 'quit', or 'q' to leave; Ctrl+C cancels a response[/dim]\n")

            while True:
                try:
                    user_input = console.input("[bold yellow]You:[/bold yellow] ")
                except (KeyboardInterrupt, EOFError):
                    console.print("\n[dim]Goodbye![/dim]")
                    break

                if not user_input.strip():
                    continue

                if user_input.strip().lower() in EXIT_COMMANDS:
                    console.print("[dim]Goodbye![/dim]")
                    break

                console.print("[bold green]Xve:[/bold green] ", end="")
                try:
                    await _ask(session, user_input)
                except ConcurrentRequestError as e:
                    console.print(f"[yellow]{e}[/yellow]")

        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
            import traceback
            console.print(f"[dim]{traceback.format_exc()}[/dim]")
            raise typer.Exit(code=1)
        finally:
            await client.close()

    try:
        asyncio.run(_chat())
    except KeyboardInterrupt:
        pass


@app.command(name="tui")
def tui_command(
    log_level: str | None = LOG_LEVEL_OPTION,
    charts_dir: Path | None = CHARTS_DIR_OPTION,
    light: bool = typer.Option(
        False,
        "--light",
        help="Start with the light theme",
    ),
):
    """Launch interactive TUI chat interface."""
    log_level = _check_log_level(log_level)

    async def _tui():
        from ..ui import run_textual_tui

        client = get_client(console)
        try:
            await run_textual_tui(
                client=client,
                charts_dir=charts_dir,
                log_level=log_level,
                dark=not light,
            )
        finally:
            console.print("\n[dim]Goodbye![/dim]")

    try:
        asyncio.run(_tui())
    except KeyboardInterrupt:
        pass


@app.command()
def health():
    """Show configuration and check that the chat endpoint is reachable."""
    async def _health():
        endpoint = get_endpoint()
        timeout, connect_timeout = get_timeouts(console)

        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("Endpoint", endpoint)
        table.add_row("Read timeout", f"{timeout:g}s")
        table.add_row("Connect timeout", f"{connect_timeout:g}s")
        console.print(table)

        client = get_client(console)
        try:
            status = await client.ping()
            console.print(f"[green]+[/green] Chat endpoint: reachable (HTTP {status})")
        except TransportError as e:
            console.print(f"[red]x[/red] Chat endpoint: UNREACHABLE ({e})")
            raise typer.Exit(code=1)
        finally:
            await client.close()

    asyncio.run(_health())


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
