"""Streaming chat client for the wxve.io assistant service.

Hidden design decisions:
- HTTP client setup, timeouts and request headers
- The decode -> interpret -> state machine pipeline
- Enforcement of a single in-flight turn
- Classification of transport failures and cancellation
- Release of the connection on every exit path
"""

import asyncio
from collections.abc import Iterable
from contextlib import aclosing
from typing import Any
from urllib.parse import urlparse

import httpx

from ..protocol.decoder import SSEDecoder
from ..protocol.errors import (
    CancellationError,
    ChatClientError,
    ConcurrentRequestError,
    TransportError,
)
from ..protocol.interpreter import interpret
from ..protocol.models import ChatRequest, Message
from ..state.machine import ResponseStateMachine
from ..state.models import ResponseState
from ..state.observable import StateCell
from .config import (
    ALLOWED_SCHEMES,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_ENDPOINT,
    DEFAULT_READ_TIMEOUT,
    EVENT_STREAM_CONTENT_TYPE,
    REQUEST_HEADERS,
)
from .handler import TurnHandle


class ChatStreamClient:
    """Sends chat turns and streams the assistant's response.

    Every turn runs as one cooperative task on the current event loop. Only
    one turn may be live at a time; starting another raises
    ConcurrentRequestError without touching the live one.

    Supports async context manager protocol for proper resource cleanup:
        async with ChatStreamClient() as client:
            handle = client.send_message("Hello", history=[])
            state = await handle
    """

    def __init__(
        self,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: float = DEFAULT_READ_TIMEOUT,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
        debug_callback: Any | None = None,
    ):
        """Initialize the client.

        Args:
            endpoint: Chat endpoint URL (http or https)
            timeout: Read timeout in seconds between stream fragments
            connect_timeout: Connection timeout in seconds
            http_client: Optional preconfigured httpx client (not closed by us)
            debug_callback: Optional callable(level, component, message)

        Raises:
            ValueError: If the endpoint scheme is not http or https
        """
        parsed = urlparse(endpoint)
        if parsed.scheme not in ALLOWED_SCHEMES:
            raise ValueError(
                f"Invalid URL scheme '{parsed.scheme}'. Only {sorted(ALLOWED_SCHEMES)} allowed."
            )

        self._endpoint = endpoint
        self._timeout = timeout
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout, connect=connect_timeout),
        )
        self._debug_callback = debug_callback
        self._live: TurnHandle | None = None

    @property
    def endpoint(self) -> str:
        """The chat endpoint URL."""
        return self._endpoint

    @property
    def busy(self) -> bool:
        """True while a turn is live."""
        return self._live is not None and self._live.is_live

    @property
    def current(self) -> TurnHandle | None:
        """Handle of the live turn, if any."""
        return self._live if self.busy else None

    def set_debug_callback(self, callback: Any) -> None:
        """Set the debug callback for detailed logging.

        Args:
            callback: Callable(level: str, component: str, message: str)
        """
        self._debug_callback = callback

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "Client", message)

    def send_message(
        self,
        message: str,
        history: Iterable[Message] = (),
    ) -> TurnHandle:
        """Start a turn and return its observable handle.

        Must be called from a running event loop.

        Args:
            message: The user's text
            history: Completed prior messages, oldest first

        Returns:
            TurnHandle publishing ResponseState snapshots

        Raises:
            ConcurrentRequestError: If another turn is still live
        """
        if self.busy:
            raise ConcurrentRequestError("A response is still streaming; wait for it or abort it")

        loop = asyncio.get_running_loop()
        request = ChatRequest(message=message, history=tuple(history))
        machine = ResponseStateMachine(debug_callback=self._debug_callback)
        cell: StateCell[ResponseState] = StateCell(machine.state, debug_callback=self._debug_callback)

        handle = TurnHandle(request, cell, loop=loop)
        self._live = handle
        task = loop.create_task(self._run_turn(handle, machine))
        task.add_done_callback(lambda _: self._settle(handle, machine))
        handle.background_task = task

        self._debug(
            "info",
            f"Sending message ({len(message)} chars, {len(request.history)} history messages)"
        )
        return handle

    async def _run_turn(self, handle: TurnHandle, machine: ResponseStateMachine) -> None:
        """Drive one turn to a terminal state, containing every failure."""
        cell = handle.cell
        try:
            await self._stream(handle.request, machine, cell)
        except asyncio.CancelledError:
            cell.set(machine.fail(CancellationError(handle.abort_reason or "Request cancelled")))
        except ChatClientError as e:
            cell.set(machine.fail(e))
        except httpx.HTTPError as e:
            cell.set(machine.fail(TransportError(_describe_http_error(e))))
        except Exception as e:
            self._debug("error", f"Unexpected error while streaming: {e!r}")
            cell.set(machine.fail(TransportError(f"Unexpected error: {e}")))
        finally:
            self._settle(handle, machine)

    def _settle(self, handle: TurnHandle, machine: ResponseStateMachine) -> None:
        """Release the live slot and resolve the handle.

        Also runs as the task's done callback, which covers a task cancelled
        before it first ran.
        """
        if self._live is handle:
            self._live = None
        if not machine.is_terminal:
            handle.cell.set(machine.fail(CancellationError(handle.abort_reason or "Request cancelled")))
        if not handle.done():
            handle.set_result(machine.state)

    async def _stream(
        self,
        request: ChatRequest,
        machine: ResponseStateMachine,
        cell: StateCell[ResponseState],
    ) -> None:
        async with self._client.stream(
            "POST",
            self._endpoint,
            json=request.to_payload(),
            headers=REQUEST_HEADERS,
        ) as response:
            if not response.is_success:
                raise TransportError(f"HTTP {response.status_code}")

            content_type = response.headers.get("content-type", "")
            if EVENT_STREAM_CONTENT_TYPE not in content_type:
                self._debug("warning", f"Unexpected content type: {content_type or 'none'}")
            self._debug("debug", f"Connected: HTTP {response.status_code}")

            decoder = SSEDecoder(debug_callback=self._debug_callback)
            async with (
                aclosing(decoder.decode(response.aiter_bytes())) as records,
                aclosing(interpret(records, self._debug_callback)) as chunks,
            ):
                async for chunk in chunks:
                    cell.set(machine.apply(chunk))
                    if machine.is_terminal:
                        return

        raise TransportError("Connection closed before the response completed")

    async def ping(self) -> int:
        """Check that the endpoint answers HTTP.

        Any status counts as reachable; the chat route may reject HEAD.

        Returns:
            The HTTP status code

        Raises:
            TransportError: If no HTTP response was received
        """
        try:
            response = await self._client.head(self._endpoint)
        except httpx.HTTPError as e:
            raise TransportError(_describe_http_error(e)) from e
        self._debug("debug", f"Ping: HTTP {response.status_code}")
        return response.status_code

    async def close(self) -> None:
        """Abort any live turn and close the HTTP client if we created it."""
        if self._live is not None:
            self._live.abort("Client closed")
            task = self._live.background_task
            if task is not None:
                await asyncio.gather(task, return_exceptions=True)
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "ChatStreamClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup."""
        await self.close()


def _describe_http_error(error: httpx.HTTPError) -> str:
    """Turn an httpx error into a short human-readable message."""
    if isinstance(error, httpx.TimeoutException):
        return f"Timed out: {error}" if str(error) else "Timed out"
    if isinstance(error, httpx.ConnectError):
        return f"Could not connect: {error}" if str(error) else "Could not connect"
    if isinstance(error, httpx.RemoteProtocolError):
        return f"Connection dropped: {error}" if str(error) else "Connection dropped"
    return str(error) or type(error).__name__
