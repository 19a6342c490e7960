"""Pytest configuration and shared fixtures."""
import asyncio
import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from wxve_chat.client import ChatStreamClient

TEST_ENDPOINT = "https://chat.test/chat"


def sse(*payloads: dict[str, Any]) -> bytes:
    """Encode chunk payloads as event-stream data records."""
    return "".join(f"data: {json.dumps(payload)}\n\n" for payload in payloads).encode()


class ScriptedStream(httpx.AsyncByteStream):
    """Response body that plays back scripted fragments.

    An asyncio.Event in the script pauses the body until it is set; an
    exception in the script is raised at that point of the body; a callable
    is called there.
    """

    def __init__(self, fragments: list[Any]):
        self.fragments = fragments
        self.closed = False
        self.yielded = 0

    async def __aiter__(self):
        for fragment in self.fragments:
            if isinstance(fragment, asyncio.Event):
                await fragment.wait()
            elif isinstance(fragment, BaseException):
                raise fragment
            elif callable(fragment):
                fragment()
            else:
                self.yielded += 1
                yield fragment

    async def aclose(self) -> None:
        self.closed = True


class FakeChatServer:
    """MockTransport handler serving one scripted response per request."""

    def __init__(
        self,
        *fragments: Any,
        status_code: int = 200,
        content_type: str = "text/event-stream",
    ):
        self.fragments = list(fragments)
        self.status_code = status_code
        self.content_type = content_type
        self.requests: list[httpx.Request] = []
        self.streams: list[ScriptedStream] = []

    @property
    def stream(self) -> ScriptedStream:
        """Body of the most recent response."""
        return self.streams[-1]

    def payload(self, index: int = -1) -> dict[str, Any]:
        """Decoded JSON body of a received request."""
        return json.loads(self.requests[index].content)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        stream = ScriptedStream(self.fragments)
        self.streams.append(stream)
        return httpx.Response(
            self.status_code,
            headers={"content-type": self.content_type},
            stream=stream,
        )


class LogRecorder:
    """Debug callback that keeps every entry."""

    def __init__(self):
        self.entries: list[tuple[str, str, str]] = []

    def __call__(self, level: str, component: str, message: str) -> None:
        self.entries.append((level, component, message))

    def at(self, level: str) -> list[str]:
        return [message for lvl, _, message in self.entries if lvl == level]


@pytest.fixture
def log_recorder():
    """Return a debug callback that records entries."""
    return LogRecorder()


@pytest.fixture
async def make_client():
    """Return a factory for clients backed by a mock transport."""
    opened: list[tuple[ChatStreamClient, httpx.AsyncClient]] = []

    def _make(handler: Callable[[httpx.Request], Any], **kwargs: Any) -> ChatStreamClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client = ChatStreamClient(endpoint=TEST_ENDPOINT, http_client=http_client, **kwargs)
        opened.append((client, http_client))
        return client

    yield _make

    for client, http_client in opened:
        await client.close()
        await http_client.aclose()


@pytest.fixture
def amzn_chunks():
    """Return the chunk payloads of a turn that uses one tool."""
    return [
        {"type": "text", "content": "AMZN"},
        {"type": "tool_start", "name": "getSecurityStructures"},
        {"type": "tool_end", "name": "getSecurityStructures"},
        {"type": "text", "content": " in wave 3..."},
        {"type": "done"},
    ]
