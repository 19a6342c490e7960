"""Unit tests for the CLI commands and configuration layer."""
import asyncio
import json
import os
import signal
import sys
import time

import httpx
import pytest
import typer
from typer.testing import CliRunner

from conftest import TEST_ENDPOINT, FakeChatServer, ScriptedStream, sse
from wxve_chat.cli import app as cli_app
from wxve_chat.cli.app import app
from wxve_chat.cli.providers import get_client, get_endpoint, get_timeouts
from wxve_chat.client import DEFAULT_ENDPOINT, ChatStreamClient

runner = CliRunner()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove wxve-chat settings from the environment."""
    for name in (
        "WXVE_CHAT_ENDPOINT",
        "WXVE_CHAT_TIMEOUT",
        "WXVE_CHAT_CONNECT_TIMEOUT",
        "WXVE_CHAT_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestProviders:
    """Tests for the environment-driven factories."""

    def test_defaults(self, clean_env):
        """Test the defaults when nothing is configured."""
        assert get_endpoint() == DEFAULT_ENDPOINT
        assert get_timeouts() == (300.0, 10.0)

    def test_overrides(self, clean_env):
        """Test reading values from the environment."""
        clean_env.setenv("WXVE_CHAT_ENDPOINT", "http://localhost:8000/chat")
        clean_env.setenv("WXVE_CHAT_TIMEOUT", "60")
        clean_env.setenv("WXVE_CHAT_CONNECT_TIMEOUT", "2.5")

        assert get_endpoint() == "http://localhost:8000/chat"
        assert get_timeouts() == (60.0, 2.5)

    @pytest.mark.parametrize("value", ["soon", "0", "-5"])
    def test_invalid_timeout_exits(self, clean_env, value: str):
        """Test that a bad timeout stops with exit code 1."""
        clean_env.setenv("WXVE_CHAT_TIMEOUT", value)

        with pytest.raises(typer.Exit) as exc_info:
            get_timeouts()

        assert exc_info.value.exit_code == 1

    def test_invalid_endpoint_exits(self, clean_env):
        """Test that a non-http endpoint stops with exit code 1."""
        clean_env.setenv("WXVE_CHAT_ENDPOINT", "ftp://api.wxve.io/chat")

        with pytest.raises(typer.Exit) as exc_info:
            get_client()

        assert exc_info.value.exit_code == 1


class TestCommands:
    """Tests for command-level validation."""

    def test_unknown_log_level(self, clean_env):
        """Test that an unknown log level is rejected before connecting."""
        result = runner.invoke(app, ["chat", "--log-level", "verbose"])

        assert result.exit_code == 1
        assert "Unknown log level" in result.output

    def test_health_with_invalid_endpoint(self, clean_env):
        """Test that health reports a bad endpoint with exit code 1."""
        clean_env.setenv("WXVE_CHAT_ENDPOINT", "ftp://api.wxve.io/chat")

        result = runner.invoke(app, ["health"])

        assert result.exit_code == 1
        assert "ftp://api.wxve.io/chat" in result.output


def send_sigint() -> None:
    os.kill(os.getpid(), signal.SIGINT)


def scripted_input(monkeypatch, *answers):
    """Replace the chat prompt with scripted answers.

    A callable answer is called in place of reading; an exception is raised.
    """
    pending = list(answers)

    def _input(prompt=""):
        answer = pending.pop(0)
        if isinstance(answer, BaseException):
            raise answer
        if callable(answer):
            return answer()
        return answer

    monkeypatch.setattr(cli_app.console, "input", _input)


def serve_with(monkeypatch, handler) -> None:
    """Point the chat command at a mock transport."""
    def _get_client(console=None, debug_callback=None):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return ChatStreamClient(
            endpoint=TEST_ENDPOINT,
            http_client=http_client,
            debug_callback=debug_callback,
        )

    monkeypatch.setattr(cli_app, "get_client", _get_client)


@pytest.mark.skipif(sys.platform == "win32", reason="needs POSIX signals")
class TestChatInterrupt:
    """Tests for Ctrl+C in the interactive chat."""

    def test_ctrl_c_at_prompt_exits(self, clean_env):
        """Test that Ctrl+C while waiting for input ends the chat without sending."""
        server = FakeChatServer(sse({"type": "text", "content": "Hello there"}, {"type": "done"}))
        serve_with(clean_env, server)

        def interrupted():
            send_sigint()
            time.sleep(1)
            return "What is AMZN doing?"

        scripted_input(clean_env, interrupted)

        result = runner.invoke(app, ["chat"])

        assert result.exit_code == 0
        assert "Goodbye!" in result.output
        assert server.requests == []

    def test_ctrl_c_while_streaming_cancels_only_the_turn(self, clean_env):
        """Test that Ctrl+C mid-response cancels it and the chat keeps going."""
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if len(requests) == 1:
                body = ScriptedStream([
                    sse({"type": "text", "content": "Hi"}),
                    send_sigint,
                    asyncio.Event(),
                ])
            else:
                body = ScriptedStream([
                    sse({"type": "text", "content": "Hello there"}, {"type": "done"}),
                ])
            return httpx.Response(200, headers={"content-type": "text/event-stream"}, stream=body)

        serve_with(clean_env, handler)
        scripted_input(clean_env, "What is AMZN doing?", "And MSFT?", EOFError())

        result = runner.invoke(app, ["chat"])

        assert result.exit_code == 0
        assert "Cancelled" in result.output
        assert "Hello there" in result.output
        assert "Goodbye!" in result.output
        assert len(requests) == 2
        assert json.loads(requests[1].content)["history"] == []
