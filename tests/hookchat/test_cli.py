"""Tests for hookchat CLI."""

import httpx
import pytest
from typer.testing import CliRunner

from hookchat import __version__
from hookchat.cli import app
from hookchat.exceptions import ERROR_MESSAGES, ErrorKind
from hookchat.webhook import WebhookClient

runner = CliRunner()


@pytest.fixture(autouse=True)
def cli_env(monkeypatch, tmp_path):
    monkeypatch.setenv("HOOKCHAT_STATE_FILE", str(tmp_path / "state.json"))
    monkeypatch.delenv("HOOKCHAT_WEBHOOK_URL", raising=False)
    monkeypatch.delenv("HOOKCHAT_RESTORE_SESSION", raising=False)
    monkeypatch.delenv("HOOKCHAT_WELCOME_MESSAGE", raising=False)


@pytest.fixture
def endpoint(monkeypatch, recorder):
    """Route CLI webhook calls through a scripted mock endpoint."""

    def install(*replies):
        handler = recorder(*replies)

        def create_client(settings):
            return WebhookClient(
                settings.webhook_url or "https://example.app.n8n.cloud/webhook/chat",
                headers=settings.headers,
                transport=httpx.MockTransport(handler),
            )

        monkeypatch.setattr("hookchat.cli.create_client", create_client)
        return handler

    return install


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_help() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "chat" in result.output
    assert "send" in result.output


def test_send_without_url_fails() -> None:
    result = runner.invoke(app, ["send", "hello"])
    assert result.exit_code == 1
    assert "No webhook URL configured" in result.output


def test_send_prints_reply(endpoint) -> None:
    handler = endpoint(httpx.Response(200, json={"output": "Hi from the workflow"}))
    result = runner.invoke(app, ["send", "Hello", "--url", "https://example.app.n8n.cloud/webhook/x"])
    assert result.exit_code == 0
    assert "Hi from the workflow" in result.output
    assert handler.bodies[0]["chatInput"] == "Hello"


def test_send_reuses_stored_session(endpoint) -> None:
    handler = endpoint(httpx.Response(200, json={"response": "ok"}))
    runner.invoke(app, ["send", "one", "--url", "https://example.app.n8n.cloud/webhook/x"])
    runner.invoke(app, ["send", "two", "--url", "https://example.app.n8n.cloud/webhook/x"])
    assert handler.bodies[0]["sessionId"] == handler.bodies[1]["sessionId"]


def test_send_error_exits_nonzero(endpoint) -> None:
    endpoint(httpx.Response(404))
    result = runner.invoke(app, ["send", "Hello", "--url", "https://example.app.n8n.cloud/webhook/x"])
    assert result.exit_code == 1
    assert "could not be found" in result.output
    assert ERROR_MESSAGES[ErrorKind.NOT_FOUND].startswith("The chat service could not be found")


def test_send_blank_message() -> None:
    result = runner.invoke(app, ["send", "   "])
    assert result.exit_code == 1
    assert "empty" in result.output


def test_chat_loop(endpoint) -> None:
    handler = endpoint(httpx.Response(200, json={"response": "Hi there"}))
    result = runner.invoke(
        app,
        ["chat", "--url", "https://example.app.n8n.cloud/webhook/x"],
        input="Hello\n/quit\n",
    )
    assert result.exit_code == 0
    assert "Hi there" in result.output
    assert len(handler.requests) == 1


def test_session_show_and_reset() -> None:
    shown = runner.invoke(app, ["session"])
    assert shown.exit_code == 0
    assert "session_" in shown.output

    again = runner.invoke(app, ["session"])
    token = [line for line in shown.output.splitlines() if "Session:" in line][0]
    assert token in again.output

    reset = runner.invoke(app, ["session", "--reset"])
    assert reset.exit_code == 0
    assert "cleared" in reset.output

    reset_again = runner.invoke(app, ["session", "--reset"])
    assert "No stored session token" in reset_again.output


def test_send_reply_that_reads_like_an_error_exits_zero(endpoint) -> None:
    endpoint(httpx.Response(200, json={"response": ERROR_MESSAGES[ErrorKind.UNKNOWN]}))
    result = runner.invoke(app, ["send", "Hello", "--url", "https://example.app.n8n.cloud/webhook/x"])
    assert result.exit_code == 0
    assert "something went wrong" in result.output


def test_session_reset_recovers_corrupt_state_file(tmp_path) -> None:
    state_file = tmp_path / "state.json"
    state_file.write_text("{half-written")

    reset = runner.invoke(app, ["session", "--reset"])
    assert reset.exit_code == 0
    assert "cleared" in reset.output
    assert not state_file.exists()

    shown = runner.invoke(app, ["session"])
    assert "not persisted" not in shown.output
    assert state_file.exists()
