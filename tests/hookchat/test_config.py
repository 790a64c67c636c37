"""Tests for ChatSettings environment loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from hookchat.config import ChatSettings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in [
        "HOOKCHAT_WEBHOOK_URL",
        "HOOKCHAT_HEADERS",
        "HOOKCHAT_RESTORE_SESSION",
        "HOOKCHAT_STATE_FILE",
        "HOOKCHAT_REQUEST_DEADLINE",
        "HOOKCHAT_WELCOME_MESSAGE",
    ]:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    settings = ChatSettings()
    assert settings.webhook_url is None
    assert settings.headers == {"Content-Type": "application/json", "Accept": "*/*"}
    assert settings.restore_session is False
    assert settings.session_key == "hookchat.sessionId"
    assert settings.request_deadline is None
    assert settings.state_file == Path("~/.hookchat/state.json")


def test_loads_from_env(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("HOOKCHAT_WEBHOOK_URL", "https://example.app.n8n.cloud/webhook/AskWindsor")
    monkeypatch.setenv("HOOKCHAT_RESTORE_SESSION", "true")
    monkeypatch.setenv("HOOKCHAT_STATE_FILE", str(tmp_path / "state.json"))
    monkeypatch.setenv("HOOKCHAT_REQUEST_DEADLINE", "30")
    monkeypatch.setenv("HOOKCHAT_HEADERS", '{"Content-Type": "application/json", "Accept": "*/*", "X-Key": "1"}')

    settings = ChatSettings()

    assert settings.webhook_url.endswith("/AskWindsor")
    assert settings.restore_session is True
    assert settings.state_file == tmp_path / "state.json"
    assert settings.request_deadline == 30.0
    assert settings.headers["X-Key"] == "1"


def test_deadline_must_be_positive(monkeypatch) -> None:
    monkeypatch.setenv("HOOKCHAT_REQUEST_DEADLINE", "0")
    with pytest.raises(ValidationError):
        ChatSettings()
