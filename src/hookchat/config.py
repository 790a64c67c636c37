"""Client configuration with environment variable support.

Example:
    ```bash
    export HOOKCHAT_WEBHOOK_URL=https://example.app.n8n.cloud/webhook/chat
    export HOOKCHAT_RESTORE_SESSION=true
    export HOOKCHAT_HEADERS='{"Content-Type": "application/json", "Accept": "*/*"}'
    ```

    ```python
    settings = ChatSettings()  # Loads from env vars
    ```
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from hookchat.session import DEFAULT_SESSION_KEY
from hookchat.webhook import DEFAULT_HEADERS


class ChatSettings(BaseSettings):
    """Deployment configuration for one webhook conversation client."""

    webhook_url: str | None = Field(
        default=None,
        description="Workflow webhook endpoint"
    )
    headers: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_HEADERS),
        description="Headers sent with every webhook request"
    )
    restore_session: bool = Field(
        default=False,
        description="Ask the webhook for earlier messages on start (loadPreviousSession)"
    )
    state_file: Path = Field(
        default=Path("~/.hookchat/state.json"),
        description="JSON file holding the session token"
    )
    session_key: str = Field(
        default=DEFAULT_SESSION_KEY,
        description="Key the session token is stored under"
    )
    welcome_message: str | None = Field(
        default=None,
        description="Assistant greeting shown when no history was restored"
    )
    request_deadline: float | None = Field(
        default=None,
        gt=0,
        description="Seconds before a pending request is failed as unreachable"
    )
    code_theme: str = Field(
        default="monokai",
        description="Pygments theme for code blocks in replies"
    )
    log_level: Literal["debug", "info", "warning", "error", "critical"] = Field(
        default="warning",
        description="Logging level"
    )

    model_config = SettingsConfigDict(
        env_prefix="HOOKCHAT_",
        case_sensitive=False,
        env_nested_delimiter="__",
    )
