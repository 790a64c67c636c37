"""Webhook protocol client.

Sends one message (or a session-restore request) to a workflow-automation
webhook and turns whatever JSON comes back into display text. Reply shapes
differ between workflow deployments, so the reply text is looked up in a
fixed, ordered list of candidate fields.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict

from hookchat.exceptions import ErrorKind, WebhookError
from hookchat.models import FallbackReply, Message, NormalizedReply, Origin, TextReply

logger = logging.getLogger(__name__)

RESPONSE_FIELDS: tuple[str, ...] = ("response", "output", "text", "message")

DEFAULT_HEADERS: dict[str, str] = {
    "Content-Type": "application/json",
    "Accept": "*/*",
}


class WebhookAction(str, Enum):
    """Action discriminator sent in every request body."""

    SEND_MESSAGE = "sendMessage"
    LOAD_SESSION = "loadPreviousSession"


class WebhookResult(BaseModel):
    """Normalized reply plus the decoded body it came from."""

    model_config = ConfigDict(frozen=True)

    reply: NormalizedReply
    body: Any = None

    @property
    def text(self) -> str:
        return self.reply.text


def iso_timestamp(now: datetime | None = None) -> str:
    """UTC ISO-8601 timestamp with millisecond precision and a Z suffix."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def build_payload(
    action: WebhookAction,
    session_id: str,
    text: str | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Build the JSON request body.

    The field names are read by name in the remote workflow. The message is
    sent twice (chatInput and message) for workflows built against either.
    """
    payload: dict[str, Any] = {
        "action": action.value,
        "sessionId": session_id,
    }
    if action is WebhookAction.SEND_MESSAGE:
        payload["chatInput"] = text or ""
        payload["message"] = text or ""
    payload["timestamp"] = iso_timestamp(now)
    return payload


def _first_object(body: Any) -> dict[str, Any] | None:
    # Workflows answering "all incoming items" wrap the object in a list
    if isinstance(body, list):
        body = next((item for item in body if isinstance(item, dict)), None)
    return body if isinstance(body, dict) else None


def normalize_response(body: Any) -> NormalizedReply:
    """Pick the reply text from a decoded response body.

    First present, non-empty string among RESPONSE_FIELDS wins; otherwise
    the fallback reply.
    """
    data = _first_object(body)
    if data is not None:
        for field in RESPONSE_FIELDS:
            value = data.get(field)
            if isinstance(value, str) and value.strip():
                return TextReply(text=value)
    return FallbackReply()


def classify_error(
    error: BaseException | None = None,
    status_code: int | None = None,
) -> ErrorKind:
    """Map a failed call to an ErrorKind.

    Best-effort: HTTP status first, then the transport error's type and
    message.
    """
    if status_code is not None:
        if status_code == 404:
            return ErrorKind.NOT_FOUND
        if 500 <= status_code < 600:
            return ErrorKind.SERVER_ERROR
        return ErrorKind.UNKNOWN

    if error is None:
        return ErrorKind.UNKNOWN

    description = str(error).lower()
    if "cors" in description or "cross-origin" in description:
        return ErrorKind.CORS_BLOCKED
    if "failed to fetch" in description or "networkerror" in description:
        return ErrorKind.NETWORK_UNREACHABLE
    if isinstance(error, (httpx.TransportError, TimeoutError, ConnectionError)):
        return ErrorKind.NETWORK_UNREACHABLE
    return ErrorKind.UNKNOWN


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return datetime.now(timezone.utc)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return datetime.now(timezone.utc)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    return datetime.now(timezone.utc)


def parse_history(body: Any) -> list[Message]:
    """Read restored messages from a loadPreviousSession reply.

    Expects ``{"messages": [{"text"|"content", "role"|"sender", "timestamp"}]}``.
    Entries without text are skipped.
    """
    data = _first_object(body)
    if data is None:
        return []
    entries = data.get("messages")
    if not isinstance(entries, list):
        return []

    messages: list[Message] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        text = entry.get("text") or entry.get("content")
        if not isinstance(text, str) or not text.strip():
            continue
        from_user = entry.get("role") == "user" or entry.get("sender") == "user"
        messages.append(
            Message(
                text=text,
                origin=Origin.USER if from_user else Origin.ASSISTANT,
                created_at=_parse_timestamp(entry.get("timestamp")),
            )
        )
    return messages


class WebhookClient:
    """Stateless request/response client for a single webhook endpoint.

    Usage:
        async with WebhookClient("https://example.app.n8n.cloud/webhook/chat") as client:
            result = await client.send(WebhookAction.SEND_MESSAGE, session_id, "Hello")
            print(result.text)
    """

    def __init__(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            url: Webhook endpoint
            headers: Request headers (defaults to JSON content type, accept any)
            http_client: Shared client; not closed by this instance
            transport: Custom transport for a client created here (tests use
                httpx.MockTransport)

        Raises:
            ValueError: Both http_client and transport were given
        """
        if http_client is not None and transport is not None:
            raise ValueError("Pass either http_client or transport, not both")
        self.url = url
        self.headers = dict(headers) if headers is not None else dict(DEFAULT_HEADERS)
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(transport=transport, timeout=None)

    async def send(
        self,
        action: WebhookAction,
        session_id: str,
        text: str | None = None,
    ) -> WebhookResult:
        """Make exactly one webhook call.

        Raises:
            WebhookError: Transport failure, non-success status, or a body
                that is not JSON
        """
        payload = build_payload(action, session_id, text)
        logger.debug("POST %s action=%s session=%s", self.url, action.value, session_id)

        try:
            response = await self._client.post(self.url, json=payload, headers=self.headers)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            kind = classify_error(e)
            logger.warning("Webhook transport failure (%s): %s", kind.value, e)
            raise WebhookError(kind, str(e), cause=e) from e

        if not response.is_success:
            kind = classify_error(status_code=response.status_code)
            logger.warning("Webhook returned HTTP %s (%s)", response.status_code, kind.value)
            raise WebhookError(
                kind, f"HTTP {response.status_code}", status_code=response.status_code
            )

        try:
            body = response.json()
        except ValueError as e:
            logger.warning("Webhook returned a non-JSON body")
            raise WebhookError(
                ErrorKind.UNKNOWN,
                "response body is not JSON",
                status_code=response.status_code,
                cause=e,
            ) from e

        return WebhookResult(reply=normalize_response(body), body=body)

    async def send_message(self, session_id: str, text: str) -> WebhookResult:
        return await self.send(WebhookAction.SEND_MESSAGE, session_id, text)

    async def load_session(self, session_id: str) -> list[Message]:
        """Fetch earlier messages of a session. Raises WebhookError on failure."""
        result = await self.send(WebhookAction.LOAD_SESSION, session_id)
        return parse_history(result.body)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "WebhookClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
