"""hookchat exception hierarchy.

Usage:
    from hookchat.exceptions import WebhookError, ErrorKind

    try:
        result = await client.send(WebhookAction.SEND_MESSAGE, session_id, "hi")
    except WebhookError as e:
        print(e.user_message)
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Closed classification of webhook failures."""

    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"
    CORS_BLOCKED = "cors_blocked"
    NETWORK_UNREACHABLE = "network_unreachable"
    UNKNOWN = "unknown"


ERROR_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.NOT_FOUND: (
        "The chat service could not be found (404). The webhook URL may be misconfigured."
    ),
    ErrorKind.SERVER_ERROR: (
        "The chat service ran into a problem while handling your message. Please try again later."
    ),
    ErrorKind.CORS_BLOCKED: (
        "The request was blocked by a cross-origin (CORS) policy. "
        "The webhook must allow requests from this client."
    ),
    ErrorKind.NETWORK_UNREACHABLE: (
        "Unable to reach the chat service. Please check your network connection."
    ),
    ErrorKind.UNKNOWN: "Sorry, something went wrong. Please try again.",
}


class HookchatError(Exception):
    """Base exception for all hookchat errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(HookchatError):
    """Invalid or missing configuration, e.g. no webhook URL."""

    pass


class StorageError(HookchatError):
    """Durable token storage could not be read or written."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class CorruptStateError(StorageError):
    """The state file exists but does not hold a JSON object."""

    pass


class WebhookError(HookchatError):
    """A webhook call failed and was classified.

    Attributes:
        kind: Classification of the failure
        status_code: HTTP status when the endpoint answered, else None
        cause: Underlying exception, if any
    """

    def __init__(
        self,
        kind: ErrorKind,
        detail: str = "",
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.kind = kind
        self.status_code = status_code
        self.cause = cause
        message = f"Webhook call failed ({kind.value})"
        if detail:
            message += f": {detail}"
        super().__init__(message)

    @property
    def user_message(self) -> str:
        """Fixed sentence shown in the transcript for this failure."""
        return ERROR_MESSAGES[self.kind]


class SubmitRejected(HookchatError):
    """A submit was refused by the controller guard. Never shown to users."""

    pass


class EmptyInputError(SubmitRejected):
    """Submitted text was empty or whitespace-only."""

    def __init__(self) -> None:
        super().__init__("Input is empty")


class AlreadyPendingError(SubmitRejected):
    """A request is already in flight for this conversation."""

    def __init__(self) -> None:
        super().__init__("A request is already pending")
