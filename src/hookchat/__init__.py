"""hookchat - conversational client for workflow-automation webhooks.

Keeps a linear transcript, a durable session token, and exchanges messages
with a remote webhook, normalizing its replies into display text.
"""

__version__ = "0.1.0"

from hookchat.controller import ConversationController, ConversationState
from hookchat.exceptions import (
    ERROR_MESSAGES,
    AlreadyPendingError,
    ConfigurationError,
    CorruptStateError,
    EmptyInputError,
    ErrorKind,
    HookchatError,
    StorageError,
    SubmitRejected,
    WebhookError,
)
from hookchat.models import (
    FALLBACK_TEXT,
    FallbackReply,
    Message,
    NormalizedReply,
    Origin,
    Session,
    TextReply,
)
from hookchat.session import SessionIdentityManager, generate_session_id
from hookchat.storage import FileTokenStore, MemoryTokenStore, TokenStore
from hookchat.transcript import Transcript
from hookchat.webhook import (
    WebhookAction,
    WebhookClient,
    WebhookResult,
    build_payload,
    classify_error,
    normalize_response,
    parse_history,
)

__all__ = [
    # Controller
    "ConversationController",
    "ConversationState",
    # Data types
    "FALLBACK_TEXT",
    "FallbackReply",
    "Message",
    "NormalizedReply",
    "Origin",
    "Session",
    "TextReply",
    "Transcript",
    # Session
    "SessionIdentityManager",
    "generate_session_id",
    "TokenStore",
    "FileTokenStore",
    "MemoryTokenStore",
    # Webhook
    "WebhookAction",
    "WebhookClient",
    "WebhookResult",
    "build_payload",
    "classify_error",
    "normalize_response",
    "parse_history",
    # Errors
    "ERROR_MESSAGES",
    "ErrorKind",
    "HookchatError",
    "ConfigurationError",
    "StorageError",
    "CorruptStateError",
    "WebhookError",
    "SubmitRejected",
    "EmptyInputError",
    "AlreadyPendingError",
]
