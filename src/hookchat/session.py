"""Session identity management.

The session token is the only process-wide conversation state. It lives in
SessionIdentityManager; every other component receives it by parameter.
"""

import logging
import secrets
import string
import time

from hookchat.exceptions import HookchatError, StorageError
from hookchat.models import Message, Session
from hookchat.storage import MemoryTokenStore, TokenStore
from hookchat.webhook import WebhookClient

logger = logging.getLogger(__name__)

DEFAULT_SESSION_KEY = "hookchat.sessionId"
TOKEN_PREFIX = "session"
SUFFIX_LENGTH = 9
_ALPHABET = string.ascii_lowercase + string.digits


def generate_session_id() -> str:
    """Create an opaque token: prefix, wall-clock millis, random suffix."""
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"{TOKEN_PREFIX}_{int(time.time() * 1000)}_{suffix}"


class SessionIdentityManager:
    """Creates, loads and persists the durable session token.

    If the store fails, the session falls back to memory for the rest of
    the process and is reported as not persisted.
    """

    def __init__(self, store: TokenStore | None = None, key: str = DEFAULT_SESSION_KEY):
        """Initialize session manager.

        Args:
            store: Durable storage (defaults to an in-memory store)
            key: Namespaced key the token is stored under
        """
        self.store: TokenStore = store if store is not None else MemoryTokenStore()
        self.key = key
        self._session: Session | None = None

    @property
    def session(self) -> Session:
        if self._session is None:
            raise HookchatError("Session not initialized; call init() first")
        return self._session

    @property
    def initialized(self) -> bool:
        return self._session is not None

    def init(self) -> Session:
        """Load the stored session or create one. Idempotent."""
        if self._session is not None:
            return self._session

        try:
            token = self.store.get(self.key)
        except StorageError as e:
            # a corrupt file is overwritten by the new token below
            logger.warning("Could not read stored session, starting a new one: %s", e)
            token = None

        if token:
            logger.debug("Loaded session %s", token)
            self._session = Session(session_id=token)
            return self._session

        token = generate_session_id()
        persisted = True
        try:
            self.store.set(self.key, token)
        except StorageError as e:
            logger.warning("Could not persist session token, keeping it in memory: %s", e)
            persisted = False
        logger.debug("Created session %s (persisted=%s)", token, persisted)
        self._session = Session(session_id=token, persisted=persisted)
        return self._session

    def get_or_create_session_id(self) -> str:
        return self.init().session_id

    def reset(self) -> bool:
        """Forget the stored token and the in-process session.

        Returns:
            True if a stored token was removed
        """
        self._session = None
        try:
            return self.store.delete(self.key)
        except StorageError as e:
            logger.warning("Could not clear session storage: %s", e)
            return False

    async def load_previous_session(
        self, client: WebhookClient, session_id: str | None = None
    ) -> list[Message]:
        """Best-effort restore of earlier messages.

        Any failure is logged and yields an empty list; it is never shown
        to the user.
        """
        session_id = session_id or self.get_or_create_session_id()
        try:
            messages = await client.load_session(session_id)
        except HookchatError as e:
            logger.warning("Could not restore session %s: %s", session_id, e)
            return []
        except (TypeError, ValueError) as e:
            logger.warning("Malformed session history for %s: %s", session_id, e)
            return []
        logger.info("Restored %d messages for session %s", len(messages), session_id)
        return messages
