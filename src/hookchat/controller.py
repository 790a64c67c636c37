"""Conversation controller.

Two-state machine (IDLE, PENDING) that turns submitted text into a webhook
round trip and records both sides in the transcript. At most one request
is in flight per controller: the guard runs, the user message is appended
and the state flips to PENDING before the first await, so a concurrent
submit on the same event loop always sees PENDING.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from enum import Enum

from hookchat.exceptions import (
    ERROR_MESSAGES,
    AlreadyPendingError,
    EmptyInputError,
    ErrorKind,
    SubmitRejected,
    WebhookError,
)
from hookchat.models import Message, Session
from hookchat.session import SessionIdentityManager
from hookchat.transcript import Transcript
from hookchat.webhook import WebhookClient, WebhookResult

logger = logging.getLogger(__name__)

Listener = Callable[["ConversationController"], None]


class ConversationState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"


class ConversationController:
    """Owns the transcript and the busy flag of one conversation.

    Remote failures never escape: they become assistant messages carrying the
    fixed sentence for their ErrorKind.
    """

    def __init__(
        self,
        client: WebhookClient,
        sessions: SessionIdentityManager,
        *,
        transcript: Transcript | None = None,
        restore_session: bool = False,
        welcome_message: str | None = None,
        deadline: float | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            client: Webhook client used for every request
            sessions: Session identity manager providing the token
            transcript: Transcript to append to (a new one by default)
            restore_session: Run the loadPreviousSession flow in start()
            welcome_message: Assistant greeting appended when nothing was restored
            deadline: Seconds to wait for a reply before failing as unreachable
        """
        self.client = client
        self.sessions = sessions
        self.transcript = transcript if transcript is not None else Transcript()
        self.restore_session = restore_session
        self.welcome_message = welcome_message
        self.deadline = deadline
        self.draft = ""
        self.last_error: ErrorKind | None = None
        self._state = ConversationState.IDLE
        self._started = False
        self._listeners: list[Listener] = []

    @property
    def state(self) -> ConversationState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._state is ConversationState.PENDING

    @property
    def session(self) -> Session:
        return self.sessions.init()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener whenever the visible conversation changes.

        A submit notifies twice: on entering PENDING with the user message
        appended, and on settling with the reply appended and the state back
        to IDLE. start() notifies for each restore transition and each
        restored or welcome message.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def _set_state(self, state: ConversationState) -> None:
        self._state = state
        self._notify()

    def _append(self, message: Message) -> None:
        self.transcript.append(message)
        self._notify()

    async def start(self) -> Session:
        """Initialize the session and seed the transcript. Runs once."""
        session = self.sessions.init()
        if self._started:
            return session
        self._started = True

        restored: list[Message] = []
        if self.restore_session:
            self._set_state(ConversationState.PENDING)
            try:
                restored = await self.sessions.load_previous_session(
                    self.client, session.session_id
                )
            finally:
                self._set_state(ConversationState.IDLE)

        for message in restored:
            self._append(message)
        if not restored and self.welcome_message:
            self._append(Message.assistant(self.welcome_message))
        return session

    def _check_submit(self, text: str) -> str:
        trimmed = text.strip()
        if not trimmed:
            raise EmptyInputError()
        if self._state is ConversationState.PENDING:
            raise AlreadyPendingError()
        return trimmed

    async def submit(self, text: str | None = None) -> bool:
        """Send text (or the current draft) and wait for the reply to settle.

        Cancelling the call (directly or through an outer timeout) settles
        the exchange as NETWORK_UNREACHABLE before the cancellation
        propagates, so the controller is always back to IDLE afterwards.

        Returns:
            False if the submit was ignored (empty input or a request is
            already pending), True once the reply or error is in the transcript
        """
        if text is None:
            text = self.draft
        try:
            trimmed = self._check_submit(text)
        except SubmitRejected as e:
            logger.debug("Submit ignored: %s", e)
            return False

        session_id = self.sessions.get_or_create_session_id()
        self.last_error = None
        self.transcript.append(Message.user(trimmed))
        self.draft = ""
        self._state = ConversationState.PENDING
        try:
            self._notify()
            reply, error = await self._exchange(session_id, trimmed)
        except asyncio.CancelledError:
            logger.warning("Message exchange cancelled before a reply arrived")
            self._settle(ERROR_MESSAGES[ErrorKind.NETWORK_UNREACHABLE], ErrorKind.NETWORK_UNREACHABLE)
            raise
        finally:
            self._state = ConversationState.IDLE
        self._settle(reply, error)
        return True

    async def _exchange(self, session_id: str, text: str) -> tuple[str, ErrorKind | None]:
        try:
            result = await self._call(session_id, text)
        except WebhookError as e:
            return e.user_message, e.kind
        except Exception:
            logger.exception("Unexpected failure while sending message")
            return ERROR_MESSAGES[ErrorKind.UNKNOWN], ErrorKind.UNKNOWN
        return result.reply.text, None

    async def _call(self, session_id: str, text: str) -> WebhookResult:
        call = self.client.send_message(session_id, text)
        if self.deadline is None:
            return await call
        try:
            return await asyncio.wait_for(call, timeout=self.deadline)
        except asyncio.TimeoutError as e:
            logger.warning("No webhook reply within %ss", self.deadline)
            raise WebhookError(
                ErrorKind.NETWORK_UNREACHABLE,
                f"no reply within {self.deadline}s",
                cause=e,
            ) from e

    def _settle(self, text: str, error: ErrorKind | None) -> None:
        self.transcript.append(Message.assistant(text))
        self.last_error = error
        self._set_state(ConversationState.IDLE)
