"""Conversation data types."""

from datetime import datetime, timezone
from enum import Enum
from typing import Literal, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

FALLBACK_TEXT = "Sorry, I could not process your request."


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Origin(str, Enum):
    """Who authored a message."""

    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """One transcript entry. Frozen once created."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    text: str
    origin: Origin
    created_at: datetime = Field(default_factory=_now)

    @property
    def is_user(self) -> bool:
        return self.origin is Origin.USER

    @classmethod
    def user(cls, text: str) -> "Message":
        return cls(text=text, origin=Origin.USER)

    @classmethod
    def assistant(cls, text: str) -> "Message":
        return cls(text=text, origin=Origin.ASSISTANT)


class Session(BaseModel):
    """The durable identity correlating all requests of one conversation."""

    model_config = ConfigDict(frozen=True)

    session_id: str
    created_at: datetime = Field(default_factory=_now)
    persisted: bool = True


class TextReply(BaseModel):
    """Reply text found in one of the recognized response fields."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str


class FallbackReply(BaseModel):
    """No recognized field carried text; display the fallback sentence."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["fallback"] = "fallback"

    @property
    def text(self) -> str:
        return FALLBACK_TEXT


NormalizedReply = Union[TextReply, FallbackReply]
