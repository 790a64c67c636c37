"""Shared pytest fixtures for hookchat tests.

Provides in-memory stores and webhook clients backed by httpx.MockTransport.
"""

import json
from collections.abc import Callable

import httpx
import pytest

from hookchat.session import SessionIdentityManager
from hookchat.storage import MemoryTokenStore
from hookchat.webhook import WebhookClient

WEBHOOK_URL = "https://example.app.n8n.cloud/webhook/chat"


class RecordingHandler:
    """MockTransport handler that records requests and replies from a script.

    Each reply is an httpx.Response, an exception to raise, or a callable
    taking the request.
    """

    def __init__(self, *replies) -> None:
        self.replies = list(replies)
        self.requests: list[httpx.Request] = []

    @property
    def bodies(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(request)
        # fresh copy so a scripted reply can be served more than once
        return httpx.Response(reply.status_code, headers=reply.headers, content=reply.content)


@pytest.fixture
def memory_store() -> MemoryTokenStore:
    return MemoryTokenStore()


@pytest.fixture
def sessions(memory_store: MemoryTokenStore) -> SessionIdentityManager:
    return SessionIdentityManager(memory_store)


@pytest.fixture
def make_client() -> Callable[..., WebhookClient]:
    """Factory building a WebhookClient whose transport is the given handler."""

    def factory(handler, url: str = WEBHOOK_URL, **kwargs) -> WebhookClient:
        return WebhookClient(url, transport=httpx.MockTransport(handler), **kwargs)

    return factory


@pytest.fixture
def recorder() -> type[RecordingHandler]:
    """The RecordingHandler class, for building scripted webhook endpoints."""
    return RecordingHandler


@pytest.fixture
def webhook_url() -> str:
    return WEBHOOK_URL
