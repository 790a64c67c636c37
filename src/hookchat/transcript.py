"""Append-only conversation transcript."""

from collections.abc import Iterator

from hookchat.models import Message


class Transcript:
    """Ordered log of messages in creation order.

    Only appends are exposed; entries are never edited, reordered or removed.
    """

    def __init__(self) -> None:
        self._messages: list[Message] = []
        self._ids: set[str] = set()

    def append(self, message: Message) -> None:
        if message.id in self._ids:
            raise ValueError(f"Duplicate message id: {message.id}")
        self._ids.add(message.id)
        self._messages.append(message)

    def all(self) -> tuple[Message, ...]:
        """Read-only snapshot of every message, oldest first."""
        return tuple(self._messages)

    @property
    def last(self) -> Message | None:
        return self._messages[-1] if self._messages else None

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))
