"""Status trail: the caller-visible progress narrative of one submission."""

from datetime import UTC, datetime
from typing import Dict, Iterator, List

from pydantic import BaseModel, Field


class StatusMessage(BaseModel):
    """One timestamped progress message."""

    message: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class StatusTrail:
    """Append-only, ordered list of status messages.

    Entries are never removed or rewritten; the trail is attached to the
    returned content so long-running submissions can show their progress.
    """

    def __init__(self) -> None:
        self._messages: List[StatusMessage] = []

    def push(self, message: str) -> StatusMessage:
        entry = StatusMessage(message=message)
        self._messages.append(entry)
        return entry

    def messages(self) -> List[str]:
        return [entry.message for entry in self._messages]

    def to_list(self) -> List[Dict[str, str]]:
        return [
            {"message": entry.message, "timestamp": entry.timestamp.isoformat()}
            for entry in self._messages
        ]

    def __iter__(self) -> Iterator[StatusMessage]:
        return iter(list(self._messages))

    def __len__(self) -> int:
        return len(self._messages)
