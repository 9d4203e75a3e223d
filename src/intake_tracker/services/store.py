"""Key-value store abstractions."""

from dataclasses import dataclass
from typing import Protocol


class KeyValueStore(Protocol):
    """Async key-value interface holding serialized string values."""

    async def get(self, key: str) -> str | None:
        """Return the stored value, if present."""

    async def put(self, key: str, value: str) -> None:
        """Store a value under a key, replacing any previous value."""

    async def delete(self, key: str) -> None:
        """Remove a key. Missing keys are ignored."""

    async def list(self, prefix: str | None = None) -> list[str]:
        """Return key names, optionally filtered by prefix."""


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """In-memory store for local development."""

    _entries: dict[str, str]

    def __init__(self, entries: dict[str, str] | None = None) -> None:
        self._entries = dict(entries or {})

    async def get(self, key: str) -> str | None:
        """Return the stored value, if present."""
        return self._entries.get(key)

    async def put(self, key: str, value: str) -> None:
        """Store a value under a key."""
        self._entries[key] = value

    async def delete(self, key: str) -> None:
        """Remove a key if present."""
        self._entries.pop(key, None)

    async def list(self, prefix: str | None = None) -> list[str]:
        """Return sorted key names matching the prefix."""
        return sorted(
            key for key in self._entries if prefix is None or key.startswith(prefix)
        )
