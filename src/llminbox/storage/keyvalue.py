"""Abstract key-value storage interface."""

from abc import ABC, abstractmethod
from typing import Any


class KeyValueStore(ABC):
    """Persistent mapping from string keys to JSON-compatible values.

    Collections (the snippet list, the transcript map) are stored as one
    value each, so every write replaces a whole collection. Implementations
    must not hold the event loop during I/O.
    """

    @abstractmethod
    async def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under key, or default if absent."""

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove key. No-op if key does not exist."""
