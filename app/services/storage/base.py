"""
Base Key-Value Store Interface

Durable storage local to the check-in device. Values are opaque strings;
callers serialize their own data. Operations are synchronous so that a
check-in never suspends on storage.
"""
from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStore(ABC):
    """
    Abstract base class for device-local key-value storage.

    Implementations must survive process restarts (except the in-memory
    store used in tests) and need no multi-process coordination.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend identifier (e.g., 'file', 'memory')"""
        pass

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read a value.

        Returns:
            The stored string, or None if the key is absent
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Write a value, replacing any previous one"""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key. Removing an absent key is not an error."""
        pass

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
