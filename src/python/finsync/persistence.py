"""Persistence interfaces for finsync credential storage backends."""

from __future__ import annotations

from abc import ABC, abstractmethod


class PersistenceStore(ABC):
    """Abstract durable key/value store for session credentials.

    Implementations hold plain strings and carry no session logic.
    """

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value for ``key``, or None."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key`` if present."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every stored key."""

    def delete_many(self, keys: tuple[str, ...] | list[str]) -> None:
        """Remove several keys."""
        for key in keys:
            self.delete(key)
