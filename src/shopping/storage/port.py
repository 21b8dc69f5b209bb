"""Cart storage port (abstract interface).

Durable key/value storage for the serialised cart record. The cart
persistence layer owns the record format; adapters only move strings.
"""

from abc import ABC, abstractmethod


class CartStorage(ABC):
    """Abstract cart storage interface."""

    @abstractmethod
    def read(self, key: str) -> str | None:
        """Return the payload stored under `key`, or None."""
        ...

    @abstractmethod
    def write(self, key: str, payload: str) -> None:
        """Store `payload` under `key`, replacing any previous value."""
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove `key`. Missing keys are ignored."""
        ...
