"""Object storage interface used by the publisher."""

from abc import ABC, abstractmethod


class StorageError(Exception):
    """Raised by storage backends when a write fails."""


class ObjectStorage(ABC):
    """
    Minimal object-store interface: existence check and put.

    Implementations decide how ``public`` maps onto their ACL model.
    """

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Return True if an object is stored under ``key``."""

    @abstractmethod
    def put_object(
        self,
        key: str,
        body: bytes,
        content_type: str,
        public: bool = True,
    ) -> None:
        """Store ``body`` under ``key``, replacing any existing object."""

    def describe(self) -> str:
        """Human-readable location, used in log lines."""
        return type(self).__name__
