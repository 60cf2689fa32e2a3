"""Base storage backend interface."""

from abc import ABC, abstractmethod

from doclite.core.models import Document


class BaseBackend(ABC):
    """Abstract base class for snapshot storage backends.

    A backend persists the whole collection as one snapshot. It knows
    nothing about queries; the store loads once at construction and saves
    on request.
    """

    @abstractmethod
    def load(self) -> list[Document] | None:
        """Load the stored snapshot, or None when nothing is stored yet.

        Raises:
            StorageError: If the snapshot exists but cannot be read.
        """
        pass

    @abstractmethod
    def save(self, documents: list[Document]) -> None:
        """Replace the stored snapshot.

        Raises:
            StorageError: If the snapshot could not be written.
        """
        pass

    @property
    @abstractmethod
    def location(self) -> str:
        """Human-readable description of where the snapshot lives."""
        pass

    def close(self) -> None:
        """Release backend resources."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.location!r})"
