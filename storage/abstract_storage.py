"""Storage abstraction layer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import IO, BinaryIO, NamedTuple


class StoredFile(NamedTuple):
    """Reference to a persisted upload."""

    path: str
    url: str
    size: int


class AbstractStorage(ABC):
    """Interface for storage backends."""

    @abstractmethod
    def save(self, file_obj: IO[bytes], filename: str) -> StoredFile:
        """Persist a file and return where it can be found again."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Return whether the given relative path exists in storage."""

    @abstractmethod
    def open(self, path: str, mode: str = "rb") -> BinaryIO:
        """Open a stored file and return the file object."""

    @abstractmethod
    def delete(self, path: str) -> None:
        """Remove a stored file if it exists."""

    @abstractmethod
    def url_for(self, path: str) -> str:
        """Return the URL a stored file is served from."""
