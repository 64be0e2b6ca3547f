"""Storage backends."""

from .abstract_storage import AbstractStorage, StoredFile
from .local_storage import LocalStorage

__all__ = ["AbstractStorage", "LocalStorage", "StoredFile"]
