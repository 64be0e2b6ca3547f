"""Local filesystem storage implementation."""

from __future__ import annotations

import os
from pathlib import Path
from typing import IO, BinaryIO

from werkzeug.utils import secure_filename

from config import Config

from .abstract_storage import AbstractStorage, StoredFile


class LocalStorage(AbstractStorage):
    """Persist files to the local filesystem under the configured upload directory."""

    def __init__(self, upload_dir: str | None = None, url_prefix: str | None = None):
        self.base_directory = Path(upload_dir or Config.UPLOAD_DIR)
        self.url_prefix = (url_prefix or Config.UPLOAD_URL_PREFIX).rstrip("/")
        os.makedirs(self.base_directory, exist_ok=True)

    def save(self, file_obj: IO[bytes], filename: str) -> StoredFile:
        """Save a file and return its relative path, URL and size."""

        safe_name = secure_filename(filename)
        if not safe_name:
            raise ValueError("Filename must contain at least one valid character.")

        destination = self.base_directory / safe_name
        if hasattr(file_obj, "save"):
            file_obj.save(destination)  # type: ignore[arg-type]
        else:
            with open(destination, "wb") as output:
                output.write(file_obj.read())

        relative = str(destination.relative_to(self.base_directory))
        return StoredFile(
            path=relative,
            url=self.url_for(relative),
            size=destination.stat().st_size,
        )

    def exists(self, path: str) -> bool:
        """Return True if the given relative path exists within the upload directory."""

        return (self.base_directory / path).exists()

    def open(self, path: str, mode: str = "rb") -> BinaryIO:
        """Open a stored file using the provided mode."""

        return open(self.base_directory / path, mode)

    def delete(self, path: str) -> None:
        """Remove a stored file; a missing file is not an error."""

        (self.base_directory / path).unlink(missing_ok=True)

    def url_for(self, path: str) -> str:
        return f"{self.url_prefix}/{path}"
