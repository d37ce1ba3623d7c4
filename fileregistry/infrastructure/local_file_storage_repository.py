"""
Local File Storage Repository Implementation

Concrete implementation of IFileStorageRepository for the local filesystem.
Staged uploads live in a staging directory written by the gateway; claimed
files are moved into the permanent storage directory under storage-internal
names.
"""

import logging
import os
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional

from fileregistry.domain.file_registry.storage_repository import (
    IFileStorageRepository,
    StoredObject,
)

logger = logging.getLogger(__name__)

STORED_SUFFIX = ".dat"


class LocalFileStorageRepository(IFileStorageRepository):
    """
    Local filesystem implementation of IFileStorageRepository.

    Thread Safety:
        Claims of distinct staged files and deletes of distinct stored files
        are independent filesystem operations and can run concurrently.

    Attributes:
        base_path: Permanent storage directory
        temp_path: Staging directory the gateway writes uploads into
    """

    def __init__(self, base_path: str = "data/storage", temp_path: str = "data/tmp"):
        """
        Initialize the local file storage repository.

        Args:
            base_path: Permanent storage directory (default: data/storage)
            temp_path: Staging directory (default: data/tmp)
        """
        self.base_path = Path(base_path).resolve()
        self.temp_path = Path(temp_path).resolve()
        self._ensure_directory(self.base_path)
        self._ensure_directory(self.temp_path)

    @staticmethod
    def _ensure_directory(path: Path) -> None:
        """
        Ensure a directory exists.

        Raises:
            PermissionError: If insufficient permissions to create directory
            OSError: If directory creation fails for other reasons
        """
        try:
            path.mkdir(parents=True, exist_ok=True)
        except PermissionError as e:
            raise PermissionError(
                f"Insufficient permissions to create storage directory: {path}"
            ) from e
        except OSError as e:
            raise OSError(f"Failed to create storage directory: {path}") from e

    def _staged_path(self, temp_ref: str) -> Path:
        """Resolve a staged file reference, refusing anything outside temp_path."""
        if not temp_ref or not temp_ref.strip():
            raise ValueError("temp_ref cannot be empty")

        if os.path.isabs(temp_ref):
            raise ValueError(f"temp_ref must be relative to the staging directory: {temp_ref!r}")

        candidate = (self.temp_path / temp_ref).resolve()
        if candidate.parent != self.temp_path:
            raise ValueError(f"temp_ref escapes the staging directory: {temp_ref!r}")

        return candidate

    def _stored_path(self, file_path: str) -> Optional[Path]:
        """Resolve a stored path, returning None for anything outside base_path."""
        if not file_path or not file_path.strip():
            return None

        candidate = Path(file_path)
        if not candidate.is_absolute():
            candidate = self.base_path / candidate
        candidate = candidate.resolve()

        if candidate.parent != self.base_path:
            return None

        return candidate

    # IFileStorageRepository interface methods

    def claim(self, temp_ref: str, storage_name: str) -> str:
        """
        Move a staged file into permanent storage.

        Uses a rename where possible and falls back to copy-and-delete across
        filesystems. The stored file's modification time is set to now.
        """
        source = self._staged_path(temp_ref)

        if not storage_name or os.sep in storage_name or storage_name.startswith("."):
            raise ValueError(f"Invalid storage name: {storage_name!r}")

        if not source.is_file():
            raise FileNotFoundError(f"Staged file not found: {temp_ref}")

        destination = self.base_path / f"{storage_name}{STORED_SUFFIX}"
        if destination.exists():
            raise FileExistsError(f"Storage name already in use: {storage_name}")

        shutil.move(str(source), str(destination))
        os.utime(destination, None)

        logger.debug(f"Claimed staged file {temp_ref} as {destination.name}")
        return str(destination)

    def delete(self, file_path: str) -> bool:
        """
        Delete a stored file. Idempotent.

        Raises:
            OSError: If the file exists but cannot be removed
        """
        full_path = self._stored_path(file_path)
        if full_path is None:
            logger.warning(f"Refusing to delete path outside storage: {file_path!r}")
            return True

        try:
            full_path.unlink()
        except FileNotFoundError:
            return True
        except IsADirectoryError as e:
            raise OSError(f"Stored path is a directory: {full_path}") from e

        return True

    def exists(self, file_path: str) -> bool:
        try:
            full_path = self._stored_path(file_path)
            return full_path is not None and full_path.is_file()
        except (OSError, ValueError):
            return False

    def get_size(self, file_path: str) -> Optional[int]:
        try:
            full_path = self._stored_path(file_path)
            if full_path is None or not full_path.is_file():
                return None
            return full_path.stat().st_size
        except (OSError, ValueError):
            return None

    def iter_stored_files(self) -> Iterator[StoredObject]:
        """
        Iterate over stored files.

        Entries that disappear while iterating (a concurrent sweep) are skipped.
        """
        for entry in self.base_path.iterdir():
            if entry.suffix != STORED_SUFFIX:
                continue
            try:
                if not entry.is_file():
                    continue
                mtime = entry.stat().st_mtime
            except FileNotFoundError:
                continue

            yield StoredObject(
                path=str(entry),
                modified_at=datetime.fromtimestamp(mtime, tz=timezone.utc),
            )

    def is_available(self) -> bool:
        """
        Check if the storage area is usable.

        Returns:
            True if both directories exist and are writable
        """
        return all(
            path.exists() and os.access(path, os.W_OK)
            for path in (self.base_path, self.temp_path)
        )
