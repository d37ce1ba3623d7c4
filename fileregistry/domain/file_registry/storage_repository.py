"""
File Storage Repository Interface

Abstract interface for the physical storage area.
This abstraction keeps the domain layer infrastructure-agnostic by defining
the contract for claiming staged uploads and removing stored bytes without
depending on a specific storage implementation.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterator, NamedTuple, Optional


class StoredObject(NamedTuple):
    """A file present in permanent storage."""

    path: str
    modified_at: datetime


class IFileStorageRepository(ABC):
    """
    Interface for the permanent storage area and its staging directory.

    Contract Guarantees:
    - claim() moves bytes; the staged file no longer exists afterwards
    - delete() is idempotent
    - exists() and get_size() never raise for missing or invalid paths
    - Storage names are chosen by the caller and never derived from public ids

    Thread Safety:
    - Implementations must be safe for concurrent claims and deletes of
      distinct paths
    """

    @abstractmethod
    def claim(self, temp_ref: str, storage_name: str) -> str:
        """
        Move a staged temporary file into permanent storage.

        Args:
            temp_ref: Name of the staged file inside the staging directory
            storage_name: Storage-internal name for the permanent copy

        Returns:
            Path of the stored file

        Raises:
            ValueError: If temp_ref is empty or escapes the staging directory
            FileNotFoundError: If the staged file does not exist
            OSError: If the move fails

        Notes:
            - The stored file's modification time is set to the claim time
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete(self, file_path: str) -> bool:
        """
        Delete a stored file.

        Deleting a non-existent file returns True without error.

        Args:
            file_path: Path returned by claim()

        Returns:
            True if the file was deleted or didn't exist

        Raises:
            OSError: If the file exists but cannot be removed
        """
        pass  # pragma: no cover

    @abstractmethod
    def exists(self, file_path: str) -> bool:
        """
        Check if a stored file exists.

        Args:
            file_path: Path returned by claim()

        Returns:
            True if the file exists, False otherwise (never raises)
        """
        pass  # pragma: no cover

    @abstractmethod
    def get_size(self, file_path: str) -> Optional[int]:
        """
        Get the size of a stored file in bytes.

        Returns:
            File size if the file exists, None otherwise
        """
        pass  # pragma: no cover

    @abstractmethod
    def iter_stored_files(self) -> Iterator[StoredObject]:
        """
        Iterate over every file in permanent storage.

        Yields:
            StoredObject for each stored file
        """
        pass  # pragma: no cover

    def is_available(self) -> bool:
        """Check if the storage area is usable. Implementations may override."""
        return True
