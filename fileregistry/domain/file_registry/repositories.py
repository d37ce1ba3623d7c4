"""
File Registry Repositories

Repository interface for file record persistence.
Concrete implementations are in the infrastructure layer.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, List, Optional

from .entities import FileRecord


class FileRecordRepository(ABC):
    """
    Abstract repository interface for file record persistence.

    The repository is the only writer of stored records and the point where
    identifier uniqueness is enforced. Implementations must allow inserts,
    point lookups and the expiry scan to run concurrently.
    """

    @abstractmethod
    def insert(self, record: FileRecord) -> None:
        """
        Insert a new record.

        Args:
            record: FileRecord to persist

        Raises:
            DuplicateKeyError: If a stored record (live or not) has the same id
            PersistenceError: If the store cannot complete the write
        """
        pass  # pragma: no cover

    @abstractmethod
    def get(self, short_id: str) -> Optional[FileRecord]:
        """
        Retrieve a record by identifier.

        Expired rows that have not been purged yet are returned as-is so the
        caller can tell "expired" apart from "never existed".

        Args:
            short_id: Public identifier

        Returns:
            FileRecord if found, None otherwise

        Raises:
            PersistenceError: If the store cannot be read
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete(self, short_id: str) -> bool:
        """
        Delete a record. Idempotent.

        Args:
            short_id: Public identifier

        Returns:
            True if a record was removed, False if there was nothing to remove

        Raises:
            PersistenceError: If the store cannot complete the delete
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete_many(self, short_ids: Iterable[str]) -> int:
        """
        Delete several records in one operation.

        Args:
            short_ids: Identifiers to remove

        Returns:
            Number of records removed
        """
        pass  # pragma: no cover

    @abstractmethod
    def find_expired(self, now: datetime, limit: Optional[int] = None) -> List[FileRecord]:
        """
        Find records whose ``expires_at`` is strictly before ``now``.

        Args:
            now: Reference time
            limit: Optional maximum number of records, oldest first

        Returns:
            List of expired records ordered by expiry
        """
        pass  # pragma: no cover

    @abstractmethod
    def has_storage_path(self, storage_path: str) -> bool:
        """
        Check whether any stored record owns a storage path.

        Args:
            storage_path: Path in permanent storage

        Returns:
            True if a record references the path
        """
        pass  # pragma: no cover

    @abstractmethod
    def health_check(self) -> bool:
        """
        Check that the store is reachable.

        Returns:
            True if healthy, False otherwise (never raises)
        """
        pass  # pragma: no cover

    def close(self) -> None:
        """Release connections held by the store. Implementations may override."""
        pass
