"""
Registry Application Service

Coordinates the file registry use cases consumed by the HTTP API, the
background sweeper and the Celery task.
"""

import logging
from datetime import timedelta
from typing import Any, Dict, Optional

from fileregistry.domain.errors import (
    LinkExpiredError,
    OrphanedStorageError,
    RecordNotFoundError,
)
from fileregistry.domain.file_registry import FileRegistry

from .cleanup_sweeper import CleanupSweeper

logger = logging.getLogger(__name__)

DEFAULT_ORPHAN_MIN_AGE = timedelta(hours=1)


class RegistryService:
    """
    Application service for registered files.

    Wraps the FileRegistry domain service, shapes its results for the
    transport and owns the lifecycle of the cleanup sweeper.
    """

    def __init__(
        self,
        file_registry: FileRegistry,
        sweeper: Optional[CleanupSweeper] = None,
        reclaim_orphans: bool = True,
        orphan_min_age: timedelta = DEFAULT_ORPHAN_MIN_AGE,
    ):
        """
        Initialize RegistryService.

        Args:
            file_registry: FileRegistry domain service
            sweeper: Background sweeper started by start_cleanup
            reclaim_orphans: Whether cleanup also removes unowned stored files
            orphan_min_age: Minimum age of a stored file before it can be reclaimed
        """
        self.file_registry = file_registry
        self.sweeper = sweeper
        self.reclaim_orphans = reclaim_orphans
        self.orphan_min_age = orphan_min_age

    def register_file(
        self,
        temp_ref: str,
        filename: str,
        size_bytes: int,
        content_type: Optional[str] = None,
    ) -> str:
        """
        Register a staged upload.

        Returns:
            The public short identifier

        Raises:
            UploadError: If the upload could not be registered
        """
        try:
            record = self.file_registry.upload(temp_ref, filename, size_bytes, content_type)
        except OrphanedStorageError as e:
            logger.error(f"Upload of {filename!r} left orphaned storage: {e}")
            raise

        return record.id

    def get_file(self, short_id: str) -> Dict[str, Any]:
        """
        Get metadata for a live file.

        Returns:
            Dictionary with storage path, filename, size, type and expiry

        Raises:
            RecordNotFoundError: If no record exists
            LinkExpiredError: If the record has expired
        """
        try:
            record = self.file_registry.get(short_id)
        except RecordNotFoundError:
            logger.info(f"File not found: {short_id!r}")
            raise
        except LinkExpiredError:
            logger.info(f"Expired link requested: {short_id}")
            raise

        return {
            "storage_path": record.storage_path,
            "filename": record.original_name,
            "size_bytes": record.size_bytes,
            "content_type": record.content_type,
            "created_at": record.created_at,
            "expires_at": record.expires_at,
            "remaining_seconds": record.get_remaining_seconds(self.file_registry.now()),
        }

    def delete_file(self, short_id: str) -> bool:
        """Delete a file and its record. Deleting a missing file is not an error."""
        deleted = self.file_registry.delete(short_id)
        if deleted:
            logger.info(f"Deleted file {short_id}")
        return deleted

    def run_cleanup(self) -> Dict[str, Any]:
        """
        Run one cleanup pass: the expired sweep, then orphan reclamation.

        Returns:
            Cleanup statistics

        Raises:
            PersistenceError: If the store cannot be scanned or updated
        """
        report = self.file_registry.sweep_expired()

        if self.reclaim_orphans:
            report.orphans_reclaimed = self.file_registry.reclaim_orphans(self.orphan_min_age)

        logger.info(
            f"Cleanup completed - Expired: {report.expired_found}, "
            f"Files: {report.files_removed}, Records: {report.records_removed}, "
            f"Orphans: {report.orphans_reclaimed}, Errors: {len(report.file_errors)}"
        )
        if report.file_errors:
            logger.warning(f"Stored files left behind for records: {report.file_errors}")

        return report.to_dict()

    def start_cleanup(self) -> None:
        """Start the background sweeper. Returns immediately."""
        if self.sweeper is None:
            raise RuntimeError("No cleanup sweeper configured")
        self.sweeper.start()

    def stop_cleanup(self, timeout: Optional[float] = None) -> None:
        if self.sweeper is not None:
            self.sweeper.stop(timeout)

    @property
    def cleanup_running(self) -> bool:
        return self.sweeper is not None and self.sweeper.is_running
