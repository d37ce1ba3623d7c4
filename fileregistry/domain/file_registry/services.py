"""
File Registry Services

Domain service for the stored-file lifecycle: ingest, lookup, expiry and purge.
"""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Callable, Optional

from fileregistry.domain.errors import (
    DuplicateKeyError,
    IdentifierExhaustedError,
    LinkExpiredError,
    OrphanedStorageError,
    PersistenceError,
    RecordNotFoundError,
    StorageMoveError,
)

from .entities import RETENTION_WINDOW, FileRecord, SweepReport, utc_now
from .identifiers import IdentifierGenerator
from .repositories import FileRecordRepository
from .storage_repository import IFileStorageRepository
from .value_objects import InvalidShortIdError, ShortId

logger = logging.getLogger(__name__)

DEFAULT_MAX_ID_ATTEMPTS = 5


class FileRegistry:
    """
    Domain service for managing registered files.

    Coordinates the move of staged uploads into permanent storage, record
    persistence with collision retries, expiry-aware lookups and the purge of
    expired files.
    """

    def __init__(
        self,
        record_repository: FileRecordRepository,
        storage_repository: IFileStorageRepository,
        id_generator: Optional[IdentifierGenerator] = None,
        retention: timedelta = RETENTION_WINDOW,
        max_id_attempts: int = DEFAULT_MAX_ID_ATTEMPTS,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize FileRegistry with its repositories.

        Args:
            record_repository: Store for file records
            storage_repository: Permanent storage area
            id_generator: Public identifier generator
            retention: How long uploads stay retrievable
            max_id_attempts: Identifier attempts before an upload fails
            clock: Source of the current UTC time
        """
        if max_id_attempts < 1:
            raise ValueError("max_id_attempts must be at least 1")

        self.record_repo = record_repository
        self.storage_repo = storage_repository
        self.id_generator = id_generator or IdentifierGenerator()
        self.retention = retention
        self.max_id_attempts = max_id_attempts
        self._clock = clock

    def now(self) -> datetime:
        return self._clock()

    def upload(
        self,
        temp_ref: str,
        original_name: str,
        size_bytes: int,
        content_type: Optional[str],
    ) -> FileRecord:
        """
        Register a staged upload.

        The staged bytes are moved first, then a record is inserted under a
        freshly generated identifier, retrying on collisions.

        Args:
            temp_ref: Name of the staged file in the staging directory
            original_name: Client-supplied filename
            size_bytes: Size reported by the transport
            content_type: MIME type reported by the transport

        Returns:
            The persisted FileRecord

        Raises:
            StorageMoveError: If the staged file could not be moved (no record)
            IdentifierExhaustedError: If every identifier attempt collided
            OrphanedStorageError: If the record could not be written after the move
        """
        storage_name = uuid.uuid4().hex

        try:
            storage_path = self.storage_repo.claim(temp_ref, storage_name)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to move staged upload {temp_ref!r} into storage: {e}")
            raise StorageMoveError(
                f"Could not move staged upload {temp_ref!r}", original_error=e
            ) from e

        created_at = self.now()

        for attempt in range(1, self.max_id_attempts + 1):
            record = FileRecord.create(
                short_id=self.id_generator.generate(),
                original_name=original_name,
                storage_path=storage_path,
                size_bytes=size_bytes,
                content_type=content_type,
                created_at=created_at,
                retention=self.retention,
            )

            try:
                self.record_repo.insert(record)
            except DuplicateKeyError:
                logger.warning(
                    f"Identifier collision on {record.id} "
                    f"(attempt {attempt}/{self.max_id_attempts})"
                )
                continue
            except PersistenceError as e:
                logger.error(
                    f"ORPHANED_STORAGE: record insert failed after move, "
                    f"bytes left at {storage_path}: {e}"
                )
                raise OrphanedStorageError(
                    "File record could not be persisted after the move",
                    storage_path=storage_path,
                    original_error=e,
                ) from e

            logger.info(
                f"Registered file {record.id} ({record.size_bytes} bytes, "
                f"expires {record.expires_at.isoformat()})"
            )
            return record

        logger.error(
            f"ORPHANED_STORAGE: identifier attempts exhausted after "
            f"{self.max_id_attempts} collisions, bytes left at {storage_path}"
        )
        raise IdentifierExhaustedError(
            f"No free identifier after {self.max_id_attempts} attempts",
            storage_path=storage_path,
        )

    def get(self, short_id: str) -> FileRecord:
        """
        Retrieve a live record.

        Expiry is decided by timestamp only; this method never purges.

        Args:
            short_id: Public identifier

        Returns:
            The live FileRecord

        Raises:
            RecordNotFoundError: If no record exists for the identifier
            LinkExpiredError: If the record's retention window has passed
            PersistenceError: If the store cannot be read
        """
        try:
            short_id = ShortId(short_id).value
        except InvalidShortIdError as e:
            raise RecordNotFoundError(f"File not found for id: {short_id!r}", e) from e

        record = self.record_repo.get(short_id)

        if record is None:
            raise RecordNotFoundError(f"File not found for id: {short_id}")

        if record.is_expired(self.now()):
            raise LinkExpiredError(f"Link has expired: {short_id}")

        return record

    def delete(self, short_id: str) -> bool:
        """
        Administratively delete a record and its backing file.

        The file goes first so a record never outlives its bytes.

        Args:
            short_id: Public identifier

        Returns:
            True if a record was removed, False if there was none
        """
        if not ShortId.is_valid(short_id):
            return False

        record = self.record_repo.get(short_id)
        if record is None:
            return False

        self._delete_physical_file(record.storage_path)
        return self.record_repo.delete(short_id)

    def sweep_expired(self) -> SweepReport:
        """
        Purge every record whose retention window has passed.

        File removal is best effort: a failure is logged and recorded in the
        report, and the sweep carries on. All found records are then removed
        with one bulk delete.

        Returns:
            SweepReport with counts

        Raises:
            PersistenceError: If the store cannot be scanned or updated
        """
        now = self.now()
        report = SweepReport(started_at=now)

        expired = self.record_repo.find_expired(now)
        report.expired_found = len(expired)

        for record in expired:
            if self._delete_physical_file(record.storage_path):
                report.files_removed += 1
            else:
                report.file_errors.append(record.id)

        if expired:
            report.records_removed = self.record_repo.delete_many(
                [record.id for record in expired]
            )

        return report

    def reclaim_orphans(self, min_age: timedelta) -> int:
        """
        Remove stored files that no record owns.

        Only files older than ``min_age`` are considered, which keeps uploads
        that are between their move and their insert out of reach.

        Args:
            min_age: Minimum age of a file before it can be reclaimed

        Returns:
            Number of files removed
        """
        cutoff = self.now() - min_age
        count = 0

        for stored in self.storage_repo.iter_stored_files():
            if stored.modified_at > cutoff:
                continue
            if self.record_repo.has_storage_path(stored.path):
                continue
            if self._delete_physical_file(stored.path):
                logger.info(f"Reclaimed orphaned file: {stored.path}")
                count += 1

        return count

    def _delete_physical_file(self, file_path: str) -> bool:
        """
        Delete a stored file, logging failures.

        Returns:
            True if deleted (or already absent), False otherwise
        """
        try:
            return self.storage_repo.delete(file_path)
        except OSError as e:
            logger.warning(f"Error deleting stored file {file_path}: {e}")
            return False
