"""
File Registry Entities

Domain entities for stored file records.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

RETENTION_WINDOW = timedelta(hours=48)
DEFAULT_CONTENT_TYPE = "application/octet-stream"


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and normalise aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class FileRecord:
    """
    Entity describing one uploaded file.

    Records are immutable: they are created once at upload and destroyed
    by the cleanup sweep or an administrative delete. ``expires_at`` is
    computed at ingest and persisted, never recomputed on read.
    """
    id: str
    original_name: str
    storage_path: str
    size_bytes: int
    content_type: str
    created_at: datetime
    expires_at: datetime

    @classmethod
    def create(
        cls,
        short_id: str,
        original_name: str,
        storage_path: str,
        size_bytes: int,
        content_type: Optional[str] = None,
        created_at: Optional[datetime] = None,
        retention: timedelta = RETENTION_WINDOW,
    ) -> "FileRecord":
        """
        Factory method to create a new file record.

        Args:
            short_id: Public link identifier
            original_name: Client-supplied filename
            storage_path: Location of the bytes in permanent storage
            size_bytes: Size captured at ingest
            content_type: MIME type captured at ingest
            created_at: Ingest timestamp (default: now)
            retention: How long the record stays live (default: 48 hours)

        Returns:
            New FileRecord instance
        """
        now = ensure_utc(created_at) if created_at is not None else utc_now()
        return cls(
            id=short_id,
            original_name=original_name,
            storage_path=storage_path,
            size_bytes=int(size_bytes),
            content_type=content_type or DEFAULT_CONTENT_TYPE,
            created_at=now,
            expires_at=now + retention,
        )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """
        Check if the retention window has passed.

        A record is expired from ``expires_at`` onwards, inclusive.
        """
        current = ensure_utc(now) if now is not None else utc_now()
        return current >= self.expires_at

    def is_live(self, now: Optional[datetime] = None) -> bool:
        return not self.is_expired(now)

    def get_remaining_time(self, now: Optional[datetime] = None) -> timedelta:
        """Remaining time until expiration (negative if expired)."""
        current = ensure_utc(now) if now is not None else utc_now()
        return self.expires_at - current

    def get_remaining_seconds(self, now: Optional[datetime] = None) -> int:
        """Seconds remaining until expiration (0 if expired)."""
        return max(0, int(self.get_remaining_time(now).total_seconds()))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "original_name": self.original_name,
            "storage_path": self.storage_path,
            "size_bytes": self.size_bytes,
            "content_type": self.content_type,
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileRecord":
        """Create FileRecord from dictionary."""
        return cls(
            id=data["id"],
            original_name=data["original_name"],
            storage_path=data["storage_path"],
            size_bytes=int(data["size_bytes"]),
            content_type=data["content_type"],
            created_at=ensure_utc(datetime.fromisoformat(data["created_at"])),
            expires_at=ensure_utc(datetime.fromisoformat(data["expires_at"])),
        )


@dataclass
class SweepReport:
    """Outcome of one cleanup run."""
    started_at: datetime
    expired_found: int = 0
    files_removed: int = 0
    records_removed: int = 0
    orphans_reclaimed: int = 0
    file_errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "started_at": self.started_at.isoformat(),
            "expired_found": self.expired_found,
            "files_removed": self.files_removed,
            "records_removed": self.records_removed,
            "orphans_reclaimed": self.orphans_reclaimed,
            "file_errors": list(self.file_errors),
        }
