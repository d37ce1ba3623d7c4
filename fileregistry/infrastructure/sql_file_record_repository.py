"""
SQL File Record Repository Implementation

SQLAlchemy-based implementation of FileRecordRepository.
Defaults to a SQLite database in WAL mode so concurrent readers, writers and
the cleanup scan do not serialize behind one lock.
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from sqlalchemy import BigInteger, DateTime, String, create_engine, delete, event, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker
from sqlalchemy.types import TypeDecorator

from fileregistry.domain.errors import DuplicateKeyError, PersistenceError
from fileregistry.domain.file_registry.entities import FileRecord, ensure_utc
from fileregistry.domain.file_registry.repositories import FileRecordRepository

logger = logging.getLogger(__name__)

# SQLite caps bound parameters per statement
DELETE_BATCH_SIZE = 500


class UTCDateTime(TypeDecorator):
    """Stores datetimes as naive UTC and returns them timezone-aware."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return ensure_utc(value).replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return value.replace(tzinfo=timezone.utc)


class Base(DeclarativeBase):
    """Base class for registry ORM models."""
    pass


class FileRecordRow(Base):
    __tablename__ = "files"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    original_name: Mapped[str] = mapped_column(String(1024), nullable=False)
    storage_path: Mapped[str] = mapped_column(String(4096), nullable=False, unique=True)
    size_bytes: Mapped[int] = mapped_column(BigInteger, nullable=False)
    content_type: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)

    @classmethod
    def from_entity(cls, record: FileRecord) -> "FileRecordRow":
        return cls(
            id=record.id,
            original_name=record.original_name,
            storage_path=record.storage_path,
            size_bytes=record.size_bytes,
            content_type=record.content_type,
            created_at=record.created_at,
            expires_at=record.expires_at,
        )

    def to_entity(self) -> FileRecord:
        return FileRecord(
            id=self.id,
            original_name=self.original_name,
            storage_path=self.storage_path,
            size_bytes=self.size_bytes,
            content_type=self.content_type,
            created_at=self.created_at,
            expires_at=self.expires_at,
        )


def _configure_sqlite(engine: Engine, busy_timeout_ms: int) -> None:
    """Apply WAL journaling and durability pragmas on every new connection."""

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragmas(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=FULL")
            cursor.execute(f"PRAGMA busy_timeout={int(busy_timeout_ms)}")
        finally:
            cursor.close()


def create_registry_engine(database_url: str, timeout_seconds: float = 5.0) -> Engine:
    """
    Create a SQLAlchemy engine for the record store.

    Args:
        database_url: SQLAlchemy URL, e.g. ``sqlite:///data/registry.db``
        timeout_seconds: Lock wait bound for each statement

    Returns:
        Configured Engine
    """
    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False, "timeout": timeout_seconds},
            pool_pre_ping=True,
        )
        _configure_sqlite(engine, int(timeout_seconds * 1000))
        return engine

    return create_engine(database_url, pool_pre_ping=True)


class SqlFileRecordRepository(FileRecordRepository):
    """
    SQLAlchemy implementation of FileRecordRepository.

    Every operation runs in its own short session, so inserts, lookups and
    the sweep each hold a pooled connection only for their own statement.
    """

    def __init__(self, engine: Engine):
        """
        Initialize with an engine and create the schema if needed.

        Args:
            engine: SQLAlchemy engine (see create_registry_engine)

        Raises:
            PersistenceError: If the schema cannot be created
        """
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)

        try:
            Base.metadata.create_all(engine)
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to create file record schema", e) from e

    @classmethod
    def from_url(cls, database_url: str, timeout_seconds: float = 5.0) -> "SqlFileRecordRepository":
        return cls(create_registry_engine(database_url, timeout_seconds))

    def insert(self, record: FileRecord) -> None:
        """
        Insert a record.

        A unique-constraint failure on ``id`` becomes DuplicateKeyError; any
        other integrity failure is a PersistenceError.
        """
        try:
            with self._session_factory() as session:
                session.add(FileRecordRow.from_entity(record))
                session.commit()
        except IntegrityError as e:
            if self._id_exists(record.id):
                raise DuplicateKeyError(f"Identifier already in use: {record.id}", e) from e
            raise PersistenceError(f"Integrity error inserting {record.id}", e) from e
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to insert file record {record.id}", e) from e

    def _id_exists(self, short_id: str) -> bool:
        try:
            with self._session_factory() as session:
                return session.get(FileRecordRow, short_id) is not None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to check identifier {short_id}", e) from e

    def get(self, short_id: str) -> Optional[FileRecord]:
        try:
            with self._session_factory() as session:
                row = session.get(FileRecordRow, short_id)
                return row.to_entity() if row is not None else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to read file record {short_id}", e) from e

    def delete(self, short_id: str) -> bool:
        try:
            with self._session_factory() as session:
                result = session.execute(
                    delete(FileRecordRow).where(FileRecordRow.id == short_id)
                )
                session.commit()
                return result.rowcount > 0
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to delete file record {short_id}", e) from e

    def delete_many(self, short_ids: Iterable[str]) -> int:
        ids = list(dict.fromkeys(short_ids))
        if not ids:
            return 0

        removed = 0
        try:
            with self._session_factory() as session:
                for start in range(0, len(ids), DELETE_BATCH_SIZE):
                    batch = ids[start:start + DELETE_BATCH_SIZE]
                    result = session.execute(
                        delete(FileRecordRow).where(FileRecordRow.id.in_(batch))
                    )
                    removed += result.rowcount
                session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to delete {len(ids)} file records", e) from e

        return removed

    def find_expired(self, now: datetime, limit: Optional[int] = None) -> List[FileRecord]:
        query = (
            select(FileRecordRow)
            .where(FileRecordRow.expires_at < ensure_utc(now))
            .order_by(FileRecordRow.expires_at)
        )
        if limit is not None:
            query = query.limit(limit)

        try:
            with self._session_factory() as session:
                return [row.to_entity() for row in session.scalars(query)]
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to scan for expired file records", e) from e

    def has_storage_path(self, storage_path: str) -> bool:
        query = select(FileRecordRow.id).where(FileRecordRow.storage_path == storage_path)
        try:
            with self._session_factory() as session:
                return session.execute(query).first() is not None
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to look up storage path", e) from e

    def health_check(self) -> bool:
        try:
            with self.engine.connect() as connection:
                connection.exec_driver_sql("SELECT 1")
            return True
        except SQLAlchemyError as e:
            logger.warning(f"Record store health check failed: {e}")
            return False

    def close(self) -> None:
        """Dispose of pooled connections."""
        self.engine.dispose()
