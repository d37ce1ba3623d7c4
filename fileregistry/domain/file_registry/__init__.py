"""
File Registry Domain

Handles short identifiers, file records, expiry and purge.
"""

from .entities import RETENTION_WINDOW, FileRecord, SweepReport
from .identifiers import (
    IdentifierGenerator,
    RandomSource,
    SystemRandomSource,
    ThreadLocalRandomSource,
)
from .repositories import FileRecordRepository
from .services import FileRegistry
from .storage_repository import IFileStorageRepository, StoredObject
from .value_objects import ALPHABET, DEFAULT_ID_LENGTH, InvalidShortIdError, ShortId

__all__ = [
    "ALPHABET",
    "DEFAULT_ID_LENGTH",
    "RETENTION_WINDOW",
    "FileRecord",
    "FileRecordRepository",
    "FileRegistry",
    "IFileStorageRepository",
    "IdentifierGenerator",
    "InvalidShortIdError",
    "RandomSource",
    "ShortId",
    "StoredObject",
    "SweepReport",
    "SystemRandomSource",
    "ThreadLocalRandomSource",
]
