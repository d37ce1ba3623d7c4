"""Infrastructure layer for the record stores and local storage."""

from .local_file_storage_repository import LocalFileStorageRepository
from .redis_file_record_repository import RedisFileRecordRepository
from .redis_repository import RedisConnectionManager, RedisRepository
from .sql_file_record_repository import SqlFileRecordRepository
from .store_factory import StoreFactory

__all__ = [
    "LocalFileStorageRepository",
    "RedisConnectionManager",
    "RedisFileRecordRepository",
    "RedisRepository",
    "SqlFileRecordRepository",
    "StoreFactory",
]
