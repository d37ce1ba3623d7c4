"""
Store Factory

Factory for creating the record store and storage area implementations.

The record store backend is chosen from configuration (`sql` or `redis`); the
application layer stays decoupled from the concrete implementation via the
`FileRecordRepository` and `IFileStorageRepository` interfaces.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from fileregistry.config.settings import RegistryConfig
from fileregistry.domain.errors import PersistenceError
from fileregistry.domain.file_registry.repositories import FileRecordRepository
from fileregistry.domain.file_registry.storage_repository import IFileStorageRepository

from .local_file_storage_repository import LocalFileStorageRepository

logger = logging.getLogger(__name__)


class StoreFactory:
    """Factory that returns configured store and storage repositories."""

    @staticmethod
    def create_record_store(config: RegistryConfig) -> FileRecordRepository:
        """
        Create the record store selected by ``REGISTRY_STORE_BACKEND``.

        Returns:
            `FileRecordRepository` implementation

        Raises:
            PersistenceError: If the store cannot be opened
        """
        if config.store_backend == "redis":
            return StoreFactory._create_redis_store(config)
        return StoreFactory._create_sql_store(config)

    @staticmethod
    def _create_sql_store(config: RegistryConfig) -> FileRecordRepository:
        from .sql_file_record_repository import SqlFileRecordRepository

        try:
            store = SqlFileRecordRepository.from_url(
                config.database_url, timeout_seconds=config.db_timeout_seconds
            )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to open record store: {e}", e) from e

        logger.info(f"Store factory: Using SQL record store at {config.database_url}")
        return store

    @staticmethod
    def _create_redis_store(config: RegistryConfig) -> FileRecordRepository:
        from fileregistry.config.redis_config import RedisConfig

        from .redis_file_record_repository import RedisFileRecordRepository
        from .redis_repository import RedisRepository

        redis_config = RedisConfig()
        manager = redis_config.create_manager()
        if not manager.health_check():
            manager.close()
            raise PersistenceError(
                f"Failed to open record store: Redis at "
                f"{redis_config.host}:{redis_config.port} is unreachable"
            )

        logger.info(
            f"Store factory: Using Redis record store at "
            f"{redis_config.host}:{redis_config.port}/{redis_config.db}"
        )
        return RedisFileRecordRepository(
            RedisRepository(manager.client, redis_config.key_prefix),
            connection_manager=manager,
        )

    @staticmethod
    def create_storage(config: RegistryConfig) -> IFileStorageRepository:
        """
        Create local filesystem storage repository.

        Raises:
            RuntimeError: If local storage initialization fails
        """
        try:
            storage = LocalFileStorageRepository(config.storage_dir, config.temp_dir)
        except OSError as e:
            raise RuntimeError(f"Failed to initialize local storage: {e}") from e

        logger.info(
            f"Store factory: Using local storage at {config.storage_dir} "
            f"(staging: {config.temp_dir})"
        )
        return storage
