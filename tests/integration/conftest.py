import os

import pytest
import redis

from fileregistry.infrastructure.local_file_storage_repository import LocalFileStorageRepository
from fileregistry.infrastructure.sql_file_record_repository import SqlFileRecordRepository


@pytest.fixture
def redis_client():
    """
    Yields a clean Redis client for integration testing.
    Skips when no Redis server is reachable.
    """
    host = os.getenv("REDIS_HOST", "localhost")
    port = int(os.getenv("REDIS_PORT", 6379))
    db = int(os.getenv("REDIS_TEST_DB", 15))

    client = redis.Redis(host=host, port=port, db=db, decode_responses=False,
                         socket_connect_timeout=1)

    try:
        client.ping()
    except redis.ConnectionError:
        pytest.skip("Redis service not available. Skipping integration tests.")

    client.flushdb()

    yield client

    client.flushdb()
    client.close()


@pytest.fixture
def sql_store(tmp_path):
    store = SqlFileRecordRepository.from_url(f"sqlite:///{tmp_path / 'registry.db'}")
    yield store
    store.close()


@pytest.fixture
def local_storage(tmp_path):
    return LocalFileStorageRepository(
        base_path=str(tmp_path / "storage"), temp_path=str(tmp_path / "tmp")
    )


@pytest.fixture
def stage_file(local_storage):
    """Write a staged upload the way the gateway does and return its temp_ref."""

    def _stage(name="tmp-a", content=b"%PDF-1.7 test"):
        (local_storage.temp_path / name).write_bytes(content)
        return name

    return _stage
