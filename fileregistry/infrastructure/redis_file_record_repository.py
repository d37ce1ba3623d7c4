"""
Redis File Record Repository Implementation

Concrete Redis-based implementation of FileRecordRepository.

Key Schema:
    - file_record:{id} -> FileRecord JSON
    - file_record:index:expiry -> Sorted Set of ids scored by expires_at
    - file_record:index:paths -> Set of owned storage paths

Records carry no Redis TTL: expiry is judged by timestamp and purging belongs
to the cleanup sweep, which also removes the backing files.
"""

import json
import logging
from datetime import datetime
from typing import Iterable, List, Optional

from redis.exceptions import RedisError

from fileregistry.domain.errors import DuplicateKeyError, PersistenceError
from fileregistry.domain.file_registry.entities import FileRecord, ensure_utc
from fileregistry.domain.file_registry.repositories import FileRecordRepository

from .redis_repository import RedisConnectionManager, RedisRepository

logger = logging.getLogger(__name__)

# Insert only if the id is free, then maintain both indexes.
INSERT_SCRIPT = """
local ok = redis.call('SET', KEYS[1], ARGV[1], 'NX')
if not ok then
    return 0
end
redis.call('ZADD', KEYS[2], ARGV[2], ARGV[3])
redis.call('SADD', KEYS[3], ARGV[4])
return 1
"""

# Delete a record and its index entries; stale index entries are cleared too.
# An undecodable document is still deleted; its path entry cannot be found.
DELETE_SCRIPT = """
local data = redis.call('GET', KEYS[1])
redis.call('ZREM', KEYS[2], ARGV[1])
if not data then
    return 0
end
local ok, record = pcall(cjson.decode, data)
if ok and type(record) == 'table' and record['storage_path'] then
    redis.call('SREM', KEYS[3], record['storage_path'])
end
redis.call('DEL', KEYS[1])
return 1
"""


class RedisFileRecordRepository(FileRecordRepository):
    """
    Redis-based implementation of FileRecordRepository.

    Inserts and deletes are single Lua scripts, so a record and its index
    entries change together. The expiry scan is a range query on the sorted
    set and takes no lock.
    """

    RECORD_PREFIX = "file_record"
    EXPIRY_INDEX = "file_record:index:expiry"
    PATH_INDEX = "file_record:index:paths"

    def __init__(self, redis_repository: RedisRepository,
                 connection_manager: Optional[RedisConnectionManager] = None):
        """
        Initialize with Redis repository.

        Args:
            redis_repository: RedisRepository instance from infrastructure layer
            connection_manager: Pool owner, disconnected by ``close``
        """
        self.redis_repo = redis_repository
        self.connection_manager = connection_manager

    def _record_key(self, short_id: str) -> str:
        return f"{self.RECORD_PREFIX}:{short_id}"

    def insert(self, record: FileRecord) -> None:
        inserted = self.redis_repo.run_script(
            INSERT_SCRIPT,
            keys=[self._record_key(record.id), self.EXPIRY_INDEX, self.PATH_INDEX],
            args=[
                json.dumps(record.to_dict()),
                record.expires_at.timestamp(),
                record.id,
                record.storage_path,
            ],
        )

        if int(inserted) != 1:
            raise DuplicateKeyError(f"Identifier already in use: {record.id}")

    def get(self, short_id: str) -> Optional[FileRecord]:
        data = self.redis_repo.get_json(self._record_key(short_id))
        if data is None:
            return None
        return self._to_entity(short_id, data)

    @staticmethod
    def _to_entity(short_id: str, data: dict) -> FileRecord:
        try:
            return FileRecord.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise PersistenceError(f"Malformed file record for id {short_id}", e) from e

    def delete(self, short_id: str) -> bool:
        removed = self.redis_repo.run_script(
            DELETE_SCRIPT,
            keys=[self._record_key(short_id), self.EXPIRY_INDEX, self.PATH_INDEX],
            args=[short_id],
        )
        return int(removed) == 1

    def delete_many(self, short_ids: Iterable[str]) -> int:
        calls = [
            ([self._record_key(short_id), self.EXPIRY_INDEX, self.PATH_INDEX], [short_id])
            for short_id in dict.fromkeys(short_ids)
        ]
        results = self.redis_repo.run_script_batch(DELETE_SCRIPT, calls)
        return sum(1 for removed in results if int(removed) == 1)

    def find_expired(self, now: datetime, limit: Optional[int] = None) -> List[FileRecord]:
        ids = self.redis_repo.range_by_score(
            self.EXPIRY_INDEX, ensure_utc(now).timestamp(), exclusive=True, limit=limit
        )
        documents = self.redis_repo.get_many_json(
            [self._record_key(i) for i in ids], skip_malformed=True
        )

        expired = []
        for short_id, data in zip(ids, documents):
            record = None
            if data is None:
                logger.warning(f"Removing unreadable expiry index entry for {short_id}")
            else:
                try:
                    record = self._to_entity(short_id, data)
                except PersistenceError as e:
                    logger.error(f"Removing expiry index entry for malformed record {short_id}: {e}")

            if record is None:
                # Dropped so one bad entry is not rescanned on every sweep;
                # a malformed document stays in place for inspection.
                self.redis_repo.remove_from_sorted_set(self.EXPIRY_INDEX, short_id)
                continue
            expired.append(record)

        return expired

    def has_storage_path(self, storage_path: str) -> bool:
        return self.redis_repo.is_member(self.PATH_INDEX, storage_path)

    def health_check(self) -> bool:
        try:
            return bool(self.redis_repo.redis.ping())
        except RedisError as e:
            logger.warning(f"Record store health check failed: {e}")
            return False

    def close(self) -> None:
        if self.connection_manager is not None:
            self.connection_manager.close()
