"""
Redis Repository Base Class

Provides JSON document access and Lua script execution on top of a pooled
Redis client. Errors are surfaced as PersistenceError so callers can tell a
missing key apart from an unreachable server.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

import redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError

from fileregistry.domain.errors import PersistenceError

logger = logging.getLogger(__name__)


def _decode(value: Any) -> Any:
    return value.decode("utf-8") if isinstance(value, bytes) else value


class RedisRepository:
    """Base Redis repository with JSON helpers and atomic scripts."""

    def __init__(self, redis_client: redis.Redis, key_prefix: str = ""):
        self.redis = redis_client
        self.key_prefix = key_prefix

    def make_key(self, key: str) -> str:
        """Create a prefixed key for Redis storage."""
        return f"{self.key_prefix}:{key}" if self.key_prefix else key

    def get_json(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Get JSON data from Redis.

        Args:
            key: Redis key (without prefix)

        Returns:
            Dictionary if found, None if the key does not exist

        Raises:
            PersistenceError: If Redis is unreachable or the value is not JSON
        """
        try:
            data = self.redis.get(self.make_key(key))
        except RedisError as e:
            raise PersistenceError(f"Error reading key {key}", e) from e

        if data is None:
            return None

        try:
            return json.loads(_decode(data))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise PersistenceError(f"Malformed JSON stored at key {key}", e) from e

    def get_many_json(self, keys: List[str],
                      skip_malformed: bool = False) -> List[Optional[Dict[str, Any]]]:
        """
        Get several JSON documents in one round trip.

        Args:
            keys: Redis keys (without prefix)
            skip_malformed: Log undecodable values and return None for them
                instead of raising

        Returns:
            One entry per key, None for missing keys
        """
        if not keys:
            return []

        try:
            values = self.redis.mget([self.make_key(key) for key in keys])
        except RedisError as e:
            raise PersistenceError(f"Error reading {len(keys)} keys", e) from e

        documents = []
        for key, value in zip(keys, values):
            if value is None:
                documents.append(None)
                continue
            try:
                documents.append(json.loads(_decode(value)))
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                if skip_malformed:
                    logger.error(f"Skipping malformed JSON stored at key {key}: {e}")
                    documents.append(None)
                    continue
                raise PersistenceError(f"Malformed JSON stored at key {key}", e) from e
        return documents

    def run_script(self, script: str, keys: List[str], args: List[Any]) -> Any:
        """
        Execute a Lua script atomically.

        Args:
            script: Lua source
            keys: Redis keys (without prefix)
            args: Script arguments

        Raises:
            PersistenceError: If the script cannot be executed
        """
        try:
            return self.redis.eval(
                script, len(keys), *[self.make_key(key) for key in keys], *args
            )
        except RedisError as e:
            raise PersistenceError("Error executing Redis script", e) from e

    def run_script_batch(self, script: str, calls: List[Tuple[List[str], List[Any]]]) -> List[Any]:
        """
        Execute the same Lua script for several key/argument sets in one round trip.

        Each script call is atomic on its own; the batch is pipelined.
        """
        if not calls:
            return []

        try:
            pipeline = self.redis.pipeline(transaction=False)
            for keys, args in calls:
                pipeline.eval(
                    script, len(keys), *[self.make_key(key) for key in keys], *args
                )
            return pipeline.execute()
        except RedisError as e:
            raise PersistenceError(f"Error executing {len(calls)} Redis scripts", e) from e

    def range_by_score(self, key: str, max_score: float, exclusive: bool = True,
                       limit: Optional[int] = None) -> List[str]:
        """
        Members of a sorted set with a score below ``max_score``.

        Returns:
            Members ordered by ascending score
        """
        upper = f"({max_score}" if exclusive else max_score
        kwargs = {}
        if limit is not None:
            kwargs = {"start": 0, "num": limit}

        try:
            members = self.redis.zrangebyscore(self.make_key(key), "-inf", upper, **kwargs)
        except RedisError as e:
            raise PersistenceError(f"Error scanning sorted set {key}", e) from e

        return [_decode(member) for member in members]

    def is_member(self, key: str, member: str) -> bool:
        try:
            return bool(self.redis.sismember(self.make_key(key), member))
        except RedisError as e:
            raise PersistenceError(f"Error checking membership in {key}", e) from e

    def remove_from_sorted_set(self, key: str, member: str) -> None:
        try:
            self.redis.zrem(self.make_key(key), member)
        except RedisError as e:
            raise PersistenceError(f"Error removing {member} from {key}", e) from e


class RedisConnectionManager:
    """Manages Redis connection with connection pooling."""

    def __init__(self, host: str = 'localhost', port: int = 6379, db: int = 0,
                 password: Optional[str] = None, max_connections: int = 20,
                 socket_timeout: Optional[float] = 5.0,
                 decode_responses: bool = False):
        self.connection_pool = redis.ConnectionPool(
            host=host,
            port=port,
            db=db,
            password=password,
            max_connections=max_connections,
            decode_responses=decode_responses,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
            retry_on_timeout=True,
            socket_keepalive=True,
        )
        self._client = None

    @property
    def client(self) -> redis.Redis:
        """Get Redis client instance with connection pooling."""
        if self._client is None:
            self._client = redis.Redis(connection_pool=self.connection_pool)
        return self._client

    def health_check(self) -> bool:
        """Check if Redis connection is healthy."""
        try:
            return bool(self.client.ping())
        except RedisConnectionError:
            return False

    def close(self):
        """Close the connection pool."""
        if self.connection_pool:
            self.connection_pool.disconnect()
