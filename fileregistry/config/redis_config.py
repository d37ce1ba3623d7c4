"""
Redis Configuration

Connection settings for the Redis record store backend.
"""

import os
from typing import Any, Dict, Optional

import redis

from fileregistry.infrastructure.redis_repository import RedisConnectionManager


class RedisConfig:
    """
    Redis settings read from the environment.

    ``REDIS_URL`` (``redis://[:password@]host:port/db``) wins over the
    individual host settings.
    """

    def __init__(self):
        self.host = os.getenv("REDIS_HOST", "localhost")
        self.port = int(os.getenv("REDIS_PORT", 6379))
        self.db = int(os.getenv("REDIS_DB", 0))
        self.password: Optional[str] = os.getenv("REDIS_PASSWORD")
        self.max_connections = int(os.getenv("REDIS_MAX_CONNECTIONS", 20))
        self.socket_timeout = float(os.getenv("REDIS_SOCKET_TIMEOUT", 5))
        self.key_prefix = os.getenv("REDIS_KEY_PREFIX", "")

        url = os.getenv("REDIS_URL")
        if url:
            parsed = redis.connection.parse_url(url)
            self.host = parsed.get("host", self.host)
            self.port = parsed.get("port", self.port)
            self.db = parsed.get("db", self.db)
            self.password = parsed.get("password", self.password)

    def pool_kwargs(self) -> Dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "db": self.db,
            "password": self.password,
            "max_connections": self.max_connections,
            "socket_timeout": self.socket_timeout,
        }

    def create_manager(self) -> RedisConnectionManager:
        """Open a pooled connection manager for these settings."""
        return RedisConnectionManager(**self.pool_kwargs())
