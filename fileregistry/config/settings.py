"""
Registry Configuration

Environment-driven settings for the file registry service.
"""

import os
from datetime import timedelta
from pathlib import Path


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class RegistryConfig:
    """Registry configuration settings."""

    STORE_BACKENDS = ("sql", "redis")
    SWEEPER_MODES = ("thread", "celery")

    def __init__(self):
        self.data_dir = os.getenv("REGISTRY_DATA_DIR", "data")
        self.storage_dir = os.getenv(
            "REGISTRY_STORAGE_DIR", str(Path(self.data_dir) / "storage")
        )
        self.temp_dir = os.getenv("REGISTRY_TEMP_DIR", str(Path(self.data_dir) / "tmp"))
        self.database_url = os.getenv(
            "DATABASE_URL", f"sqlite:///{Path(self.data_dir) / 'registry.db'}"
        )

        self.store_backend = os.getenv("REGISTRY_STORE_BACKEND", "sql").lower()
        self.id_length = int(os.getenv("REGISTRY_ID_LENGTH", 5))
        self.max_id_attempts = int(os.getenv("REGISTRY_MAX_ID_ATTEMPTS", 5))
        self.retention_hours = float(os.getenv("REGISTRY_RETENTION_HOURS", 48))
        self.sweep_interval_seconds = float(
            os.getenv("REGISTRY_SWEEP_INTERVAL_SECONDS", 86400)
        )
        self.sweeper_mode = os.getenv("REGISTRY_SWEEPER_MODE", "thread").lower()
        self.reclaim_orphans = _env_bool("REGISTRY_RECLAIM_ORPHANS", "true")
        self.orphan_min_age_seconds = float(
            os.getenv("REGISTRY_ORPHAN_MIN_AGE_SECONDS", 3600)
        )
        self.db_timeout_seconds = float(os.getenv("REGISTRY_DB_TIMEOUT_SECONDS", 5))

        self.host = os.getenv("FLASK_HOST", "0.0.0.0")
        self.port = int(os.getenv("FLASK_PORT", 8000))
        self.debug = _env_bool("FLASK_DEBUG", "false")
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

        self.validate()

    def validate(self) -> None:
        """
        Reject settings the registry cannot run with.

        Raises:
            ValueError: On an unknown backend or mode, or a non-positive bound
        """
        if self.store_backend not in self.STORE_BACKENDS:
            raise ValueError(
                f"REGISTRY_STORE_BACKEND must be one of {self.STORE_BACKENDS}, "
                f"got {self.store_backend!r}"
            )
        if self.sweeper_mode not in self.SWEEPER_MODES:
            raise ValueError(
                f"REGISTRY_SWEEPER_MODE must be one of {self.SWEEPER_MODES}, "
                f"got {self.sweeper_mode!r}"
            )
        if self.max_id_attempts < 1:
            raise ValueError("REGISTRY_MAX_ID_ATTEMPTS must be at least 1")
        if self.retention_hours <= 0:
            raise ValueError("REGISTRY_RETENTION_HOURS must be positive")
        if self.sweep_interval_seconds <= 0:
            raise ValueError("REGISTRY_SWEEP_INTERVAL_SECONDS must be positive")

    @property
    def retention(self) -> timedelta:
        return timedelta(hours=self.retention_hours)

    @property
    def orphan_min_age(self) -> timedelta:
        return timedelta(seconds=self.orphan_min_age_seconds)
