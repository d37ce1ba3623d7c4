"""
Shared pytest fixtures and configuration for the file registry test suite.

This module provides:
- Hypothesis configuration for property-based testing
- Environment defaults so importing the Celery app never touches ./data
- Shared fixtures for records, repositories and a controllable clock
"""

import os
import tempfile
from datetime import timedelta

import pytest

# Hypothesis configuration
from hypothesis import HealthCheck, Phase, settings

# Must be set before anything imports fileregistry.celery_app
_SESSION_DATA_DIR = tempfile.mkdtemp(prefix="fileregistry-tests-")
os.environ.setdefault("REGISTRY_DATA_DIR", _SESSION_DATA_DIR)
os.environ.setdefault("REGISTRY_STORE_BACKEND", "sql")
os.environ.setdefault("REGISTRY_SWEEPER_MODE", "thread")

from fileregistry.domain.file_registry import FileRecord, FileRegistry  # noqa: E402
from tests.fixtures import (  # noqa: E402
    FakeClock,
    MockFileRecordRepository,
    MockFileStorageRepository,
)

settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.target, Phase.shrink],
)
settings.register_profile(
    "ci",
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.register_profile(
    "dev",
    max_examples=10,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))


# =============================================================================
# Time Fixtures
# =============================================================================

@pytest.fixture
def clock():
    """Provide a controllable UTC clock starting at 2024-01-15 12:00."""
    return FakeClock()


# =============================================================================
# Repository Fixtures
# =============================================================================

@pytest.fixture
def record_repo():
    return MockFileRecordRepository()


@pytest.fixture
def storage_repo():
    return MockFileStorageRepository()


@pytest.fixture
def file_registry(record_repo, storage_repo, clock):
    """FileRegistry over in-memory repositories and the fake clock."""
    return FileRegistry(record_repo, storage_repo, clock=clock)


@pytest.fixture
def make_record(clock):
    """Factory for FileRecord instances created at the fake clock's time."""

    def _make(short_id="aZ3k9", created_at=None, retention=timedelta(hours=48), **kwargs):
        return FileRecord.create(
            short_id=short_id,
            original_name=kwargs.get("original_name", "report.pdf"),
            storage_path=kwargs.get("storage_path", f"/srv/storage/{short_id}.dat"),
            size_bytes=kwargs.get("size_bytes", 2048),
            content_type=kwargs.get("content_type", "application/pdf"),
            created_at=created_at or clock(),
            retention=retention,
        )

    return _make


# =============================================================================
# Pytest Configuration Hooks
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (real stores and filesystem)"
    )
    config.addinivalue_line(
        "markers", "contract: Contract tests (verify interface compliance)"
    )
    config.addinivalue_line(
        "markers", "property: Property-based tests using Hypothesis"
    )


def pytest_collection_modifyitems(config, items):
    """
    Automatically mark tests based on their location.

    - tests/unit/* -> @pytest.mark.unit
    - tests/integration/* -> @pytest.mark.integration
    - tests/contracts/* -> @pytest.mark.contract
    - tests/property/* -> @pytest.mark.property
    """
    for item in items:
        test_path = str(item.fspath)

        if "/unit/" in test_path or "\\unit\\" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path or "\\integration\\" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/contracts/" in test_path or "\\contracts\\" in test_path:
            item.add_marker(pytest.mark.contract)
        elif "/property/" in test_path or "\\property\\" in test_path:
            item.add_marker(pytest.mark.property)
