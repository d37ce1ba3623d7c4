"""
Test fixtures package.

Provides mock implementations of the registry ports and test utilities.
"""

from .mock_repositories import (
    FakeClock,
    MockFileRecordRepository,
    MockFileStorageRepository,
    ScriptedIdentifierGenerator,
    failing_store,
)

__all__ = [
    "FakeClock",
    "MockFileRecordRepository",
    "MockFileStorageRepository",
    "ScriptedIdentifierGenerator",
    "failing_store",
]
