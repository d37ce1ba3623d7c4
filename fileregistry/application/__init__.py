"""
Application Services Layer

Orchestrates domain services and coordinates use cases.
"""

from .cleanup_sweeper import CleanupSweeper
from .dependency_container import DependencyContainer, DependencyNotFoundError
from .registry_service import RegistryService

__all__ = [
    'CleanupSweeper',
    'DependencyContainer',
    'DependencyNotFoundError',
    'RegistryService',
]
