"""
Celery Tasks

This module contains the Celery tasks for the file registry.
"""

from .cleanup_task import sweep_expired_files

__all__ = ['sweep_expired_files']
