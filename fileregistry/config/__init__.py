"""Configuration for the registry, Redis and Celery."""

from .settings import RegistryConfig

__all__ = ["RegistryConfig"]
