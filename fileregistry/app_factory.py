"""
Application Factory

Creates and configures the Flask application with all dependencies.
This factory pattern improves testability by allowing dependency injection
and configuration overrides.
"""

import logging
import threading
from datetime import datetime
from typing import Callable, Optional

from flask import Flask, jsonify

from fileregistry.application.cleanup_sweeper import CleanupSweeper
from fileregistry.application.dependency_container import DependencyContainer
from fileregistry.application.registry_service import RegistryService
from fileregistry.config.celery_config import make_celery
from fileregistry.config.settings import RegistryConfig
from fileregistry.domain.file_registry import (
    FileRecordRepository,
    FileRegistry,
    IdentifierGenerator,
    IFileStorageRepository,
)
from fileregistry.domain.file_registry.entities import utc_now
from fileregistry.infrastructure.store_factory import StoreFactory

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[RegistryConfig] = None,
    clock: Callable[[], datetime] = utc_now,
) -> Flask:
    """
    Create and configure Flask application.

    Args:
        config: Registry configuration, uses default if None
        clock: Source of the current UTC time

    Returns:
        Configured Flask application

    Raises:
        PersistenceError: If the record store cannot be opened
    """
    if config is None:
        config = RegistryConfig()

    app = Flask(__name__)
    app.registry_config = config
    app.shutdown_event = threading.Event()

    # The store must open; nothing else is worth serving without it
    _initialize_services(app, config, clock)

    _initialize_celery(app)

    _register_blueprints(app)

    _register_health_endpoint(app)

    return app


def _initialize_services(
    app: Flask, config: RegistryConfig, clock: Callable[[], datetime]
) -> None:
    """
    Initialize services and attach them to the app through a DependencyContainer.

    API routes and tasks resolve services from ``app.container``.

    Args:
        app: Flask application
        config: Registry configuration
        clock: Source of the current UTC time
    """
    container = DependencyContainer()
    container.register_singleton(RegistryConfig, config)

    # Infrastructure adapters
    record_store = StoreFactory.create_record_store(config)
    storage = StoreFactory.create_storage(config)

    container.register_singleton(FileRecordRepository, record_store)
    container.register_singleton(IFileStorageRepository, storage)

    # Domain services
    id_generator = IdentifierGenerator(length=config.id_length)
    file_registry = FileRegistry(
        record_store,
        storage,
        id_generator=id_generator,
        retention=config.retention,
        max_id_attempts=config.max_id_attempts,
        clock=clock,
    )

    container.register_singleton(IdentifierGenerator, id_generator)
    container.register_singleton(FileRegistry, file_registry)

    # Application services
    registry_service = RegistryService(
        file_registry,
        reclaim_orphans=config.reclaim_orphans,
        orphan_min_age=config.orphan_min_age,
    )

    if config.sweeper_mode == "thread":
        registry_service.sweeper = CleanupSweeper(
            registry_service.run_cleanup,
            interval=config.sweep_interval_seconds,
            shutdown_event=app.shutdown_event,
        )

    container.register_singleton(RegistryService, registry_service)

    app.container = container
    app.registry_service = registry_service

    logger.info(
        f"Application services initialized with DependencyContainer "
        f"({container.singleton_count} singleton services)"
    )


def _initialize_celery(app: Flask) -> None:
    """
    Initialize Celery. A missing broker is not fatal; the in-process sweeper
    does not need one.
    """
    try:
        app.celery = make_celery(app)
        logger.info("Celery initialized successfully")
    except Exception as e:
        logger.warning(f"Could not initialize Celery: {e}")
        app.celery = None


def _register_blueprints(app: Flask) -> None:
    from fileregistry.api.v1 import API_VERSION, api_v1_bp

    app.register_blueprint(api_v1_bp)

    logger.info(
        f"API {API_VERSION} registered at /api/{API_VERSION} "
        f"with Swagger UI at /api/{API_VERSION}/docs"
    )


def _get_health_status(app: Flask) -> tuple[dict, int]:
    """
    Get health status of all system components.

    Args:
        app: Flask application instance

    Returns:
        Tuple of (health_status_dict, http_status_code)
    """
    health_status = {
        "status": "ok",
        "store": "unknown",
        "storage": "unknown",
        "sweeper": "unknown",
        "celery": "unknown",
    }

    container = app.container

    if container.resolve(FileRecordRepository).health_check():
        health_status["store"] = "connected"
    else:
        health_status["store"] = "disconnected"
        health_status["status"] = "degraded"

    if container.resolve(IFileStorageRepository).is_available():
        health_status["storage"] = "available"
    else:
        health_status["storage"] = "unavailable"
        health_status["status"] = "degraded"

    if app.registry_config.sweeper_mode == "celery":
        health_status["sweeper"] = "celery_beat"
    elif app.registry_service.cleanup_running:
        health_status["sweeper"] = "running"
    else:
        health_status["sweeper"] = "stopped"

    health_status["celery"] = "available" if getattr(app, "celery", None) else "unavailable"

    status_code = 200 if health_status["status"] == "ok" else 503
    return health_status, status_code


def _register_health_endpoint(app: Flask) -> None:

    @app.route("/health", methods=["GET"])
    def health():
        """
        Health check endpoint.
        Returns overall health status of the application and its dependencies.
        """
        health_status, status_code = _get_health_status(app)
        return jsonify(health_status), status_code
