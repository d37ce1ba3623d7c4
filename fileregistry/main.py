"""
main.py

Runs the file registry: opens the record store, starts the cleanup sweeper
and serves the HTTP API.

Notes:
  - API v1 endpoints available at /api/v1/ with Swagger docs at /api/v1/docs
  - With REGISTRY_SWEEPER_MODE=celery the sweep runs on Celery beat instead
    (celery -A fileregistry.celery_app beat / worker -Q cleanup_queue)
"""

import logging
import sys

from fileregistry.app_factory import create_app
from fileregistry.config.settings import RegistryConfig
from fileregistry.domain.file_registry import FileRecordRepository

logger = logging.getLogger(__name__)


def main() -> int:
    try:
        config = RegistryConfig()
    except ValueError as e:
        logging.basicConfig(level=logging.INFO)
        logger.error(f"Invalid configuration: {e}")
        return 1

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    try:
        app = create_app(config)
    except Exception as e:
        logger.error(f"Failed to start file registry: {e}", exc_info=True)
        return 1

    registry_service = app.registry_service
    if config.sweeper_mode == "thread":
        registry_service.start_cleanup()

    try:
        # The reloader would fork a second sweeper
        app.run(host=config.host, port=config.port, debug=config.debug, use_reloader=False)
    finally:
        registry_service.stop_cleanup(timeout=config.db_timeout_seconds + 5)
        app.container.resolve(FileRecordRepository).close()
        logger.info("Record store closed")

    return 0


if __name__ == "__main__":
    sys.exit(main())
