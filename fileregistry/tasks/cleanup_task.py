"""
Cleanup Task

Celery beat task for the periodic sweep of expired files.
Thin wrapper that delegates to the registry application service.
"""

import logging

from fileregistry.celery_app import celery_app
from fileregistry.config.celery_config import SWEEP_TASK_NAME

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, name=SWEEP_TASK_NAME)
def sweep_expired_files(self):
    """
    Periodic sweep that removes expired files and their records.

    Used when the registry runs with ``REGISTRY_SWEEPER_MODE=celery`` in place
    of the in-process sweeper thread. Failures are logged and reported in the
    returned statistics; the next beat tick tries again.

    Returns:
        dict: Cleanup statistics with counts and errors
    """
    logger.info("Starting sweep task")

    try:
        from fileregistry.application.registry_service import RegistryService
        from fileregistry.celery_app import flask_app

        registry_service = flask_app.container.resolve(RegistryService)
        stats = registry_service.run_cleanup()
        stats["errors"] = []
        return stats

    except Exception as e:
        error_msg = f"Sweep task failed: {e}"
        logger.error(error_msg, exc_info=True)
        return {
            "expired_found": 0,
            "files_removed": 0,
            "records_removed": 0,
            "orphans_reclaimed": 0,
            "file_errors": [],
            "errors": [error_msg],
        }
