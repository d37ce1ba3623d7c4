"""
Celery Application Instance

Creates the Celery app instance for use by workers and the beat scheduler.
Uses the app factory so tasks resolve the same services as the API.
"""

import logging

from celery.signals import beat_init

from fileregistry.app_factory import create_app
from fileregistry.config.celery_config import SWEEP_TASK_NAME

logger = logging.getLogger(__name__)


def _require_celery(app):
    if getattr(app, "celery", None) is None:
        raise RuntimeError(
            "Celery could not be initialized; check CELERY_BROKER_URL and the "
            "application logs"
        )
    return app.celery


flask_app = create_app()
celery_app = _require_celery(flask_app)

# Task modules are imported by name when the worker starts, once
# `celery_app` exists for the task decorators.
celery_app.conf.imports = ("fileregistry.tasks.cleanup_task",)


@beat_init.connect
def queue_startup_sweep(sender=None, **kwargs):
    """
    Queue one sweep as soon as beat starts.

    The beat schedule first fires a full interval after startup; this run
    covers the time in between.
    """
    try:
        celery_app.send_task(SWEEP_TASK_NAME)
        logger.info("Queued startup sweep")
    except Exception as e:
        logger.error(f"Could not queue startup sweep, waiting for first beat tick: {e}")
