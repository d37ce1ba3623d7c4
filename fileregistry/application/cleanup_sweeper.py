"""
Cleanup Sweeper

Long-lived background worker that runs the expired-file sweep once at start
and then on a fixed interval until shutdown is signalled.
"""

import logging
import threading
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class CleanupSweeper:
    """
    Recurring sweep on a daemon thread.

    The sweeper owns its thread and observes a shutdown event shared with the
    rest of the process. A failing run is logged and the sweeper waits for
    the next tick; an in-flight run is allowed to finish on shutdown.

    Attributes:
        interval: Seconds between runs
        shutdown_event: Event that stops the loop when set
    """

    def __init__(
        self,
        sweep: Callable[[], Any],
        interval: float,
        shutdown_event: Optional[threading.Event] = None,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")

        self._sweep = sweep
        self.interval = interval
        self.shutdown_event = shutdown_event or threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self.runs = 0

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Launch the sweeper thread. Calling start on a running sweeper is a no-op."""
        with self._lock:
            if self.is_running:
                return

            self._thread = threading.Thread(
                target=self._run_loop, name="cleanup-sweeper", daemon=True
            )
            self._thread.start()

        logger.info(f"Cleanup sweeper started (interval {self.interval}s)")

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal shutdown and wait for the thread to exit."""
        self.shutdown_event.set()

        with self._lock:
            thread = self._thread

        if thread is not None:
            thread.join(timeout)
            if thread.is_alive():
                logger.warning("Cleanup sweeper did not stop within the timeout")
            else:
                logger.info("Cleanup sweeper stopped")

    def run_once(self) -> Optional[Any]:
        """
        Run one sweep.

        Returns:
            The sweep result, or None if the run failed
        """
        try:
            result = self._sweep()
        except Exception as e:
            logger.error(f"Cleanup sweep failed, waiting for next tick: {e}", exc_info=True)
            return None
        finally:
            self.runs += 1

        logger.info(f"Cleanup sweep finished: {result}")
        return result

    def _run_loop(self) -> None:
        if self.shutdown_event.is_set():
            return

        self.run_once()
        while not self.shutdown_event.wait(self.interval):
            self.run_once()
