"""
Background expiry sweeper.

Runs NameRegistry.sweep_expired on a fixed interval from a daemon thread.
Stopping between passes is always safe: each release inside a pass is an
independent atomic transition.
"""

import logging
import threading

from .registry import NameRegistry

logger = logging.getLogger(__name__)


class ExpirySweeper:
    """Periodic driver for NameRegistry.sweep_expired."""

    def __init__(self, registry: NameRegistry, interval_seconds: float) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._registry = registry
        self._interval = interval_seconds
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="namereg-expiry-sweeper", daemon=True
        )
        self._thread.start()
        logger.info("Expiry sweeper started (interval %.1fs)", self._interval)

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread is None:
            return
        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning("Expiry sweeper did not stop within %ss", timeout)
            return
        self._thread = None
        logger.info("Expiry sweeper stopped")

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            try:
                self._registry.sweep_expired()
            except Exception:
                # Keep the sweeper alive; the next pass retries.
                logger.exception("Expiry sweep pass failed")
