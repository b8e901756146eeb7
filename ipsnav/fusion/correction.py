"""
Restartable periodic Wi-Fi correction loop.

One cycle: ask the scanner for a scan, hand it to the consumer (the
engine applies it as a fix), then wait ``interval_s``. The wait is on a
``threading.Event`` so ``stop`` interrupts it immediately.
"""

import logging
import threading
from typing import Callable, Optional

from ipsnav.exceptions import IpsNavError
from ipsnav.fingerprinting.features import ScanLike

logger = logging.getLogger(__name__)

Scanner = Callable[[], ScanLike]


class PeriodicCorrectionTask:
    """
    Background thread running scan → apply → wait until stopped.

    Args:
        scanner: Returns one completed scan per call (blocking is fine).
        on_scan: Receives each scan; its return value is ignored.
        interval_s: Pause between cycles (s).
        name: Thread name, shows up in log records.

    Any error raised by the scanner or the consumer is logged and the
    cycle is skipped; the loop keeps running until ``stop``.
    """

    def __init__(
        self,
        scanner: Scanner,
        on_scan: Callable[[ScanLike], object],
        interval_s: float = 5.0,
        name: str = "wifi-correction",
    ):
        if interval_s <= 0:
            raise ValueError(f"interval_s must be positive, got {interval_s}")
        self.scanner = scanner
        self.on_scan = on_scan
        self.interval_s = interval_s
        self.name = name
        self.cycles = 0
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the loop; no-op if it is already running."""
        with self._lock:
            if self.is_running:
                return
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._run, args=(self._stop_event,), name=self.name, daemon=True
            )
            self._thread.start()
        logger.info("Periodic correction started (interval %.1f s)", self.interval_s)

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal the loop to end and wait for the current cycle to finish."""
        with self._lock:
            thread = self._thread
            self._stop_event.set()
            self._thread = None
        if thread is None:
            return
        if thread is not threading.current_thread():
            thread.join(timeout)
        logger.info("Periodic correction stopped after %d cycles", self.cycles)

    def restart(self) -> None:
        self.stop()
        self.start()

    def run_once(self) -> None:
        """One scan → apply cycle on the calling thread."""
        try:
            scan = self.scanner()
            self.on_scan(scan)
        except IpsNavError as exc:
            logger.warning("Correction cycle skipped: %s", exc)
        except Exception:
            # Platform scanner faults must not end the loop
            logger.exception("Correction cycle failed")
        self.cycles += 1

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.is_set():
            self.run_once()
            stop_event.wait(self.interval_s)
