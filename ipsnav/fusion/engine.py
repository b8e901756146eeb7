"""
Localization and navigation engine.

Wires the components together around one fused position estimate:

    AccelSample        → PdrIntegrator → FusionKalmanFilter.predict
    OrientationSample  → HeadingTracker
    WifiScan           → FingerprintLocalizer → DisplacementGate
                                              → FusionKalmanFilter.reset / correct
    fused position     → RoutePlanner.check_off_route (replan)

Threading model:
    - Producers call ``submit(event)``; a single consumer thread started
      with ``start()`` dispatches events in arrival order. ``process``
      handles one event on the caller's thread instead.
    - Every filter, PDR or route mutation happens under one re-entrant
      lock, so step detection, predict, correct, reset and replanning
      never interleave.
    - Periodic Wi-Fi correction runs on its own ``PeriodicCorrectionTask``
      and feeds fixes through the same lock; the sample path never waits
      on a scan.
    - Readers use ``snapshot()``, ``current_route()`` and
      ``instructions()``, which return copies.

Per-cycle failures (no fix, no heading, no route after a replan) are
logged and the engine keeps its last estimate.
"""

import logging
import queue
import threading
from typing import Callable, List, Optional, Tuple, Union

from ipsnav.config import EngineConfig
from ipsnav.estimators.kalman_filter import FusionKalmanFilter, FusionState
from ipsnav.exceptions import (
    LocalizationUnavailable,
    NoRouteFound,
    NotConfigured,
    SensorUnavailable,
)
from ipsnav.fingerprinting.features import ScanLike
from ipsnav.fingerprinting.localizer import FingerprintLocalizer
from ipsnav.fingerprinting.types import WifiScan
from ipsnav.fusion.correction import PeriodicCorrectionTask
from ipsnav.fusion.gating import DisplacementGate
from ipsnav.graph.types import Graph
from ipsnav.planning.planner import RoutePlanner
from ipsnav.planning.route import Route
from ipsnav.sensors.heading import HeadingTracker
from ipsnav.sensors.pdr import PdrIntegrator
from ipsnav.sensors.types import AccelSample, OrientationSample, StepEvent

logger = logging.getLogger(__name__)

Event = Union[AccelSample, OrientationSample, WifiScan]

_SHUTDOWN = object()


class LocalizationEngine:
    """
    Fused indoor position plus route guidance.

    Args:
        graph: Shared read-only floor graph.
        localizer: Fingerprint localizer with its reference table loaded.
        config: Engine configuration.
        scanner: Optional callable returning one completed Wi-Fi scan;
                 required for ``locate_now`` and periodic correction.

    Usage:
        >>> engine = LocalizationEngine(graph, localizer)        # doctest: +SKIP
        >>> engine.process(WifiScan(t=0.0, results=(...)))       # doctest: +SKIP
        >>> engine.navigate("1-10")                              # doctest: +SKIP
        >>> engine.snapshot().position                           # doctest: +SKIP
    """

    def __init__(
        self,
        graph: Graph,
        localizer: FingerprintLocalizer,
        config: Optional[EngineConfig] = None,
        scanner: Optional[Callable[[], ScanLike]] = None,
    ):
        self.config = config or EngineConfig()
        self.graph = graph
        self.localizer = localizer
        self.scanner = scanner

        self.heading = HeadingTracker(self.config.heading)
        self.pdr = PdrIntegrator(self.heading, self.config.pdr)
        self.filter = FusionKalmanFilter(
            process_noise=self.config.fusion.process_noise,
            measurement_noise=self.config.fusion.measurement_noise,
        )
        self.gate = DisplacementGate(self.config.fusion.min_fix_displacement_m)
        self.planner = RoutePlanner(graph, self.config.planner)

        self._lock = threading.RLock()
        self._events: "queue.Queue[object]" = queue.Queue()
        self._consumer: Optional[threading.Thread] = None
        self._correction: Optional[PeriodicCorrectionTask] = None
        self._pdr_degraded = False

    # ------------------------------------------------------------------
    # Event stream
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the consumer thread; no-op if it is already running."""
        if self._consumer is not None and self._consumer.is_alive():
            return
        self._consumer = threading.Thread(
            target=self._consume, name="ipsnav-engine", daemon=True
        )
        self._consumer.start()
        logger.info("Engine consumer started")

    def shutdown(self, timeout: Optional[float] = None) -> None:
        """
        Stop navigation and the consumer thread.

        Events submitted before the call are still processed.
        """
        self.stop()
        consumer = self._consumer
        if consumer is None:
            return
        self._events.put(_SHUTDOWN)
        consumer.join(timeout)
        self._consumer = None
        logger.info("Engine consumer stopped")

    def submit(self, event: Event) -> None:
        """Queue an event for the consumer thread."""
        self._events.put(event)

    def _consume(self) -> None:
        while True:
            event = self._events.get()
            try:
                if event is _SHUTDOWN:
                    return
                self.process(event)
            except (TypeError, ValueError) as exc:
                logger.error("Dropping malformed event %r: %s", event, exc)
            finally:
                self._events.task_done()

    def join(self) -> None:
        """Block until every submitted event has been processed."""
        self._events.join()

    def process(self, event: Event) -> None:
        """Handle one event on the calling thread."""
        if isinstance(event, AccelSample):
            self.on_accel(event)
        elif isinstance(event, OrientationSample):
            self.on_orientation(event)
        elif isinstance(event, WifiScan):
            self.on_scan(event)
        else:
            raise TypeError(f"Unsupported event type: {type(event).__name__}")

    # ------------------------------------------------------------------
    # Motion path
    # ------------------------------------------------------------------

    def on_orientation(self, sample: OrientationSample) -> Optional[float]:
        with self._lock:
            heading = self.heading.update(sample)
            if self._pdr_degraded:
                logger.info("Heading available again, PDR resumed")
                self._pdr_degraded = False
            return heading

    def mark_heading_unavailable(self, reason: str = "orientation sensor not available") -> None:
        """Report that the orientation source is gone; PDR pauses until it returns."""
        with self._lock:
            self.heading.mark_unavailable(reason)

    def set_target_heading(self, heading_deg: Optional[float]) -> None:
        """Desired travel heading for off-axis step gating (None disables it)."""
        with self._lock:
            self.pdr.set_target_heading(heading_deg)

    def on_accel(self, sample: AccelSample) -> Optional[StepEvent]:
        # Same lock as apply_fix, which resets the step detector
        with self._lock:
            try:
                step = self.pdr.update(sample)
            except SensorUnavailable as exc:
                if not self._pdr_degraded:
                    logger.warning("PDR paused, position from Wi-Fi only: %s", exc)
                    self._pdr_degraded = True
                return None
            if step is not None:
                self.apply_step(step.dx, step.dy)
            return step

    def apply_step(self, dx: float, dy: float) -> None:
        """Predict with a relative displacement (ignored before the first fix)."""
        with self._lock:
            if not self.filter.initialized:
                return
            self.filter.predict(dx, dy)
            self._after_position_update()

    # ------------------------------------------------------------------
    # Wi-Fi path
    # ------------------------------------------------------------------

    def on_scan(self, scan: ScanLike) -> bool:
        """
        Localize a scan and apply it as a fix.

        Returns:
            True if the fix was applied, False if no fix was produced or
            the displacement gate discarded it.
        """
        try:
            x, y = self.localizer.predict(scan)
        except LocalizationUnavailable as exc:
            logger.warning("No Wi-Fi fix this cycle: %s", exc)
            return False
        return self.apply_fix(x, y)

    def apply_fix(self, x: float, y: float) -> bool:
        """Gate an absolute fix, then bootstrap or correct the filter."""
        with self._lock:
            if not self.gate.accept(x, y):
                logger.debug("Fix (%.2f, %.2f) within gate, discarded", x, y)
                return False
            if not self.filter.initialized:
                self.filter.reset(x, y)
                self.pdr.reset_to(x, y)
                logger.info("Position initialized at (%.2f, %.2f)", x, y)
            else:
                self.filter.correct(x, y)
                logger.debug("Fix (%.2f, %.2f) applied", x, y)
            self._after_position_update()
            return True

    def locate_now(self) -> bool:
        """
        Run one scan → localize → apply cycle immediately.

        Raises:
            NotConfigured: If the engine has no scanner.
        """
        if self.scanner is None:
            raise NotConfigured("No Wi-Fi scanner configured")
        return self.on_scan(self.scanner())

    def start_periodic_correction(self) -> None:
        """Start (or restart) the background scan loop."""
        if self.scanner is None:
            raise NotConfigured("No Wi-Fi scanner configured")
        if self._correction is None:
            self._correction = PeriodicCorrectionTask(
                self.scanner, self.on_scan, interval_s=self.config.scan_interval_s
            )
        self._correction.restart()

    def stop_periodic_correction(self) -> None:
        if self._correction is not None:
            self._correction.stop()

    @property
    def correction_running(self) -> bool:
        return self._correction is not None and self._correction.is_running

    # ------------------------------------------------------------------
    # Navigation commands
    # ------------------------------------------------------------------

    def navigate(self, goal_label: str, start_label: Optional[str] = None) -> Route:
        """
        Plan a route to ``goal_label``.

        Without ``start_label`` the route starts at the node nearest to
        the fused position. With a scanner configured, periodic Wi-Fi
        correction is (re)started for the new destination.

        Raises:
            InvalidNode: Unknown label, or current location requested
                         before any fix.
            NoRouteFound: Destination unreachable.
        """
        with self._lock:
            route = self.planner.navigate(
                goal_label, start_label=start_label, position=self.filter.position()
            )
        if self.scanner is not None:
            self.start_periodic_correction()
        return route

    def stop(self) -> None:
        """End navigation: cancel periodic correction and drop the route."""
        self.stop_periodic_correction()
        with self._lock:
            self.planner.clear()

    def _after_position_update(self) -> None:
        position = self.filter.position()
        if position is None or self.planner.route is None:
            return
        try:
            self.planner.check_off_route(*position)
        except NoRouteFound as exc:
            logger.warning("Replan failed, keeping previous route: %s", exc)

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------

    def snapshot(self) -> FusionState:
        with self._lock:
            return self.filter.snapshot()

    def position(self) -> Optional[Tuple[float, float]]:
        with self._lock:
            return self.filter.position()

    def current_route(self) -> Optional[Route]:
        with self._lock:
            return self.planner.route

    def instructions(self) -> List[str]:
        with self._lock:
            return self.planner.instructions
