"""
Example: Wi-Fi + PDR fused indoor navigation on a synthetic floor.

Builds an L-shaped corridor floor, a reference fingerprint table from a
log-distance path-loss model, and a simulated walk (50 Hz accelerometer
and compass, one Wi-Fi scan every few seconds). The engine fuses both
sources, follows the planned route and the fused track is plotted
against the ground truth. The recorded accelerometer log is also
replayed through the offline peak detector to cross-check the live
step count and draw a PDR-only track.

Run with:
    python examples/example_navigation.py
    python examples/example_navigation.py --goal "1-20" --scan-interval 3 --no-show
"""

import argparse
from pathlib import Path
from typing import List, Optional, Tuple

import matplotlib.pyplot as plt
import numpy as np

from ipsnav.config import EngineConfig, configure_logging
from ipsnav.eval import compute_error_stats, compute_position_errors
from ipsnav.eval.plots import plot_floor_tracks, save_figure
from ipsnav.fingerprinting import FingerprintLocalizer, ReferenceTable, ScanResult, WifiScan
from ipsnav.fusion import LocalizationEngine
from ipsnav.graph import load_graph
from ipsnav.sensors import (
    AccelSample,
    OrientationSample,
    detect_steps_peak_detector,
    integrate_steps,
)

ACCESS_POINTS = {
    "aa:00:00:00:00:01": (-5.0, 0.0),
    "aa:00:00:00:00:02": (5.0, 12.0),
    "aa:00:00:00:00:03": (-2.0, 24.0),
    "aa:00:00:00:00:04": (22.0, 24.0),
}

FLOOR = {
    "metadata": {"building": "Demo Hall", "floor": 1, "units": "m"},
    "nodes": [
        {"id": "n0", "label": "Lift", "x_m": 0.0, "y_m": 0.0, "type": "room"},
        {"id": "n1", "label": None, "x_m": 0.0, "y_m": 10.0, "type": "junction"},
        {"id": "n2", "label": "1-10", "x_m": -3.0, "y_m": 10.0, "type": "room"},
        {"id": "n3", "label": None, "x_m": 0.0, "y_m": 20.0, "type": "turn"},
        {"id": "n4", "label": None, "x_m": 10.0, "y_m": 20.0, "type": "junction"},
        {"id": "n5", "label": "1-20", "x_m": 10.0, "y_m": 23.0, "type": "room"},
        {"id": "n6", "label": "Exit", "x_m": 20.0, "y_m": 20.0, "type": "room"},
    ],
    "edges": [
        {"u": "n0", "v": "n1", "w": 10.0},
        {"u": "n1", "v": "n2", "w": 3.0},
        {"u": "n1", "v": "n3", "w": 10.0},
        {"u": "n3", "v": "n4", "w": 10.0},
        {"u": "n4", "v": "n5", "w": 3.0},
        {"u": "n4", "v": "n6", "w": 10.0},
    ],
}

RATE_HZ = 50.0


def rssi_at(
    x: float, y: float, rng: Optional[np.random.Generator] = None, sigma: float = 0.0
) -> np.ndarray:
    """Log-distance path loss: RSSI = -40 - 25 log10(d), clipped at -100 dBm."""
    values = []
    for ax, ay in ACCESS_POINTS.values():
        d = max(np.hypot(x - ax, y - ay), 1.0)
        rssi = -40.0 - 25.0 * np.log10(d)
        if rng is not None:
            rssi += rng.normal(0.0, sigma)
        values.append(max(rssi, -100.0))
    return np.array(values)


def build_reference_table(spacing: float = 2.0) -> ReferenceTable:
    """Reference points every ``spacing`` meters along both corridors."""
    points: List[Tuple[float, float]] = [(0.0, y) for y in np.arange(0.0, 20.0 + 1e-9, spacing)]
    points += [(x, 20.0) for x in np.arange(spacing, 20.0 + 1e-9, spacing)]
    features = np.array([rssi_at(x, y) for x, y in points])
    return ReferenceTable(
        ap_ids=tuple(ACCESS_POINTS),
        features=features,
        locations=np.array(points),
        meta={"source": "synthetic"},
    )


def simulate_walk(
    waypoints: np.ndarray,
    rate_hz: float = RATE_HZ,
    cadence_hz: float = 1.6,
    step_length: float = 0.75,
    scan_interval: float = 5.0,
    rssi_sigma: float = 3.0,
    seed: int = 7,
):
    """Time-ordered sensor events and the true position at each step."""
    rng = np.random.default_rng(seed)
    events = []
    truth = [tuple(waypoints[0])]
    t = 0.0
    dt = 1.0 / rate_hz
    next_scan = 0.5
    pos = waypoints[0].astype(float)

    for target in waypoints[1:]:
        leg = target - pos
        n_steps = int(round(np.linalg.norm(leg) / step_length))
        heading = np.degrees(np.arctan2(leg[0], leg[1])) % 360.0
        step_vec = leg / max(n_steps, 1)
        for _ in range(n_steps):
            samples_per_step = int(rate_hz / cadence_hz)
            for k in range(samples_per_step):
                spike = 2.5 if k == samples_per_step // 2 else 0.0
                az = 9.81 + spike + rng.normal(0.0, 0.05)
                events.append(AccelSample(t=t, ax=0.0, ay=0.0, az=az))
                events.append(OrientationSample(t=t, azimuth_deg=heading + rng.normal(0.0, 2.0)))
                if t >= next_scan:
                    rssi = rssi_at(pos[0], pos[1], rng, rssi_sigma)
                    results = tuple(ScanResult(b, r) for b, r in zip(ACCESS_POINTS, rssi))
                    events.append(WifiScan(t=t, results=results))
                    next_scan += scan_interval
                if spike:
                    pos = pos + step_vec
                    truth.append(tuple(pos))
                t += dt
        pos = target.astype(float)
    return events, np.array(truth)


def replay_offline_pdr(events, rate_hz: float, step_length: float, start_xy: Tuple[float, float]):
    """
    Batch PDR over the recorded log: peak-detected steps, each taken
    along the compass heading logged at that sample.

    Returns:
        Tuple of (n_steps, track) with track of shape (n_steps + 1, 2).
    """
    accel_log = np.array([(e.ax, e.ay, e.az) for e in events if isinstance(e, AccelSample)])
    heading_log = np.array([e.azimuth_deg for e in events if isinstance(e, OrientationSample)])

    # Simulated steps are one-sample spikes, so no low-pass
    step_indices, _ = detect_steps_peak_detector(
        accel_log, dt=1.0 / rate_hz, min_peak_height=1.0, min_peak_distance=0.3,
        lowpass_cutoff=None,
    )
    track = integrate_steps(heading_log[step_indices], step_length, start_xy)
    return len(step_indices), track


def main():
    parser = argparse.ArgumentParser(description="Fused indoor navigation demo")
    parser.add_argument("--start", default="Lift", help="Start location label")
    parser.add_argument("--goal", default="Exit", help="Destination label")
    parser.add_argument("--scan-interval", type=float, default=5.0, help="Seconds between Wi-Fi scans")
    parser.add_argument("--rssi-sigma", type=float, default=3.0, help="RSSI noise std (dB)")
    parser.add_argument("--out", default="figs", help="Output directory for the figure")
    parser.add_argument("--no-show", action="store_true", help="Do not open a plot window")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    configure_logging(args.log_level)

    print("\n" + "=" * 70)
    print("Indoor navigation: Wi-Fi fingerprinting + PDR + Kalman fusion")
    print("=" * 70)

    graph = load_graph(FLOOR)
    localizer = FingerprintLocalizer(build_reference_table())
    engine = LocalizationEngine(graph, localizer, EngineConfig(scan_interval_s=args.scan_interval))

    route = engine.navigate(args.goal, start_label=args.start)
    print(f"\nRoute: {' -> '.join(route.labels)} ({route.cost:.1f} m)")
    for line in engine.instructions():
        print(f"  - {line}")

    waypoints = np.array(route.polyline)
    events, truth = simulate_walk(
        waypoints, scan_interval=args.scan_interval, rssi_sigma=args.rssi_sigma
    )

    fused, fixes, truth_at_fused = [], [], []
    step_index = 0
    for event in events:
        if not isinstance(event, AccelSample):
            if isinstance(event, WifiScan):
                fixes.append(localizer.predict(event))
            engine.process(event)
            continue
        # Sample the fused estimate once per step
        if engine.on_accel(event) is None:
            continue
        step_index += 1
        position = engine.position()
        if position is not None and step_index < len(truth):
            fused.append(position)
            truth_at_fused.append(truth[step_index])

    fused = np.array(fused)
    errors = compute_position_errors(np.array(truth_at_fused), fused)
    stats = compute_error_stats(errors)

    print(f"\nSteps: {step_index}, Wi-Fi fixes: {len(fixes)}")
    print(f"Final fused position: ({fused[-1, 0]:.2f}, {fused[-1, 1]:.2f})")
    print(f"Error  mean {stats['mean']:.2f} m | RMSE {stats['rmse']:.2f} m | "
          f"p90 {stats['p90']:.2f} m | max {stats['max']:.2f} m")

    n_offline, offline_track = replay_offline_pdr(
        events, RATE_HZ, engine.config.pdr.step_length_m, tuple(truth[0])
    )
    drift = np.hypot(*(offline_track[-1] - truth[-1]))
    print(f"Offline peak detector: {n_offline} steps (live detector: {step_index}), "
          f"PDR-only end drift {drift:.2f} m")

    fig = plot_floor_tracks(
        graph,
        {"Ground Truth": truth, "Fused": fused, "PDR only (offline)": offline_track},
        route=engine.current_route(),
        fixes=np.array(fixes),
        title=f"{args.start} -> {args.goal}",
    )
    for path in save_figure(fig, Path(args.out), "navigation_demo"):
        print(f"  [OK] Saved: {path}")
    if not args.no_show:
        plt.show()


if __name__ == "__main__":
    main()
