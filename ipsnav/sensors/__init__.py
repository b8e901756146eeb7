"""
Motion sensing for pedestrian dead reckoning.

Modules:
    types: AccelSample, OrientationSample, StepEvent
    heading: rotation vector -> azimuth, smoothed HeadingTracker
    pdr: streaming StepDetector/PdrIntegrator and batch log helpers

Design principles:
    - Samples are frozen dataclasses pushed in by the platform layer
    - No listener inheritance: components expose plain ``update`` methods
    - Heading loss raises SensorUnavailable, which callers treat as
      "no PDR input this step", never as fatal
"""

from ipsnav.sensors.heading import HeadingTracker, azimuth_from_rotation_vector
from ipsnav.sensors.pdr import (
    PdrIntegrator,
    StepDetector,
    StepState,
    detect_steps_peak_detector,
    integrate_steps,
    step_displacement,
)
from ipsnav.sensors.types import AccelSample, OrientationSample, StepEvent

__all__ = [
    "AccelSample",
    "OrientationSample",
    "StepEvent",
    "HeadingTracker",
    "azimuth_from_rotation_vector",
    "StepDetector",
    "StepState",
    "PdrIntegrator",
    "step_displacement",
    "detect_steps_peak_detector",
    "integrate_steps",
]
