"""Configuration for the localization and navigation engine.

Each component takes a small dataclass config with documented defaults.
``EngineConfig`` aggregates them and can be read from a JSON document
with ``load_engine_config``.

Example JSON::

    {
        "pdr": {"step_length_m": 0.7},
        "fusion": {"measurement_noise": 2.0},
        "scan_interval_s": 4.0
    }
"""

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ipsnav.exceptions import ParseError


LOGGING_CONFIG = {
    "level": "INFO",
    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}


def configure_logging(level: Optional[str] = None) -> None:
    """Apply ``LOGGING_CONFIG`` to the root logger.

    Meant for scripts and applications; library modules only create
    module-level loggers and never call this.

    Args:
        level: Optional level name overriding ``LOGGING_CONFIG["level"]``.
    """
    level_name = (level or LOGGING_CONFIG["level"]).upper()
    logging.basicConfig(
        level=getattr(logging, level_name),
        format=LOGGING_CONFIG["format"],
    )


@dataclass
class PdrConfig:
    """
    Step detection and dead-reckoning parameters.

    Attributes:
        step_length_m: Fixed length emitted per accepted step (m).
        accel_delta_threshold: Minimum rise of the acceleration magnitude
            between consecutive samples to count as a step (m/s²).
        min_step_interval_s: Refractory period between accepted steps (s).
        target_tolerance_deg: Steps deviating more than this from the
            target travel heading are ignored (deg).
    """

    step_length_m: float = 0.75
    accel_delta_threshold: float = 1.2
    min_step_interval_s: float = 0.3
    target_tolerance_deg: float = 45.0

    def __post_init__(self) -> None:
        if self.step_length_m <= 0:
            raise ValueError(f"step_length_m must be positive, got {self.step_length_m}")
        if self.accel_delta_threshold <= 0:
            raise ValueError(
                f"accel_delta_threshold must be positive, got {self.accel_delta_threshold}"
            )
        if self.min_step_interval_s < 0:
            raise ValueError(
                f"min_step_interval_s must be non-negative, got {self.min_step_interval_s}"
            )
        if not 0 < self.target_tolerance_deg <= 180:
            raise ValueError(
                f"target_tolerance_deg must be in (0, 180], got {self.target_tolerance_deg}"
            )


@dataclass
class HeadingConfig:
    """
    Compass smoothing parameters.

    Attributes:
        mode: "exponential" blends each sample with weight ``smoothing_alpha``;
            "change_gate" only accepts a sample when it differs by more than
            ``gate_deg`` or ``gate_interval_s`` elapsed since the last update.
        smoothing_alpha: Weight of the new sample in exponential mode.
        gate_deg: Change gate threshold (deg).
        gate_interval_s: Change gate refresh interval (s).
    """

    mode: str = "exponential"
    smoothing_alpha: float = 0.1
    gate_deg: float = 45.0
    gate_interval_s: float = 0.5

    def __post_init__(self) -> None:
        if self.mode not in ("exponential", "change_gate"):
            raise ValueError(
                f"Unsupported heading mode: '{self.mode}'. "
                f"Use 'exponential' or 'change_gate'."
            )
        if not 0 < self.smoothing_alpha <= 1:
            raise ValueError(f"smoothing_alpha must be in (0, 1], got {self.smoothing_alpha}")
        if self.gate_deg < 0 or self.gate_interval_s < 0:
            raise ValueError("gate_deg and gate_interval_s must be non-negative")


@dataclass
class FusionConfig:
    """
    Kalman fusion parameters.

    Attributes:
        process_noise: q, added to every diagonal term of P per prediction.
        measurement_noise: r, Wi-Fi fix variance (m²).
        min_fix_displacement_m: Fixes closer than this to the previously
            applied fix are discarded as redundant (m).
    """

    process_noise: float = 0.05
    measurement_noise: float = 1.0
    min_fix_displacement_m: float = 0.25

    def __post_init__(self) -> None:
        if self.process_noise < 0:
            raise ValueError(f"process_noise must be non-negative, got {self.process_noise}")
        if self.measurement_noise <= 0:
            raise ValueError(
                f"measurement_noise must be positive, got {self.measurement_noise}"
            )
        if self.min_fix_displacement_m < 0:
            raise ValueError(
                f"min_fix_displacement_m must be non-negative, got {self.min_fix_displacement_m}"
            )


@dataclass
class LocalizerConfig:
    """
    Weighted k-NN fingerprint localizer parameters.

    Attributes:
        k: Number of nearest reference points.
        missing_rssi_dbm: Sentinel for access points absent from a scan.
        eps: Added to each neighbour distance before inverting it.
        length_mismatch_penalty: Distance added per missing dimension when
            a reference vector and the live vector differ in length.
    """

    k: int = 3
    missing_rssi_dbm: float = -100.0
    eps: float = 1e-6
    length_mismatch_penalty: float = 1000.0

    def __post_init__(self) -> None:
        if self.k < 1:
            raise ValueError(f"k must be >= 1, got k={self.k}")
        if self.eps <= 0:
            raise ValueError(f"eps must be positive, got {self.eps}")
        if self.length_mismatch_penalty < 0:
            raise ValueError("length_mismatch_penalty must be non-negative")


@dataclass
class PlannerConfig:
    """
    Route planning and instruction parameters.

    Attributes:
        off_route_threshold_m: Distance from the route polyline that
            triggers a replan (m).
        turn_threshold_deg: Turn angles beyond ±this are reported as turns.
        y_axis_up: True when floor y grows northwards (map frame); False
            for image-style coordinates where y grows downwards. Only the
            sign of turn angles depends on it.
    """

    off_route_threshold_m: float = 2.0
    turn_threshold_deg: float = 30.0
    y_axis_up: bool = True

    def __post_init__(self) -> None:
        if self.off_route_threshold_m <= 0:
            raise ValueError(
                f"off_route_threshold_m must be positive, got {self.off_route_threshold_m}"
            )
        if not 0 <= self.turn_threshold_deg < 180:
            raise ValueError(
                f"turn_threshold_deg must be in [0, 180), got {self.turn_threshold_deg}"
            )


@dataclass
class EngineConfig:
    """Aggregate configuration of the whole engine."""

    pdr: PdrConfig = field(default_factory=PdrConfig)
    heading: HeadingConfig = field(default_factory=HeadingConfig)
    fusion: FusionConfig = field(default_factory=FusionConfig)
    localizer: LocalizerConfig = field(default_factory=LocalizerConfig)
    planner: PlannerConfig = field(default_factory=PlannerConfig)
    scan_interval_s: float = 5.0

    def __post_init__(self) -> None:
        if self.scan_interval_s <= 0:
            raise ValueError(f"scan_interval_s must be positive, got {self.scan_interval_s}")


_SECTIONS = {
    "pdr": PdrConfig,
    "heading": HeadingConfig,
    "fusion": FusionConfig,
    "localizer": LocalizerConfig,
    "planner": PlannerConfig,
}


def _build_section(name: str, cls: type, values: Any) -> Any:
    if not isinstance(values, dict):
        raise ParseError(f"Config section '{name}' must be an object, got {type(values).__name__}")
    known = {f.name for f in fields(cls)}
    unknown = set(values) - known
    if unknown:
        raise ParseError(f"Unknown keys in config section '{name}': {sorted(unknown)}")
    try:
        return cls(**values)
    except (TypeError, ValueError) as exc:
        raise ParseError(f"Invalid config section '{name}': {exc}") from exc


def engine_config_from_dict(data: Dict[str, Any]) -> EngineConfig:
    """Build an ``EngineConfig`` from a decoded JSON mapping."""
    if not isinstance(data, dict):
        raise ParseError("Engine config must be a JSON object")

    unknown = set(data) - set(_SECTIONS) - {"scan_interval_s"}
    if unknown:
        raise ParseError(f"Unknown config keys: {sorted(unknown)}")

    kwargs: Dict[str, Any] = {}
    for name, cls in _SECTIONS.items():
        if name in data:
            kwargs[name] = _build_section(name, cls, data[name])
    if "scan_interval_s" in data:
        kwargs["scan_interval_s"] = data["scan_interval_s"]

    try:
        return EngineConfig(**kwargs)
    except (TypeError, ValueError) as exc:
        raise ParseError(f"Invalid engine config: {exc}") from exc


def load_engine_config(path: Union[str, Path]) -> EngineConfig:
    """
    Load engine configuration from a JSON file.

    Missing sections and keys keep their defaults.

    Args:
        path: Path to the JSON document.

    Returns:
        Validated EngineConfig.

    Raises:
        ParseError: If the file cannot be read, is not valid JSON, or
                    contains unknown or invalid values.
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as exc:
        raise ParseError(f"Cannot read config file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ParseError(f"Config file {path} is not valid JSON: {exc}") from exc

    return engine_config_from_dict(data)
