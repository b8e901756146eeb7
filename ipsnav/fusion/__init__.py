"""
Position fusion and the engine that drives it.

Modules:
    gating: DisplacementGate for redundant Wi-Fi fixes
    correction: PeriodicCorrectionTask background scan loop
    engine: LocalizationEngine, event dispatch and navigation commands
"""

from ipsnav.fusion.correction import PeriodicCorrectionTask
from ipsnav.fusion.engine import Event, LocalizationEngine
from ipsnav.fusion.gating import DisplacementGate

__all__ = [
    "DisplacementGate",
    "PeriodicCorrectionTask",
    "LocalizationEngine",
    "Event",
]
