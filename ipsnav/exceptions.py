"""Error taxonomy for the localization and navigation engine.

Load-time failures (``ParseError``) abort startup. Everything else is a
per-cycle condition that callers recover from locally: the engine keeps
its last fused position and carries on.
"""


class IpsNavError(Exception):
    """Base class for all engine errors."""


class ParseError(IpsNavError):
    """Graph, reference table or configuration source is malformed."""


class LocalizationUnavailable(IpsNavError):
    """The fingerprint localizer cannot produce a fix this cycle."""


class NotConfigured(LocalizationUnavailable):
    """A component was used before its canonical data was loaded."""


class NoReferenceData(LocalizationUnavailable):
    """The reference fingerprint table is empty."""


class NoNeighborsFound(LocalizationUnavailable):
    """Nearest-neighbour selection produced no usable reference point."""


class SensorUnavailable(IpsNavError):
    """A motion or orientation source is missing; PDR input is degraded."""


class NoRouteFound(IpsNavError):
    """A* exhausted its open set without reaching the goal."""


class InvalidNode(IpsNavError):
    """A start or goal label/id does not name a node of the graph."""
