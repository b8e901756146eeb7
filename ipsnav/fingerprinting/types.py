"""Type definitions for Wi-Fi fingerprint localization.

Convention: fingerprints are raw RSSI vectors in dBm, ordered by the
reference table's column header. No standard scaling is applied to
either the reference table or live scans, so distances between them
are directly comparable.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np


Location = np.ndarray  # Shape (2,), floor-local (x, y) in meters
Fingerprint = np.ndarray  # Shape (N,), RSSI from N access points in dBm


@dataclass(frozen=True)
class ScanResult:
    """One access point observed in a Wi-Fi scan."""

    bssid: str
    rssi_dbm: float


@dataclass(frozen=True)
class WifiScan:
    """
    A completed Wi-Fi scan.

    Attributes:
        t: Completion timestamp (s).
        results: Observed access points.
    """

    t: float
    results: Tuple[ScanResult, ...] = field(default_factory=tuple)

    def as_dict(self) -> dict:
        """BSSID -> RSSI mapping (later duplicates override earlier ones)."""
        return {r.bssid: r.rssi_dbm for r in self.results}


@dataclass
class ReferenceTable:
    """
    Precomputed fingerprint reference table (radio map).

    Attributes:
        ap_ids: Canonical access point identifiers, lower-cased, in
                column order. Length N.
        features: Reference fingerprints, shape (M, N), dBm with -100 for
                  access points not seen at that reference point.
        locations: Reference point coordinates, shape (M, 2).
        meta: Auxiliary information (source path, skipped row count, ...).

    Examples:
        >>> table = ReferenceTable(
        ...     ap_ids=("aa:bb", "cc:dd"),
        ...     features=np.array([[-50.0, -70.0], [-70.0, -50.0]]),
        ...     locations=np.array([[0.0, 0.0], [10.0, 0.0]]),
        ... )
        >>> table
        ReferenceTable(n_rps=2, n_aps=2)

    Notes:
        - An empty table (M = 0) is valid; the localizer reports
          NoReferenceData when asked to predict from it.
        - The vector order must match the live feature vector exactly;
          build live vectors with a FeatureVectorBuilder seeded from
          ``ap_ids``.
    """

    ap_ids: Tuple[str, ...]
    features: np.ndarray
    locations: np.ndarray
    meta: dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate data structure consistency after initialization."""
        self.ap_ids = tuple(str(a).lower() for a in self.ap_ids)
        self.features = np.asarray(self.features, dtype=float)
        self.locations = np.asarray(self.locations, dtype=float)

        n_aps = len(self.ap_ids)
        if self.features.size == 0 and self.features.ndim < 2:
            self.features = self.features.reshape(0, n_aps)
        if self.locations.size == 0 and self.locations.ndim < 2:
            self.locations = self.locations.reshape(0, 2)

        if self.features.ndim != 2:
            raise ValueError(
                f"features must be 2D array (M, N), got shape {self.features.shape}"
            )
        if self.locations.ndim != 2 or self.locations.shape[1] != 2:
            raise ValueError(
                f"locations must be 2D array (M, 2), got shape {self.locations.shape}"
            )
        if self.features.shape[0] != self.locations.shape[0]:
            raise ValueError(
                f"Inconsistent number of reference points: "
                f"features={self.features.shape[0]}, locations={self.locations.shape[0]}"
            )
        if self.features.shape[1] != n_aps:
            raise ValueError(
                f"features have {self.features.shape[1]} columns but "
                f"{n_aps} access point ids were given"
            )

    @property
    def n_reference_points(self) -> int:
        """Number of reference points (M)."""
        return self.features.shape[0]

    @property
    def n_features(self) -> int:
        """Number of access points (N)."""
        return len(self.ap_ids)

    @property
    def is_empty(self) -> bool:
        return self.n_reference_points == 0

    def row(self, index: int) -> Tuple[np.ndarray, Tuple[float, float]]:
        """Feature vector and (x, y) of one reference point."""
        x, y = self.locations[index]
        return self.features[index].copy(), (float(x), float(y))

    def __repr__(self) -> str:
        return f"ReferenceTable(n_rps={self.n_reference_points}, n_aps={self.n_features})"


def empty_table(ap_ids: Optional[Tuple[str, ...]] = None) -> ReferenceTable:
    """A reference table with no rows."""
    ap_ids = tuple(ap_ids or ())
    return ReferenceTable(
        ap_ids=ap_ids,
        features=np.zeros((0, len(ap_ids))),
        locations=np.zeros((0, 2)),
    )
