"""Live feature vector construction for fingerprint localization.

A live scan is a sparse set of (BSSID, RSSI) pairs. The localizer needs a
dense vector in the reference table's column order, with a sentinel for
every access point the scan did not see.
"""

import json
import logging
import math
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from ipsnav.exceptions import NotConfigured, ParseError
from ipsnav.fingerprinting.types import Fingerprint, ScanResult, WifiScan

logger = logging.getLogger(__name__)

MISSING_RSSI_DBM = -100.0

ScanLike = Union[
    WifiScan,
    Mapping[str, float],
    Iterable[ScanResult],
    Iterable[Tuple[str, float]],
]


def scan_to_dict(scan: ScanLike) -> dict:
    """
    Normalise any supported scan representation to ``{bssid: rssi}``.

    BSSIDs are lower-cased; when a BSSID repeats, the later reading wins.
    Readings whose RSSI is missing or not a finite number are dropped
    with a warning, so that access point falls back to the sentinel.
    """
    if isinstance(scan, WifiScan):
        items = [(r.bssid, r.rssi_dbm) for r in scan.results]
    elif isinstance(scan, Mapping):
        items = list(scan.items())
    else:
        items = []
        for entry in scan:
            if isinstance(entry, ScanResult):
                items.append((entry.bssid, entry.rssi_dbm))
            else:
                bssid, rssi = entry
                items.append((bssid, rssi))

    readings = {}
    for bssid, rssi in items:
        try:
            value = float(rssi)
        except (TypeError, ValueError):
            value = math.nan
        if not math.isfinite(value):
            logger.warning("Dropping reading with unusable RSSI %r for %s", rssi, bssid)
            continue
        readings[str(bssid).lower()] = value
    return readings


class FeatureVectorBuilder:
    """
    Aligns live scans to a canonical access point order.

    The canonical order normally comes from the reference table header
    (``set_reference_order``); a fallback order can be loaded from a
    ``{bssid: column_index}`` JSON map. The reference order always wins
    once it is set.

    Examples:
        >>> builder = FeatureVectorBuilder(["AA:01", "aa:02", "aa:03"])
        >>> builder.build_vector({"aa:03": -60.0, "AA:01": -45.0, "ff:ff": -30.0})
        array([ -45., -100.,  -60.])
    """

    def __init__(
        self,
        bssid_order: Optional[Sequence[str]] = None,
        missing_rssi_dbm: float = MISSING_RSSI_DBM,
    ):
        self.missing_rssi_dbm = float(missing_rssi_dbm)
        self._order: List[str] = []
        self._index: dict = {}
        if bssid_order:
            self.set_reference_order(bssid_order)

    def set_reference_order(self, order: Sequence[str]) -> None:
        """Fix the canonical order (case-insensitive)."""
        self._order = [str(b).lower() for b in order]
        self._index = {bssid: i for i, bssid in enumerate(self._order)}
        logger.info("Reference BSSID order set (%d access points)", len(self._order))

    def load_fallback_map(self, path: Union[str, Path]) -> bool:
        """
        Use a JSON ``{bssid: column_index}`` map as the order, unless a
        reference order is already set.

        Returns:
            True if the map was applied.
        """
        if self._order:
            logger.debug("Reference order already set; ignoring fallback map %s", path)
            return False
        self.set_reference_order(load_bssid_map(path))
        return True

    @property
    def bssid_order(self) -> Tuple[str, ...]:
        return tuple(self._order)

    @property
    def feature_count(self) -> int:
        return len(self._order)

    def build_vector(self, scan: ScanLike) -> Fingerprint:
        """
        Build the dense RSSI vector for a live scan.

        Args:
            scan: WifiScan, ``{bssid: rssi}`` mapping, or iterable of
                  ScanResult / (bssid, rssi) pairs.

        Returns:
            Vector of shape (N,) in canonical order; unseen access points
            carry the sentinel value.

        Raises:
            NotConfigured: If no canonical order is set.
        """
        if not self._order:
            raise NotConfigured("BSSID order is empty; load the reference table first")

        readings = scan_to_dict(scan)
        vector = np.full(len(self._order), self.missing_rssi_dbm)
        matched = 0
        for bssid, rssi in readings.items():
            i = self._index.get(bssid)
            if i is not None:
                vector[i] = rssi
                matched += 1

        logger.debug(
            "Built feature vector (len=%d): %d of %d scanned APs matched",
            len(vector), matched, len(readings),
        )
        return vector


def load_bssid_map(path: Union[str, Path]) -> List[str]:
    """
    Read a ``{bssid: column_index}`` JSON map and return BSSIDs in column order.

    Raises:
        ParseError: If the file is unreadable or not such a map.
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as exc:
        raise ParseError(f"Cannot read BSSID map {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ParseError(f"BSSID map {path} is not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise ParseError(f"BSSID map {path} must be a JSON object")
    try:
        ordered = sorted(data.items(), key=lambda kv: int(kv[1]))
    except (TypeError, ValueError) as exc:
        raise ParseError(f"BSSID map {path} has non-integer column indices") from exc
    return [str(bssid).lower() for bssid, _ in ordered]
