"""Wi-Fi fingerprint localization.

Maps a live scan to an absolute floor position with weighted k-nearest-
neighbour regression over a precomputed reference table (raw RSSI in
dBm, -100 for unseen access points).

Main components:
    - ReferenceTable, ScanResult, WifiScan: data structures
    - load_reference_table / save_reference_table: CSV I/O
    - FeatureVectorBuilder: aligns scans to the canonical BSSID order
    - pairwise_distances, knn_localize: the regression itself
    - FingerprintLocalizer: table + builder + k-NN behind one call

Example usage:
    >>> from ipsnav.fingerprinting import FingerprintLocalizer
    >>> localizer = FingerprintLocalizer.from_csv("referencepoints.csv")  # doctest: +SKIP
    >>> localizer.predict({"aa:bb:cc:dd:ee:01": -52.0})                   # doctest: +SKIP
    (12.4, 3.1)
"""

from .dataset import load_reference_table, save_reference_table
from .deterministic import k_nearest_indices, knn_localize, pairwise_distances
from .features import (
    MISSING_RSSI_DBM,
    FeatureVectorBuilder,
    load_bssid_map,
    scan_to_dict,
)
from .localizer import FingerprintLocalizer
from .types import Fingerprint, Location, ReferenceTable, ScanResult, WifiScan, empty_table

__all__ = [
    # Types
    "ReferenceTable",
    "ScanResult",
    "WifiScan",
    "Fingerprint",
    "Location",
    "empty_table",
    # I/O
    "load_reference_table",
    "save_reference_table",
    "load_bssid_map",
    # Feature construction
    "MISSING_RSSI_DBM",
    "FeatureVectorBuilder",
    "scan_to_dict",
    # k-NN
    "pairwise_distances",
    "k_nearest_indices",
    "knn_localize",
    "FingerprintLocalizer",
]
