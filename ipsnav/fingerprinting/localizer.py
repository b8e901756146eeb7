"""Wi-Fi fingerprint localizer: live scan -> absolute (x, y)."""

import logging
from pathlib import Path
from typing import Optional, Tuple, Union

import numpy as np

from ipsnav.config import LocalizerConfig
from ipsnav.exceptions import NoReferenceData
from ipsnav.fingerprinting.dataset import load_reference_table
from ipsnav.fingerprinting.deterministic import knn_localize
from ipsnav.fingerprinting.features import FeatureVectorBuilder, ScanLike
from ipsnav.fingerprinting.types import Fingerprint, ReferenceTable

logger = logging.getLogger(__name__)


class FingerprintLocalizer:
    """
    Weighted k-NN localizer over an immutable reference table.

    The table is loaded once; its header seeds the feature builder so
    live vectors always share the table's column order.

    Usage:
        >>> localizer = FingerprintLocalizer.from_csv("referencepoints.csv")  # doctest: +SKIP
        >>> x, y = localizer.predict({"a4:2b:b0:11:22:33": -48.0})             # doctest: +SKIP

    Errors raised by ``predict`` (NotConfigured, NoReferenceData,
    NoNeighborsFound) all derive from LocalizationUnavailable; callers
    skip the cycle and keep their last estimate.
    """

    def __init__(
        self,
        table: Optional[ReferenceTable] = None,
        config: Optional[LocalizerConfig] = None,
    ):
        self.config = config or LocalizerConfig()
        self.feature_builder = FeatureVectorBuilder(missing_rssi_dbm=self.config.missing_rssi_dbm)
        self._table: Optional[ReferenceTable] = None
        if table is not None:
            self._install(table)

    @classmethod
    def from_csv(
        cls, path: Union[str, Path], config: Optional[LocalizerConfig] = None
    ) -> "FingerprintLocalizer":
        localizer = cls(config=config)
        localizer.load(path)
        return localizer

    def _install(self, table: ReferenceTable) -> None:
        self._table = table
        self.feature_builder.set_reference_order(table.ap_ids)

    def load(self, path: Union[str, Path]) -> ReferenceTable:
        """Load the reference table from CSV; no-op if one is already loaded."""
        if self._table is not None:
            logger.debug("Reference table already loaded, ignoring %s", path)
            return self._table
        self._install(load_reference_table(path, missing_rssi_dbm=self.config.missing_rssi_dbm))
        return self._table

    @property
    def table(self) -> Optional[ReferenceTable]:
        return self._table

    @property
    def ap_ids(self) -> Tuple[str, ...]:
        return self._table.ap_ids if self._table is not None else ()

    def predict_vector(self, z: Fingerprint) -> np.ndarray:
        """Position estimate for an already aligned fingerprint vector."""
        if self._table is None:
            raise NoReferenceData("No reference table loaded")
        return knn_localize(
            z,
            self._table,
            k=self.config.k,
            eps=self.config.eps,
            length_mismatch_penalty=self.config.length_mismatch_penalty,
        )

    def predict(self, scan: ScanLike) -> Tuple[float, float]:
        """
        Position estimate for a live scan.

        Args:
            scan: WifiScan, ``{bssid: rssi}`` mapping, or iterable of
                  ScanResult / (bssid, rssi) pairs.

        Returns:
            (x, y) in floor-local meters.

        Raises:
            NotConfigured: No canonical BSSID order (no table loaded).
            NoReferenceData: Table empty.
            NoNeighborsFound: No usable reference rows.
        """
        z = self.feature_builder.build_vector(scan)
        x_hat = self.predict_vector(z)
        x, y = float(x_hat[0]), float(x_hat[1])
        logger.debug("Predicted position x=%.2f y=%.2f", x, y)
        return (x, y)
