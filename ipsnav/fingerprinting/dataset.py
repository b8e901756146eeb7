"""Loading and saving of the fingerprint reference table.

CSV layout (exported by the offline survey tooling)::

    bssid_1,bssid_2,...,bssid_N,x,y
    -52,-71,...,-100,1.25,3.50
    ...

The header's first N columns define the canonical access point order;
the last two columns are the reference point coordinates in meters.
"""

import csv
import logging
import math
from pathlib import Path
from typing import List, Union

import numpy as np

from ipsnav.exceptions import ParseError
from ipsnav.fingerprinting.features import MISSING_RSSI_DBM
from ipsnav.fingerprinting.types import ReferenceTable

logger = logging.getLogger(__name__)


def _rssi_or_sentinel(cell: str, missing_rssi_dbm: float) -> float:
    try:
        value = float(cell)
    except ValueError:
        return missing_rssi_dbm
    return value if math.isfinite(value) else missing_rssi_dbm


def load_reference_table(
    path: Union[str, Path], missing_rssi_dbm: float = MISSING_RSSI_DBM
) -> ReferenceTable:
    """
    Load the reference fingerprint table from CSV.

    Malformed rows (wrong column count, non-numeric coordinates) are
    skipped with a warning; unparsable RSSI cells fall back to the
    sentinel. Only a missing or unusable header is fatal.

    Args:
        path: CSV file path.
        missing_rssi_dbm: Sentinel for unparsable RSSI cells.

    Returns:
        ReferenceTable; ``meta`` records the source and skipped row count.

    Raises:
        ParseError: If the file cannot be read or has no usable header.

    Examples:
        >>> table = load_reference_table("assets/model/referencepoints.csv")  # doctest: +SKIP
        >>> table.ap_ids[:2]                                                   # doctest: +SKIP
        ('a4:2b:b0:11:22:33', 'a4:2b:b0:11:22:34')
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            rows = list(csv.reader(f))
    except OSError as exc:
        raise ParseError(f"Cannot read reference table {path}: {exc}") from exc

    if not rows:
        raise ParseError(f"Reference table {path} is empty (no header)")

    header = [h.strip() for h in rows[0]]
    n_features = len(header) - 2
    if n_features < 1:
        raise ParseError(
            f"Reference table {path} header needs at least one BSSID column plus x,y; "
            f"got {len(header)} columns"
        )
    ap_ids = header[:n_features]

    features: List[List[float]] = []
    locations: List[List[float]] = []
    skipped = 0
    for line_no, row in enumerate(rows[1:], start=2):
        if not row or all(not cell.strip() for cell in row):
            continue
        if len(row) != n_features + 2:
            logger.warning(
                "%s:%d: expected %d columns, got %d; row skipped",
                path, line_no, n_features + 2, len(row),
            )
            skipped += 1
            continue
        try:
            x = float(row[n_features])
            y = float(row[n_features + 1])
        except ValueError:
            logger.warning("%s:%d: non-numeric coordinates; row skipped", path, line_no)
            skipped += 1
            continue
        if not (math.isfinite(x) and math.isfinite(y)):
            logger.warning("%s:%d: non-finite coordinates; row skipped", path, line_no)
            skipped += 1
            continue

        features.append([_rssi_or_sentinel(c, missing_rssi_dbm) for c in row[:n_features]])
        locations.append([x, y])

    table = ReferenceTable(
        ap_ids=tuple(ap_ids),
        features=np.array(features, dtype=float).reshape(-1, n_features),
        locations=np.array(locations, dtype=float).reshape(-1, 2),
        meta={"source": str(path), "skipped_rows": skipped, "unit": "dBm"},
    )
    logger.info(
        "Loaded %d reference points (%d APs) from %s, %d row(s) skipped",
        table.n_reference_points, table.n_features, path, skipped,
    )
    return table


def save_reference_table(table: ReferenceTable, path: Union[str, Path]) -> None:
    """
    Write a reference table in the CSV layout read by ``load_reference_table``.

    The parent directory is created if needed.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(list(table.ap_ids) + ["x", "y"])
        for features, (x, y) in zip(table.features, table.locations):
            writer.writerow([repr(float(v)) for v in features] + [repr(float(x)), repr(float(y))])
