"""Deterministic fingerprinting: weighted k-nearest-neighbour regression.

Key relations:
    - Distance: D(z, f_i) = ||z - f_i||_2 over the live and reference RSSI vectors
    - Neighbour set: K(z) = indices of the k smallest D(z, f_i), ties by table order
    - Estimate: x̂ = Σ w_i x_i / Σ w_i with w_i = 1 / (D(z, f_i) + ε)

Everything here is a pure function of its inputs: the same scan and
table always give the same estimate.
"""

import numpy as np

from ipsnav.exceptions import NoNeighborsFound, NoReferenceData
from ipsnav.fingerprinting.types import Fingerprint, Location, ReferenceTable


DEFAULT_LENGTH_MISMATCH_PENALTY = 1000.0


def pairwise_distances(
    z: np.ndarray,
    F: np.ndarray,
    length_mismatch_penalty: float = DEFAULT_LENGTH_MISMATCH_PENALTY,
) -> np.ndarray:
    """
    Compute Euclidean distances D(z, f_i) for all reference fingerprints.

    When the live vector and the reference rows differ in length (a
    stale table against a newer AP list, or the reverse), the distance
    is computed over the common leading dimensions and
    ``length_mismatch_penalty`` is added once per extra dimension. The
    lookup therefore still succeeds, but mismatched data never beats a
    well-aligned match.

    Args:
        z: Live fingerprint, shape (N,).
        F: Reference fingerprints, shape (M, N').
        length_mismatch_penalty: Penalty per dimension of |N - N'|.

    Returns:
        Distances, shape (M,). Rows containing NaN yield NaN.

    Raises:
        ValueError: If z is not 1D or F is not 2D.

    Examples:
        >>> z = np.array([-50.0, -60.0])
        >>> F = np.array([[-50.0, -60.0], [-53.0, -64.0]])
        >>> pairwise_distances(z, F)
        array([0., 5.])
    """
    z = np.asarray(z, dtype=float)
    F = np.asarray(F, dtype=float)
    if z.ndim != 1:
        raise ValueError(f"Query z must be 1D array, got shape {z.shape}")
    if F.ndim != 2:
        raise ValueError(f"Reference F must be 2D array (M, N), got shape {F.shape}")

    n = min(z.shape[0], F.shape[1])
    distances = np.linalg.norm(F[:, :n] - z[:n], axis=1)

    extra = abs(z.shape[0] - F.shape[1])
    if extra:
        distances = distances + length_mismatch_penalty * extra
    return distances


def k_nearest_indices(distances: np.ndarray, k: int) -> np.ndarray:
    """
    Indices of the ``k`` smallest finite distances.

    A stable sort keeps equal distances in table order. Non-finite
    distances (rows with NaN) are never selected, so fewer than ``k``
    indices come back when the table has fewer usable rows.
    """
    if k < 1:
        raise ValueError(f"k must be >= 1, got k={k}")
    candidates = np.flatnonzero(np.isfinite(distances))
    order = np.argsort(distances[candidates], kind="stable")
    return candidates[order[:k]]


def knn_localize(
    z: Fingerprint,
    table: ReferenceTable,
    k: int = 3,
    eps: float = 1e-6,
    length_mismatch_penalty: float = DEFAULT_LENGTH_MISMATCH_PENALTY,
) -> Location:
    """
    Weighted k-NN position estimate from a live fingerprint.

    Implements x̂ = Σ_{i ∈ K(z)} w_i x_i / Σ_{i ∈ K(z)} w_i with
    inverse-distance weights w_i = 1 / (D(z, f_i) + ε). ε keeps an exact
    match (D = 0) finite; it then dominates the average.

    Args:
        z: Live fingerprint, shape (N,).
        table: Reference table with M reference points.
        k: Number of neighbours; fewer are used if the table is smaller.
        eps: Added to each distance before inverting it.
        length_mismatch_penalty: See ``pairwise_distances``.

    Returns:
        Estimated (x, y), shape (2,).

    Raises:
        NoReferenceData: If the table has no rows.
        NoNeighborsFound: If no row yields a usable distance.

    Examples:
        >>> table = ReferenceTable(
        ...     ap_ids=("a", "b"),
        ...     features=np.array([[-40.0, -80.0], [-80.0, -40.0]]),
        ...     locations=np.array([[0.0, 0.0], [10.0, 0.0]]),
        ... )
        >>> knn_localize(np.array([-40.0, -80.0]), table, k=1)
        array([0., 0.])
    """
    if table.is_empty:
        raise NoReferenceData("Reference table is empty")

    distances = pairwise_distances(z, table.features, length_mismatch_penalty)
    nearest = k_nearest_indices(distances, k)
    if nearest.size == 0:
        raise NoNeighborsFound(
            f"No usable reference points among {table.n_reference_points} rows"
        )

    weights = 1.0 / (distances[nearest] + eps)
    locations = table.locations[nearest]

    # Averaging offsets from the closest neighbour keeps the estimate
    # exactly on it when all neighbours share one location.
    anchor = locations[0]
    offset = np.sum(weights[:, np.newaxis] * (locations - anchor), axis=0) / np.sum(weights)
    return anchor + offset
