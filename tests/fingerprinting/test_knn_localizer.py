"""Unit tests for weighted k-NN fingerprint localization."""

import numpy as np
import pytest

from ipsnav.config import LocalizerConfig
from ipsnav.exceptions import (
    LocalizationUnavailable,
    NoNeighborsFound,
    NoReferenceData,
    NotConfigured,
)
from ipsnav.fingerprinting import (
    FingerprintLocalizer,
    ReferenceTable,
    ScanResult,
    WifiScan,
    empty_table,
    k_nearest_indices,
    knn_localize,
    pairwise_distances,
)


def _cluster_table():
    """Three identical rows at (5, 5) and two far-away rows."""
    return ReferenceTable(
        ap_ids=("ap1", "ap2", "ap3"),
        features=np.array(
            [
                [-90.0, -40.0, -90.0],
                [-50.0, -60.0, -70.0],
                [-50.0, -60.0, -70.0],
                [-50.0, -60.0, -70.0],
                [-40.0, -90.0, -90.0],
            ]
        ),
        locations=np.array([[20.0, 0.0], [5.0, 5.0], [5.0, 5.0], [5.0, 5.0], [0.0, 20.0]]),
    )


class TestPairwiseDistances:
    """Test suite for pairwise_distances()."""

    def test_euclidean(self):
        z = np.array([-50.0, -60.0])
        F = np.array([[-50.0, -60.0], [-53.0, -64.0]])

        np.testing.assert_allclose(pairwise_distances(z, F), [0.0, 5.0])

    def test_length_mismatch_penalised(self):
        z = np.array([-50.0, -60.0, -70.0])
        F = np.array([[-50.0, -60.0]])

        d = pairwise_distances(z, F, length_mismatch_penalty=1000.0)

        assert d[0] == pytest.approx(1000.0)

    def test_shape_validation(self):
        with pytest.raises(ValueError):
            pairwise_distances(np.zeros((2, 2)), np.zeros((2, 2)))
        with pytest.raises(ValueError):
            pairwise_distances(np.zeros(2), np.zeros(2))


class TestKNearestIndices:
    """Test suite for k_nearest_indices()."""

    def test_ties_in_table_order(self):
        d = np.array([3.0, 1.0, 1.0, 0.5, 1.0])

        np.testing.assert_array_equal(k_nearest_indices(d, 3), [3, 1, 2])

    def test_non_finite_excluded(self):
        d = np.array([np.nan, 2.0, np.inf, 1.0])

        np.testing.assert_array_equal(k_nearest_indices(d, 3), [3, 1])

    def test_invalid_k(self):
        with pytest.raises(ValueError):
            k_nearest_indices(np.array([1.0]), 0)


class TestKnnLocalize:
    """Test suite for knn_localize()."""

    def test_identical_cluster_predicts_exactly(self):
        table = _cluster_table()
        z = np.array([-52.0, -61.0, -69.0])

        x_hat = knn_localize(z, table, k=3)

        assert x_hat[0] == 5.0
        assert x_hat[1] == 5.0

    def test_exact_match_dominates(self):
        table = ReferenceTable(
            ap_ids=("a", "b"),
            features=np.array([[-40.0, -80.0], [-80.0, -40.0], [-60.0, -60.0]]),
            locations=np.array([[0.0, 0.0], [10.0, 0.0], [5.0, 5.0]]),
        )

        x_hat = knn_localize(np.array([-40.0, -80.0]), table, k=3)

        np.testing.assert_allclose(x_hat, [0.0, 0.0], atol=1e-4)

    def test_inverse_distance_weights(self):
        table = ReferenceTable(
            ap_ids=("a",),
            features=np.array([[-50.0], [-53.0]]),
            locations=np.array([[0.0, 0.0], [10.0, 0.0]]),
        )

        # d = 1 and 2 -> weights 1 and 0.5 -> x = 10 * 0.5 / 1.5
        x_hat = knn_localize(np.array([-51.0]), table, k=2)

        assert x_hat[0] == pytest.approx(10.0 / 3.0, rel=1e-5)
        assert x_hat[1] == pytest.approx(0.0)

    def test_fewer_rows_than_k(self):
        table = ReferenceTable(
            ap_ids=("a",), features=np.array([[-50.0]]), locations=np.array([[3.0, 4.0]])
        )

        np.testing.assert_allclose(knn_localize(np.array([-70.0]), table, k=3), [3.0, 4.0])

    def test_deterministic(self):
        table = _cluster_table()
        z = np.array([-60.0, -55.0, -80.0])

        first = knn_localize(z, table)
        for _ in range(5):
            np.testing.assert_array_equal(knn_localize(z, table), first)

    def test_empty_table(self):
        with pytest.raises(NoReferenceData):
            knn_localize(np.array([-50.0]), empty_table(("a",)))

    def test_all_rows_unusable(self):
        table = ReferenceTable(
            ap_ids=("a", "b"),
            features=np.array([[np.nan, -50.0], [-60.0, np.nan]]),
            locations=np.array([[0.0, 0.0], [1.0, 1.0]]),
        )

        with pytest.raises(NoNeighborsFound):
            knn_localize(np.array([-50.0, -50.0]), table)

    def test_errors_share_base_class(self):
        assert issubclass(NoReferenceData, LocalizationUnavailable)
        assert issubclass(NoNeighborsFound, LocalizationUnavailable)
        assert issubclass(NotConfigured, LocalizationUnavailable)


class TestFingerprintLocalizer:
    """Test suite for FingerprintLocalizer."""

    def test_predict_from_mapping_case_insensitive(self):
        localizer = FingerprintLocalizer(_cluster_table())

        x, y = localizer.predict({"AP1": -50.0, "ap2": -60.0, "Ap3": -70.0})

        assert (x, y) == (5.0, 5.0)

    def test_predict_from_wifi_scan(self):
        localizer = FingerprintLocalizer(_cluster_table())
        scan = WifiScan(
            t=1.0,
            results=(ScanResult("ap1", -50.0), ScanResult("ap2", -61.0), ScanResult("zz", -30.0)),
        )

        x, y = localizer.predict(scan)

        assert (x, y) == (5.0, 5.0)

    def test_without_table(self):
        localizer = FingerprintLocalizer()

        with pytest.raises(NotConfigured):
            localizer.predict({"ap1": -50.0})
        with pytest.raises(NoReferenceData):
            localizer.predict_vector(np.array([-50.0]))

    def test_config_k_used(self):
        localizer = FingerprintLocalizer(_cluster_table(), LocalizerConfig(k=1))
        z = np.array([-89.0, -41.0, -90.0])

        np.testing.assert_allclose(localizer.predict_vector(z), [20.0, 0.0])

    def test_from_csv_and_load_once(self, tmp_path):
        path = tmp_path / "rp.csv"
        path.write_text("AA:01,aa:02,x,y\n-40,-80,0,0\n-80,-40,10,0\n", encoding="utf-8")
        other = tmp_path / "other.csv"
        other.write_text("bb:01,x,y\n-40,1,1\n", encoding="utf-8")

        localizer = FingerprintLocalizer.from_csv(path)
        localizer.load(other)

        assert localizer.ap_ids == ("aa:01", "aa:02")
        assert localizer.feature_builder.bssid_order == ("aa:01", "aa:02")
        x, y = localizer.predict({"aa:01": -40.0, "aa:02": -80.0})
        assert x == pytest.approx(0.0, abs=1e-4)
