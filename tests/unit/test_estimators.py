"""
ImputeGenius - Unit Tests for Imputation Estimators
"""

import asyncio

import numpy as np
import pytest

from agents.imputation.dataset import prepare_dataset
from agents.imputation.estimators import (
    ESTIMATORS,
    BaseEstimator,
    FieldwiseEstimator,
    KNNEstimator,
    MeanMedianEstimator,
    MICEEstimator,
    NeuralNetworkEstimator,
    RandomForestEstimator,
    RegressionEstimator,
    get_estimator,
)
from agents.imputation.estimators.knn import neighbor_count
from agents.imputation.estimators.mice import cell_changed
from agents.imputation.estimators.neural_network import encode_matrix, row_similarity
from agents.imputation.estimators.random_forest import fit_stump, gini, predictor_matrix, variance
from agents.imputation.schemas import ESTIMATOR_METHODS, ImputationConfig
from core.exceptions import ConfigurationError


def _by_cell(output):
    return {(r.field, r.row_index): r for r in output.records}


@pytest.fixture
def neighbour_records():
    """Row 3 matches row 1 exactly on a and c; row 4 matches row 2 on a and b."""
    return [
        {"a": 1.0, "b": 10.0, "c": "x"},
        {"a": 2.0, "b": 20.0, "c": "y"},
        {"a": 3.0, "b": 30.0, "c": "x"},
        {"a": 2.0, "b": None, "c": "y"},
        {"a": 3.0, "b": 30.0, "c": None},
    ]


# ═══════════════════════════════════════════════════════════════════════════
# Registry
# ═══════════════════════════════════════════════════════════════════════════

class TestRegistry:
    """Estimator lookup"""

    def test_every_method_is_registered(self):
        assert set(ESTIMATORS) == set(ESTIMATOR_METHODS)

    def test_get_estimator(self):
        assert isinstance(get_estimator("knn"), KNNEstimator)
        assert get_estimator("mice").name == "mice"

    def test_unknown_estimator(self):
        with pytest.raises(ConfigurationError) as exc_info:
            get_estimator("magic")
        assert "magic" in exc_info.value.message


# ═══════════════════════════════════════════════════════════════════════════
# Shared loop behaviour
# ═══════════════════════════════════════════════════════════════════════════

class _ExplodingEstimator(FieldwiseEstimator):
    name = "exploding"

    def impute_field(self, field, prepared, config, state):
        if field == "y":
            raise RuntimeError("boom")
        return [(int(r), 0.0, 0.5) for r in prepared.missing_rows(field)]


class TestEstimatorLoop:
    """Per-field isolation and telemetry"""

    def test_failing_field_is_skipped(self, numeric_records, default_config):
        output = _ExplodingEstimator().impute(prepare_dataset(numeric_records), default_config)

        assert output.skipped_fields == ["y"]
        assert {r.field for r in output.records} == {"x", "z"}
        assert np.isnan(output.values.at[2, "y"])

    def test_telemetry(self, median_records, default_config):
        output = MeanMedianEstimator().impute(prepare_dataset(median_records), default_config)

        assert output.telemetry["estimator"] == "mean_median"
        assert output.telemetry["n_imputed"] == 1
        assert output.telemetry["fields"]["value"]["missing"] == 1
        assert output.telemetry["fields"]["value"]["filled"] == 1
        assert output.telemetry["elapsed_s"] >= 0

    def test_input_values_untouched(self, median_records, default_config):
        prepared = prepare_dataset(median_records)
        MeanMedianEstimator().impute(prepared, default_config)
        assert np.isnan(prepared.values.at[3, "value"])

    def test_fully_missing_field_is_not_attempted(self, default_config):
        records = [{"a": float(i), "b": None} for i in range(5)]
        records[2]["a"] = None

        output = MeanMedianEstimator().impute(prepare_dataset(records), default_config)
        assert [r.field for r in output.records] == ["a"]

    def test_joint_estimators_skip_the_field_loop(self):
        """MICE fills all fields at once and has no per-field hook"""
        assert not issubclass(MICEEstimator, FieldwiseEstimator)
        assert not hasattr(MICEEstimator, "impute_field")
        assert issubclass(RegressionEstimator, FieldwiseEstimator)

    def test_base_estimator_is_abstract(self):
        with pytest.raises(TypeError):
            BaseEstimator()


# ═══════════════════════════════════════════════════════════════════════════
# Central tendency
# ═══════════════════════════════════════════════════════════════════════════

class TestMeanMedian:
    """Median / mode fill"""

    def test_median_of_present_values(self, median_records, default_config):
        """Median of [1, 2, 3, 5, 6, 7, 8, 9, 10] is 6"""
        output = MeanMedianEstimator().impute(prepare_dataset(median_records), default_config)
        record = output.records[0]

        assert record.field == "value"
        assert record.row_index == 3
        assert record.imputed_value == 6.0
        assert record.original_value is None
        assert record.confidence == pytest.approx(0.6)
        assert record.method == "mean_median"

    def test_mode_for_categorical(self, mixed_records, default_config):
        output = MeanMedianEstimator().impute(prepare_dataset(mixed_records), default_config)
        cells = _by_cell(output)

        assert cells[("region", 4)].imputed_value == "north"
        assert cells[("region", 8)].imputed_value == "north"
        assert cells[("region", 8)].original_value == ""
        assert cells[("qty", 6)].imputed_value == 5.0
        assert cells[("amount", 3)].imputed_value == 60.0


# ═══════════════════════════════════════════════════════════════════════════
# Nearest neighbours
# ═══════════════════════════════════════════════════════════════════════════

class TestKNN:
    """Mixed-kind nearest neighbours"""

    @pytest.mark.parametrize(
        "n_rows,max_neighbors,expected",
        [(5, 5, 1), (30, 5, 3), (200, 5, 5), (200, 2, 2)],
    )
    def test_neighbor_count(self, n_rows, max_neighbors, expected):
        assert neighbor_count(n_rows, max_neighbors) == expected

    def test_exact_match_donor(self, neighbour_records, default_config):
        output = KNNEstimator().impute(prepare_dataset(neighbour_records), default_config)
        cells = _by_cell(output)

        assert cells[("b", 3)].imputed_value == pytest.approx(20.0)
        assert cells[("b", 3)].confidence == pytest.approx(1.0)
        assert cells[("c", 4)].imputed_value == "x"

    def test_distances_ignore_target(self, neighbour_records):
        prepared = prepare_dataset(neighbour_records)
        state = KNNEstimator().prepare_state(prepared, ImputationConfig())

        dist = KNNEstimator.distances(state, 3, np.array([0, 1, 2]), "b")
        np.testing.assert_allclose(dist, [1.0, 0.0, 1.0])

    def test_no_shared_fields_is_infinite(self):
        records = [{"a": 1.0, "b": None}, {"a": None, "b": 2.0}]
        prepared = prepare_dataset(records)
        state = KNNEstimator().prepare_state(prepared, ImputationConfig())

        dist = KNNEstimator.distances(state, 0, np.array([1]), "c")
        assert np.isinf(dist[0])


# ═══════════════════════════════════════════════════════════════════════════
# Regression
# ═══════════════════════════════════════════════════════════════════════════

class TestRegression:
    """OLS on the other numeric fields"""

    def test_predicts_linear_target(self, numeric_records, default_config):
        output = RegressionEstimator().impute(prepare_dataset(numeric_records), default_config)
        cells = _by_cell(output)

        assert cells[("y", 2)].imputed_value == pytest.approx(7.0, abs=0.5)
        assert cells[("y", 5)].imputed_value == pytest.approx(13.0, abs=0.5)
        assert cells[("y", 2)].confidence > 0.9
        assert output.n_imputed == 4

    def test_row_missing_a_predictor_stays_missing(self, default_config):
        records = [{"a": float(i), "b": 2.0 * i + 1, "c": float((i * 7) % 5)} for i in range(8)]
        records[5]["a"] = None
        records[5]["b"] = None

        output = RegressionEstimator().impute(prepare_dataset(records), default_config)

        assert output.records == []
        assert np.isnan(output.values.at[5, "a"])
        assert output.telemetry["fields"]["a"]["filled"] == 0
        assert output.skipped_fields == []

    def test_single_numeric_field_is_skipped(self, median_records, default_config):
        output = RegressionEstimator().impute(prepare_dataset(median_records), default_config)
        assert output.skipped_fields == ["value"]
        assert output.n_imputed == 0

    def test_singular_system_is_skipped(self, default_config):
        records = [{"a": float(i), "b": 2.0 * i, "t": float(i * i)} for i in range(6)]
        records[5]["t"] = None

        output = RegressionEstimator().impute(prepare_dataset(records), default_config)
        assert output.skipped_fields == ["t"]

    def test_categorical_target_is_skipped(self, mixed_records, default_config):
        """Non-numeric targets are reported, not silently dropped"""
        output = RegressionEstimator().impute(prepare_dataset(mixed_records), default_config)

        assert "region" not in {r.field for r in output.records}
        assert output.skipped_fields == ["region"]
        assert {r.field for r in output.records} == {"amount", "qty"}


# ═══════════════════════════════════════════════════════════════════════════
# Ensemble of stumps
# ═══════════════════════════════════════════════════════════════════════════

class TestRandomForest:
    """Seeded stump ensemble"""

    def test_impurity(self):
        assert variance(np.array([1.0, 1.0])) == 0.0
        assert variance(np.array([])) == 0.0
        assert gini(np.array(["a", "a", "b", "b"], dtype=object)) == pytest.approx(0.5)

    def test_fit_stump(self):
        x = np.array([[1.0], [2.0], [3.0], [4.0]])
        y = np.array([10.0, 10.0, 10.0, 20.0])
        stump = fit_stump(x, y, numeric=True)

        assert stump.split == 3.0
        assert stump.predict(np.array([2.0])) == 10.0
        assert stump.predict(np.array([5.0])) == 20.0
        # missing predictor follows the larger branch
        assert stump.predict(np.array([np.nan])) == 10.0

    def test_constant_predictor_has_no_split(self):
        x = np.array([[1.0], [1.0], [1.0]])
        assert fit_stump(x, np.array([1.0, 2.0, 3.0]), numeric=True) is None

    def test_deterministic_for_a_seed(self, numeric_records):
        config = ImputationConfig(random_state=7)
        first = RandomForestEstimator().impute(prepare_dataset(numeric_records), config)
        second = RandomForestEstimator().impute(prepare_dataset(numeric_records), config)

        assert [r.imputed_value for r in first.records] == [r.imputed_value for r in second.records]
        assert first.n_imputed == 4

    def test_values_and_confidence_bounds(self, numeric_records, default_config):
        output = RandomForestEstimator().impute(prepare_dataset(numeric_records), default_config)
        observed_y = [r["y"] for r in numeric_records if r["y"] is not None]

        for record in output.records:
            assert 0.5 <= record.confidence <= 0.9
            if record.field == "y":
                assert min(observed_y) <= record.imputed_value <= max(observed_y)

    def test_categorical_target(self, mixed_records, default_config):
        output = RandomForestEstimator().impute(prepare_dataset(mixed_records), default_config)
        regions = {r.imputed_value for r in output.records if r.field == "region"}
        assert regions <= {"north", "south"}
        assert len([r for r in output.records if r.field == "region"]) == 2

    def test_fit_stump_equality_split(self):
        """Factorize codes split on the most frequent code"""
        x = np.array([[0.0], [0.0], [1.0], [2.0]])
        y = np.array(["a", "a", "b", "b"], dtype=object)
        stump = fit_stump(x, y, numeric=False, categorical=[True])

        assert stump.categorical
        assert stump.split == 0.0
        assert stump.predict(np.array([0.0])) == "a"
        assert stump.predict(np.array([2.0])) == "b"
        assert stump.predict(np.array([np.nan])) == "a"

    def test_predictor_matrix_codes(self, mixed_records):
        x, categorical = predictor_matrix(prepare_dataset(mixed_records), ["qty", "region"])

        assert categorical == [False, True]
        assert x[0, 1] == x[1, 1] == 0.0
        assert x[2, 1] == 1.0
        assert np.isnan(x[4, 1])
        assert np.isnan(x[6, 0])

    def test_categorical_only_dataset(self, categorical_records, default_config):
        output = RandomForestEstimator().impute(prepare_dataset(categorical_records), default_config)
        cells = _by_cell(output)

        assert output.skipped_fields == []
        assert set(cells) == {("colour", 3), ("size", 3)}
        assert cells[("colour", 3)].imputed_value in {"red", "green", "blue"}
        assert cells[("size", 3)].imputed_value in {"small", "medium", "large"}

    def test_single_field_is_skipped(self, default_config):
        records = [{"colour": c} for c in ["red", "blue", None, "red"]]
        output = RandomForestEstimator().impute(prepare_dataset(records), default_config)
        assert output.skipped_fields == ["colour"]


# ═══════════════════════════════════════════════════════════════════════════
# Similarity-weighted matrix imputation
# ═══════════════════════════════════════════════════════════════════════════

class TestNeuralNetwork:
    """Similarity-weighted donor averaging"""

    def test_encode_matrix(self, mixed_records):
        encoded = encode_matrix(prepare_dataset(mixed_records))

        amount = encoded.matrix[:, encoded.column("amount")]
        assert np.nanmin(amount) == 0.0
        assert np.nanmax(amount) == pytest.approx(1.0)
        assert np.isnan(amount[3])

        region = encoded.matrix[:, encoded.column("region")]
        assert np.isnan(region[4])
        assert encoded.decode("region", region[0]) == "north"
        assert encoded.decode("amount", 1.0) == pytest.approx(100.0)

    def test_row_similarity(self):
        row = np.array([0.5, np.nan])
        donors = np.array([[0.5, 1.0], [np.nan, 0.0]])
        weights, counts = row_similarity(row, donors)

        assert counts.tolist() == [1, 0]
        assert weights[0] == pytest.approx(1.0)
        assert weights[1] == 0.0

    def test_fills_within_observed_range(self, mixed_records, default_config):
        output = NeuralNetworkEstimator().impute(prepare_dataset(mixed_records), default_config)
        cells = _by_cell(output)

        assert 10.0 <= cells[("amount", 3)].imputed_value <= 100.0
        assert cells[("region", 4)].imputed_value in {"north", "south"}
        for record in output.records:
            assert 0.6 <= record.confidence <= 0.95

    def test_too_few_donors_is_skipped(self, default_config):
        records = [{"a": float(i), "b": None} for i in range(6)]
        records[0]["b"] = 1.0
        records[1]["b"] = 2.0

        output = NeuralNetworkEstimator().impute(prepare_dataset(records), default_config)
        assert output.skipped_fields == ["b"]

    def test_async_matches_sync(self, mixed_records, default_config):
        prepared = prepare_dataset(mixed_records)
        sync_out = NeuralNetworkEstimator().impute(prepared, default_config)
        async_out = asyncio.run(NeuralNetworkEstimator().aimpute(prepared, default_config))

        assert [(r.field, r.row_index, r.imputed_value) for r in sync_out.records] == [
            (r.field, r.row_index, r.imputed_value) for r in async_out.records
        ]


# ═══════════════════════════════════════════════════════════════════════════
# Chained equations
# ═══════════════════════════════════════════════════════════════════════════

class TestMICE:
    """Iterative chained regressions"""

    def test_cell_changed(self):
        assert not cell_changed(1000.0, 1000.0 + 1e-7)
        assert cell_changed(1.0, 1.1)

    def test_fills_and_reports_iterations(self, numeric_records, default_config):
        output = MICEEstimator().impute(prepare_dataset(numeric_records), default_config)
        cells = _by_cell(output)

        assert output.n_imputed == 4
        assert cells[("y", 2)].imputed_value == pytest.approx(7.0, abs=0.5)
        assert cells[("y", 2)].confidence >= 0.7
        assert 1 <= output.telemetry["iterations"] <= default_config.max_iterations
        assert isinstance(output.telemetry["converged"], bool)
        assert output.telemetry["skipped_fields"] == []

    def test_single_pass_does_not_converge(self, numeric_records):
        config = ImputationConfig(max_iterations=1)
        output = MICEEstimator().impute(prepare_dataset(numeric_records), config)

        assert output.telemetry["iterations"] == 1
        assert output.telemetry["converged"] is False

    def test_non_numeric_fields_keep_mode(self, mixed_records, default_config):
        output = MICEEstimator().impute(prepare_dataset(mixed_records), default_config)
        cells = _by_cell(output)

        assert cells[("region", 4)].imputed_value == "north"
        assert cells[("region", 4)].confidence == pytest.approx(0.6)
        assert cells[("amount", 3)].method == "mice"

    def test_lone_field_keeps_initial_fill(self, median_records, default_config):
        """Without predictors the median initialisation is final"""
        output = MICEEstimator().impute(prepare_dataset(median_records), default_config)

        assert output.records[0].imputed_value == 6.0
        assert output.records[0].confidence == pytest.approx(0.6)
        assert output.telemetry["converged"] is True
