"""
ImputeGenius - Unit Tests for Dataset Preparation
"""

import numpy as np
import pandas as pd
import pytest

from agents.imputation.dataset import coerce_records, prepare_dataset
from core.exceptions import DataValidationError, EmptyDatasetError


class TestCoerceRecords:
    """Accepted dataset shapes"""

    @pytest.mark.parametrize("dataset", [None, [], pd.DataFrame()])
    def test_empty_inputs(self, dataset):
        with pytest.raises(EmptyDatasetError):
            coerce_records(dataset)

    def test_mapping_is_rejected(self):
        with pytest.raises(DataValidationError):
            coerce_records({"a": 1})

    def test_non_mapping_rows_are_rejected(self):
        with pytest.raises(DataValidationError) as exc_info:
            coerce_records([{"a": 1}, 5, "x"])
        assert exc_info.value.details["invalid_rows"] == [1, 2]

    def test_dataframe_input(self):
        frame = pd.DataFrame({"a": [1, 2]}, index=[10, 20])
        assert coerce_records(frame) == [{"a": 1}, {"a": 2}]


class TestPrepareDataset:
    """Aligned frames, mask and schema"""

    def test_shapes_and_schema(self, mixed_records):
        prepared = prepare_dataset(mixed_records)

        assert prepared.n_rows == 10
        assert prepared.fields == ["amount", "qty", "region"]
        assert prepared.field_types == {"amount": "numeric", "qty": "numeric", "region": "categorical"}
        assert prepared.numeric_fields == ["amount", "qty"]

    def test_mask_counts_blank_strings(self, mixed_records):
        prepared = prepare_dataset(mixed_records)

        assert prepared.missing_count("region") == 2
        assert prepared.total_missing == 4
        assert prepared.fields_with_missing == ["amount", "qty", "region"]
        assert prepared.missing_rows("region").tolist() == [4, 8]

    def test_working_values(self, mixed_records):
        prepared = prepare_dataset(mixed_records)

        assert prepared.values["amount"].dtype == float
        assert np.isnan(prepared.values.at[3, "amount"])
        assert pd.isna(prepared.values.at[8, "region"])
        # raw keeps the original blank string
        assert prepared.raw.at[8, "region"] == ""

    def test_ragged_records(self):
        """Keys absent from a record count as missing"""
        prepared = prepare_dataset([{"a": 1, "b": 2}, {"a": 3}, {"b": 4, "c": "x"}])

        assert prepared.fields == ["a", "b", "c"]
        assert prepared.missing_count("c") == 2
        assert prepared.missing_rows("a").tolist() == [2]

    def test_imputable_fields_need_a_present_value(self):
        prepared = prepare_dataset([{"a": 1, "b": None}, {"a": None, "b": None}, {"a": 3, "b": None}])

        assert prepared.fields_with_missing == ["a", "b"]
        assert prepared.imputable_fields == ["a"]

    def test_numeric_matrix(self, numeric_records):
        prepared = prepare_dataset(numeric_records)
        matrix = prepared.numeric_matrix(["x", "y"])

        assert matrix.shape == (12, 2)
        assert np.isnan(matrix[2, 1])
        assert prepared.numeric_matrix([]).shape == (12, 0)

    def test_with_values_treats_fills_as_present(self, median_records):
        prepared = prepare_dataset(median_records)
        filled = prepared.values.copy()
        filled.at[3, "value"] = 6.0

        view = prepared.with_values(filled)
        assert view.total_missing == 0
        assert view.records is prepared.records
        assert prepared.total_missing == 1

    def test_explicit_field_types(self):
        prepared = prepare_dataset([{"code": "1"}, {"code": "2"}], field_types={"code": "categorical"})

        assert prepared.field_types == {"code": "categorical"}
        assert prepared.values.at[0, "code"] == "1"
