"""
ImputeGenius - Unit Tests for Core Utils
"""

import math

import numpy as np
import pandas as pd
import pytest

from core.utils import (
    collect_fields,
    detect_column_type,
    first_mode,
    format_percentage,
    infer_schema,
    is_missing_value,
    is_numeric_value,
    missing_mask,
    safe_to_numeric,
    timer,
    to_python_scalar,
)


class TestIsMissingValue:
    """Tests for canonical missing-value detection"""

    @pytest.mark.parametrize("value", [None, float("nan"), np.nan, pd.NA, pd.NaT, "", "   ", math.inf, -math.inf])
    def test_missing(self, value):
        """None, NaN, NA, NaT, blank strings and infinities are missing"""
        assert is_missing_value(value)

    @pytest.mark.parametrize("value", [0, 0.0, "0", "abc", False, True, np.int64(3)])
    def test_present(self, value):
        """Zero, False and non-blank strings are present"""
        assert not is_missing_value(value)


class TestIsNumericValue:
    """Tests for numeric value sniffing"""

    def test_numbers_and_numeric_strings(self):
        assert is_numeric_value(3)
        assert is_numeric_value(2.5)
        assert is_numeric_value(" 4.2 ")

    def test_booleans_are_not_numeric(self):
        """Booleans never count as numbers"""
        assert not is_numeric_value(True)
        assert not is_numeric_value(np.bool_(False))

    def test_non_numeric(self):
        assert not is_numeric_value("abc")
        assert not is_numeric_value(float("inf"))
        assert not is_numeric_value(None)


class TestDetectColumnType:
    """Tests for detect_column_type function"""

    def test_numeric_column(self):
        """Test detection of numeric column"""
        series = pd.Series([1, 2, 3, 4, 5])
        assert detect_column_type(series) == "numeric"

    def test_numeric_strings_with_gaps(self):
        """Missing cells are ignored during detection"""
        series = pd.Series(["1", None, "2.5", ""], dtype=object)
        assert detect_column_type(series) == "numeric"

    def test_categorical_column(self):
        """Test detection of categorical column"""
        series = pd.Series(['a', 'b', 'c', 'a', 'b'])
        assert detect_column_type(series) == "categorical"

    def test_boolean_column_is_categorical(self):
        series = pd.Series([True, False, True], dtype=object)
        assert detect_column_type(series) == "categorical"

    def test_datetime_column(self):
        """Test detection of datetime column"""
        series = pd.to_datetime(pd.Series(['2023-01-01', '2023-01-02', '2023-01-03']))
        assert detect_column_type(series) == "date"

    def test_date_strings(self):
        series = pd.Series(['2023-01-01', '2023-02-15', None], dtype=object)
        assert detect_column_type(series) == "date"

    def test_text_column(self):
        """Mostly unique strings over enough rows are free text"""
        series = pd.Series([f"comment number {i}" for i in range(12)])
        assert detect_column_type(series) == "text"

    def test_few_unique_strings_stay_categorical(self):
        """Below the row minimum, unique strings are still categorical"""
        series = pd.Series(['text1', 'text2', 'text3', 'text4', 'text5'])
        assert detect_column_type(series) == "categorical"

    def test_all_missing_column(self):
        series = pd.Series([None, "", None], dtype=object)
        assert detect_column_type(series) == "text"


class TestFrameHelpers:
    """Tests for record and frame helpers"""

    def test_collect_fields_first_seen_order(self):
        """Union of keys in first-seen order"""
        records = [{"b": 1, "a": 2}, {"c": 3, "a": 4}]
        assert collect_fields(records) == ["b", "a", "c"]

    def test_missing_mask(self):
        frame = pd.DataFrame({"a": [1, None, ""], "b": ["x", "y", np.nan]}, dtype=object)
        mask = missing_mask(frame)
        assert mask["a"].tolist() == [False, True, True]
        assert mask["b"].tolist() == [False, False, True]

    def test_safe_to_numeric(self):
        series = pd.Series(["1", " 2.5 ", None, "abc", ""], dtype=object)
        result = safe_to_numeric(series)
        assert result.dtype == float
        assert result.iloc[0] == 1.0
        assert result.iloc[1] == 2.5
        assert result.iloc[2:].isna().all()

    def test_infer_schema(self):
        frame = pd.DataFrame(
            {"num": [1, 2, None], "cat": ["a", "b", "a"], "day": ["2024-01-01", None, "2024-01-03"]},
            dtype=object,
        )
        assert infer_schema(frame) == {"num": "numeric", "cat": "categorical", "day": "date"}


class TestFormatters:
    """Tests for formatting and conversion functions"""

    def test_format_percentage(self):
        """Values are already on the 0-100 scale"""
        assert format_percentage(50) == "50.0%"
        assert format_percentage(12.345) == "12.3%"

    def test_format_percentage_decimals(self):
        """Test percentage formatting with custom decimals"""
        assert format_percentage(12.3456, decimals=2) == "12.35%"
        assert format_percentage(100, decimals=0) == "100%"

    def test_to_python_scalar(self):
        assert type(to_python_scalar(np.float64(1.5))) is float
        assert type(to_python_scalar(np.int64(2))) is int
        assert to_python_scalar("x") == "x"

    def test_first_mode_tie_prefers_first_seen(self):
        assert first_mode(["b", "a", "a", "b"]) == "b"
        assert first_mode(["x", "y", "y"]) == "y"
        assert first_mode([]) is None


class TestTimer:
    """Tests for the timing decorator"""

    def test_returns_result(self):
        @timer
        def square(x):
            return x * x

        assert square(4) == 16
        assert square.__name__ == "square"
