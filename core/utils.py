"""
ImputeGenius - Utility Functions
Missing-value canonicalisation, type sniffing and formatting helpers
"""

from __future__ import annotations

import math
import re
import time
from collections import Counter
from datetime import date, datetime
from functools import wraps
from numbers import Number
from typing import Any, Iterable, List, Literal, Mapping, Optional, Sequence

import numpy as np
import pandas as pd
from loguru import logger
from pandas.api import types as ptypes

FieldKind = Literal["numeric", "categorical", "date", "text"]

# ISO-like or d/m/y-like date strings, optionally followed by a time part
_DATE_PATTERN = re.compile(
    r"^\s*(\d{4}[-/.]\d{1,2}[-/.]\d{1,2}|\d{1,2}[-/.]\d{1,2}[-/.]\d{2,4})([ T]\d{1,2}:\d{2}(:\d{2}(\.\d+)?)?)?\s*(Z|[+-]\d{2}:?\d{2})?\s*$"
)


# ---------------------------------------------------------------------
# Missing values
# ---------------------------------------------------------------------
def is_missing_value(value: Any) -> bool:
    """
    True for None, NaN / NaT / pd.NA, +-inf and blank strings.
    """
    if value is None or value is pd.NA or value is pd.NaT:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (bool, np.bool_)):
        return False
    if isinstance(value, Number):
        try:
            return not math.isfinite(float(value))
        except (TypeError, ValueError, OverflowError):
            return False
    if isinstance(value, (np.datetime64, np.timedelta64)):
        return bool(np.isnat(value))
    return False


def missing_mask(frame: pd.DataFrame) -> pd.DataFrame:
    """Boolean frame, True where a cell is missing."""
    return frame.apply(lambda s: s.map(is_missing_value)).astype(bool)


def collect_fields(records: Iterable[Mapping[str, Any]]) -> List[str]:
    """Union of record keys in first-seen order."""
    seen: dict[str, None] = {}
    for record in records:
        for key in record.keys():
            seen.setdefault(str(key), None)
    return list(seen)


# ---------------------------------------------------------------------
# Converters & parsing
# ---------------------------------------------------------------------
def is_numeric_value(value: Any) -> bool:
    """True for finite real numbers and numeric strings (booleans excluded)."""
    if isinstance(value, (bool, np.bool_)):
        return False
    if isinstance(value, Number):
        return not is_missing_value(value)
    if isinstance(value, str):
        try:
            return math.isfinite(float(value.strip()))
        except ValueError:
            return False
    return False


def safe_to_numeric(series: pd.Series, downcast: Optional[str] = None) -> pd.Series:
    """
    Convert Series to float; non-convertible and missing values become NaN.
    """
    cleaned = series.map(lambda v: np.nan if is_missing_value(v) else v)
    cleaned = cleaned.map(lambda v: v.strip() if isinstance(v, str) else v)
    s = pd.to_numeric(cleaned, errors="coerce", downcast=downcast)
    return s.astype(float) if downcast is None else s


def is_date_value(value: Any) -> bool:
    """True for date/datetime objects and date-formatted strings."""
    if isinstance(value, (datetime, date, pd.Timestamp, np.datetime64)):
        return not is_missing_value(value)
    if isinstance(value, str):
        return bool(_DATE_PATTERN.match(value))
    return False


# ---------------------------------------------------------------------
# Type detection & inference
# ---------------------------------------------------------------------
def detect_column_type(series: pd.Series, text_ratio: float = 0.9, min_rows_for_text: int = 10) -> FieldKind:
    """
    Detect semantic type of a column of raw values: numeric, date, categorical or text.

    Missing cells are ignored. A column is numeric only when every present
    value is a real number (or numeric string); booleans are categorical.
    """
    present = [v for v in series.tolist() if not is_missing_value(v)]
    if not present:
        return "text"

    if ptypes.is_datetime64_any_dtype(series):
        return "date"
    if all(is_numeric_value(v) for v in present):
        return "numeric"
    if all(is_date_value(v) for v in present):
        return "date"

    n_unique = len({str(v) for v in present})
    n_total = len(present)
    if n_total >= min_rows_for_text and (n_unique / n_total) > text_ratio:
        return "text"
    return "categorical"


def infer_schema(frame: pd.DataFrame) -> dict[str, FieldKind]:
    """Field name -> semantic kind for every column of ``frame``."""
    return {str(col): detect_column_type(frame[col]) for col in frame.columns}


# ---------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------
def format_percentage(value: float, decimals: int = 1) -> str:
    """
    Format a percentage already expressed on the 0-100 scale.
    """
    return f"{float(value):.{decimals}f}%"


def to_python_scalar(value: Any) -> Any:
    """numpy scalars -> builtin Python scalars; everything else untouched."""
    if isinstance(value, np.generic):
        return value.item()
    return value


def first_mode(values: Sequence[Any]) -> Any:
    """Most frequent value; ties resolved in favour of the value seen first."""
    if len(values) == 0:
        return None
    return Counter(values).most_common(1)[0][0]


# ---------------------------------------------------------------------
# Timing decorator
# ---------------------------------------------------------------------
def timer(func):
    """Decorator to time function execution."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        result = func(*args, **kwargs)
        end = time.perf_counter()
        logger.debug(f"{func.__name__} executed in {end - start:.3f}s")
        return result

    return wrapper
