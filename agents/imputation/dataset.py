# agents/imputation/dataset.py
"""
Prepared view of a record-oriented dataset.

Records are read once into three aligned frames (row i == record i):

    raw     original values, untouched
    values  working values: numeric fields as float64, others as object,
            every missing cell as NaN
    mask    True where the original cell is missing

plus the field -> kind schema sniffed from the raw values. Estimators read
``values``/``mask`` and never re-infer types.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field as dc_field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from agents.imputation.schemas import FieldKind
from core.exceptions import DataValidationError, EmptyDatasetError
from core.utils import collect_fields, infer_schema, missing_mask, safe_to_numeric

__all__ = ["PreparedDataset", "coerce_records", "prepare_dataset"]


def coerce_records(dataset: Any) -> List[Mapping[str, Any]]:
    """
    Normalise the accepted dataset shapes to a list of mappings.

    Raises:
        EmptyDatasetError: dataset is None or has no rows.
        DataValidationError: dataset is not a sequence of mappings.
    """
    if dataset is None:
        raise EmptyDatasetError("No data provided for imputation")

    if isinstance(dataset, pd.DataFrame):
        if dataset.empty and len(dataset.index) == 0:
            raise EmptyDatasetError("No data provided for imputation")
        frame = dataset.reset_index(drop=True)
        frame.columns = [str(c) for c in frame.columns]
        return frame.to_dict(orient="records")

    if isinstance(dataset, (str, bytes, Mapping)):
        raise DataValidationError(
            "Dataset must be a sequence of records",
            details={"received": type(dataset).__name__},
        )

    try:
        records = list(dataset)
    except TypeError as e:
        raise DataValidationError(
            "Dataset must be a sequence of records",
            details={"received": type(dataset).__name__},
            cause=e,
        ) from e

    if not records:
        raise EmptyDatasetError("No data provided for imputation")

    bad = [i for i, r in enumerate(records) if not isinstance(r, Mapping)]
    if bad:
        raise DataValidationError(
            "Every record must be a mapping of field name to value",
            details={"invalid_rows": bad[:10], "n_invalid": len(bad)},
        )
    return records


@dataclass
class PreparedDataset:
    """Aligned raw / working / mask frames and the field schema."""

    records: List[Mapping[str, Any]]
    fields: List[str]
    raw: pd.DataFrame
    values: pd.DataFrame
    mask: pd.DataFrame
    field_types: Dict[str, FieldKind] = dc_field(default_factory=dict)

    # ───────────────────────────────────────────────────────────────────
    # Shape
    # ───────────────────────────────────────────────────────────────────

    @property
    def n_rows(self) -> int:
        return len(self.records)

    @property
    def n_fields(self) -> int:
        return len(self.fields)

    @property
    def total_missing(self) -> int:
        return int(self.mask.to_numpy().sum()) if self.fields else 0

    # ───────────────────────────────────────────────────────────────────
    # Fields
    # ───────────────────────────────────────────────────────────────────

    def is_numeric(self, field: str) -> bool:
        return self.field_types.get(field) == "numeric"

    @property
    def numeric_fields(self) -> List[str]:
        return [f for f in self.fields if self.is_numeric(f)]

    def missing_count(self, field: str) -> int:
        return int(self.mask[field].sum())

    def present_count(self, field: str) -> int:
        return self.n_rows - self.missing_count(field)

    @property
    def fields_with_missing(self) -> List[str]:
        """Fields that have at least one missing cell, in field order."""
        return [f for f in self.fields if self.missing_count(f) > 0]

    @property
    def imputable_fields(self) -> List[str]:
        """Fields with at least one missing and at least one present value."""
        return [f for f in self.fields_with_missing if self.present_count(f) > 0]

    def missing_rows(self, field: str) -> np.ndarray:
        return np.flatnonzero(self.mask[field].to_numpy())

    def present_rows(self, field: str) -> np.ndarray:
        return np.flatnonzero(~self.mask[field].to_numpy())

    def numeric_matrix(self, fields: Sequence[str]) -> np.ndarray:
        """float matrix (n_rows x len(fields)) with NaN for missing cells."""
        if not fields:
            return np.empty((self.n_rows, 0))
        return self.values[list(fields)].to_numpy(dtype=float)

    # ───────────────────────────────────────────────────────────────────
    # Derivation
    # ───────────────────────────────────────────────────────────────────

    def with_values(self, values: pd.DataFrame) -> "PreparedDataset":
        """
        A view in which ``values`` are the observed data (cells filled by a
        previous estimator count as present). Schema and records are shared.
        """
        mask = values.isna()
        return PreparedDataset(
            records=self.records,
            fields=self.fields,
            raw=self.raw,
            values=values,
            mask=mask,
            field_types=self.field_types,
        )


def prepare_dataset(dataset: Any, field_types: Optional[Dict[str, FieldKind]] = None) -> PreparedDataset:
    """
    Build a PreparedDataset from records (or a DataFrame).

    Raises:
        EmptyDatasetError / DataValidationError: see ``coerce_records``.
    """
    records = coerce_records(dataset)
    fields = collect_fields(records)

    index = pd.RangeIndex(len(records))
    if fields:
        rows = [{str(k): v for k, v in r.items()} for r in records]
        raw = pd.DataFrame(
            [[r.get(f) for f in fields] for r in rows],
            columns=fields,
            index=index,
            dtype=object,
        )
    else:
        raw = pd.DataFrame(index=index)

    mask = missing_mask(raw) if fields else pd.DataFrame(index=raw.index)
    schema = dict(field_types) if field_types else infer_schema(raw)

    values = raw.where(~mask, np.nan) if fields else raw.copy()
    for f in fields:
        if schema.get(f) == "numeric":
            values[f] = safe_to_numeric(raw[f])
        else:
            values[f] = values[f].astype(object)

    return PreparedDataset(
        records=records,
        fields=fields,
        raw=raw,
        values=values,
        mask=mask,
        field_types=schema,
    )
