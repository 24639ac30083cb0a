# agents/imputation/estimators/central_tendency.py
"""Median fill for numeric fields, most-frequent fill for everything else."""

from __future__ import annotations

from typing import Any, List

import numpy as np

from agents.imputation.dataset import PreparedDataset
from agents.imputation.estimators.base import Cell, FieldwiseEstimator
from agents.imputation.schemas import ImputationConfig
from agents.imputation.scoring import CENTRAL_TENDENCY_CONFIDENCE
from core.utils import first_mode

__all__ = ["MeanMedianEstimator", "central_value"]


def central_value(prepared: PreparedDataset, field: str) -> Any:
    """Median of the present values (numeric) or their first-seen mode."""
    present = prepared.values[field][~prepared.mask[field]]
    if prepared.is_numeric(field):
        if present.empty:
            return None
        return float(np.median(present.to_numpy(dtype=float)))
    return first_mode(present.tolist())


class MeanMedianEstimator(FieldwiseEstimator):
    """
    📏 Central tendency imputation.

    Ignores every other field, hence the fixed confidence.
    """

    name = "mean_median"

    def impute_field(
        self,
        field: str,
        prepared: PreparedDataset,
        config: ImputationConfig,
        state: Any,
    ) -> List[Cell]:
        fill = central_value(prepared, field)
        return [
            (int(row), fill, CENTRAL_TENDENCY_CONFIDENCE)
            for row in prepared.missing_rows(field)
        ]
