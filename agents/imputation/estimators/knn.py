# agents/imputation/estimators/knn.py
"""
Nearest-neighbour imputation.

Distance between two rows is the mean, over the other fields observed in
both rows, of the absolute difference (numeric fields, raw scale) or a 0/1
mismatch (every other kind). Rows sharing no observed field are infinitely
far apart.

    k = max(1, min(knn_max_neighbors, n_rows // 10))

Numeric targets take the inverse-distance weighted mean of the k nearest
donors (plain mean when every neighbour is infinitely far); other kinds
take the neighbours' mode, nearest first on ties.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List

import numpy as np

from agents.imputation.dataset import PreparedDataset
from agents.imputation.estimators.base import Cell, FieldwiseEstimator
from agents.imputation.schemas import ImputationConfig
from agents.imputation.scoring import (
    KNN_DISTANCE_EPSILON,
    KNN_ROWS_PER_NEIGHBOR,
    knn_confidence,
)
from core.utils import first_mode

__all__ = ["KNNEstimator", "neighbor_count"]


def neighbor_count(n_rows: int, max_neighbors: int) -> int:
    return max(1, min(max_neighbors, n_rows // KNN_ROWS_PER_NEIGHBOR))


@dataclass
class _DistanceInputs:
    numeric_fields: List[str]
    numeric: np.ndarray            # float, NaN where missing
    other_fields: List[str]
    other: np.ndarray              # object
    other_present: np.ndarray      # bool


class KNNEstimator(FieldwiseEstimator):
    """🧭 k-nearest-neighbour imputation over mixed field kinds."""

    name = "knn"

    def prepare_state(self, prepared: PreparedDataset, config: ImputationConfig) -> _DistanceInputs:
        numeric_fields = prepared.numeric_fields
        other_fields = [f for f in prepared.fields if not prepared.is_numeric(f)]
        return _DistanceInputs(
            numeric_fields=numeric_fields,
            numeric=prepared.numeric_matrix(numeric_fields),
            other_fields=other_fields,
            other=prepared.values[other_fields].to_numpy(dtype=object) if other_fields
            else np.empty((prepared.n_rows, 0), dtype=object),
            other_present=~prepared.mask[other_fields].to_numpy(dtype=bool) if other_fields
            else np.empty((prepared.n_rows, 0), dtype=bool),
        )

    # ───────────────────────────────────────────────────────────────────
    # Distances
    # ───────────────────────────────────────────────────────────────────

    @staticmethod
    def distances(state: _DistanceInputs, row: int, donors: np.ndarray, exclude: str) -> np.ndarray:
        """Mean per-field distance from ``row`` to each donor, ignoring ``exclude``."""
        total = np.zeros(len(donors))
        count = np.zeros(len(donors))

        num_cols = [j for j, f in enumerate(state.numeric_fields) if f != exclude]
        if num_cols:
            a = state.numeric[row, num_cols]
            b = state.numeric[np.ix_(donors, num_cols)]
            diff = np.abs(b - a)
            comparable = ~np.isnan(diff)
            total += np.where(comparable, diff, 0.0).sum(axis=1)
            count += comparable.sum(axis=1)

        other_cols = [j for j, f in enumerate(state.other_fields) if f != exclude]
        if other_cols:
            a = state.other[row, other_cols]
            b = state.other[np.ix_(donors, other_cols)]
            comparable = state.other_present[np.ix_(donors, other_cols)] & state.other_present[row, other_cols]
            mismatch = np.asarray(b != a, dtype=bool) & comparable
            total += mismatch.sum(axis=1)
            count += comparable.sum(axis=1)

        out = np.full(len(donors), np.inf)
        has = count > 0
        out[has] = total[has] / count[has]
        return out

    # ───────────────────────────────────────────────────────────────────
    # Field
    # ───────────────────────────────────────────────────────────────────

    def impute_field(
        self,
        field: str,
        prepared: PreparedDataset,
        config: ImputationConfig,
        state: _DistanceInputs,
    ) -> List[Cell]:
        donors = prepared.present_rows(field)
        k = neighbor_count(prepared.n_rows, config.knn_max_neighbors)
        numeric = prepared.is_numeric(field)
        target = prepared.values[field].to_numpy(dtype=float if numeric else object)

        cells: List[Cell] = []
        for row in prepared.missing_rows(field):
            dist = self.distances(state, int(row), donors, field)
            order = np.argsort(dist, kind="stable")[:k]
            nearest = dist[order]
            neighbours = target[donors[order]]

            if numeric:
                if np.all(np.isinf(nearest)):
                    value: Any = float(np.mean(neighbours))
                else:
                    weights = 1.0 / (nearest + KNN_DISTANCE_EPSILON)
                    value = float(np.sum(weights * neighbours) / np.sum(weights))
            else:
                value = first_mode(list(neighbours))

            cells.append((int(row), value, knn_confidence(float(nearest[0]))))
        return cells
