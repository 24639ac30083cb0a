# agents/imputation/estimators/neural_network.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  ImputeGenius — Similarity-Weighted Matrix Imputation                      ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Numeric fields min-max scaled (scikit-learn MinMaxScaler)               ║
║  ✓ Other fields encoded as integer codes (pandas.factorize)                ║
║  ✓ Every donor row votes with its mean per-field similarity                ║
║  ✓ Result mapped back to the original scale / label                        ║
║  ✓ Native async entry point                                                ║
╚════════════════════════════════════════════════════════════════════════════╝

Registered as ``neural_network``: a lightweight, deterministic stand-in for
denoising-autoencoder style imputation; no network is trained.

Similarity of a donor row to the row being filled, over the other fields
observed in both:

    sim = mean(1 - |a - b| / (1 + |a| + |b|))

Donors sharing no observed field with the row do not vote; a row with no
voting donor stays missing. The estimate is the similarity-weighted mean
of the donors' (encoded) target values.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field as dc_field
from typing import Any, Dict, List

import numpy as np
import pandas as pd
from sklearn.preprocessing import MinMaxScaler

from agents.imputation.dataset import PreparedDataset
from agents.imputation.estimators.base import Cell, EstimatorOutput, FieldwiseEstimator
from agents.imputation.schemas import ImputationConfig
from agents.imputation.scoring import MIN_TRAINING_ROWS, similarity_confidence
from core.exceptions import InsufficientDataError

__all__ = ["NeuralNetworkEstimator", "EncodedMatrix", "encode_matrix", "row_similarity"]


# ═══════════════════════════════════════════════════════════════════════════
# Encoding
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class EncodedMatrix:
    """All fields as one float matrix (NaN = missing) plus the inverse maps."""

    fields: List[str]
    matrix: np.ndarray
    scale_min: Dict[str, float] = dc_field(default_factory=dict)
    scale_range: Dict[str, float] = dc_field(default_factory=dict)
    labels: Dict[str, np.ndarray] = dc_field(default_factory=dict)

    def column(self, field: str) -> int:
        return self.fields.index(field)

    def decode(self, field: str, value: float) -> Any:
        if field in self.labels:
            uniques = self.labels[field]
            code = int(np.clip(round(value), 0, len(uniques) - 1))
            return uniques[code]
        return self.scale_min[field] + value * self.scale_range[field]


def encode_matrix(prepared: PreparedDataset) -> EncodedMatrix:
    fields = prepared.fields
    encoded = EncodedMatrix(fields=list(fields), matrix=np.full((prepared.n_rows, len(fields)), np.nan))

    scalable = [f for f in prepared.numeric_fields if prepared.present_count(f) > 0]
    if scalable:
        scaler = MinMaxScaler()
        block = scaler.fit_transform(prepared.numeric_matrix(scalable))
        for j, f in enumerate(scalable):
            encoded.matrix[:, encoded.column(f)] = block[:, j]
            encoded.scale_min[f] = float(scaler.data_min_[j])
            encoded.scale_range[f] = float(scaler.data_range_[j])

    for f in fields:
        if prepared.is_numeric(f):
            continue
        codes, uniques = pd.factorize(prepared.values[f])
        column = codes.astype(float)
        column[codes < 0] = np.nan
        encoded.matrix[:, encoded.column(f)] = column
        encoded.labels[f] = np.asarray(uniques, dtype=object)

    return encoded


def row_similarity(row: np.ndarray, donors: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """
    Mean similarity of ``row`` to each donor row and the number of compared
    fields per donor (0 = not comparable).
    """
    comparable = ~np.isnan(donors) & ~np.isnan(row)
    a = np.where(comparable, row, 0.0)
    b = np.where(comparable, donors, 0.0)
    sim = 1.0 - np.abs(a - b) / (1.0 + np.abs(a) + np.abs(b))
    counts = comparable.sum(axis=1)
    totals = np.where(comparable, sim, 0.0).sum(axis=1)
    weights = np.zeros(len(donors))
    np.divide(totals, counts, out=weights, where=counts > 0)
    return weights, counts


# ═══════════════════════════════════════════════════════════════════════════
# Estimator
# ═══════════════════════════════════════════════════════════════════════════

class NeuralNetworkEstimator(FieldwiseEstimator):
    """🧠 Similarity-weighted donor averaging over the encoded matrix."""

    name = "neural_network"

    def prepare_state(self, prepared: PreparedDataset, config: ImputationConfig) -> EncodedMatrix:
        return encode_matrix(prepared)

    def impute_field(
        self,
        field: str,
        prepared: PreparedDataset,
        config: ImputationConfig,
        state: EncodedMatrix,
    ) -> List[Cell]:
        donors = prepared.present_rows(field)
        if len(donors) < MIN_TRAINING_ROWS:
            raise InsufficientDataError(
                f"Too few donor rows for '{field}'",
                details={"field": field, "rows": int(len(donors))},
            )

        target_col = state.column(field)
        others = [j for j in range(len(state.fields)) if j != target_col]
        donor_features = state.matrix[np.ix_(donors, others)]
        donor_targets = state.matrix[donors, target_col]

        cells: List[Cell] = []
        for row in prepared.missing_rows(field):
            weights, counts = row_similarity(state.matrix[row, others], donor_features)
            voting = counts > 0
            if not voting.any():
                continue

            w, v = weights[voting], donor_targets[voting]
            total = float(w.sum())
            estimate = float(np.dot(w, v) / total) if total > 0 else float(v.mean())
            cells.append((
                int(row),
                state.decode(field, estimate),
                similarity_confidence(total / len(w)),
            ))
        return cells

    async def aimpute(self, prepared: PreparedDataset, config: ImputationConfig) -> EstimatorOutput:
        output = self._start(prepared)
        state = self.prepare_state(prepared, config)
        for field in prepared.imputable_fields:
            self._fill_field(field, prepared, config, state, output)
            await asyncio.sleep(0)
        return self._finish(output)
