# agents/imputation/estimators/random_forest.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  ImputeGenius — Ensemble of Decision Stumps                                ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Bootstrap samples from a seeded generator (reproducible)                ║
║  ✓ One split per stump: median (numeric) or mode equality (other kinds)    ║
║  ✓ Variance reduction (numeric targets) / Gini gain (other kinds)          ║
║  ✓ Mean or majority vote across stumps                                     ║
╚════════════════════════════════════════════════════════════════════════════╝

Stump construction for a bootstrap sample:

    for every predictor observed in >= 2 sampled rows:
        numeric:  split = sorted(values)[len // 2], left = value <= split
        other:    split = most frequent code,     left = value == split
        right = the rest (both sides non-empty)
        score = impurity(target) - weighted impurity(left, right)
    keep the best-scoring predictor; leaves hold mean (numeric) or mode

Non-numeric predictors are turned into integer codes with ``pandas.factorize``
so categorical-only datasets can still grow stumps. At prediction time a row
missing the split predictor follows the branch that held more training rows.
The generator is created once per call from ``config.random_state``, so
identical inputs give identical outputs.

A field is skipped (left missing) when it has fewer than three observed
values, when it is the only field, or when no predictor varies enough to
split any bootstrap sample.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from agents.imputation.dataset import PreparedDataset
from agents.imputation.estimators.base import Cell, FieldwiseEstimator
from agents.imputation.schemas import ImputationConfig
from agents.imputation.scoring import MIN_TRAINING_ROWS, forest_confidence
from core.exceptions import InsufficientDataError
from core.utils import first_mode

__all__ = [
    "RandomForestEstimator",
    "DecisionStump",
    "fit_stump",
    "gini",
    "predictor_matrix",
    "variance",
]


# ═══════════════════════════════════════════════════════════════════════════
# Impurity
# ═══════════════════════════════════════════════════════════════════════════

def variance(values: np.ndarray) -> float:
    return float(np.var(values)) if len(values) else 0.0


def gini(values: np.ndarray) -> float:
    if len(values) == 0:
        return 0.0
    _, counts = np.unique(np.asarray([str(v) for v in values]), return_counts=True)
    p = counts / counts.sum()
    return float(1.0 - np.sum(p ** 2))


# ═══════════════════════════════════════════════════════════════════════════
# Stump
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DecisionStump:
    predictor: int          # column of the predictor matrix
    split: float
    left_value: Any
    right_value: Any
    left_size: int
    right_size: int
    categorical: bool = False   # equality split on a factorize code

    def goes_left(self, value: float) -> bool:
        if np.isnan(value):
            return self.left_size >= self.right_size
        if self.categorical:
            return value == self.split
        return value <= self.split

    def predict(self, x: np.ndarray) -> Any:
        return self.left_value if self.goes_left(x[self.predictor]) else self.right_value


def _leaf(values: np.ndarray, numeric: bool) -> Any:
    if numeric:
        return float(np.mean(values))
    return first_mode(list(values))


def _mode_code(codes: np.ndarray) -> float:
    # np.unique sorts, so ties go to the lowest (first-seen) code
    uniques, counts = np.unique(codes, return_counts=True)
    return float(uniques[int(np.argmax(counts))])


def fit_stump(
    x: np.ndarray,
    y: np.ndarray,
    numeric: bool,
    categorical: Optional[Sequence[bool]] = None,
) -> Optional[DecisionStump]:
    """
    Fit one stump on predictor matrix ``x`` (NaN = missing) and target ``y``.

    ``categorical[j]`` marks column j as factorize codes, split by equality
    with its most frequent code instead of at the median.

    Returns None when no predictor yields a split with two non-empty sides.
    """
    if categorical is None:
        categorical = [False] * x.shape[1]
    impurity = variance if numeric else gini
    best: Optional[DecisionStump] = None
    best_score = -np.inf

    for j in range(x.shape[1]):
        observed = ~np.isnan(x[:, j])
        if int(observed.sum()) < 2:
            continue
        xs, ys = x[observed, j], y[observed]
        if categorical[j]:
            split = _mode_code(xs)
            left = xs == split
        else:
            split = float(np.sort(xs)[len(xs) // 2])
            left = xs <= split
        n_left = int(left.sum())
        n_right = len(xs) - n_left
        if n_left == 0 or n_right == 0:
            continue

        weighted = (n_left * impurity(ys[left]) + n_right * impurity(ys[~left])) / len(xs)
        score = impurity(ys) - weighted
        if score > best_score:
            best_score = score
            best = DecisionStump(
                predictor=j,
                split=split,
                left_value=_leaf(ys[left], numeric),
                right_value=_leaf(ys[~left], numeric),
                left_size=n_left,
                right_size=n_right,
                categorical=bool(categorical[j]),
            )
    return best


def predictor_matrix(prepared: PreparedDataset, fields: Sequence[str]) -> Tuple[np.ndarray, List[bool]]:
    """
    Float matrix of ``fields`` (NaN = missing) and a per-column flag that is
    True for non-numeric fields, whose values are replaced by factorize codes.
    """
    columns: List[np.ndarray] = []
    categorical: List[bool] = []
    for f in fields:
        if prepared.is_numeric(f):
            columns.append(prepared.values[f].to_numpy(dtype=float))
            categorical.append(False)
            continue
        codes, _ = pd.factorize(prepared.values[f])
        column = codes.astype(float)
        column[codes < 0] = np.nan
        columns.append(column)
        categorical.append(True)
    if not columns:
        return np.empty((prepared.n_rows, 0)), categorical
    return np.column_stack(columns), categorical


# ═══════════════════════════════════════════════════════════════════════════
# Estimator
# ═══════════════════════════════════════════════════════════════════════════

class RandomForestEstimator(FieldwiseEstimator):
    """
    🌲 **Stump ensemble imputation**

    ``config.n_trees`` bootstrap stumps per field, split on any other field;
    confidence grows with the share of stumps that could actually be built.
    """

    name = "random_forest"

    def prepare_state(self, prepared: PreparedDataset, config: ImputationConfig) -> np.random.Generator:
        return np.random.default_rng(config.random_state)

    def impute_field(
        self,
        field: str,
        prepared: PreparedDataset,
        config: ImputationConfig,
        state: np.random.Generator,
    ) -> List[Cell]:
        rng = state
        numeric = prepared.is_numeric(field)
        predictors = [f for f in prepared.fields if f != field]
        train_rows = prepared.present_rows(field)

        if len(train_rows) < MIN_TRAINING_ROWS:
            raise InsufficientDataError(
                f"Too few observed values to train stumps for '{field}'",
                details={"field": field, "rows": int(len(train_rows))},
            )
        if not predictors:
            raise InsufficientDataError(
                f"No predictor fields available for '{field}'",
                details={"field": field},
            )

        x, categorical = predictor_matrix(prepared, predictors)
        y = prepared.values[field].to_numpy(dtype=float if numeric else object)

        stumps: List[DecisionStump] = []
        for _ in range(config.n_trees):
            sample = rng.choice(train_rows, size=len(train_rows), replace=True)
            stump = fit_stump(x[sample], y[sample], numeric, categorical)
            if stump is not None:
                stumps.append(stump)

        if not stumps:
            raise InsufficientDataError(
                f"No stump could be built for '{field}'",
                details={"field": field, "requested": config.n_trees},
            )

        confidence = forest_confidence(len(stumps), config.n_trees)
        cells: List[Cell] = []
        for row in prepared.missing_rows(field):
            votes = [s.predict(x[row]) for s in stumps]
            value = float(np.mean(votes)) if numeric else first_mode(votes)
            cells.append((int(row), value, confidence))
        return cells
