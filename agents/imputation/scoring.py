# agents/imputation/scoring.py
"""
Confidence heuristics and result-level quality scoring.

Every confidence constant used by the estimators lives here so it can be
tuned and tested independently of the estimator code. Confidences are
heuristic scores in [0, 1], not calibrated probabilities.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

import numpy as np

from agents.imputation.schemas import (
    ImputationStatistics,
    ImputedFieldRecord,
    QualityMetrics,
)

# ═══════════════════════════════════════════════════════════════════════════
# Confidence Constants
# ═══════════════════════════════════════════════════════════════════════════

# Central tendency ignores every other field: low, fixed confidence.
CENTRAL_TENDENCY_CONFIDENCE: float = 0.6

# Neighbour search: floor on the score derived from the nearest distance.
KNN_MIN_CONFIDENCE: float = 0.5
KNN_MAX_NEIGHBORS: int = 5
KNN_ROWS_PER_NEIGHBOR: int = 10
# Added to distances before inversion so identical rows get a finite weight.
KNN_DISTANCE_EPSILON: float = 1e-6

# Regression: floor below R².
REGRESSION_MIN_CONFIDENCE: float = 0.4

# Any fitted estimator needs at least this many training rows.
MIN_TRAINING_ROWS: int = 3

# Ensemble of stumps: 0.5 + 0.4 * (built / requested), capped at 0.9.
FOREST_BASE_CONFIDENCE: float = 0.5
FOREST_CONFIDENCE_SPAN: float = 0.4
FOREST_MAX_CONFIDENCE: float = 0.9
FOREST_DEFAULT_TREES: int = 10

# Similarity-weighted estimator: mean donor weight clamped to [0.6, 0.95].
SIMILARITY_MIN_CONFIDENCE: float = 0.6
SIMILARITY_MAX_CONFIDENCE: float = 0.95

# Chained equations: floor below the last R² of a model-set cell.
MICE_MIN_CONFIDENCE: float = 0.7
# Relative change below which a cell counts as unchanged between passes.
MICE_CONVERGENCE_TOLERANCE: float = 1e-9

# Diagnosis: pattern confidence = min(0.9, 2 * predictors / fields), 0.3 without predictors.
PATTERN_MAX_CONFIDENCE: float = 0.9
PATTERN_NO_PREDICTOR_CONFIDENCE: float = 0.3
PATTERN_PREDICTOR_WEIGHT: float = 2.0

# Result-level consistency = min(100, 80 + 20 * average confidence).
CONSISTENCY_BASE: float = 80.0
CONSISTENCY_SPAN: float = 20.0


# ═══════════════════════════════════════════════════════════════════════════
# Per-cell helpers
# ═══════════════════════════════════════════════════════════════════════════

def clamp_confidence(value: float) -> float:
    """Clip to [0, 1]; NaN becomes 0."""
    v = float(value)
    if np.isnan(v):
        return 0.0
    return float(min(1.0, max(0.0, v)))


def knn_confidence(nearest_distance: float) -> float:
    return clamp_confidence(max(KNN_MIN_CONFIDENCE, 1.0 - nearest_distance))


def regression_confidence(r_squared: float) -> float:
    return clamp_confidence(max(REGRESSION_MIN_CONFIDENCE, r_squared))


def forest_confidence(built: int, requested: int) -> float:
    if requested <= 0:
        return 0.0
    score = FOREST_BASE_CONFIDENCE + (built / requested) * FOREST_CONFIDENCE_SPAN
    return clamp_confidence(min(FOREST_MAX_CONFIDENCE, score))


def similarity_confidence(mean_weight: float) -> float:
    return clamp_confidence(
        min(SIMILARITY_MAX_CONFIDENCE, max(SIMILARITY_MIN_CONFIDENCE, mean_weight))
    )


def mice_confidence(r_squared: float) -> float:
    return clamp_confidence(max(MICE_MIN_CONFIDENCE, r_squared))


def pattern_confidence(n_predictors: int, n_fields: int) -> float:
    if n_predictors == 0 or n_fields == 0:
        return PATTERN_NO_PREDICTOR_CONFIDENCE
    return clamp_confidence(
        min(PATTERN_MAX_CONFIDENCE, n_predictors / n_fields * PATTERN_PREDICTOR_WEIGHT)
    )


# ═══════════════════════════════════════════════════════════════════════════
# Result-level scoring
# ═══════════════════════════════════════════════════════════════════════════

def average_confidence(records: Sequence[ImputedFieldRecord]) -> float:
    """Mean confidence of all records (0 when nothing was imputed)."""
    if not records:
        return 0.0
    return clamp_confidence(float(np.mean([r.confidence for r in records])))


def methods_used(records: Iterable[ImputedFieldRecord]) -> List[str]:
    """Distinct method names in order of first use."""
    seen: dict[str, None] = {}
    for r in records:
        seen.setdefault(r.method, None)
    return list(seen)


def build_statistics(
    records: Sequence[ImputedFieldRecord],
    *,
    total_missing: int,
    remaining_missing: int,
    methods: Optional[Sequence[str]] = None,
) -> ImputationStatistics:
    """``methods`` defaults to the distinct methods found in ``records``."""
    return ImputationStatistics(
        total_missing=int(total_missing),
        total_imputed=len(records),
        methods_used=list(methods) if methods is not None else methods_used(records),
        average_confidence=average_confidence(records),
        remaining_missing=int(remaining_missing),
    )


def build_quality_metrics(avg_confidence: float) -> QualityMetrics:
    """
    Completeness is reported as 100 by definition (every fillable cell was
    filled); callers check ``statistics.remaining_missing`` for residual gaps.
    """
    return QualityMetrics(
        completeness=100.0,
        reliability=avg_confidence * 100.0,
        consistency=min(100.0, CONSISTENCY_BASE + avg_confidence * CONSISTENCY_SPAN),
    )
