# agents/imputation/diagnostician.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  ImputeGenius — Missing Data Diagnostician                                 ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Field schema sniffing (numeric / categorical / date / text)             ║
║  ✓ Per-field missing counts and percentages                                ║
║  ✓ Co-missingness between fields (correlated_with)                         ║
║  ✓ Predictor discovery (jointly observed fields)                           ║
║  ✓ Pattern classification: random / systematic / correlated                ║
║  ✓ Heuristic method suggestion                                             ║
╚════════════════════════════════════════════════════════════════════════════╝

The method suggestion is a fixed set of decision rules, not a validated
model-selection procedure:

    no missing data                          -> none
    <= 2 affected fields, all under 10 %     -> mean_median
    any field with co-missing partners       -> random_forest
    any field over 30 % missing              -> neural_network
    otherwise                                -> mice
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional

import numpy as np
from loguru import logger

from agents.imputation.dataset import PreparedDataset, prepare_dataset
from agents.imputation.schemas import MissingDataDiagnosis, MissingDataPattern
from agents.imputation.scoring import pattern_confidence
from core.base_agent import AgentResult, BaseAgent
from core.exceptions import EmptyDatasetError

__all__ = [
    "DiagnosisConfig",
    "MissingDataDiagnostician",
    "diagnose_missing_data",
    "diagnose_prepared",
]


# ═══════════════════════════════════════════════════════════════════════════
# Configuration
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DiagnosisConfig:
    """Thresholds of the diagnosis rules."""
    correlated_share: float = 0.30          # share of a field's missing rows also missing elsewhere
    predictor_row_share: float = 0.50       # jointly observed rows / all rows, strictly above
    systematic_missing_pct: float = 50.0    # above -> systematic
    min_predictors: int = 2                 # fewer -> systematic
    simple_max_fields: int = 2              # mean_median rule: at most this many affected fields
    simple_max_missing_pct: float = 10.0    # ... each strictly below this percentage
    heavy_missing_pct: float = 30.0         # neural_network rule


RECOMMENDATION_MESSAGES = {
    "none": "No missing data detected - ready for processing",
    "mean_median": "Low missing data rate - simple imputation methods recommended",
    "random_forest": "Strong correlations detected - use regression or ML-based methods",
    "neural_network": "High missing data rate - advanced imputation required",
    "mice": "Moderate complexity - MICE or Random Forest recommended",
}


# ═══════════════════════════════════════════════════════════════════════════
# Core diagnosis
# ═══════════════════════════════════════════════════════════════════════════

def _empty_diagnosis() -> MissingDataDiagnosis:
    return MissingDataDiagnosis(
        patterns=[],
        recommendations=[],
        suggested_method="mean_median",
    )


def _classify(
    missing_pct: float,
    correlated_with: List[str],
    predictors: List[str],
    cfg: DiagnosisConfig,
) -> str:
    if correlated_with:
        return "correlated"
    if missing_pct > cfg.systematic_missing_pct or len(predictors) < cfg.min_predictors:
        return "systematic"
    return "random"


def _suggest(patterns: List[MissingDataPattern], cfg: DiagnosisConfig) -> str:
    if not patterns:
        return "none"
    if len(patterns) <= cfg.simple_max_fields and all(
        p.missing_percentage < cfg.simple_max_missing_pct for p in patterns
    ):
        return "mean_median"
    if any(p.correlated_with for p in patterns):
        return "random_forest"
    if any(p.missing_percentage > cfg.heavy_missing_pct for p in patterns):
        return "neural_network"
    return "mice"


def diagnose_prepared(
    prepared: PreparedDataset,
    config: Optional[DiagnosisConfig] = None,
) -> MissingDataDiagnosis:
    """Diagnose an already prepared dataset."""
    cfg = config or DiagnosisConfig()
    fields = prepared.fields
    n_rows, n_fields = prepared.n_rows, prepared.n_fields

    if n_rows == 0 or n_fields == 0:
        diagnosis = _empty_diagnosis()
        diagnosis.n_rows = n_rows
        diagnosis.recommendations = [RECOMMENDATION_MESSAGES["none"]]
        diagnosis.suggested_method = "none"
        return diagnosis

    missing = prepared.mask[fields].to_numpy(dtype=np.int64)
    present = 1 - missing

    missing_counts = missing.sum(axis=0)
    co_missing = missing.T @ missing          # rows where both fields are missing
    joint_present = present.T @ present       # rows where both fields are observed

    patterns: List[MissingDataPattern] = []
    for i, field in enumerate(fields):
        m_i = int(missing_counts[i])
        if m_i == 0:
            continue

        missing_pct = m_i / n_rows * 100.0
        correlated_with = [
            other for j, other in enumerate(fields)
            if j != i and co_missing[i, j] > 0 and co_missing[i, j] >= m_i * cfg.correlated_share
        ]
        predictors = [
            other for j, other in enumerate(fields)
            if j != i and joint_present[i, j] > n_rows * cfg.predictor_row_share
        ]

        patterns.append(
            MissingDataPattern(
                field=field,
                field_type=prepared.field_types.get(field, "text"),
                missing_count=m_i,
                missing_percentage=missing_pct,
                pattern=_classify(missing_pct, correlated_with, predictors, cfg),
                correlated_with=correlated_with,
                predictors=predictors,
                confidence=pattern_confidence(len(predictors), n_fields),
            )
        )

    suggested = _suggest(patterns, cfg)

    return MissingDataDiagnosis(
        patterns=patterns,
        recommendations=[RECOMMENDATION_MESSAGES[suggested]],
        suggested_method=suggested,
        field_types=dict(prepared.field_types),
        n_rows=n_rows,
        n_fields=n_fields,
        total_missing=int(missing_counts.sum()),
    )


def diagnose_missing_data(dataset: Any, config: Optional[DiagnosisConfig] = None) -> MissingDataDiagnosis:
    """
    Diagnose missingness of a record dataset (or DataFrame).

    An empty or absent dataset yields an empty diagnosis suggesting
    ``mean_median``; it is the orchestrator, not the diagnosis, that
    rejects empty input.
    """
    try:
        prepared = prepare_dataset(dataset)
    except EmptyDatasetError:
        return _empty_diagnosis()
    return diagnose_prepared(prepared, config)


# ═══════════════════════════════════════════════════════════════════════════
# Agent
# ═══════════════════════════════════════════════════════════════════════════

class MissingDataDiagnostician(BaseAgent):
    """
    🩺 **Missing Data Diagnostician**

    Agent wrapper around ``diagnose_missing_data``.

    Usage:
```python
        result = MissingDataDiagnostician().run(data=records)
        diagnosis = result.data["diagnosis"]
        print(diagnosis.suggested_method)
```
    """

    def __init__(self, config: Optional[DiagnosisConfig] = None) -> None:
        super().__init__(
            name="MissingDataDiagnostician",
            description="Classifies missingness per field and suggests an imputation method",
        )
        self.config = config or DiagnosisConfig()
        self._log = logger.bind(agent="MissingDataDiagnostician")

    def execute(self, data: Any = None, **kwargs: Any) -> AgentResult:
        result = AgentResult(agent_name=self.name)

        diagnosis = diagnose_missing_data(data, self.config)
        result.add_data(
            diagnosis=diagnosis,
            suggested_method=diagnosis.suggested_method,
            summary={
                "n_rows": diagnosis.n_rows,
                "n_fields": diagnosis.n_fields,
                "total_missing": diagnosis.total_missing,
                "affected_fields": diagnosis.affected_fields,
                "patterns": {p.field: p.pattern for p in diagnosis.patterns},
            },
        )

        if diagnosis.n_rows == 0:
            result.add_warning("No data provided for diagnosis")

        self._log.success(
            f"Diagnosis complete: {len(diagnosis.patterns)} affected field(s), "
            f"suggested={diagnosis.suggested_method}"
        )
        return result
