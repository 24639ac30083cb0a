# agents/imputation/schemas.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  ImputeGenius — Imputation Schemas                                         ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ ImputationConfig (per-call options, defaults from Settings)             ║
║  ✓ MissingDataPattern / MissingDataDiagnosis                               ║
║  ✓ ImputedFieldRecord (camelCase wire shape)                               ║
║  ✓ ImputationStatistics / QualityMetrics / ImputationResult                ║
║  ✓ Completeness metrics, recommendations and comparison                    ║
╚════════════════════════════════════════════════════════════════════════════╝

All models accept both snake_case names and their camelCase aliases, and
serialise with ``model_dump(by_alias=True)`` to the camelCase shape consumed
by reporting layers (e.g. ``{field, rowIndex, confidence, method}``).
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

from config.settings import Settings, get_settings

__all__ = [
    "ESTIMATOR_METHODS",
    "ImputationMethod",
    "PatternType",
    "FieldKind",
    "ImputationConfig",
    "MissingDataPattern",
    "MissingDataDiagnosis",
    "ImputedFieldRecord",
    "ImputationStatistics",
    "QualityMetrics",
    "ImputationResult",
    "FieldCompletenessInfo",
    "CompletenessRecommendation",
    "DataCompletenessMetrics",
    "CompletenessComparison",
]


# ═══════════════════════════════════════════════════════════════════════════
# Type Definitions
# ═══════════════════════════════════════════════════════════════════════════

ESTIMATOR_METHODS: tuple[str, ...] = (
    "mean_median",
    "knn",
    "regression",
    "random_forest",
    "neural_network",
    "mice",
)

ImputationMethod = Literal[
    "mean_median", "knn", "regression", "random_forest", "neural_network", "mice"
]
SuggestedMethod = Literal[
    "none", "mean_median", "knn", "regression", "random_forest", "neural_network", "mice"
]
PatternType = Literal["random", "systematic", "correlated"]
FieldKind = Literal["numeric", "categorical", "date", "text"]

QualityLevel = Literal["excellent", "good", "warning", "critical"]
QualityColor = Literal["green", "yellow", "red"]
ProceedRecommendation = Literal["proceed", "caution", "stop"]


class _ImputeModel(BaseModel):
    """Base model: camelCase aliases, population by field name."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        arbitrary_types_allowed=True,
        extra="ignore",
    )


# ═══════════════════════════════════════════════════════════════════════════
# Configuration
# ═══════════════════════════════════════════════════════════════════════════

class ImputationConfig(_ImputeModel):
    """
    ⚙️ **Imputation Configuration**

    ``method`` is deliberately an open string: unknown names are resolved by
    the orchestrator (central tendency plus a warning) instead of failing here.
    ``confidence_threshold`` is advisory only and never enforced by estimators.
    """

    method: str = Field(
        default="auto",
        description="One of mean_median, knn, regression, random_forest, neural_network, mice, auto",
    )
    confidence_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    max_iterations: int = Field(default=10, ge=1, le=1000, description="Hard cap on MICE passes")
    mark_imputed: bool = Field(
        default=True,
        description="Add a boolean '<field>_imputed' flag to every filled row",
    )
    random_state: int = Field(default=42, description="Seed of the ensemble tree estimator")
    fallback_method: Optional[ImputationMethod] = Field(
        default=None,
        description="Estimator used for cells the primary method left missing (off by default)",
    )
    n_trees: int = Field(default=10, ge=1, le=500)
    knn_max_neighbors: int = Field(default=5, ge=1, le=100)

    @field_validator("method", mode="before")
    @classmethod
    def normalize_method(cls, v: Any) -> str:
        return str(v if v is not None else "auto").strip().lower()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **overrides: Any) -> "ImputationConfig":
        """Build a config from the engine-wide Settings defaults."""
        s = settings or get_settings()
        values: Dict[str, Any] = {
            "method": s.IMPUTATION_DEFAULT_METHOD,
            "confidence_threshold": s.IMPUTATION_CONFIDENCE_THRESHOLD,
            "max_iterations": s.IMPUTATION_MAX_ITERATIONS,
            "mark_imputed": s.IMPUTATION_MARK_IMPUTED,
            "random_state": s.RANDOM_STATE,
            "n_trees": s.IMPUTATION_FOREST_TREES,
            "knn_max_neighbors": s.IMPUTATION_KNN_MAX_NEIGHBORS,
        }
        values.update(overrides)
        return cls.model_validate(values)


# ═══════════════════════════════════════════════════════════════════════════
# Diagnosis
# ═══════════════════════════════════════════════════════════════════════════

class MissingDataPattern(_ImputeModel):
    """🔍 Missingness profile of a single field."""

    field: str
    field_type: FieldKind = "text"
    missing_count: int = Field(ge=0)
    missing_percentage: float = Field(ge=0.0, le=100.0)
    pattern: PatternType
    correlated_with: List[str] = Field(default_factory=list)
    predictors: List[str] = Field(default_factory=list)
    confidence: float = Field(ge=0.0, le=1.0)


class MissingDataDiagnosis(_ImputeModel):
    """🩺 Result of the diagnosis step."""

    patterns: List[MissingDataPattern] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    suggested_method: SuggestedMethod = "mean_median"
    field_types: Dict[str, FieldKind] = Field(default_factory=dict)
    n_rows: int = 0
    n_fields: int = 0
    total_missing: int = 0

    @property
    def affected_fields(self) -> List[str]:
        return [p.field for p in self.patterns]

    def pattern_for(self, field: str) -> Optional[MissingDataPattern]:
        for p in self.patterns:
            if p.field == field:
                return p
        return None


# ═══════════════════════════════════════════════════════════════════════════
# Imputation Result
# ═══════════════════════════════════════════════════════════════════════════

class ImputedFieldRecord(_ImputeModel):
    """📝 One synthesized cell: where it is, what it became and how sure we are."""

    field: str
    row_index: int = Field(ge=0)
    original_value: Any = None
    imputed_value: Any = None
    confidence: float = Field(ge=0.0, le=1.0)
    method: str


class ImputationStatistics(_ImputeModel):
    total_missing: int = 0
    total_imputed: int = 0
    methods_used: List[str] = Field(default_factory=list)
    average_confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    remaining_missing: int = 0


class QualityMetrics(_ImputeModel):
    completeness: float = 100.0
    reliability: float = 0.0
    consistency: float = 80.0


class ImputationResult(_ImputeModel):
    """
    📦 **Imputation Result**

    ``data`` is an independent copy of the input records with the imputed
    values written in (and ``<field>_imputed`` flags when requested).
    """

    data: List[Dict[str, Any]] = Field(default_factory=list)
    imputed_fields: List[ImputedFieldRecord] = Field(default_factory=list)
    statistics: ImputationStatistics = Field(default_factory=ImputationStatistics)
    quality_metrics: QualityMetrics = Field(default_factory=QualityMetrics)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @computed_field
    @property
    def has_remaining_missing(self) -> bool:
        """Distinct warning state: some cells could not be filled."""
        return self.statistics.remaining_missing > 0

    @property
    def warnings(self) -> List[str]:
        return list(self.metadata.get("warnings", []))

    def to_frame(self) -> pd.DataFrame:
        """Imputed records as a DataFrame."""
        return pd.DataFrame.from_records(self.data)

    def imputed_cells(self) -> set[tuple[str, int]]:
        """(field, row_index) pairs that were synthesized."""
        return {(r.field, r.row_index) for r in self.imputed_fields}


# ═══════════════════════════════════════════════════════════════════════════
# Completeness
# ═══════════════════════════════════════════════════════════════════════════

class FieldCompletenessInfo(_ImputeModel):
    field_name: str
    total_values: int
    original_values: int
    missing_values: int
    imputed_values: int
    original_percentage: float
    missing_percentage: float
    imputed_percentage: float
    quality_level: QualityLevel
    quality_color: QualityColor
    is_required: bool
    data_type: FieldKind


class CompletenessRecommendation(_ImputeModel):
    type: Literal["info", "warning", "critical"]
    title: str
    message: str
    affected_fields: List[str] = Field(default_factory=list)
    suggested_action: str
    priority: Literal["low", "medium", "high"]


class DataCompletenessMetrics(_ImputeModel):
    """📊 Completeness of a dataset before or after imputation."""

    overall_completeness: float
    original_data_percentage: float
    imputed_data_percentage: float
    quality_level: QualityLevel
    quality_color: QualityColor
    quality_message: str
    field_analysis: List[FieldCompletenessInfo] = Field(default_factory=list)
    recommendations: List[CompletenessRecommendation] = Field(default_factory=list)
    action_required: bool


class CompletenessComparison(_ImputeModel):
    improvement: float
    quality_change: str
    risk_assessment: str
    proceed_recommendation: ProceedRecommendation
    summary: str
