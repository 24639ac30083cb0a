# agents/imputation/completeness.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  ImputeGenius — Data Completeness Analyzer                                 ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Per-field original / missing / imputed counts and shares                ║
║  ✓ Traffic-light quality levels (green / yellow / red)                     ║
║  ✓ Required-field heuristic                                                ║
║  ✓ Pre- and post-imputation recommendations                                ║
║  ✓ Before/after comparison with a proceed recommendation                   ║
╚════════════════════════════════════════════════════════════════════════════╝

Quality is graded on the share of *original* (non-imputed) data:

    >= 90 %   excellent   green
    >= 75 %   warning     yellow
    <  75 %   critical    red

Usage:
```python
    analyzer = DataCompletenessAnalyzer()
    before = analyzer.analyze_original_completeness(records)
    result = impute_missing_data(records)
    after = analyzer.analyze_post_imputation_completeness(records, result.data, result.imputed_fields)
    print(analyzer.compare_completeness(before, after).summary)
```
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence, Set, Tuple

import pandas as pd
from loguru import logger

from agents.imputation.schemas import (
    CompletenessComparison,
    CompletenessRecommendation,
    DataCompletenessMetrics,
    FieldCompletenessInfo,
    ImputedFieldRecord,
)
from core.utils import collect_fields, detect_column_type, format_percentage, is_missing_value

__all__ = [
    "CompletenessConfig",
    "DataCompletenessAnalyzer",
    "generate_summary_text",
    "imputed_cells",
    "quality_icon",
]


# ═══════════════════════════════════════════════════════════════════════════
# Configuration
# ═══════════════════════════════════════════════════════════════════════════

REQUIRED_FIELD_PATTERNS: Tuple[str, ...] = ("id", "name", "amount", "quantity", "date", "customer", "order")

QUALITY_MESSAGES = {
    "excellent": "Excellent data quality - ready to proceed with confidence",
    "warning": "Moderate data quality - review imputed fields and consider collecting more data",
    "critical": "Poor data quality - collect more original data before proceeding",
}

QUALITY_COLORS = {"excellent": "green", "good": "green", "warning": "yellow", "critical": "red"}


@dataclass(frozen=True)
class CompletenessConfig:
    excellent_pct: float = 90.0
    warning_pct: float = 75.0
    high_imputed_pct: float = 25.0          # critical recommendation (overall)
    high_imputed_field_pct: float = 20.0    # ... fields listed under it
    moderate_imputed_pct: float = 10.0      # warning recommendation (overall and per field)
    heavy_field_imputed_pct: float = 30.0   # per-field heavy imputation warning
    action_imputed_pct: float = 15.0        # warning level + this much imputed -> action required
    type_sample_rows: int = 20
    required_patterns: Tuple[str, ...] = REQUIRED_FIELD_PATTERNS


# ═══════════════════════════════════════════════════════════════════════════
# Analyzer
# ═══════════════════════════════════════════════════════════════════════════

class DataCompletenessAnalyzer:
    """
    📊 **Data Completeness Analyzer**

    Stateless; every method takes the records it reports on.
    """

    def __init__(self, config: Optional[CompletenessConfig] = None) -> None:
        self.config = config or CompletenessConfig()
        self._log = logger.bind(component="completeness")

    # ───────────────────────────────────────────────────────────────────
    # Public API
    # ───────────────────────────────────────────────────────────────────

    def analyze_original_completeness(self, data: Optional[Sequence[Mapping[str, Any]]]) -> DataCompletenessMetrics:
        """Completeness of the dataset as collected."""
        if not data:
            return self._empty_metrics()

        fields = self._analyze_fields(data, imputed=set())
        original_pct, _ = self._overall(fields)
        level = self.quality_level(original_pct)

        self._log.info(f"Original completeness {format_percentage(original_pct)} ({level})")
        return DataCompletenessMetrics(
            overall_completeness=original_pct,
            original_data_percentage=original_pct,
            imputed_data_percentage=0.0,
            quality_level=level,
            quality_color=QUALITY_COLORS[level],
            quality_message=QUALITY_MESSAGES[level],
            field_analysis=fields,
            recommendations=self._recommendations(fields, level),
            action_required=level in ("critical", "warning"),
        )

    def analyze_post_imputation_completeness(
        self,
        original_data: Optional[Sequence[Mapping[str, Any]]],
        imputed_data: Optional[Sequence[Mapping[str, Any]]] = None,
        imputed_fields: Optional[Iterable[Any]] = None,
    ) -> DataCompletenessMetrics:
        """
        Completeness after imputation.

        Imputed cells are taken from ``imputed_fields`` (ImputedFieldRecord
        objects or mappings with ``field`` and ``rowIndex``/``row_index``).
        Without them, any cell missing in ``original_data`` but present in
        ``imputed_data`` counts as imputed.
        """
        if not original_data:
            return self._empty_metrics()

        if imputed_fields is not None:
            imputed = imputed_cells(imputed_fields)
        else:
            imputed = self._diff_cells(original_data, imputed_data or [])

        fields = self._analyze_fields(original_data, imputed=imputed)
        original_pct, imputed_pct = self._overall(fields)
        level = self.quality_level(original_pct)

        message = QUALITY_MESSAGES[level]
        if imputed_pct > 0:
            message = f"{message} ({imputed_pct:.1f}% of data was imputed using ML)"

        self._log.info(
            f"Post-imputation: original {format_percentage(original_pct)}, "
            f"imputed {format_percentage(imputed_pct)} ({level})"
        )
        return DataCompletenessMetrics(
            overall_completeness=100.0,
            original_data_percentage=original_pct,
            imputed_data_percentage=imputed_pct,
            quality_level=level,
            quality_color=QUALITY_COLORS[level],
            quality_message=message,
            field_analysis=fields,
            recommendations=self._post_imputation_recommendations(fields, imputed_pct),
            action_required=level == "critical"
            or (level == "warning" and imputed_pct > self.config.action_imputed_pct),
        )

    def compare_completeness(
        self,
        before: DataCompletenessMetrics,
        after: DataCompletenessMetrics,
    ) -> CompletenessComparison:
        """Before/after comparison and a proceed / caution / stop verdict."""
        cfg = self.config
        original = after.original_data_percentage

        if original < cfg.warning_pct:
            verdict, risk = "stop", "High risk - Too much imputed data"
        elif original < cfg.excellent_pct:
            verdict, risk = "caution", "Medium risk - Significant imputed data"
        else:
            verdict, risk = "proceed", "Low risk"

        outcome = {
            "proceed": "Safe to proceed",
            "caution": "Proceed with caution",
            "stop": "Consider collecting more data",
        }[verdict]

        return CompletenessComparison(
            improvement=after.overall_completeness - before.overall_completeness,
            quality_change=_quality_change(before.quality_level, after.quality_level),
            risk_assessment=risk,
            proceed_recommendation=verdict,
            summary=f"Original data: {original:.1f}%, Imputed: {after.imputed_data_percentage:.1f}% - {outcome}",
        )

    # ───────────────────────────────────────────────────────────────────
    # Grading
    # ───────────────────────────────────────────────────────────────────

    def quality_level(self, original_pct: float) -> str:
        if original_pct >= self.config.excellent_pct:
            return "excellent"
        if original_pct >= self.config.warning_pct:
            return "warning"
        return "critical"

    def is_required_field(self, name: str) -> bool:
        lowered = name.lower()
        return any(p in lowered for p in self.config.required_patterns)

    # ───────────────────────────────────────────────────────────────────
    # Field analysis
    # ───────────────────────────────────────────────────────────────────

    def _analyze_fields(
        self,
        data: Sequence[Mapping[str, Any]],
        imputed: Set[Tuple[str, int]],
    ) -> List[FieldCompletenessInfo]:
        total = len(data)
        sample = data[: self.config.type_sample_rows]
        infos: List[FieldCompletenessInfo] = []

        for name in collect_fields(data):
            original = missing = imputed_count = 0
            for i, row in enumerate(data):
                if not is_missing_value(row.get(name)):
                    original += 1
                elif (name, i) in imputed:
                    imputed_count += 1
                else:
                    missing += 1

            original_pct = original / total * 100.0
            level = self.quality_level(original_pct)
            infos.append(
                FieldCompletenessInfo(
                    field_name=name,
                    total_values=total,
                    original_values=original,
                    missing_values=missing,
                    imputed_values=imputed_count,
                    original_percentage=original_pct,
                    missing_percentage=missing / total * 100.0,
                    imputed_percentage=imputed_count / total * 100.0,
                    quality_level=level,
                    quality_color=QUALITY_COLORS[level],
                    is_required=self.is_required_field(name),
                    data_type=detect_column_type(pd.Series([r.get(name) for r in sample], dtype=object)),
                )
            )
        return infos

    @staticmethod
    def _overall(fields: Sequence[FieldCompletenessInfo]) -> Tuple[float, float]:
        cells = sum(f.total_values for f in fields)
        if cells == 0:
            return 0.0, 0.0
        original = sum(f.original_values for f in fields)
        imputed = sum(f.imputed_values for f in fields)
        return original / cells * 100.0, imputed / cells * 100.0

    @staticmethod
    def _diff_cells(
        original: Sequence[Mapping[str, Any]],
        imputed: Sequence[Mapping[str, Any]],
    ) -> Set[Tuple[str, int]]:
        cells: Set[Tuple[str, int]] = set()
        for i, (before, after) in enumerate(zip(original, imputed)):
            for name in collect_fields([before]):
                if is_missing_value(before.get(name)) and not is_missing_value(after.get(name)):
                    cells.add((name, i))
        return cells

    # ───────────────────────────────────────────────────────────────────
    # Recommendations
    # ───────────────────────────────────────────────────────────────────

    def _recommendations(
        self,
        fields: Sequence[FieldCompletenessInfo],
        level: str,
    ) -> List[CompletenessRecommendation]:
        recs: List[CompletenessRecommendation] = []
        critical = [f.field_name for f in fields if f.quality_level == "critical"]
        warning = [f.field_name for f in fields if f.quality_level == "warning"]

        if level == "critical":
            recs.append(CompletenessRecommendation(
                type="critical",
                title="Critical Data Quality Issue",
                message="Less than 75% of your data is complete. This may lead to unreliable analysis results.",
                affected_fields=critical,
                suggested_action="Collect more complete data before proceeding with analysis",
                priority="high",
            ))
        elif level == "warning":
            recs.append(CompletenessRecommendation(
                type="warning",
                title="Moderate Data Quality",
                message="75-90% of your data is complete. Consider reviewing the imputed values.",
                affected_fields=warning,
                suggested_action="Review which fields will be imputed and consider collecting more data for critical fields",
                priority="medium",
            ))

        required = [f.field_name for f in fields if f.quality_level == "critical" and f.is_required]
        if required:
            recs.append(CompletenessRecommendation(
                type="critical",
                title="Required Fields with Poor Quality",
                message="Some required fields have less than 75% complete data.",
                affected_fields=required,
                suggested_action="Prioritize collecting data for these required fields",
                priority="high",
            ))

        if warning:
            recs.append(CompletenessRecommendation(
                type="warning",
                title="Fields Requiring Attention",
                message="Several fields have 75-90% complete data and will benefit from additional data collection.",
                affected_fields=warning,
                suggested_action="Consider collecting more data for these fields to improve analysis accuracy",
                priority="medium",
            ))
        return recs

    def _post_imputation_recommendations(
        self,
        fields: Sequence[FieldCompletenessInfo],
        imputed_pct: float,
    ) -> List[CompletenessRecommendation]:
        cfg = self.config
        recs: List[CompletenessRecommendation] = []

        if imputed_pct > cfg.high_imputed_pct:
            recs.append(CompletenessRecommendation(
                type="critical",
                title="High Percentage of Imputed Data",
                message=f"{imputed_pct:.1f}% of your data has been imputed using ML algorithms.",
                affected_fields=[f.field_name for f in fields if f.imputed_percentage > cfg.high_imputed_field_pct],
                suggested_action="Validate results carefully and consider collecting more original data",
                priority="high",
            ))
        elif imputed_pct > cfg.moderate_imputed_pct:
            recs.append(CompletenessRecommendation(
                type="warning",
                title="Moderate Imputation Used",
                message=f"{imputed_pct:.1f}% of your data has been imputed.",
                affected_fields=[f.field_name for f in fields if f.imputed_percentage > cfg.moderate_imputed_pct],
                suggested_action="Review imputed values and validate against business knowledge",
                priority="medium",
            ))

        heavy = [f.field_name for f in fields if f.imputed_percentage > cfg.heavy_field_imputed_pct]
        if heavy:
            recs.append(CompletenessRecommendation(
                type="warning",
                title="Fields with Heavy Imputation",
                message="Some fields had more than 30% of their values imputed.",
                affected_fields=heavy,
                suggested_action="Review these fields carefully and validate imputed values",
                priority="medium",
            ))
        return recs

    @staticmethod
    def _empty_metrics() -> DataCompletenessMetrics:
        return DataCompletenessMetrics(
            overall_completeness=0.0,
            original_data_percentage=0.0,
            imputed_data_percentage=0.0,
            quality_level="critical",
            quality_color="red",
            quality_message="No data available for analysis",
            field_analysis=[],
            recommendations=[],
            action_required=True,
        )


# ═══════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════

def imputed_cells(imputed_fields: Iterable[Any]) -> Set[Tuple[str, int]]:
    """(field, row) pairs from ImputedFieldRecord objects or plain mappings."""
    cells: Set[Tuple[str, int]] = set()
    for item in imputed_fields:
        if isinstance(item, ImputedFieldRecord):
            cells.add((item.field, item.row_index))
        elif isinstance(item, Mapping):
            row = item.get("rowIndex", item.get("row_index"))
            if item.get("field") is not None and row is not None:
                cells.add((str(item["field"]), int(row)))
    return cells


def _quality_change(before: str, after: str) -> str:
    if before == after:
        return "Quality level maintained"
    if (before, after) in {("critical", "warning"), ("warning", "excellent")}:
        return "Quality level improved"
    return "Quality level changed"


def quality_icon(level: str) -> str:
    return {"excellent": "✅", "good": "✅", "warning": "⚠️", "critical": "❌"}.get(level, "❔")


def generate_summary_text(metrics: DataCompletenessMetrics) -> str:
    """One-line summary, e.g. ``"80.0% original data, 20.0% imputed - Needs attention"``."""
    summary = f"{format_percentage(metrics.original_data_percentage)} original data"
    if metrics.imputed_data_percentage > 0:
        summary += f", {format_percentage(metrics.imputed_data_percentage)} imputed"

    status = {
        "excellent": "Excellent quality",
        "good": "Good quality",
        "warning": "Needs attention",
    }.get(metrics.quality_level, "Critical issues")
    return f"{summary} - {status}"
