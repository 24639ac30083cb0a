"""
ImputeGenius - Unit Tests for the Data Completeness Analyzer
"""

import pytest

from agents.imputation.completeness import (
    DataCompletenessAnalyzer,
    generate_summary_text,
    imputed_cells,
    quality_icon,
)
from agents.imputation.orchestrator import impute_missing_data
from agents.imputation.schemas import ImputedFieldRecord


@pytest.fixture
def analyzer():
    return DataCompletenessAnalyzer()


@pytest.fixture
def imputed_mixed(mixed_records):
    return impute_missing_data(mixed_records, {"method": "mean_median"})


class TestOriginalCompleteness:
    """Completeness before imputation"""

    def test_warning_level(self, analyzer, mixed_records):
        metrics = analyzer.analyze_original_completeness(mixed_records)

        assert metrics.original_data_percentage == pytest.approx(26 / 30 * 100)
        assert metrics.overall_completeness == metrics.original_data_percentage
        assert metrics.imputed_data_percentage == 0.0
        assert metrics.quality_level == "warning"
        assert metrics.quality_color == "yellow"
        assert metrics.action_required is True
        assert [r.title for r in metrics.recommendations] == [
            "Moderate Data Quality",
            "Fields Requiring Attention",
        ]
        assert metrics.recommendations[1].affected_fields == ["region"]

    def test_field_analysis(self, analyzer, mixed_records):
        fields = {f.field_name: f for f in analyzer.analyze_original_completeness(mixed_records).field_analysis}

        assert fields["amount"].original_values == 9
        assert fields["amount"].missing_values == 1
        assert fields["amount"].quality_level == "excellent"
        assert fields["amount"].is_required is True
        assert fields["amount"].data_type == "numeric"
        assert fields["region"].missing_percentage == pytest.approx(20.0)
        assert fields["region"].quality_level == "warning"
        assert fields["region"].data_type == "categorical"
        assert fields["qty"].is_required is False

    def test_critical_required_field(self, analyzer):
        records = [{"customer_name": "c" if i < 4 else None} for i in range(10)]
        metrics = analyzer.analyze_original_completeness(records)

        assert metrics.quality_level == "critical"
        assert metrics.quality_color == "red"
        assert [r.title for r in metrics.recommendations] == [
            "Critical Data Quality Issue",
            "Required Fields with Poor Quality",
        ]
        assert metrics.recommendations[1].affected_fields == ["customer_name"]

    def test_complete_data(self, analyzer, complete_records):
        metrics = analyzer.analyze_original_completeness(complete_records)

        assert metrics.quality_level == "excellent"
        assert metrics.action_required is False
        assert metrics.recommendations == []

    def test_empty_data(self, analyzer):
        metrics = analyzer.analyze_original_completeness([])

        assert metrics.quality_level == "critical"
        assert metrics.quality_message == "No data available for analysis"
        assert metrics.action_required is True


class TestPostImputationCompleteness:
    """Completeness after imputation"""

    def test_with_imputed_records(self, analyzer, mixed_records, imputed_mixed):
        metrics = analyzer.analyze_post_imputation_completeness(
            mixed_records, imputed_mixed.data, imputed_mixed.imputed_fields
        )

        assert metrics.overall_completeness == 100.0
        assert metrics.imputed_data_percentage == pytest.approx(4 / 30 * 100)
        assert metrics.quality_level == "warning"
        assert metrics.quality_message.endswith("(13.3% of data was imputed using ML)")
        assert metrics.action_required is False
        assert [r.title for r in metrics.recommendations] == ["Moderate Imputation Used"]
        assert metrics.recommendations[0].affected_fields == ["region"]

    def test_diff_matches_explicit_records(self, analyzer, mixed_records, imputed_mixed):
        explicit = analyzer.analyze_post_imputation_completeness(
            mixed_records, imputed_mixed.data, imputed_mixed.imputed_fields
        )
        diffed = analyzer.analyze_post_imputation_completeness(mixed_records, imputed_mixed.data)

        assert diffed.imputed_data_percentage == explicit.imputed_data_percentage
        assert [f.imputed_values for f in diffed.field_analysis] == [1, 1, 2]

    def test_heavy_imputation(self, analyzer):
        records = [{"v": float(i) if i >= 3 else None} for i in range(10)]
        imputed = [{"field": "v", "rowIndex": i} for i in range(3)]

        metrics = analyzer.analyze_post_imputation_completeness(records, imputed_fields=imputed)

        assert metrics.quality_level == "critical"
        assert metrics.action_required is True
        assert metrics.recommendations[0].title == "High Percentage of Imputed Data"
        assert metrics.recommendations[0].affected_fields == ["v"]

    def test_compare(self, analyzer, mixed_records, imputed_mixed):
        before = analyzer.analyze_original_completeness(mixed_records)
        after = analyzer.analyze_post_imputation_completeness(
            mixed_records, imputed_mixed.data, imputed_mixed.imputed_fields
        )
        comparison = analyzer.compare_completeness(before, after)

        assert comparison.improvement == pytest.approx(100 - 26 / 30 * 100)
        assert comparison.quality_change == "Quality level maintained"
        assert comparison.proceed_recommendation == "caution"
        assert comparison.risk_assessment == "Medium risk - Significant imputed data"
        assert comparison.summary == "Original data: 86.7%, Imputed: 13.3% - Proceed with caution"


class TestHelpers:
    """Module-level helpers"""

    def test_imputed_cells(self):
        items = [
            ImputedFieldRecord(field="a", row_index=0, confidence=0.5, method="knn"),
            {"field": "b", "rowIndex": 1},
            {"field": "c", "row_index": 2},
            {"rowIndex": 3},
        ]
        assert imputed_cells(items) == {("a", 0), ("b", 1), ("c", 2)}

    def test_summary_text(self, analyzer, mixed_records, imputed_mixed):
        after = analyzer.analyze_post_imputation_completeness(
            mixed_records, imputed_mixed.data, imputed_mixed.imputed_fields
        )
        assert generate_summary_text(after) == "86.7% original data, 13.3% imputed - Needs attention"

    def test_summary_without_imputation(self, analyzer, complete_records):
        metrics = analyzer.analyze_original_completeness(complete_records)
        assert generate_summary_text(metrics) == "100.0% original data - Excellent quality"

    def test_quality_icon(self):
        assert quality_icon("excellent") == "✅"
        assert quality_icon("critical") == "❌"
        assert quality_icon("unknown") == "❔"
