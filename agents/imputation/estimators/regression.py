# agents/imputation/estimators/regression.py
"""
Linear regression imputation for numeric fields.

Predictors are the other numeric fields with at least three observed values;
the model is fitted on rows where the target and every predictor are
observed. Rows missing any predictor are left missing. Non-numeric targets
are skipped and reported in ``telemetry["skipped_fields"]``.
"""

from __future__ import annotations

from typing import Any, List

import numpy as np

from agents.imputation.dataset import PreparedDataset
from agents.imputation.estimators.base import Cell, FieldwiseEstimator
from agents.imputation.schemas import ImputationConfig
from agents.imputation.scoring import MIN_TRAINING_ROWS, regression_confidence
from core.exceptions import EstimationError, InsufficientDataError
from core.numeric_kernel import fit_least_squares

__all__ = ["RegressionEstimator", "usable_predictors"]


def usable_predictors(prepared: PreparedDataset, field: str, min_present: int = MIN_TRAINING_ROWS) -> List[str]:
    return [
        f for f in prepared.numeric_fields
        if f != field and prepared.present_count(f) >= min_present
    ]


class RegressionEstimator(FieldwiseEstimator):
    """📈 Ordinary least squares on the other numeric fields."""

    name = "regression"

    def impute_field(
        self,
        field: str,
        prepared: PreparedDataset,
        config: ImputationConfig,
        state: Any,
    ) -> List[Cell]:
        if not prepared.is_numeric(field):
            raise InsufficientDataError(
                f"Regression needs a numeric target, '{field}' is {prepared.field_types.get(field)}",
                details={"field": field, "kind": prepared.field_types.get(field)},
            )

        predictors = usable_predictors(prepared, field)
        if not predictors:
            raise InsufficientDataError(
                f"No numeric predictors available for '{field}'",
                details={"field": field},
            )

        x = prepared.numeric_matrix(predictors)
        y = prepared.numeric_matrix([field])[:, 0]
        complete = ~np.isnan(x).any(axis=1)
        train = complete & ~np.isnan(y)

        if int(train.sum()) < MIN_TRAINING_ROWS:
            raise InsufficientDataError(
                f"Too few complete rows to fit '{field}'",
                details={"field": field, "rows": int(train.sum())},
            )

        fit = fit_least_squares(x[train], y[train])
        if fit is None:
            raise EstimationError(
                f"Normal equations for '{field}' are singular",
                details={"field": field, "predictors": predictors},
            )

        rows = [int(r) for r in prepared.missing_rows(field) if complete[r]]
        if not rows:
            return []

        confidence = regression_confidence(fit.r_squared)
        predictions = fit.predict(x[rows])
        return [(row, float(p), confidence) for row, p in zip(rows, predictions)]
