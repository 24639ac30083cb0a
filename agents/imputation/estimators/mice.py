# agents/imputation/estimators/mice.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  ImputeGenius — Chained Equations (MICE)                                   ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Central-tendency initialisation of every fillable field                 ║
║  ✓ Iterative OLS refits of numeric fields on the other numeric fields      ║
║  ✓ Double-buffered passes (order-independent within a pass)                ║
║  ✓ Convergence check with relative tolerance                               ║
║  ✓ Records reflect the final state only                                    ║
╚════════════════════════════════════════════════════════════════════════════╝

Pass structure:

    previous = state committed by the last pass (initially the median/mode fill)
    for each numeric field with missing cells:
        fit OLS on rows where the field was observed, predictors read from previous
        predict its originally-missing cells into next
    previous = next

A cell counts as changed when ``|new - old| > 1e-9 * max(1, |old|)``; the
loop stops after the first pass without changes, or after
``config.max_iterations`` passes. Non-numeric fields keep their mode fill.
A field whose refit raises keeps its current values and is reported in
``telemetry["skipped_fields"]``.
"""

from __future__ import annotations

from typing import Dict, List, Set, Tuple

import numpy as np

from agents.imputation.dataset import PreparedDataset
from agents.imputation.estimators.base import BaseEstimator, EstimatorOutput
from agents.imputation.estimators.central_tendency import central_value
from agents.imputation.schemas import ImputationConfig
from agents.imputation.scoring import (
    CENTRAL_TENDENCY_CONFIDENCE,
    MICE_CONVERGENCE_TOLERANCE,
    MIN_TRAINING_ROWS,
    mice_confidence,
)
from core.numeric_kernel import fit_least_squares

__all__ = ["MICEEstimator", "cell_changed"]


def cell_changed(old: float, new: float, tolerance: float = MICE_CONVERGENCE_TOLERANCE) -> bool:
    return abs(new - old) > tolerance * max(1.0, abs(old))


class MICEEstimator(BaseEstimator):
    """🔁 Multiple imputation by chained equations (single chain)."""

    name = "mice"

    def impute(self, prepared: PreparedDataset, config: ImputationConfig) -> EstimatorOutput:
        output = self._start(prepared)
        fields = prepared.imputable_fields
        numeric = prepared.numeric_fields
        observed = ~prepared.mask[numeric].to_numpy(dtype=bool) if numeric else np.empty((prepared.n_rows, 0), dtype=bool)

        # ═══════════════════════════════════════════════════════════
        # Initialisation
        # ═══════════════════════════════════════════════════════════
        init_values = {f: central_value(prepared, f) for f in fields}
        buffer = prepared.numeric_matrix(numeric)
        for f in fields:
            if f in numeric:
                j = numeric.index(f)
                buffer[~observed[:, j], j] = init_values[f]

        targets = [numeric.index(f) for f in fields if f in numeric]
        model_confidence: Dict[Tuple[int, int], float] = {}
        skipped: Set[str] = set()

        # ═══════════════════════════════════════════════════════════
        # Chained passes
        # ═══════════════════════════════════════════════════════════
        iterations = 0
        converged = False
        for _ in range(config.max_iterations):
            previous = buffer
            buffer = previous.copy()
            changed = 0

            for t in targets:
                name = numeric[t]
                if name in skipped:
                    continue
                try:
                    changed += self._refit(t, previous, buffer, observed, model_confidence)
                except Exception as e:
                    self.logger.opt(exception=e).warning(f"[{self.name}] Field '{name}' failed: {e}")
                    skipped.add(name)

            iterations += 1
            self.logger.debug(f"[{self.name}] pass {iterations}: {changed} cell(s) changed")
            if changed == 0:
                converged = True
                break

        # ═══════════════════════════════════════════════════════════
        # Final state
        # ═══════════════════════════════════════════════════════════
        for f in fields:
            if f in numeric:
                j = numeric.index(f)
                cells = [
                    (int(r), buffer[r, j], model_confidence.get((j, int(r)), CENTRAL_TENDENCY_CONFIDENCE))
                    for r in prepared.missing_rows(f)
                ]
            else:
                cells = [(int(r), init_values[f], CENTRAL_TENDENCY_CONFIDENCE) for r in prepared.missing_rows(f)]
            filled = self.write_cells(f, cells, prepared, output)
            output.telemetry["fields"][f] = {"missing": prepared.missing_count(f), "filled": filled}

        output.telemetry["skipped_fields"] = [f for f in fields if f in skipped]
        output.telemetry["iterations"] = iterations
        output.telemetry["converged"] = converged
        return self._finish(output)

    def _refit(
        self,
        t: int,
        previous: np.ndarray,
        buffer: np.ndarray,
        observed: np.ndarray,
        model_confidence: Dict[Tuple[int, int], float],
    ) -> int:
        """Refit column ``t`` from ``previous`` and write predictions into ``buffer``."""
        predictors: List[int] = [
            j for j in range(previous.shape[1])
            if j != t and not np.all(np.isnan(previous[:, j]))
        ]
        if not predictors:
            return 0

        x = previous[:, predictors]
        complete = ~np.isnan(x).any(axis=1)
        train = observed[:, t] & complete
        if int(train.sum()) < MIN_TRAINING_ROWS:
            return 0

        fit = fit_least_squares(x[train], previous[train, t])
        if fit is None:
            return 0

        rows = np.flatnonzero(~observed[:, t] & complete)
        if len(rows) == 0:
            return 0

        confidence = mice_confidence(fit.r_squared)
        changed = 0
        for r, value in zip(rows, fit.predict(x[rows])):
            if cell_changed(previous[r, t], float(value)):
                changed += 1
            buffer[r, t] = float(value)
            model_confidence[(t, int(r))] = confidence
        return changed
