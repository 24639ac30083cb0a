# agents/imputation/estimators/base.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  ImputeGenius — Estimator Contract                                         ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Uniform impute(prepared, config) -> EstimatorOutput                     ║
║  ✓ Per-field isolation (a failing field is skipped, never fatal)           ║
║  ✓ Cell provenance records                                                 ║
║  ✓ Per-field telemetry                                                     ║
║  ✓ Async entry point (defaults to the sync path)                           ║
╚════════════════════════════════════════════════════════════════════════════╝

An estimator reads the *observed* values of a PreparedDataset and never its
own earlier fills: every field is estimated from what was present in the
input, whatever order fields are processed in.

Two bases share the output and record plumbing. ``BaseEstimator`` only
fixes the ``impute(prepared, config)`` contract and suits estimators that
fill every field jointly (MICE). ``FieldwiseEstimator`` adds the
per-field loop: subclasses implement ``impute_field`` and return
``(row, value, confidence)`` triples for the cells they could fill. Raising
``InsufficientDataError`` or ``EstimationError`` marks the field as skipped
without a traceback; any other exception is logged with its traceback and
also skips the field.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field as dc_field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd
from loguru import logger

from agents.imputation.dataset import PreparedDataset
from agents.imputation.schemas import ImputationConfig, ImputedFieldRecord
from core.exceptions import EstimationError, InsufficientDataError
from core.utils import is_missing_value, to_python_scalar

__all__ = ["BaseEstimator", "FieldwiseEstimator", "EstimatorOutput", "Cell"]

# (row index, imputed value, confidence)
Cell = Tuple[int, Any, float]


@dataclass
class EstimatorOutput:
    """Filled values, one record per filled cell and run telemetry."""

    values: pd.DataFrame
    records: List[ImputedFieldRecord] = dc_field(default_factory=list)
    telemetry: Dict[str, Any] = dc_field(default_factory=dict)
    started: float = dc_field(default_factory=time.perf_counter, repr=False)

    @property
    def n_imputed(self) -> int:
        return len(self.records)

    @property
    def skipped_fields(self) -> List[str]:
        return list(self.telemetry.get("skipped_fields", []))


class BaseEstimator(ABC):
    """
    🧩 **Base Estimator**

    Owns the ``impute`` contract, output bookkeeping and cell provenance.
    Joint estimators subclass this directly and implement ``impute``.
    """

    name: str = "base"

    def __init__(self) -> None:
        self.logger = logger.bind(component="estimator", estimator=self.name)

    @abstractmethod
    def impute(self, prepared: PreparedDataset, config: ImputationConfig) -> EstimatorOutput:
        """Fill what can be filled and report the rest in telemetry."""

    async def aimpute(self, prepared: PreparedDataset, config: ImputationConfig) -> EstimatorOutput:
        return self.impute(prepared, config)

    # ───────────────────────────────────────────────────────────────────
    # Output bookkeeping
    # ───────────────────────────────────────────────────────────────────

    def _start(self, prepared: PreparedDataset) -> EstimatorOutput:
        return EstimatorOutput(
            values=prepared.values.copy(),
            telemetry={
                "estimator": self.name,
                "skipped_fields": [],
                "fields": {},
            },
        )

    def _finish(self, output: EstimatorOutput) -> EstimatorOutput:
        output.telemetry["n_imputed"] = output.n_imputed
        output.telemetry["elapsed_s"] = round(time.perf_counter() - output.started, 6)
        self.logger.debug(
            f"[{self.name}] filled {output.n_imputed} cell(s), "
            f"skipped fields: {output.telemetry['skipped_fields'] or 'none'}"
        )
        return output

    def write_cells(
        self,
        field: str,
        cells: Sequence[Cell],
        prepared: PreparedDataset,
        output: EstimatorOutput,
        method: Optional[str] = None,
    ) -> int:
        """Write cells into ``output.values`` and append their records."""
        filled = 0
        numeric = prepared.is_numeric(field)
        for row, value, confidence in cells:
            if is_missing_value(value):
                continue
            value = float(value) if numeric else to_python_scalar(value)
            output.values.at[row, field] = value
            output.records.append(
                ImputedFieldRecord(
                    field=field,
                    row_index=int(row),
                    original_value=prepared.records[int(row)].get(field),
                    imputed_value=value,
                    confidence=float(confidence),
                    method=method or self.name,
                )
            )
            filled += 1
        return filled

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}')"


class FieldwiseEstimator(BaseEstimator):
    """
    Template for the per-field imputation loop. ``prepare_state`` runs once
    per call and may precompute anything shared between fields (scaled
    matrices, distance inputs, a seeded generator).
    """

    def prepare_state(self, prepared: PreparedDataset, config: ImputationConfig) -> Any:
        return None

    @abstractmethod
    def impute_field(
        self,
        field: str,
        prepared: PreparedDataset,
        config: ImputationConfig,
        state: Any,
    ) -> Sequence[Cell]:
        """Estimate the missing cells of one field."""

    def impute(self, prepared: PreparedDataset, config: ImputationConfig) -> EstimatorOutput:
        output = self._start(prepared)
        state = self.prepare_state(prepared, config)
        for field in prepared.imputable_fields:
            self._fill_field(field, prepared, config, state, output)
        return self._finish(output)

    def _fill_field(
        self,
        field: str,
        prepared: PreparedDataset,
        config: ImputationConfig,
        state: Any,
        output: EstimatorOutput,
    ) -> None:
        started = time.perf_counter()
        try:
            cells = self.impute_field(field, prepared, config, state)
        except (InsufficientDataError, EstimationError) as e:
            self.logger.info(f"[{self.name}] Field '{field}' skipped: {e.message}")
            output.telemetry["skipped_fields"].append(field)
            return
        except Exception as e:
            self.logger.opt(exception=e).warning(f"[{self.name}] Field '{field}' failed: {e}")
            output.telemetry["skipped_fields"].append(field)
            return

        filled = self.write_cells(field, cells, prepared, output)
        output.telemetry["fields"][field] = {
            "missing": prepared.missing_count(field),
            "filled": filled,
            "elapsed_s": round(time.perf_counter() - started, 6),
        }
