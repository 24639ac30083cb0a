# agents/imputation/orchestrator.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  ImputeGenius — Imputation Orchestrator                                    ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Input validation (empty datasets rejected as input errors)              ║
║  ✓ Diagnosis-driven method selection ("auto")                              ║
║  ✓ Unknown methods resolved to central tendency with a warning             ║
║  ✓ Optional fallback estimator for cells left missing                      ║
║  ✓ Provenance records, statistics and quality metrics                      ║
║  ✓ Sync and async entry points, agent wrapper                              ║
╚════════════════════════════════════════════════════════════════════════════╝

Architecture:
```
    dataset ─► prepare_dataset ─► diagnose_prepared ─► resolve_method
                                                           │
                  ┌────────────────────────────────────────┘
                  ▼
            primary estimator ─► [fallback estimator] ─► assemble result
```

Usage:
```python
    from agents.imputation import impute_missing_data

    result = impute_missing_data(records, {"method": "knn"})
    print(result.statistics.total_imputed, result.quality_metrics.reliability)
```

The input is never mutated: ``result.data`` is a deep copy with the imputed
values (and ``<field>_imputed`` flags) written in.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from loguru import logger

from agents.imputation.dataset import PreparedDataset, prepare_dataset
from agents.imputation.diagnostician import diagnose_prepared
from agents.imputation.estimators import ESTIMATORS, EstimatorOutput, get_estimator
from agents.imputation.schemas import (
    ImputationConfig,
    ImputationResult,
    MissingDataDiagnosis,
)
from agents.imputation.scoring import build_quality_metrics, build_statistics
from config.logging_config import LogContext, log_execution_time
from core.base_agent import AgentResult, BaseAgent
from core.exceptions import ConfigurationError, EstimationError, exception_context
from core.utils import to_python_scalar

__all__ = [
    "ImputationOrchestrator",
    "aimpute_missing_data",
    "impute_missing_data",
    "resolve_method",
]

ConfigLike = Union[ImputationConfig, Mapping[str, Any], None]

_log = logger.bind(component="orchestrator")


# ═══════════════════════════════════════════════════════════════════════════
# Planning
# ═══════════════════════════════════════════════════════════════════════════

def _coerce_config(config: ConfigLike) -> ImputationConfig:
    if config is None:
        return ImputationConfig.from_settings()
    if isinstance(config, ImputationConfig):
        return config
    if isinstance(config, Mapping):
        return ImputationConfig.model_validate(dict(config))
    raise ConfigurationError(
        "config must be an ImputationConfig, a mapping or None",
        details={"received": type(config).__name__},
    )


def resolve_method(requested: str, diagnosis: MissingDataDiagnosis) -> Tuple[str, List[str]]:
    """
    Map the requested method to the one that will run.

    Returns:
        (method, warnings). ``method`` is an estimator name or ``"none"``.
    """
    if requested == "auto":
        return diagnosis.suggested_method, []
    if requested == "none" or requested in ESTIMATORS:
        return requested, []

    warning = f"Unknown imputation method '{requested}' - falling back to mean_median"
    _log.warning(warning)
    return "mean_median", [warning]


def _plan(dataset: Any, config: ConfigLike):
    cfg = _coerce_config(config)
    prepared = prepare_dataset(dataset)
    diagnosis = diagnose_prepared(prepared)
    method, warnings = resolve_method(cfg.method, diagnosis)

    _log.info(
        f"Imputing {prepared.total_missing} missing cell(s) in "
        f"{prepared.n_rows} row(s) x {prepared.n_fields} field(s): "
        f"requested={cfg.method}, resolved={method}"
    )
    return cfg, prepared, diagnosis, method, warnings


def _needs_fallback(cfg: ImputationConfig, method: str, output: EstimatorOutput) -> bool:
    if not cfg.fallback_method or cfg.fallback_method == method:
        return False
    return bool(output.values.isna().to_numpy().any())


# ═══════════════════════════════════════════════════════════════════════════
# Assembly
# ═══════════════════════════════════════════════════════════════════════════

def _assemble(
    prepared: PreparedDataset,
    cfg: ImputationConfig,
    diagnosis: MissingDataDiagnosis,
    method: str,
    outputs: Dict[str, EstimatorOutput],
    warnings: List[str],
) -> ImputationResult:
    records = [r for output in outputs.values() for r in output.records]

    data: List[Dict[str, Any]] = [dict(r) for r in copy.deepcopy(prepared.records)]
    for rec in records:
        row = data[rec.row_index]
        row[rec.field] = to_python_scalar(rec.imputed_value)
        if cfg.mark_imputed:
            row[f"{rec.field}_imputed"] = True

    remaining = prepared.total_missing - len(records)
    statistics = build_statistics(
        records,
        total_missing=prepared.total_missing,
        remaining_missing=remaining,
        methods=list(outputs),
    )

    skipped = sorted({f for output in outputs.values() for f in output.skipped_fields})
    if skipped:
        warnings.append(f"Estimation skipped for field(s): {', '.join(skipped)}")
    if remaining > 0:
        warnings.append(f"{remaining} missing cell(s) could not be imputed")

    for w in warnings:
        _log.warning(w)

    return ImputationResult(
        data=data,
        imputed_fields=records,
        statistics=statistics,
        quality_metrics=build_quality_metrics(statistics.average_confidence),
        metadata={
            "requested_method": cfg.method,
            "resolved_method": method,
            "fallback_method": cfg.fallback_method,
            "warnings": warnings,
            "telemetry": {name: output.telemetry for name, output in outputs.items()},
            "diagnosis": {
                "suggested_method": diagnosis.suggested_method,
                "recommendations": list(diagnosis.recommendations),
                "affected_fields": diagnosis.affected_fields,
                "patterns": {p.field: p.pattern for p in diagnosis.patterns},
            },
            "field_types": dict(prepared.field_types),
            "n_rows": prepared.n_rows,
            "n_fields": prepared.n_fields,
        },
    )


# ═══════════════════════════════════════════════════════════════════════════
# Entry Points
# ═══════════════════════════════════════════════════════════════════════════

@log_execution_time
def impute_missing_data(dataset: Any, config: ConfigLike = None) -> ImputationResult:
    """
    🚀 **Impute missing values of a record dataset**

    Args:
        dataset: Sequence of mappings (or a DataFrame)
        config: ImputationConfig, a mapping of its fields, or None for the
            Settings defaults

    Returns:
        ImputationResult

    Raises:
        EmptyDatasetError: dataset is None or has no rows
        DataValidationError: dataset is not a sequence of mappings
    """
    cfg, prepared, diagnosis, method, warnings = _plan(dataset, config)
    outputs: Dict[str, EstimatorOutput] = {}

    if method != "none":
        with LogContext(imputation_method=method):
            with exception_context(to=EstimationError, message=f"{method} estimator failed"):
                outputs[method] = get_estimator(method).impute(prepared, cfg)

        primary = outputs[method]
        if _needs_fallback(cfg, method, primary):
            fallback = cfg.fallback_method
            with LogContext(imputation_method=fallback):
                with exception_context(to=EstimationError, message=f"{fallback} estimator failed"):
                    outputs[fallback] = get_estimator(fallback).impute(
                        prepared.with_values(primary.values), cfg
                    )

    return _assemble(prepared, cfg, diagnosis, method, outputs, warnings)


@log_execution_time
async def aimpute_missing_data(dataset: Any, config: ConfigLike = None) -> ImputationResult:
    """Async variant of ``impute_missing_data``; estimators run through ``aimpute``."""
    cfg, prepared, diagnosis, method, warnings = _plan(dataset, config)
    outputs: Dict[str, EstimatorOutput] = {}

    if method != "none":
        with LogContext(imputation_method=method):
            with exception_context(to=EstimationError, message=f"{method} estimator failed"):
                outputs[method] = await get_estimator(method).aimpute(prepared, cfg)

        primary = outputs[method]
        if _needs_fallback(cfg, method, primary):
            fallback = cfg.fallback_method
            with LogContext(imputation_method=fallback):
                with exception_context(to=EstimationError, message=f"{fallback} estimator failed"):
                    outputs[fallback] = await get_estimator(fallback).aimpute(
                        prepared.with_values(primary.values), cfg
                    )

    return _assemble(prepared, cfg, diagnosis, method, outputs, warnings)


# ═══════════════════════════════════════════════════════════════════════════
# Agent
# ═══════════════════════════════════════════════════════════════════════════

class ImputationOrchestrator(BaseAgent):
    """
    🧬 **Imputation Orchestrator Agent**

    Runs ``impute_missing_data`` inside the agent lifecycle. An empty
    dataset produces a failed AgentResult with
    ``metadata["error_code"] == "empty_dataset"``.

    Usage:
```python
        result = ImputationOrchestrator().run(data=records, config={"method": "mice"})
        if result.is_failed():
            print(result.errors)
        else:
            imputed = result.data["result"]
```
    """

    def __init__(self, config: ConfigLike = None) -> None:
        super().__init__(
            name="ImputationOrchestrator",
            description="Diagnoses missingness and fills missing cells",
        )
        self.config = config

    def execute(self, data: Any = None, config: ConfigLike = None, **kwargs: Any) -> AgentResult:
        result = AgentResult(agent_name=self.name)

        imputed = impute_missing_data(data, config if config is not None else self.config)

        result.add_data(
            result=imputed,
            data=imputed.data,
            statistics=imputed.statistics,
            quality_metrics=imputed.quality_metrics,
        )
        result.add_metadata(
            requested_method=imputed.metadata["requested_method"],
            resolved_method=imputed.metadata["resolved_method"],
        )
        for warning in imputed.warnings:
            result.add_warning(warning)

        self.logger.success(
            f"Imputed {imputed.statistics.total_imputed}/{imputed.statistics.total_missing} cell(s) "
            f"with {imputed.metadata['resolved_method']}"
        )
        return result
