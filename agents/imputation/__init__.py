# agents/imputation/__init__.py
"""
ImputeGenius — imputation package (lazy exports)

Exports:
- impute_missing_data / aimpute_missing_data   (agents.imputation.orchestrator)
- diagnose_missing_data                         (agents.imputation.diagnostician)
- DataCompletenessAnalyzer                      (agents.imputation.completeness)
- ImputationConfig, ImputationResult, ...       (agents.imputation.schemas)

Usage:
    from agents.imputation import impute_missing_data, ImputationConfig
"""

from __future__ import annotations

from importlib import import_module
from types import ModuleType
from typing import Any, Dict, Tuple

_LAZY_EXPORTS: Dict[str, Tuple[str, str]] = {
    # Orchestration
    "impute_missing_data": ("agents.imputation.orchestrator", "impute_missing_data"),
    "aimpute_missing_data": ("agents.imputation.orchestrator", "aimpute_missing_data"),
    "resolve_method": ("agents.imputation.orchestrator", "resolve_method"),
    "ImputationOrchestrator": ("agents.imputation.orchestrator", "ImputationOrchestrator"),

    # Diagnosis
    "diagnose_missing_data": ("agents.imputation.diagnostician", "diagnose_missing_data"),
    "DiagnosisConfig": ("agents.imputation.diagnostician", "DiagnosisConfig"),
    "MissingDataDiagnostician": ("agents.imputation.diagnostician", "MissingDataDiagnostician"),

    # Estimators
    "get_estimator": ("agents.imputation.estimators", "get_estimator"),

    # Completeness
    "DataCompletenessAnalyzer": ("agents.imputation.completeness", "DataCompletenessAnalyzer"),
    "generate_summary_text": ("agents.imputation.completeness", "generate_summary_text"),

    # Data model
    "PreparedDataset": ("agents.imputation.dataset", "PreparedDataset"),
    "prepare_dataset": ("agents.imputation.dataset", "prepare_dataset"),
    "ImputationConfig": ("agents.imputation.schemas", "ImputationConfig"),
    "ImputationResult": ("agents.imputation.schemas", "ImputationResult"),
    "ImputedFieldRecord": ("agents.imputation.schemas", "ImputedFieldRecord"),
    "MissingDataDiagnosis": ("agents.imputation.schemas", "MissingDataDiagnosis"),
    "MissingDataPattern": ("agents.imputation.schemas", "MissingDataPattern"),
    "DataCompletenessMetrics": ("agents.imputation.schemas", "DataCompletenessMetrics"),
}

__all__ = tuple(_LAZY_EXPORTS.keys())


def __getattr__(name: str) -> Any:
    """Resolve a symbol on first access and cache it in globals()."""
    if name not in _LAZY_EXPORTS:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
    mod_name, symbol = _LAZY_EXPORTS[name]
    module: ModuleType = import_module(mod_name)
    obj = getattr(module, symbol)
    globals()[name] = obj
    return obj


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(_LAZY_EXPORTS.keys()))
