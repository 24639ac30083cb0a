# agents/__init__.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  ImputeGenius — Agents Package                                             ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Lazy Import System (PEP 562)                                            ║
║  ✓ LRU Caching of Resolved Symbols                                         ║
║  ✓ Clean Public API                                                        ║
║  ✓ Version Management                                                      ║
╚════════════════════════════════════════════════════════════════════════════╝

Agent Categories:
    • orchestrators: end-to-end imputation
    • diagnosis: missingness patterns and method suggestion
    • quality: completeness before / after imputation

Usage:
```python
    # Import is fast - pandas / scikit-learn load on first use
    from agents import ImputationOrchestrator, impute_missing_data

    result = impute_missing_data(records)
```
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass
from functools import lru_cache
from importlib.metadata import PackageNotFoundError, version as _pkg_version
from types import ModuleType
from typing import Any, Dict, Final, List, Tuple

# ═══════════════════════════════════════════════════════════════════════════
# Package Metadata
# ═══════════════════════════════════════════════════════════════════════════

try:
    __version__ = _pkg_version("imputegenius")
except PackageNotFoundError:
    __version__ = "1.0.0-dev"

__author__ = "ImputeGenius Team"


# ═══════════════════════════════════════════════════════════════════════════
# Lazy Export Specification
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class _LazySpec:
    """Specification for lazy-loaded symbol."""
    module: str
    symbol: str


_LAZY_EXPORTS: Dict[str, _LazySpec] = {

    # ═══════════════════════════════════════════════════════════════════════
    # ORCHESTRATORS
    # ═══════════════════════════════════════════════════════════════════════

    "ImputationOrchestrator": _LazySpec(
        "agents.imputation.orchestrator", "ImputationOrchestrator"
    ),
    "impute_missing_data": _LazySpec(
        "agents.imputation.orchestrator", "impute_missing_data"
    ),
    "aimpute_missing_data": _LazySpec(
        "agents.imputation.orchestrator", "aimpute_missing_data"
    ),

    # ═══════════════════════════════════════════════════════════════════════
    # DIAGNOSIS
    # ═══════════════════════════════════════════════════════════════════════

    "MissingDataDiagnostician": _LazySpec(
        "agents.imputation.diagnostician", "MissingDataDiagnostician"
    ),
    "diagnose_missing_data": _LazySpec(
        "agents.imputation.diagnostician", "diagnose_missing_data"
    ),

    # ═══════════════════════════════════════════════════════════════════════
    # QUALITY
    # ═══════════════════════════════════════════════════════════════════════

    "DataCompletenessAnalyzer": _LazySpec(
        "agents.imputation.completeness", "DataCompletenessAnalyzer"
    ),
}


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

__all__: Final[Tuple[str, ...]] = tuple(_LAZY_EXPORTS.keys()) + (
    "__version__",
    "__author__",
    "list_agents",
)


# ═══════════════════════════════════════════════════════════════════════════
# Lazy Resolution with LRU Cache
# ═══════════════════════════════════════════════════════════════════════════

@lru_cache(maxsize=len(_LAZY_EXPORTS) or 128)
def _resolve(name: str) -> Any:
    """
    🔄 **Lazy Symbol Resolution with Caching**

    Raises:
        AttributeError: Symbol not in lazy exports
        ImportError: Module import failed
    """
    spec = _LAZY_EXPORTS.get(name)

    if spec is None:
        raise AttributeError(
            f"module '{__name__}' has no attribute '{name}'. "
            f"Available: {', '.join(sorted(_LAZY_EXPORTS.keys()))}"
        )

    try:
        module: ModuleType = importlib.import_module(spec.module)
    except Exception as e:
        raise ImportError(
            f"Failed to import module '{spec.module}' required for '{name}': {e}"
        ) from e

    return getattr(module, spec.symbol)


def __getattr__(name: str) -> Any:
    obj = _resolve(name)
    globals()[name] = obj
    return obj


def __dir__() -> List[str]:
    return sorted(list(globals().keys()) + list(__all__))


# ═══════════════════════════════════════════════════════════════════════════
# Utility Functions
# ═══════════════════════════════════════════════════════════════════════════

def list_agents() -> List[str]:
    return sorted(_LAZY_EXPORTS.keys())
