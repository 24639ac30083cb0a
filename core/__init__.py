# core/__init__.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  ImputeGenius — Core Package                                               ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Lazy Module Loading                                                     ║
║  ✓ Clean Public API                                                        ║
║  ✓ Version Management                                                      ║
╚════════════════════════════════════════════════════════════════════════════╝

Core Package Structure:
```
    core/
    ├── __init__.py          # Lazy exports (this file)
    ├── base_agent.py        # Agent framework
    ├── exceptions.py        # Exception hierarchy
    ├── numeric_kernel.py    # Linear algebra / least squares
    └── utils.py             # Missing values, type sniffing, formatting
```

Usage:
```python
    from core import BaseAgent, AgentResult, fit_least_squares
```
"""

from __future__ import annotations

from importlib import import_module
from importlib.metadata import PackageNotFoundError, version as _pkg_version
from types import ModuleType
from typing import Any, Dict, Tuple

# ═══════════════════════════════════════════════════════════════════════════
# Module Metadata
# ═══════════════════════════════════════════════════════════════════════════

try:
    __version__ = _pkg_version("imputegenius")
except PackageNotFoundError:
    # Development mode / uninstalled package
    __version__ = "1.0.0-dev"

__author__ = "ImputeGenius Team"


# ═══════════════════════════════════════════════════════════════════════════
# Lazy Export Definitions
# ═══════════════════════════════════════════════════════════════════════════

_LAZY_EXPORTS: Dict[str, Tuple[str, str]] = {
    # Agent Framework
    "BaseAgent": ("core.base_agent", "BaseAgent"),
    "AgentResult": ("core.base_agent", "AgentResult"),
    "AgentStatus": ("core.base_agent", "AgentStatus"),

    # Numeric Kernel
    "LinearFit": ("core.numeric_kernel", "LinearFit"),
    "fit_least_squares": ("core.numeric_kernel", "fit_least_squares"),
    "solve_linear_system": ("core.numeric_kernel", "solve_linear_system"),

    # Exceptions
    "ImputeGeniusException": ("core.exceptions", "ImputeGeniusException"),
    "EmptyDatasetError": ("core.exceptions", "EmptyDatasetError"),
    "DataValidationError": ("core.exceptions", "DataValidationError"),
}

__all__ = ("__version__", *_LAZY_EXPORTS.keys())


# ═══════════════════════════════════════════════════════════════════════════
# Lazy Loading Implementation
# ═══════════════════════════════════════════════════════════════════════════

def __getattr__(name: str) -> Any:
    """Resolve a public symbol on first access and cache it in globals()."""
    if name not in _LAZY_EXPORTS:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'")

    module_name, symbol = _LAZY_EXPORTS[name]
    module: ModuleType = import_module(module_name)
    obj = getattr(module, symbol)
    globals()[name] = obj
    return obj


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(_LAZY_EXPORTS.keys()))
