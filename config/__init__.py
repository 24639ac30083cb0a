# config/__init__.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  ImputeGenius — Configuration Package                                      ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Lazy Module Loading                                                     ║
║  ✓ Settings Validation                                                     ║
║  ✓ Test Utilities                                                          ║
╚════════════════════════════════════════════════════════════════════════════╝

Architecture:
```
    config/
    ├── __init__.py          # Lazy exports (this file)
    ├── settings.py          # Engine settings (pydantic-settings)
    └── logging_config.py    # Loguru sinks and helpers
```

Usage:
```python
    from config import get_settings, validate_settings

    print(get_settings().IMPUTATION_DEFAULT_METHOD)
    for key, msg in validate_settings().items():
        print(f"⚠ {key}: {msg}")
```
"""

from __future__ import annotations

from importlib import import_module
from pathlib import Path
from types import ModuleType
from typing import Any, Dict, List, Tuple

# ═══════════════════════════════════════════════════════════════════════════
# Module Metadata
# ═══════════════════════════════════════════════════════════════════════════

__version__ = "1.0.0"
__author__ = "ImputeGenius Team"


# ═══════════════════════════════════════════════════════════════════════════
# Lazy Exports
# ═══════════════════════════════════════════════════════════════════════════

_LAZY_EXPORTS: Dict[str, Tuple[str, str]] = {
    # Settings
    "Settings": ("config.settings", "Settings"),
    "get_settings": ("config.settings", "get_settings"),
    "IMPUTATION_METHODS": ("config.settings", "IMPUTATION_METHODS"),

    # Logging
    "setup_logging": ("config.logging_config", "setup_logging"),
    "get_logger": ("config.logging_config", "get_logger"),
}

__all__ = (
    "__version__",
    *_LAZY_EXPORTS.keys(),
    "validate_settings",
    "use_test_settings",
    "get_config_info",
)


def __getattr__(name: str) -> Any:
    """Load the owning module on first access and cache the symbol."""
    if name in _LAZY_EXPORTS:
        module_name, symbol_name = _LAZY_EXPORTS[name]
        try:
            module: ModuleType = import_module(module_name)
            obj = getattr(module, symbol_name)
        except (ImportError, AttributeError) as e:
            raise AttributeError(f"Failed to load '{name}' from '{module_name}': {e}") from e
        globals()[name] = obj
        return obj

    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


def __dir__() -> List[str]:
    return sorted(set(list(globals().keys()) + list(_LAZY_EXPORTS.keys())))


# ═══════════════════════════════════════════════════════════════════════════
# Configuration Validation
# ═══════════════════════════════════════════════════════════════════════════

def validate_settings(*, strict: bool = False) -> Dict[str, str]:
    """
    🔍 **Validate Configuration Settings**

    Checks what field validators cannot: a writable logs directory and
    imputation defaults that are legal but unlikely to be intended.

    Args:
        strict: Raise ValueError on the first issue instead of collecting it

    Returns:
        Setting name -> warning message (empty if all OK)
    """
    from config.settings import settings as _s

    warnings: Dict[str, str] = {}

    def _report(key: str, msg: str) -> None:
        if strict:
            raise ValueError(msg)
        warnings[key] = msg

    logs = Path(_s.LOGS_PATH)
    try:
        logs.mkdir(parents=True, exist_ok=True)
        probe = logs / ".write_test"
        probe.touch()
        probe.unlink()
    except OSError as e:
        _report("LOGS_PATH", f"LOGS_PATH ({logs}) is not writable: {e}")

    if _s.RANDOM_STATE < 0:
        _report("RANDOM_STATE", "RANDOM_STATE should be non-negative")

    if _s.IMPUTATION_MAX_ITERATIONS < 3:
        _report(
            "IMPUTATION_MAX_ITERATIONS",
            f"IMPUTATION_MAX_ITERATIONS is very low ({_s.IMPUTATION_MAX_ITERATIONS}); "
            "MICE will rarely converge",
        )

    if _s.IMPUTATION_FOREST_TREES < 5:
        _report(
            "IMPUTATION_FOREST_TREES",
            f"IMPUTATION_FOREST_TREES is very low ({_s.IMPUTATION_FOREST_TREES}); "
            "ensemble estimates will be noisy",
        )

    return warnings


# ═══════════════════════════════════════════════════════════════════════════
# Test Utilities
# ═══════════════════════════════════════════════════════════════════════════

def use_test_settings(**overrides: Any) -> Dict[str, Any]:
    """
    🧪 **Override Settings for Tests**

    Returns the previous values so callers can restore them.

    Warning:
        Changes are global and persist until restored or process restart.
    """
    from config.settings import settings as _s

    previous: Dict[str, Any] = {}
    for key, value in overrides.items():
        if not hasattr(_s, key):
            raise AttributeError(f"Setting '{key}' does not exist in configuration")
        previous[key] = getattr(_s, key)
        setattr(_s, key, value)
    return previous


# ═══════════════════════════════════════════════════════════════════════════
# Configuration Info
# ═══════════════════════════════════════════════════════════════════════════

def get_config_info() -> Dict[str, Any]:
    """📊 Summary of the active configuration."""
    from config.settings import settings as _s

    return {
        "version": __version__,
        "exports": list(_LAZY_EXPORTS.keys()),
        "cached": [name for name in _LAZY_EXPORTS if name in globals()],
        "settings": {
            "ENVIRONMENT": _s.ENVIRONMENT,
            "LOG_LEVEL": _s.LOG_LEVEL,
            "LOGS_PATH": str(_s.LOGS_PATH),
            "RANDOM_STATE": _s.RANDOM_STATE,
            "IMPUTATION_DEFAULT_METHOD": _s.IMPUTATION_DEFAULT_METHOD,
            "IMPUTATION_MAX_ITERATIONS": _s.IMPUTATION_MAX_ITERATIONS,
        },
    }
