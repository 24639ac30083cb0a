# core/exceptions.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  ImputeGenius — Exceptions                                                 ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  EXCEPTION HIERARCHY OF THE IMPUTATION ENGINE                              ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Centralized Exception Hierarchy                                         ║
║  ✓ Error Code & Severity System                                            ║
║  ✓ Input Errors vs. Internal Errors                                        ║
║  ✓ Context & Details Tracking                                              ║
║  ✓ Decorator & Context Manager                                             ║
║  ✓ Safe Execution Wrappers                                                 ║
╚════════════════════════════════════════════════════════════════════════════╝

Architecture:
```
    ImputeGeniusException (Base)
    ├── ErrorCode (taxonomy)
    ├── ErrorSeverity (info/warning/error/critical)
    └── Context & Details

    Specific Exceptions:
    ├── DataValidationError       (input)
    ├── EmptyDatasetError         (input)
    ├── InsufficientDataError     (input)
    ├── ConfigurationError        (input)
    ├── EstimationError
    └── NumericKernelError

    Helpers:
    ├── safe_execute()
    ├── wrap_exceptions() decorator
    └── exception_context() manager
```

Usage:
```python
    from core.exceptions import EmptyDatasetError, exception_context

    raise EmptyDatasetError("No data provided for imputation")

    with exception_context(to=EstimationError, message="KNN failed"):
        ...
```

Dependencies:
    • loguru
"""

from __future__ import annotations

from contextlib import contextmanager
from enum import Enum
from functools import wraps
from typing import Any, Callable, Dict, Iterator, Optional, Type

from loguru import logger

# ═══════════════════════════════════════════════════════════════════════════
# Module Metadata
# ═══════════════════════════════════════════════════════════════════════════

__version__ = "1.0.0"
__author__ = "ImputeGenius Team"

__all__ = [
    # Enums
    "ErrorCode",
    "ErrorSeverity",
    # Base Exception
    "ImputeGeniusException",
    # Specific Exceptions
    "DataValidationError",
    "EmptyDatasetError",
    "InsufficientDataError",
    "ConfigurationError",
    "EstimationError",
    "NumericKernelError",
    # Helpers
    "safe_execute",
    "wrap_exceptions",
    "exception_context",
]


# ═══════════════════════════════════════════════════════════════════════════
# Error Taxonomy
# ═══════════════════════════════════════════════════════════════════════════

class ErrorSeverity(str, Enum):
    """🚨 Severity classification for errors."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCode(str, Enum):
    """🏷️ Standardized error codes for categorization."""
    UNKNOWN = "unknown_error"
    DATA_VALIDATION = "data_validation_error"
    EMPTY_DATASET = "empty_dataset"
    INSUFFICIENT_DATA = "insufficient_data"
    CONFIG = "configuration_error"
    ESTIMATION = "estimation_error"
    NUMERIC = "numeric_kernel_error"


# Codes that describe a problem with the caller's input, not with the engine
_INPUT_ERROR_CODES = frozenset({
    ErrorCode.DATA_VALIDATION,
    ErrorCode.EMPTY_DATASET,
    ErrorCode.INSUFFICIENT_DATA,
    ErrorCode.CONFIG,
})


# ═══════════════════════════════════════════════════════════════════════════
# Base Exception
# ═══════════════════════════════════════════════════════════════════════════

class ImputeGeniusException(Exception):
    """
    🎯 **Base ImputeGenius Exception**

    Base exception class with error code, severity, details and context.

    Usage:
```python
        raise ImputeGeniusException(
            "Operation failed",
            details={"field": "price"},
            error_code=ErrorCode.ESTIMATION,
            context={"method": "regression"}
        )
```
    """

    default_code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        *,
        error_code: Optional[ErrorCode] = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None
    ):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details or {}
        self.error_code: ErrorCode = error_code or self.default_code
        self.severity: ErrorSeverity = severity
        self.context: Dict[str, Any] = context or {}
        self.cause = cause

    @property
    def is_input_error(self) -> bool:
        """True when the caller supplied unusable input."""
        return self.error_code in _INPUT_ERROR_CODES

    def __str__(self) -> str:
        """String representation with full context."""
        parts = [f"{self.error_code.value}: {self.message}"]

        if self.details:
            parts.append(f"Details: {self.details}")

        if self.context:
            parts.append(f"Context: {self.context}")

        if self.cause:
            parts.append(f"Cause: {type(self.cause).__name__}: {self.cause}")

        return " | ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "error": {
                "code": self.error_code.value,
                "message": self.message,
                "details": self.details or {},
                "context": self.context or {},
                "severity": self.severity.value,
                "input_error": self.is_input_error,
                "cause": str(self.cause) if self.cause else None
            }
        }

    @classmethod
    def from_exc(
        cls,
        exc: BaseException,
        *,
        default_code: ErrorCode = ErrorCode.UNKNOWN,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        context: Optional[Dict[str, Any]] = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR
    ) -> "ImputeGeniusException":
        """Create from an existing exception (returned as-is if already ours)."""
        if isinstance(exc, ImputeGeniusException):
            return exc

        return cls(
            message or str(exc) or "An unexpected error occurred",
            details=details,
            error_code=default_code,
            severity=severity,
            context=context,
            cause=exc
        )


# ═══════════════════════════════════════════════════════════════════════════
# Specific Exception Classes
# ═══════════════════════════════════════════════════════════════════════════

class DataValidationError(ImputeGeniusException):
    """⚠️ Dataset has an unusable shape or type."""
    default_code = ErrorCode.DATA_VALIDATION


class EmptyDatasetError(DataValidationError):
    """📭 No records were supplied for imputation."""
    default_code = ErrorCode.EMPTY_DATASET


class InsufficientDataError(ImputeGeniusException):
    """📉 Not enough observed values to fit an estimator."""
    default_code = ErrorCode.INSUFFICIENT_DATA


class ConfigurationError(ImputeGeniusException):
    """⚙️ Invalid imputation configuration."""
    default_code = ErrorCode.CONFIG


class EstimationError(ImputeGeniusException):
    """🧮 An estimator failed while computing a value."""
    default_code = ErrorCode.ESTIMATION


class NumericKernelError(ImputeGeniusException):
    """📐 Invalid shapes handed to the linear-algebra kernel."""
    default_code = ErrorCode.NUMERIC


# ═══════════════════════════════════════════════════════════════════════════
# Helper Functions
# ═══════════════════════════════════════════════════════════════════════════

def _wrap(
    exc: Exception,
    to: Type[ImputeGeniusException],
    message: str,
    error_code: Optional[ErrorCode],
    severity: ErrorSeverity,
    context: Optional[Dict[str, Any]],
    log: bool,
) -> ImputeGeniusException:
    wrapped = to(
        message,
        details={"original_error": str(exc)},
        error_code=error_code,
        severity=severity,
        context=context,
        cause=exc
    )
    if log:
        logger.opt(exception=exc).error(str(wrapped))
    return wrapped


def safe_execute(
    func: Callable[..., Any],
    *args,
    error_message: str = "Operation failed",
    exc_type: Type[ImputeGeniusException] = ImputeGeniusException,
    error_code: Optional[ErrorCode] = None,
    severity: ErrorSeverity = ErrorSeverity.ERROR,
    log: bool = True,
    context: Optional[Dict[str, Any]] = None,
    **kwargs
) -> Any:
    """
    🛡️ **Safe Function Execution**

    Executes `func` and re-raises any foreign exception as `exc_type`.

    Example:
```python
        fit = safe_execute(
            fit_least_squares, X, y,
            error_message="Regression fit failed",
            exc_type=EstimationError,
        )
```
    """
    try:
        return func(*args, **kwargs)
    except ImputeGeniusException:
        raise
    except Exception as e:
        raise _wrap(e, exc_type, error_message, error_code, severity, context, log) from e


def wrap_exceptions(
    *,
    to: Type[ImputeGeniusException],
    message: str,
    error_code: Optional[ErrorCode] = None,
    severity: ErrorSeverity = ErrorSeverity.ERROR,
    context_builder: Optional[Callable[[tuple, dict], Dict[str, Any]]] = None,
    log: bool = True
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    🎁 **Exception Wrapping Decorator**

    Example:
```python
        @wrap_exceptions(to=EstimationError, message="Forest fit failed")
        def fit_forest(frame, target):
            ...
```
    """
    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(fn)
        def wrapper(*args, **kwargs):
            try:
                return fn(*args, **kwargs)
            except ImputeGeniusException:
                raise
            except Exception as e:
                ctx = context_builder(args, kwargs) if context_builder else {}
                raise _wrap(e, to, message, error_code, severity, ctx, log) from e

        return wrapper
    return decorator


@contextmanager
def exception_context(
    *,
    to: Type[ImputeGeniusException] = ImputeGeniusException,
    message: str = "Operation failed",
    error_code: Optional[ErrorCode] = None,
    severity: ErrorSeverity = ErrorSeverity.ERROR,
    context: Optional[Dict[str, Any]] = None,
    log: bool = True
) -> Iterator[None]:
    """
    🔒 **Exception Context Manager**

    Example:
```python
        with exception_context(to=EstimationError, message="MICE pass failed"):
            run_pass()
```
    """
    try:
        yield
    except ImputeGeniusException:
        raise
    except Exception as e:
        raise _wrap(e, to, message, error_code, severity, context, log) from e
