# config/logging_config.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  ImputeGenius — Logging Configuration                                      ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  CENTRALIZED LOGGING FOR THE IMPUTATION ENGINE                             ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Structured Logging (JSON + Human-Readable)                              ║
║  ✓ Multiple Sinks (Console, Files, JSONL)                                  ║
║  ✓ Context Variables (Run / Dataset IDs)                                   ║
║  ✓ Stdlib Interception (warnings, scikit-learn, pandas)                    ║
║  ✓ Sync/Async Timing Decorators                                            ║
║  ✓ Explicit Setup (no sinks touched at import unless LOG_AUTO_SETUP)       ║
╚════════════════════════════════════════════════════════════════════════════╝

Architecture:
```
    Application Code
         ├─→ loguru.logger
         ├─→ stdlib logging → InterceptHandler → loguru
         └─→ warnings → loguru

    Sinks:
    ├── Console (stdout, colorized)
    ├── app.log (all logs, rotated)
    ├── errors.log (ERROR+ only)
    ├── agents.log (agent-specific)
    └── app.jsonl (structured JSON)
```

Usage:
```python
    from config.logging_config import setup_logging, get_logger, log_execution_time

    setup_logging(log_level="INFO")
    log = get_logger(__name__, component="estimator")

    @log_execution_time
    def impute(data):
        ...
```

Dependencies:
    • loguru
"""

from __future__ import annotations

import inspect
import logging
import sys
import time
import warnings
from contextvars import ContextVar
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from loguru import logger

from config.settings import settings

# ═══════════════════════════════════════════════════════════════════════════
# Module Metadata
# ═══════════════════════════════════════════════════════════════════════════

__version__ = "1.0.0"
__author__ = "ImputeGenius Team"

__all__ = [
    "setup_logging",
    "get_logger",
    "set_run_context",
    "clear_run_context",
    "log_execution_time",
    "LogContext",
]


# ═══════════════════════════════════════════════════════════════════════════
# Context Variables
# ═══════════════════════════════════════════════════════════════════════════

_ctx_run_id: ContextVar[Optional[str]] = ContextVar("run_id", default=None)
_ctx_dataset_id: ContextVar[Optional[str]] = ContextVar("dataset_id", default=None)


def set_run_context(
    *,
    run_id: Optional[str] = None,
    dataset_id: Optional[str] = None
) -> None:
    """
    🏷️ **Set Run Context**

    Tags every subsequent log record of the current execution context
    with the given imputation run / dataset identifiers.
    """
    if run_id is not None:
        _ctx_run_id.set(run_id)
    if dataset_id is not None:
        _ctx_dataset_id.set(dataset_id)


def clear_run_context() -> None:
    """Clear all context variables."""
    _ctx_run_id.set(None)
    _ctx_dataset_id.set(None)


# ═══════════════════════════════════════════════════════════════════════════
# Stdlib Logging Interception
# ═══════════════════════════════════════════════════════════════════════════

class InterceptHandler(logging.Handler):
    """
    🔌 **Stdlib Logging Interceptor**

    Intercepts standard library logging and routes to loguru.
    """

    def emit(self, record: logging.LogRecord) -> None:
        """Emit log record to loguru."""
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore
            depth += 1

        logger.bind(module=record.module) \
              .opt(depth=depth, exception=record.exc_info) \
              .log(level, record.getMessage())


def _patch_record(record: Dict[str, Any]) -> None:
    """Fill run context into the record's extra dict."""
    extra = record["extra"]
    extra["run_id"] = extra.get("run_id") or _ctx_run_id.get() or "-"
    extra["dataset_id"] = extra.get("dataset_id") or _ctx_dataset_id.get() or "-"


# ═══════════════════════════════════════════════════════════════════════════
# Filters
# ═══════════════════════════════════════════════════════════════════════════

def _agents_filter(record: Dict[str, Any]) -> bool:
    """True if the record was emitted by (or on behalf of) an agent."""
    name = (record.get("name") or "").lower()
    extra = record.get("extra") or {}
    component = str(extra.get("component", "")).lower()
    agent = str(extra.get("agent", "")).lower()

    return ("agent" in name) or ("agent" in component) or (agent != "")


# ═══════════════════════════════════════════════════════════════════════════
# Log Formats
# ═══════════════════════════════════════════════════════════════════════════

LOG_FORMAT_HUMAN = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{module}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "run=<blue>{extra[run_id]}</blue> ds=<blue>{extra[dataset_id]}</blue> | "
    "<level>{message}</level>"
)

LOG_FORMAT_COMPACT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}"
)


# ═══════════════════════════════════════════════════════════════════════════
# Initialization State
# ═══════════════════════════════════════════════════════════════════════════

_INITIALIZED_FLAG = False
_SINK_IDS: List[int] = []


# ═══════════════════════════════════════════════════════════════════════════
# Main Setup
# ═══════════════════════════════════════════════════════════════════════════

def setup_logging(
    app_name: Optional[str] = None,
    log_level: Optional[str] = None,
    *,
    enable_json: Optional[bool] = None,
    console_compact: Optional[bool] = None,
    logs_path: Optional[Union[str, Path]] = None,
    reset_existing: bool = False
) -> None:
    """
    🔧 **Setup Centralized Logging**

    Initializes logging system with multiple sinks.
    Idempotent - can be called multiple times safely.

    Args:
        app_name: Application name
        log_level: Log level (DEBUG/INFO/WARNING/ERROR/CRITICAL)
        enable_json: Enable JSONL sink
        console_compact: Use compact console format
        logs_path: Directory for log files
        reset_existing: Force re-initialization

    Creates:
      • Console sink (colorized)
      • app.log, errors.log, agents.log, app.jsonl (skipped in TEST_MODE)
    """
    global _INITIALIZED_FLAG

    if _INITIALIZED_FLAG and not reset_existing:
        return

    app_name = app_name or settings.APP_NAME
    log_level = (log_level or settings.LOG_LEVEL).upper()
    logs_dir = Path(logs_path or settings.LOGS_PATH).resolve()
    rotation = settings.LOG_ROTATION
    retention = settings.LOG_RETENTION
    enable_json = settings.LOG_JSON_ENABLED if enable_json is None else enable_json
    console_compact = (
        settings.LOG_CONSOLE_COMPACT if console_compact is None else console_compact
    )

    logger.remove()
    _SINK_IDS.clear()
    logger.configure(
        extra={"run_id": "-", "dataset_id": "-", "app": app_name},
        patcher=_patch_record,
    )

    # Console sink
    _SINK_IDS.append(
        logger.add(
            sys.stdout,
            format=LOG_FORMAT_COMPACT if console_compact else LOG_FORMAT_HUMAN,
            level=log_level,
            colorize=True,
            backtrace=(log_level == "DEBUG"),
            diagnose=False,
        )
    )

    if not settings.TEST_MODE:
        logs_dir.mkdir(parents=True, exist_ok=True)

        file_sinks = [
            ("app.log", log_level, retention, None),
            ("errors.log", "ERROR", "90 days", None),
            ("agents.log", "INFO", retention, _agents_filter),
        ]
        for filename, level, keep, sink_filter in file_sinks:
            _SINK_IDS.append(
                logger.add(
                    logs_dir / filename,
                    format=LOG_FORMAT_HUMAN,
                    level=level,
                    rotation=rotation,
                    retention=keep,
                    compression="zip",
                    encoding="utf-8",
                    enqueue=True,
                    filter=sink_filter,
                )
            )

        if enable_json:
            _SINK_IDS.append(
                logger.add(
                    logs_dir / "app.jsonl",
                    serialize=True,
                    level=log_level,
                    rotation=rotation,
                    retention=retention,
                    compression="zip",
                    encoding="utf-8",
                    enqueue=True,
                )
            )

    # Intercept stdlib logging
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    for lib in ("sklearn", "pandas", "numpy"):
        lib_logger = logging.getLogger(lib)
        lib_logger.handlers = [InterceptHandler()]
        lib_logger.propagate = False

    # Capture warnings
    warnings.simplefilter("default")
    logging.captureWarnings(True)

    logger.info(
        f"✓ Logging initialized: app={app_name}, level={log_level}, "
        f"json={enable_json}, logs_dir={logs_dir}"
    )

    _INITIALIZED_FLAG = True


# ═══════════════════════════════════════════════════════════════════════════
# Utilities
# ═══════════════════════════════════════════════════════════════════════════

def get_logger(name: Optional[str] = None, **binds: Any):
    """
    📝 **Get Bound Logger**

    Example:
```python
        log = get_logger(__name__, component="estimator", method="knn")
        log.info("Fitting neighbours")
```
    """
    lgr = logger

    if name:
        lgr = lgr.bind(name=name)

    if binds:
        lgr = lgr.bind(**binds)

    return lgr


class LogContext:
    """
    📦 **Log Context Manager**

    Temporary bindings for every record emitted inside the block.

    Example:
```python
        with LogContext(method="mice", field="price"):
            log.info("Refitting")
```
    """

    def __init__(self, **kwargs: Any):
        self._ctx = kwargs
        self._cm = None

    def __enter__(self):
        self._cm = logger.contextualize(**self._ctx)
        self._cm.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            logger.error(f"Exception in context: {exc_val!r}")
        self._cm.__exit__(exc_type, exc_val, exc_tb)
        return False


# ═══════════════════════════════════════════════════════════════════════════
# Decorators
# ═══════════════════════════════════════════════════════════════════════════

def log_execution_time(func: Callable) -> Callable:
    """
    ⏱️ **Log Execution Time Decorator**

    Logs function execution time and re-raises exceptions.
    Supports both sync and async functions.
    """
    if inspect.iscoroutinefunction(func):
        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            start = time.perf_counter()
            logger.debug(f"▶️  Starting {func.__name__}")

            try:
                result = await func(*args, **kwargs)
                duration = time.perf_counter() - start
                logger.debug(f"✓ Completed {func.__name__} in {duration:.3f}s")
                return result

            except Exception as e:
                duration = time.perf_counter() - start
                logger.error(f"✗ Failed {func.__name__} after {duration:.3f}s: {e}")
                raise

        return async_wrapper

    @wraps(func)
    def sync_wrapper(*args, **kwargs):
        start = time.perf_counter()
        logger.debug(f"▶️  Starting {func.__name__}")

        try:
            result = func(*args, **kwargs)
            duration = time.perf_counter() - start
            logger.debug(f"✓ Completed {func.__name__} in {duration:.3f}s")
            return result

        except Exception as e:
            duration = time.perf_counter() - start
            logger.error(f"✗ Failed {func.__name__} after {duration:.3f}s: {e}")
            raise

    return sync_wrapper


# ═══════════════════════════════════════════════════════════════════════════
# Auto-Initialization
# ═══════════════════════════════════════════════════════════════════════════

def _auto_setup() -> bool:
    """Configure sinks at import only when LOG_AUTO_SETUP is on outside TEST_MODE."""
    if settings.LOG_AUTO_SETUP and not settings.TEST_MODE:
        setup_logging()
        return True
    return False


_auto_setup()
