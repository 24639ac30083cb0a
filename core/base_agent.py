# core/base_agent.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  ImputeGenius — Base Agent                                                 ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  AGENT FRAMEWORK FOR DIAGNOSIS, IMPUTATION AND COMPLETENESS STEPS          ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Abstract Base Agent Class                                               ║
║  ✓ Lifecycle Hooks (validate → before → execute → after)                   ║
║  ✓ Progress Callbacks                                                      ║
║  ✓ Failures Reported as Results, Never Raised                              ║
╚════════════════════════════════════════════════════════════════════════════╝

Usage:
```python
    from core.base_agent import BaseAgent, AgentResult

    class MyAgent(BaseAgent):
        def __init__(self):
            super().__init__(name="my_agent", description="Custom agent")

        def execute(self, **kwargs) -> AgentResult:
            result = AgentResult(agent_name=self.name)
            result.add_data(output=kwargs["data"])
            return result

    result = MyAgent().run(data=records)
    if result.is_failed():
        print(result.errors)
```

Dependencies:
    • loguru
    • pydantic
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Literal, Optional
from uuid import uuid4

from loguru import logger
from pydantic import BaseModel, Field

from core.exceptions import ImputeGeniusException

# ═══════════════════════════════════════════════════════════════════════════
# Module Metadata
# ═══════════════════════════════════════════════════════════════════════════

__version__ = "1.0.0"
__author__ = "ImputeGenius Team"

__all__ = [
    "BaseAgent",
    "AgentResult",
    "AgentStatus",
]


# ═══════════════════════════════════════════════════════════════════════════
# Type Definitions
# ═══════════════════════════════════════════════════════════════════════════

AgentStatus = Literal["success", "failed", "partial"]


# ═══════════════════════════════════════════════════════════════════════════
# Agent Result
# ═══════════════════════════════════════════════════════════════════════════

class AgentResult(BaseModel):
    """
    📊 **Agent Execution Result**

    Standard result format with status helpers.

    Attributes:
        agent_name: Name of the agent
        status: Execution status (success/failed/partial)
        execution_time: Duration in seconds
        started_at / finished_at: Timestamps
        trace_id: Unique trace identifier
        data: Result payload
        metadata: Additional metadata
        errors / warnings: Messages collected during execution
    """

    agent_name: str
    status: AgentStatus = Field(default="success")

    # Timing
    execution_time: float = Field(default=0.0)
    timestamp: datetime = Field(default_factory=datetime.now)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    # Tracing
    trace_id: str = Field(default_factory=lambda: uuid4().hex)

    # Payload
    data: Dict[str, Any] = Field(default_factory=dict)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

    # ───────────────────────────────────────────────────────────────────
    # Status Checks
    # ───────────────────────────────────────────────────────────────────

    def is_success(self) -> bool:
        """Check if execution was successful."""
        return self.status == "success"

    def is_failed(self) -> bool:
        """Check if execution failed."""
        return self.status == "failed"

    def is_partial(self) -> bool:
        """Check if execution partially succeeded."""
        return self.status == "partial"

    # ───────────────────────────────────────────────────────────────────
    # Mutations
    # ───────────────────────────────────────────────────────────────────

    def add_error(self, error: str) -> None:
        """Add error and mark as failed."""
        self.errors.append(error)
        if self.status != "failed":
            self.status = "failed"

    def add_warning(self, warning: str) -> None:
        """Add warning and mark as partial if success."""
        self.warnings.append(warning)
        if self.status == "success":
            self.status = "partial"

    def add_data(self, **items: Any) -> None:
        """Add data items."""
        self.data.update(items)

    def add_metadata(self, **items: Any) -> None:
        """Add metadata items."""
        self.metadata.update(items)


# ═══════════════════════════════════════════════════════════════════════════
# Base Agent
# ═══════════════════════════════════════════════════════════════════════════

class BaseAgent(ABC):
    """
    🤖 **Base Agent Class**

    Abstract base class for all agents with lifecycle management.

    Lifecycle:
```
        run() → validate_input()
              → before_execute()
              → execute()
              → measure time
              → after_execute()
              → return AgentResult
```

    Any exception escaping `execute()` is logged and converted into a
    `failed` AgentResult; `run()` itself never raises.
    """

    def __init__(
        self,
        name: str,
        description: str = "",
        version: str = "1.0",
        *,
        on_progress: Optional[Callable[[Dict[str, Any]], None]] = None
    ):
        self.name = name
        self.description = description
        self.version = version

        self.logger = logger.bind(
            agent=name,
            component="agent",
            version=version
        )

        self._result: Optional[AgentResult] = None
        self.on_progress = on_progress

    # ───────────────────────────────────────────────────────────────────
    # Abstract Methods
    # ───────────────────────────────────────────────────────────────────

    @abstractmethod
    def execute(self, **kwargs) -> AgentResult:
        """Execute agent logic. Must be implemented by subclasses."""
        raise NotImplementedError

    # ───────────────────────────────────────────────────────────────────
    # Lifecycle Hooks
    # ───────────────────────────────────────────────────────────────────

    def validate_input(self, **kwargs) -> bool:
        """
        Validate input before execution.

        Override to add custom validation; raise to abort the run.
        """
        return True

    def before_execute(self, **kwargs) -> None:
        """Hook called before execution."""
        self._emit_progress("start", extra={"kwargs_keys": list(kwargs.keys())})
        self.logger.debug(f"[{self.name}] Starting execution")

    def after_execute(self, result: AgentResult) -> None:
        """Hook called after execution."""
        self._emit_progress(
            "end",
            extra={
                "status": result.status,
                "execution_time": round(result.execution_time, 3)
            }
        )
        self.logger.info(
            f"[{self.name}] Execution completed: "
            f"status={result.status}, time={result.execution_time:.3f}s"
        )

    def _emit_progress(
        self,
        event: str,
        *,
        extra: Optional[Dict[str, Any]] = None
    ) -> None:
        """Emit progress event to callback."""
        if self.on_progress:
            try:
                self.on_progress({
                    "agent": self.name,
                    "event": event,
                    "ts": datetime.now(timezone.utc).isoformat(),
                    **(extra or {})
                })
            except Exception as e:
                self.logger.debug(f"on_progress callback failed: {e}")

    # ───────────────────────────────────────────────────────────────────
    # Main Execution
    # ───────────────────────────────────────────────────────────────────

    def run(self, **kwargs) -> AgentResult:
        """
        🚀 **Execute Agent**

        Main entry point with full lifecycle management.

        Returns:
            AgentResult (always, even on failure)
        """
        start_perf = time.perf_counter()
        started_at = datetime.now()

        try:
            self.validate_input(**kwargs)
            self.before_execute(**kwargs)

            result = self.execute(**kwargs)

            if not isinstance(result, AgentResult):
                raise TypeError(
                    f"Invalid result type returned by {self.name}: "
                    f"expected AgentResult, got {type(result).__name__}"
                )

            result.execution_time = time.perf_counter() - start_perf
            result.started_at = started_at
            result.finished_at = datetime.now()

            self._result = result
            self.after_execute(result)

            return result

        except Exception as e:
            if isinstance(e, ImputeGeniusException) and e.is_input_error:
                self.logger.warning(f"[{self.name}] Rejected input: {e.message}")
            else:
                self.logger.opt(exception=e).error(f"[{self.name}] Execution failed: {e}")

            failed = AgentResult(
                agent_name=self.name,
                status="failed",
                execution_time=time.perf_counter() - start_perf,
                started_at=started_at,
                finished_at=datetime.now()
            )

            if isinstance(e, ImputeGeniusException):
                failed.add_error(e.message)
                failed.add_metadata(
                    error_code=e.error_code.value,
                    input_error=e.is_input_error,
                )
            else:
                failed.add_error(f"{type(e).__name__}: {e}")

            self._result = failed
            self.after_execute(failed)

            return failed

    # ───────────────────────────────────────────────────────────────────
    # Utilities
    # ───────────────────────────────────────────────────────────────────

    def get_last_result(self) -> Optional[AgentResult]:
        """Get last execution result."""
        return self._result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}', version='{self.version}')"
