# config/settings.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  ImputeGenius — Settings                                                   ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  TYPE-SAFE CONFIGURATION FOR THE IMPUTATION ENGINE                         ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Pydantic v2 Settings                                                    ║
║  ✓ Environment Variable Support (.env)                                     ║
║  ✓ Range Validation of Imputation Defaults                                 ║
║  ✓ Computed Properties                                                     ║
║  ✓ Auto-Creation of the Logs Directory                                     ║
╚════════════════════════════════════════════════════════════════════════════╝

Architecture:
    Configuration Structure:
```
    Settings
    ├── Application (name, version, environment)
    ├── Logging (level, format, rotation)
    ├── Paths (logs)
    ├── Reproducibility (random state)
    └── Imputation defaults (method, thresholds, iterations, ensemble size)
```

Usage:
```python
    from config.settings import settings

    print(settings.APP_NAME)                       # "ImputeGenius"
    print(settings.IMPUTATION_DEFAULT_METHOD)      # "auto"
    print(settings.is_production)                  # False
```

Environment Variables:
    Every field can be overridden by an environment variable of the same
    (case-sensitive) name, or through a `.env` file in the working directory:

      • LOG_LEVEL=DEBUG
      • IMPUTATION_MAX_ITERATIONS=25
      • IMPUTATION_DEFAULT_METHOD=knn

Dependencies:
    • pydantic
    • pydantic-settings
    • python-dotenv
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import computed_field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ═══════════════════════════════════════════════════════════════════════════
# Module Metadata
# ═══════════════════════════════════════════════════════════════════════════

__version__ = "1.0.0"
__author__ = "ImputeGenius Team"

__all__ = ["Settings", "settings", "get_settings", "IMPUTATION_METHODS"]


# Load environment variables
load_dotenv()

# Project root directory
ROOT_DIR = Path(__file__).resolve().parent.parent

# Methods accepted as a configured default ("auto" lets the diagnosis decide)
IMPUTATION_METHODS: tuple[str, ...] = (
    "auto",
    "mean_median",
    "knn",
    "regression",
    "random_forest",
    "neural_network",
    "mice",
)


# ═══════════════════════════════════════════════════════════════════════════
# Settings Class
# ═══════════════════════════════════════════════════════════════════════════

class Settings(BaseSettings):
    """
    🔧 **Central Configuration**

    Type-safe configuration with Pydantic v2. Engine-wide defaults for the
    imputation run live here; a per-call `ImputationConfig` may override them.

    Usage:
```python
        from config.settings import settings

        if settings.TEST_MODE:
            ...

        cfg = ImputationConfig.from_settings(settings)
```
    """

    # ───────────────────────────────────────────────────────────────────
    # Application
    # ───────────────────────────────────────────────────────────────────

    APP_NAME: str = "ImputeGenius"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Logging configuration
    LOG_JSON_ENABLED: bool = True
    LOG_ROTATION: str = "10 MB"
    LOG_RETENTION: str = "30 days"
    LOG_CONSOLE_COMPACT: bool = False
    # Off: the host application calls setup_logging() itself
    LOG_AUTO_SETUP: bool = False

    # ───────────────────────────────────────────────────────────────────
    # Paths
    # ───────────────────────────────────────────────────────────────────

    BASE_PATH: Path = ROOT_DIR
    LOGS_PATH: Path = ROOT_DIR / "logs"

    # ───────────────────────────────────────────────────────────────────
    # Reproducibility
    # ───────────────────────────────────────────────────────────────────

    RANDOM_STATE: int = 42

    # ───────────────────────────────────────────────────────────────────
    # Imputation Defaults
    # ───────────────────────────────────────────────────────────────────

    IMPUTATION_DEFAULT_METHOD: str = "auto"
    IMPUTATION_CONFIDENCE_THRESHOLD: float = 0.7
    IMPUTATION_MAX_ITERATIONS: int = 10
    IMPUTATION_MARK_IMPUTED: bool = True
    IMPUTATION_FOREST_TREES: int = 10
    IMPUTATION_KNN_MAX_NEIGHBORS: int = 5

    # ───────────────────────────────────────────────────────────────────
    # Development
    # ───────────────────────────────────────────────────────────────────

    TEST_MODE: bool = False

    # ───────────────────────────────────────────────────────────────────
    # Pydantic Configuration
    # ───────────────────────────────────────────────────────────────────

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # ───────────────────────────────────────────────────────────────────
    # Computed Fields
    # ───────────────────────────────────────────────────────────────────

    @computed_field
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.ENVIRONMENT == "production"

    # ───────────────────────────────────────────────────────────────────
    # Field Validators
    # ───────────────────────────────────────────────────────────────────

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        normalized = (v or "").upper()

        if normalized not in allowed:
            raise ValueError(
                f"Invalid LOG_LEVEL '{v}'. "
                f"Allowed: {', '.join(sorted(allowed))}"
            )

        return normalized

    @field_validator("LOGS_PATH", mode="before")
    @classmethod
    def ensure_directories(cls, v: Path | str) -> Path:
        """Ensure directories exist."""
        path = Path(v).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    @field_validator("IMPUTATION_DEFAULT_METHOD")
    @classmethod
    def validate_default_method(cls, v: str) -> str:
        """Validate the default imputation method."""
        normalized = (v or "").strip().lower()
        if normalized not in IMPUTATION_METHODS:
            raise ValueError(
                f"Invalid IMPUTATION_DEFAULT_METHOD '{v}'. "
                f"Allowed: {', '.join(IMPUTATION_METHODS)}"
            )
        return normalized

    @field_validator("IMPUTATION_CONFIDENCE_THRESHOLD")
    @classmethod
    def validate_threshold(cls, v: float) -> float:
        """Validate threshold values."""
        if not 0.0 <= v <= 1.0:
            raise ValueError("Threshold must be in range 0.0..1.0")
        return v

    @field_validator("IMPUTATION_MAX_ITERATIONS")
    @classmethod
    def validate_max_iterations(cls, v: int) -> int:
        """Validate the iterative estimator's pass limit."""
        if v < 1 or v > 1_000:
            raise ValueError("IMPUTATION_MAX_ITERATIONS must be in range 1..1000")
        return v

    # ───────────────────────────────────────────────────────────────────
    # Model Validators
    # ───────────────────────────────────────────────────────────────────

    @model_validator(mode="after")
    def validate_configuration(self) -> "Settings":
        """Validate complete configuration."""
        if self.IMPUTATION_FOREST_TREES < 1:
            raise ValueError("IMPUTATION_FOREST_TREES must be >= 1")

        if self.IMPUTATION_KNN_MAX_NEIGHBORS < 1:
            raise ValueError("IMPUTATION_KNN_MAX_NEIGHBORS must be >= 1")

        # Debug logging is never left on in production
        if self.is_production and self.LOG_LEVEL == "DEBUG":
            self.LOG_LEVEL = "INFO"

        return self


# ═══════════════════════════════════════════════════════════════════════════
# Global Instance
# ═══════════════════════════════════════════════════════════════════════════

settings = Settings()


# ═══════════════════════════════════════════════════════════════════════════
# Convenience Functions
# ═══════════════════════════════════════════════════════════════════════════

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    📋 **Get Settings Instance**

    Returns the global settings instance.
    """
    return settings
