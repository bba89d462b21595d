"""Application configuration using Pydantic Settings."""

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


SUPPORTED_LOG_FORMATS = ("json", "console")


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TAXGRAPH_",
        case_sensitive=False,
    )

    # Environment
    environment: str = "development"
    """Current environment (development, staging, production)."""

    debug: bool = False
    """Enable debug mode."""

    log_format: str | None = None
    """Logging format override (json or console). Defaults by environment."""

    # Computation graph
    default_tax_year: int = 2025
    """Tax year assumed when the input snapshot does not name one."""

    max_evaluation_depth: int = 256
    """Deepest chain of nested line evaluations before a cycle is assumed."""

    # Scenarios
    max_selected_scenarios: int = 3
    """Scenarios that can be selected for side-by-side comparison."""

    calculation_concurrency: int = 4
    """Worker threads used when calculating several scenarios at once."""

    output_dir: str = "/tmp/output"
    """Default output directory for comparison workbooks."""

    @field_validator("log_format", mode="before")
    @classmethod
    def parse_log_format(cls, value: object) -> str | None:
        """Normalize the log format override, treating blanks as unset."""
        if value is None:
            return None
        text = str(value).strip().lower()
        if not text:
            return None
        if text not in SUPPORTED_LOG_FORMATS:
            raise ValueError(
                f"TAXGRAPH_LOG_FORMAT must be one of {SUPPORTED_LOG_FORMATS}, got {text!r}."
            )
        return text

    @field_validator("max_selected_scenarios", "max_evaluation_depth", "calculation_concurrency")
    @classmethod
    def require_positive(cls, value: int) -> int:
        """Reject zero or negative limits."""
        if value < 1:
            raise ValueError("limit must be at least 1")
        return value


try:
    settings = Settings()
except Exception as exc:
    env_file = Path(".env")
    raise RuntimeError(
        "Failed to initialize taxgraph settings. "
        f"Check environment variables in {env_file.resolve() if env_file.exists() else '.env'}.\n"
        + f"Error: {exc}\n"
        + "TAXGRAPH_LOG_FORMAT accepts json or console; numeric limits must be >= 1."
    ) from exc
