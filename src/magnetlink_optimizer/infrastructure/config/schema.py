"""Pydantic configuration models with validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]


def _normalize_path(value: Any) -> Path:
    """
    Normalize a path-like value without causing filesystem side-effects.

    This function MUST NOT create directories or files.
    """
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    raise TypeError(f"Expected path-like value, got: {type(value)!r}")


class LlmSettings(BaseModel):
    """Retry and fallback limits for the model calls (YAML section: llm.*)."""

    max_attempts: int = Field(
        default=3,
        description="Attempts per batch analysis request (first try included).",
    )
    retry_delay_seconds: float = Field(
        default=2.0,
        description="Fixed delay between batch analysis attempts.",
    )
    max_failed_batches: int = Field(
        default=3,
        description="Failed batches tolerated before remaining items are skipped.",
    )
    item_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout of one per-item fallback analysis.",
    )
    max_html_chars: int = Field(
        default=80_000,
        description="Page HTML is truncated to this many characters for extraction.",
    )
    builtin_priority_markers: list[str] = Field(
        default_factory=lambda: ["蓝光原盘", "高清电影"],
        description="Title markers that always take the priority track.",
    )

    @field_validator("max_attempts", "max_failed_batches", "max_html_chars")
    @classmethod
    def _validate_positive_int(cls, v: int) -> int:
        if v < 1:
            raise ValueError("value must be >= 1")
        return v

    @field_validator("retry_delay_seconds")
    @classmethod
    def _validate_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError("retry_delay_seconds must be >= 0")
        return v

    @field_validator("item_timeout_seconds")
    @classmethod
    def _validate_item_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("item_timeout_seconds must be > 0")
        return v


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (http/logging/storage/search/llm).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(
        default="magnetlink-optimizer", description="Application name."
    )
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # HTTP (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=30.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="Connect + response timeout for provider page fetches.",
    )
    http_user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/131.0.0.0 Safari/537.36"
        ),
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="Browser User-Agent sent to search providers.",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    # Storage (YAML section: storage.*)
    state_file: Path = Field(
        default=Path("~/.magnetlink-optimizer/app_data.json"),
        validation_alias=AliasChoices(
            "state_file",
            AliasPath("storage", "state_file"),
        ),
        description="JSON snapshot with favorites, engines and LLM settings.",
    )

    # Search (YAML section: search.*)
    default_max_pages: int = Field(
        default=3,
        validation_alias=AliasChoices(
            "default_max_pages",
            AliasPath("search", "default_max_pages"),
        ),
        description="Pages per provider when neither CLI nor settings specify one.",
    )

    # LLM limits (YAML section: llm.*)
    llm: LlmSettings = Field(default_factory=LlmSettings)

    @field_validator("state_file", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Path:
        return _normalize_path(v)

    @field_validator("http_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_seconds must be > 0")
        return v

    @field_validator("default_max_pages")
    @classmethod
    def _validate_max_pages(cls, v: int) -> int:
        if v < 1:
            raise ValueError("default_max_pages must be >= 1")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml/docs.
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "user_agent": self.http_user_agent,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
            "storage": {"state_file": str(self.state_file)},
            "search": {"default_max_pages": self.default_max_pages},
            "llm": self.llm.model_dump(),
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    Intended usage:
    - load.py creates EnvOverrides() to read MAGNETOPT_* variables,
      converts to dict of set values, merges into YAML/defaults,
      then validates AppConfig.

    Supported env var examples (flat, explicit):
    - MAGNETOPT_HTTP_TIMEOUT_SECONDS
    - MAGNETOPT_STATE_FILE
    - MAGNETOPT_LOG_LEVEL
    - MAGNETOPT_LLM_MAX_ATTEMPTS
    """

    model_config = SettingsConfigDict(
        env_prefix="MAGNETOPT_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_timeout_seconds: Optional[float] = None
    http_user_agent: Optional[str] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    state_file: Optional[Path] = None
    default_max_pages: Optional[int] = None

    llm_max_attempts: Optional[int] = None
    llm_retry_delay_seconds: Optional[float] = None
    llm_max_failed_batches: Optional[int] = None
    llm_item_timeout_seconds: Optional[float] = None
    llm_max_html_chars: Optional[int] = None

    @field_validator("state_file", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Any:
        if v is None:
            return None
        return _normalize_path(v)

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
