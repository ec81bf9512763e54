"""Application settings — Pydantic-based configuration with YAML and env var support.

Configuration is loaded from (in order of precedence):
  1. YAML config file, when loaded through ``Settings.from_yaml``
  2. Environment variables (DOCSEARCH_ prefix) and ``.env``
  3. Default values
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


class BackendSettings(BaseModel):
    """Search backend connection configuration."""

    name: str = Field(default="elasticsearch", description="Backend name: elasticsearch, opensearch, memory")
    url: str = Field(default="http://localhost:9200", description="Backend base URL")
    timeout: float | None = Field(default=30.0, gt=0, description="Default per-operation deadline in seconds")
    refresh: Literal["true", "false", "wait_for"] | None = Field(
        default=None,
        description="Refresh policy sent with index and delete requests",
    )
    verify_certs: bool = Field(default=True, description="Verify TLS certificates")
    extra: dict[str, Any] = Field(default_factory=dict, description="Backend-specific client options")

    @field_validator("url")
    @classmethod
    def _require_url(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("backend url must not be empty")
        return v.strip()


class ObservabilitySettings(BaseModel):
    """Observability configuration."""

    log_level: str = Field(default="info", description="Log level: debug, info, warning, error")
    log_format: str = Field(default="json", description="Log format: json, console")


class Settings(BaseSettings):
    """Root settings.

    Configuration is loaded from environment variables with the DOCSEARCH_ prefix.
    Nested settings use double underscores: DOCSEARCH_BACKEND__URL=http://es:9200

    Example:
        DOCSEARCH_BACKEND__NAME=opensearch
        DOCSEARCH_BACKEND__TIMEOUT=5
        DOCSEARCH_OBSERVABILITY__LOG_LEVEL=debug
    """

    model_config = {
        "env_prefix": "DOCSEARCH_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    backend: BackendSettings = Field(default_factory=BackendSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @classmethod
    def from_yaml(cls, path: str | Path) -> Settings:
        """Load settings from a YAML configuration file.

        Args:
            path: Path to the YAML config file.

        Returns:
            Populated Settings instance.
        """
        import yaml  # type: ignore[import-untyped]

        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)
