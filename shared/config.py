"""
Shared configuration management for the Access Mediator.
"""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="MEDIATOR_",
        env_file=".env",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = Field(default="local", description="Deployment environment name")
    log_level: str = Field(
        default="info",
        pattern="(?i)^(debug|info|warning|error|critical)$",
        description="Root log level"
    )


class MediatorConfig(BaseConfig):
    """Settings used to assemble an access mediator."""

    service_name: str = Field(default="access-mediator")

    # Admission
    denied_substrings: List[str] = Field(
        default_factory=lambda: ["forbidden"],
        description="Request keys containing any of these substrings are denied"
    )
    admission_rules_file: Optional[str] = Field(
        default=None,
        description="YAML rule file; when set it replaces the substring policy"
    )
    default_admission: str = Field(default="allow", pattern="^(allow|deny)$")

    # Cache
    cache_max_entries: Optional[int] = Field(default=None, gt=0)
    cache_ttl_seconds: Optional[float] = Field(default=None, gt=0)

    # Delegate
    delegate_delay_seconds: float = Field(default=1.0, ge=0)

    # Observability
    metrics_enabled: bool = Field(default=False)


def get_config(**overrides) -> MediatorConfig:
    """Get mediator configuration, applying explicit overrides on top of the environment."""
    return MediatorConfig(**overrides)
