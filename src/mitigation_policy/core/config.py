"""Configuration management.

Loads from TOML config files + environment variables.
Uses pydantic-settings for validation and env var overriding.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from .enums import EnforcementLevel, ScanMode
from .errors import ConfigError


def _coerce_level(v: Any) -> EnforcementLevel:
    try:
        return EnforcementLevel.parse(v)
    except ConfigError as exc:
        raise ValueError(str(exc)) from exc


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class PolicyOverride(BaseModel):
    """Operator exception applied after the enforcement level gate.

    With ``policy`` unset the override covers every policy of the
    mitigation.
    """

    mitigation: str
    policy: str | None = None
    enforced: bool

    @field_validator("mitigation")
    @classmethod
    def mitigation_must_be_named(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("override mitigation name must not be empty")
        return v


class MitigationConfig(BaseModel):
    enforcement_level: EnforcementLevel = EnforcementLevel.MODERATE
    mode: ScanMode = ScanMode.AUDIT
    overrides: list[PolicyOverride] = Field(default_factory=list)
    # Per-mitigation level replacing enforcement_level for that mitigation
    mitigation_levels: dict[str, EnforcementLevel] = Field(default_factory=dict)

    @field_validator("enforcement_level", mode="before")
    @classmethod
    def parse_enforcement_level(cls, v: Any) -> EnforcementLevel:
        return _coerce_level(v)

    @field_validator("mitigation_levels", mode="before")
    @classmethod
    def parse_mitigation_levels(cls, v: Any) -> dict[str, EnforcementLevel]:
        if not isinstance(v, dict):
            raise ValueError("mitigation_levels must be a table of name = level")
        return {name: _coerce_level(level) for name, level in v.items()}

    def level_for(self, mitigation: str) -> EnforcementLevel:
        """Gate level to use for one mitigation."""
        return self.mitigation_levels.get(mitigation, self.enforcement_level)


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: str = "console"  # "json" or "console"


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Top-level application settings.

    Loaded from TOML config files, overridden by environment variables
    (``MITIGATION_SCAN__ENFORCEMENT_LEVEL=high``).
    """

    scan: MitigationConfig = Field(default_factory=MitigationConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "MITIGATION_", "env_nested_delimiter": "__"}

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # File values arrive as init kwargs; env vars must still win
        return env_settings, init_settings, dotenv_settings, file_secret_settings


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from TOML file + env vars.

    Environment variables take precedence over both the file and
    ``overrides``; nested keys not set in the environment keep their
    file values.

    Args:
        config_path: Path to TOML config file (optional).
        overrides: Dict of overrides merged on top, one level deep.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        import tomli

        with open(path, "rb") as f:
            try:
                data = tomli.load(f)
            except tomli.TOMLDecodeError as exc:
                raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc

    if overrides:
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(data.get(key), dict):
                data[key] = {**data[key], **value}
            else:
                data[key] = value

    return Settings(**data)
