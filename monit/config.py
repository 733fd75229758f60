"""Report configuration from explicit values + MONIT_* environment variables + YAML."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict, SettingsError

from monit.errors import ConfigResolutionError

ENV_PREFIX = "MONIT_"

# Explicit values equal to these count as "not supplied" and fall back to env.
_UNSET_VALUES: dict[str, Any] = {"host": "", "interval": 0}


class ReportConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, frozen=True, extra="ignore")

    # Fully qualified URL reports are POSTed to (MONIT_HOST)
    host: str
    # Reporting cadence in seconds (MONIT_INTERVAL)
    interval: int = Field(gt=0)
    # Fields merged into every report (MONIT_BASE, as a JSON object)
    base: dict[str, Any] = Field(default_factory=dict)

    # Transport
    verify_tls: bool = True
    timeout: float = Field(default=10.0, gt=0)

    log_level: str = "INFO"

    @field_validator("host")
    @classmethod
    def _host_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("host must not be empty")
        return value

    @classmethod
    def resolve(cls, **overrides: Any) -> ReportConfig:
        """Build a config from explicit values, falling back to the environment.

        ``None``, ``host=""`` and ``interval=0`` are treated as not supplied.
        Raises ConfigResolutionError when a required value cannot be found.
        """
        explicit = {
            key: value
            for key, value in overrides.items()
            if value is not None and not (key in _UNSET_VALUES and value == _UNSET_VALUES[key])
        }
        try:
            return cls(**explicit)
        except ValidationError as e:
            raise ConfigResolutionError(_describe(e)) from e
        except SettingsError as e:
            raise ConfigResolutionError(str(e)) from e

    @classmethod
    def from_yaml(cls, path: str | Path = "monit.yaml", **overrides: Any) -> ReportConfig:
        """Load config from the ``monit:`` section of a YAML file.

        Precedence: explicit overrides, then env vars, then YAML, then defaults.
        """
        yaml_path = Path(path)
        yaml_data: dict[str, Any] = {}

        if yaml_path.exists():
            try:
                with yaml_path.open("r", encoding="utf-8") as f:
                    raw = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigResolutionError(f"{yaml_path}: invalid YAML: {e}") from e
            if not isinstance(raw, dict):
                raise ConfigResolutionError(f"{yaml_path}: top level must be a mapping")
            section = raw.get("monit") or {}
            if not isinstance(section, dict):
                raise ConfigResolutionError(f"{yaml_path}: 'monit' section must be a mapping")
            bad_keys = [key for key in section if not isinstance(key, str)]
            if bad_keys:
                raise ConfigResolutionError(f"{yaml_path}: setting names must be strings, got {bad_keys!r}")
            yaml_data = {
                key: value
                for key, value in section.items()
                if f"{ENV_PREFIX}{key.upper()}" not in os.environ
            }

        return cls.resolve(**{**yaml_data, **overrides})


def _describe(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        field = ".".join(str(loc) for loc in err["loc"]) or "config"
        if err["type"] == "missing":
            parts.append(f"{field}: not set (pass it explicitly or set {ENV_PREFIX}{field.upper()})")
        else:
            parts.append(f"{field}: {err['msg']}")
    return "; ".join(parts)
