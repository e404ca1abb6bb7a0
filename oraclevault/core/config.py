"""oraclevault.core.config

Two config surfaces only:
1) `config/default.yaml` (+ optional `config/user.yaml` overlay)
2) Environment variables (`ORACLEVAULT_`, nested with `__`)

Everything else is derived.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

from oraclevault.core.exceptions import ConfigError

RATE_PRECISION = 100_000
SECONDS_PER_YEAR = 365 * 24 * 60 * 60


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


class OracleSettings(BaseModel):
    """Defaults applied to a freshly constructed vault's oracle."""

    timelock_minutes: int = 1440
    max_deviation_ticks: int = 100

    @field_validator("timelock_minutes", "max_deviation_ticks")
    @classmethod
    def must_be_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must be >= 0")
        return v


class FeeSettings(BaseModel):
    """Annual rates are parts-per-100000 (1000 = 1%)."""

    max_annual_rate: int = 5_000
    default_annual_rate: int = 0

    @field_validator("default_annual_rate", mode="after")
    @classmethod
    def default_within_max(cls, v: int, info) -> int:
        cap = int(info.data.get("max_annual_rate", RATE_PRECISION))
        if v < 0 or v > cap:
            raise ValueError(f"default_annual_rate must be in [0, {cap}], got {v}")
        return v

    @field_validator("max_annual_rate")
    @classmethod
    def max_below_precision(cls, v: int) -> int:
        if v < 0 or v >= RATE_PRECISION:
            raise ValueError(f"max_annual_rate must be in [0, {RATE_PRECISION})")
        return v


class VaultSettings(BaseModel):
    minimum_liquidity: int = 1_000
    quote_offset_decimals: int = 0
    base_cap: int | None = None
    quote_cap: int | None = None

    @field_validator("minimum_liquidity", "quote_offset_decimals")
    @classmethod
    def must_be_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @property
    def share_scale(self) -> int:
        return 10**self.quote_offset_decimals


class LoggingConfig(BaseModel):
    level: str = "INFO"
    json_output: bool = False


class ApiConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = 5060


class Config(BaseSettings):
    """Root configuration. Single source of truth."""

    data_dir: Path = Path("data")
    config_dir: Path = Path("config")

    oracle: OracleSettings = Field(default_factory=OracleSettings)
    fees: FeeSettings = Field(default_factory=FeeSettings)
    vault: VaultSettings = Field(default_factory=VaultSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)

    model_config = {"env_prefix": "ORACLEVAULT_", "env_nested_delimiter": "__"}

    @property
    def journal_path(self) -> Path:
        return self.data_dir / "journal.db"

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")

        raw = yaml.safe_load(path.read_text()) or {}

        # User overlay lives next to the defaults.
        user = path.parent / "user.yaml"
        if user != path and user.exists():
            raw = _deep_merge(raw, yaml.safe_load(user.read_text()) or {})

        try:
            return cls(**raw)
        except ValidationError as e:
            raise ConfigError(str(e)) from e

    @classmethod
    def from_repo_defaults(cls, repo_root: Path | None = None) -> Config:
        root = repo_root or Path.cwd()
        return cls.from_yaml(root / "config" / "default.yaml")
