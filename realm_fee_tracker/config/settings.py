"""
Application settings: config.json + environment.

config.json keys: realm_id, wallet_address, start_date (MM-DD-YYYY),
end_date (MM-DD-YYYY or empty for today), rps, max_concurrency,
governance_program_id. The RPC URL comes from the environment (see env.py).
Any problem raises ConfigurationError before a single RPC call is made.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator
from solders.pubkey import Pubkey

from realm_fee_tracker.config.env import get_solana_rpc_url
from realm_fee_tracker.constants import (
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_RPS,
    GOVERNANCE_PROGRAM_ID,
)
from realm_fee_tracker.core.dates import (
    current_end_of_day_timestamp,
    end_of_day_timestamp,
    start_of_day_timestamp,
)
from realm_fee_tracker.core.exceptions import ConfigurationError

DEFAULT_CONFIG_PATH = Path("config.json")


def _check_pubkey(value: str, field_name: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError(f"{field_name} is required")
    try:
        Pubkey.from_string(value)
    except Exception as e:
        raise ValueError(f"Invalid {field_name} public key: {value}") from e
    return value


class TrackerFileConfig(BaseModel):
    """Raw config.json contents, field-validated."""

    realm_id: str
    wallet_address: str
    start_date: str
    end_date: str | None = None
    rps: int = Field(default=DEFAULT_RPS, gt=0)
    max_concurrency: int = Field(default=DEFAULT_MAX_CONCURRENCY, gt=0)
    governance_program_id: str = GOVERNANCE_PROGRAM_ID

    @field_validator("realm_id")
    @classmethod
    def _realm_pubkey(cls, v: str) -> str:
        return _check_pubkey(v, "realm_id")

    @field_validator("wallet_address")
    @classmethod
    def _wallet_pubkey(cls, v: str) -> str:
        return _check_pubkey(v, "wallet_address")

    @field_validator("governance_program_id")
    @classmethod
    def _program_pubkey(cls, v: str) -> str:
        return _check_pubkey(v, "governance_program_id")

    @field_validator("start_date")
    @classmethod
    def _start_date(cls, v: str) -> str:
        start_of_day_timestamp(v)
        return v

    @field_validator("end_date")
    @classmethod
    def _end_date(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        end_of_day_timestamp(v)
        return v


@dataclass(frozen=True)
class TrackerSettings:
    """Validated settings for one tracking run."""

    realm_id: str
    wallet_address: str
    start_timestamp: int
    end_timestamp: int
    rpc_url: str
    rps: int = DEFAULT_RPS
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    governance_program_id: str = GOVERNANCE_PROGRAM_ID

    def __post_init__(self) -> None:
        if self.start_timestamp >= self.end_timestamp:
            raise ConfigurationError("start_date must be before end_date")
        if self.rps <= 0:
            raise ConfigurationError("rps must be a positive integer")
        if self.max_concurrency <= 0:
            raise ConfigurationError("max_concurrency must be a positive integer")
        if not self.rpc_url.strip():
            raise ConfigurationError("RPC URL must be non-empty")


def _format_validation_error(err: ValidationError) -> str:
    parts = []
    for item in err.errors():
        loc = ".".join(str(p) for p in item.get("loc", ())) or "config"
        msg = str(item.get("msg", "invalid value"))
        parts.append(f"{loc}: {msg.removeprefix('Value error, ')}")
    return "; ".join(parts)


def settings_from_mapping(
    raw: dict[str, Any],
    *,
    rpc_url: str | None = None,
) -> TrackerSettings:
    """Validate a config mapping (config.json contents) into TrackerSettings."""
    try:
        cfg = TrackerFileConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {_format_validation_error(e)}") from e

    start_ts = start_of_day_timestamp(cfg.start_date)
    if cfg.end_date is None:
        end_ts = current_end_of_day_timestamp()
    else:
        end_ts = end_of_day_timestamp(cfg.end_date)

    return TrackerSettings(
        realm_id=cfg.realm_id,
        wallet_address=cfg.wallet_address,
        start_timestamp=start_ts,
        end_timestamp=end_ts,
        rpc_url=rpc_url if rpc_url is not None else get_solana_rpc_url(),
        rps=cfg.rps,
        max_concurrency=cfg.max_concurrency,
        governance_program_id=cfg.governance_program_id,
    )


def load_settings(
    config_path: str | Path = DEFAULT_CONFIG_PATH,
    *,
    overrides: dict[str, Any] | None = None,
    rpc_url: str | None = None,
) -> TrackerSettings:
    """
    Load config.json, apply CLI overrides (None values ignored), validate.

    Raises:
        ConfigurationError: file missing, not JSON, or any field invalid.
    """
    path = Path(config_path)
    if not path.is_file():
        raise ConfigurationError(f"Config file not found: {path}")
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{path} must contain a JSON object")
    for key, value in (overrides or {}).items():
        if value is not None:
            raw[key] = value
    return settings_from_mapping(raw, rpc_url=rpc_url)
