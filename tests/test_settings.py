"""
Tests for configuration: MM-DD-YYYY window parsing, config.json validation,
CLI overrides and RPC URL resolution from the environment.
"""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone

import pytest

from conftest import REALM, WALLET
from realm_fee_tracker.config.env import (
    MAINNET_RPC_URL,
    get_solana_rpc_url,
    mask_rpc_url,
)
from realm_fee_tracker.config.settings import (
    TrackerSettings,
    load_settings,
    settings_from_mapping,
)
from realm_fee_tracker.constants import DEFAULT_MAX_CONCURRENCY, DEFAULT_RPS, GOVERNANCE_PROGRAM_ID
from realm_fee_tracker.core.dates import (
    current_end_of_day_timestamp,
    end_of_day_timestamp,
    format_timestamp,
    is_valid_date_format,
    start_of_day_timestamp,
)
from realm_fee_tracker.core.exceptions import ConfigurationError

RPC = "http://localhost:8899"


def _raw(**overrides) -> dict:
    raw = {
        "realm_id": REALM,
        "wallet_address": WALLET,
        "start_date": "01-01-2024",
        "end_date": "01-31-2024",
    }
    raw.update(overrides)
    return raw


# --- dates ---


def test_day_boundaries_are_utc():
    assert start_of_day_timestamp("01-01-2024") == 1704067200
    assert end_of_day_timestamp("01-01-2024") == 1704067200 + 86399
    assert format_timestamp(1704067200) == "2024-01-01 00:00:00 UTC"


def test_leap_day_is_valid():
    assert start_of_day_timestamp("02-29-2024") == 1709164800


@pytest.mark.parametrize(
    "value",
    ["2024-01-01", "1-1-2024", "13-01-2024", "00-10-2024", "01-32-2024", "02-30-2023", "01-01-2019", "01-01-2101"],
)
def test_invalid_dates(value):
    with pytest.raises(ValueError):
        start_of_day_timestamp(value)


def test_date_format_shape():
    assert is_valid_date_format("12-31-2024")
    assert not is_valid_date_format("12/31/2024")


def test_current_end_of_day():
    now = datetime(2024, 3, 5, 14, 30, tzinfo=timezone.utc)
    assert current_end_of_day_timestamp(now) == end_of_day_timestamp("03-05-2024")


# --- settings ---


def test_settings_from_mapping_defaults():
    settings = settings_from_mapping(_raw(), rpc_url=RPC)
    assert settings.realm_id == REALM
    assert settings.wallet_address == WALLET
    assert settings.start_timestamp == 1704067200
    assert settings.end_timestamp == end_of_day_timestamp("01-31-2024")
    assert settings.rps == DEFAULT_RPS
    assert settings.max_concurrency == DEFAULT_MAX_CONCURRENCY
    assert settings.governance_program_id == GOVERNANCE_PROGRAM_ID
    assert settings.rpc_url == RPC


def test_missing_end_date_means_end_of_today():
    settings = settings_from_mapping(_raw(end_date=""), rpc_url=RPC)
    assert settings.end_timestamp == current_end_of_day_timestamp()


def test_single_day_window():
    settings = settings_from_mapping(_raw(end_date="01-01-2024"), rpc_url=RPC)
    assert settings.end_timestamp - settings.start_timestamp == 86399


def test_start_after_end_is_rejected():
    with pytest.raises(ConfigurationError):
        settings_from_mapping(_raw(start_date="02-01-2024", end_date="01-01-2024"), rpc_url=RPC)


@pytest.mark.parametrize(
    "field, value",
    [
        ("realm_id", "not-a-pubkey"),
        ("wallet_address", ""),
        ("start_date", "2024-01-01"),
        ("end_date", "01-32-2024"),
        ("rps", 0),
        ("max_concurrency", -2),
        ("governance_program_id", "xyz"),
    ],
)
def test_invalid_fields_raise_configuration_error(field, value):
    with pytest.raises(ConfigurationError) as exc_info:
        settings_from_mapping(_raw(**{field: value}), rpc_url=RPC)
    assert field in str(exc_info.value)


def test_missing_required_field():
    raw = _raw()
    del raw["wallet_address"]
    with pytest.raises(ConfigurationError):
        settings_from_mapping(raw, rpc_url=RPC)


def test_tracker_settings_validates_directly():
    with pytest.raises(ConfigurationError):
        TrackerSettings(REALM, WALLET, 10, 10, RPC)
    with pytest.raises(ConfigurationError):
        TrackerSettings(REALM, WALLET, 1, 10, "  ")


def test_load_settings_from_file_with_overrides(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(_raw(rps=3)), encoding="utf-8")
    settings = load_settings(path, overrides={"rps": None, "max_concurrency": 4}, rpc_url=RPC)
    assert settings.rps == 3
    assert settings.max_concurrency == 4


def test_load_settings_missing_file(tmp_path):
    with pytest.raises(ConfigurationError, match="not found"):
        load_settings(tmp_path / "nope.json", rpc_url=RPC)


def test_load_settings_bad_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="Invalid JSON"):
        load_settings(path, rpc_url=RPC)


def test_load_settings_non_object(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_settings(path, rpc_url=RPC)


# --- env ---


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ("SOLANA_RPC_URL", "RPC_URL", "HELIUS_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


def test_rpc_url_precedence(clean_env):
    clean_env.setenv("HELIUS_API_KEY", "k123")
    assert get_solana_rpc_url() == "https://mainnet.helius-rpc.com/?api-key=k123"
    clean_env.setenv("RPC_URL", "http://rpc-url")
    assert get_solana_rpc_url() == "http://rpc-url"
    clean_env.setenv("SOLANA_RPC_URL", "http://solana-rpc-url")
    assert get_solana_rpc_url() == "http://solana-rpc-url"


def test_rpc_url_defaults_to_public_mainnet(clean_env):
    assert get_solana_rpc_url() == MAINNET_RPC_URL


def test_rpc_url_from_dotenv_file(clean_env, tmp_path):
    (tmp_path / ".env").write_text("SOLANA_RPC_URL=http://from-dotenv\n", encoding="utf-8")
    try:
        assert get_solana_rpc_url() == "http://from-dotenv"
    finally:
        os.environ.pop("SOLANA_RPC_URL", None)


def test_settings_take_rpc_url_from_env(clean_env):
    clean_env.setenv("SOLANA_RPC_URL", "http://env-rpc")
    assert settings_from_mapping(_raw()).rpc_url == "http://env-rpc"


def test_mask_rpc_url():
    assert mask_rpc_url("https://mainnet.helius-rpc.com/?api-key=secret") == (
        "https://mainnet.helius-rpc.com/?api-key=***"
    )
    assert mask_rpc_url(MAINNET_RPC_URL) == MAINNET_RPC_URL
