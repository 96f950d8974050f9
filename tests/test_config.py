"""Tests for configuration loading."""

import json

import pytest

from solana_balance_checker.config import (
    DEFAULT_RPC_ENDPOINT,
    RPC_ENDPOINT_ENV_VAR,
    load_config,
    validate_endpoint,
)
from solana_balance_checker.errors import ConfigurationError


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(RPC_ENDPOINT_ENV_VAR, raising=False)


def write_config(path, data):
    path.write_text(json.dumps(data) if not isinstance(data, str) else data, encoding="utf-8")
    return path


def test_defaults_without_config_file():
    config = load_config()

    assert config["rpc_endpoint"] == DEFAULT_RPC_ENDPOINT
    assert config["timeout_seconds"] == 10.0
    assert config["parallel_requests"] is False
    assert config["output_format"] == "table"
    assert config["wallet_address"] is None
    assert config["log_level"] == "WARNING"


def test_config_cfg_in_working_directory_is_picked_up(tmp_path):
    write_config(tmp_path / "config.cfg", {"rpc_endpoint": "https://api.devnet.solana.com"})

    assert load_config()["rpc_endpoint"] == "https://api.devnet.solana.com"


def test_explicit_config_file(tmp_path):
    path = write_config(
        tmp_path / "custom.json",
        {
            "rpc_endpoint": "http://localhost:8899",
            "timeout_seconds": 2.5,
            "parallel_requests": True,
            "output_format": "JSON",
            "wallet_address": "  EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v ",
            "log_level": "DEBUG",
        },
    )

    config = load_config(path)

    assert config["rpc_endpoint"] == "http://localhost:8899"
    assert config["timeout_seconds"] == 2.5
    assert config["parallel_requests"] is True
    assert config["output_format"] == "json"
    assert config["wallet_address"] == "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
    assert config["log_level"] == "DEBUG"


def test_environment_overrides_file(tmp_path, monkeypatch):
    path = write_config(tmp_path / "custom.json", {"rpc_endpoint": "http://localhost:8899"})
    monkeypatch.setenv(RPC_ENDPOINT_ENV_VAR, "https://api.testnet.solana.com")

    assert load_config(path)["rpc_endpoint"] == "https://api.testnet.solana.com"


def test_missing_explicit_file_is_an_error(tmp_path):
    with pytest.raises(ConfigurationError, match="not found"):
        load_config(tmp_path / "absent.cfg")


@pytest.mark.parametrize("content", ["{not json", "[1, 2, 3]"])
def test_malformed_file_is_an_error(tmp_path, content):
    path = write_config(tmp_path / "bad.cfg", content)
    with pytest.raises(ConfigurationError):
        load_config(path)


@pytest.mark.parametrize(
    "overrides",
    [
        {"timeout_seconds": 0},
        {"timeout_seconds": -3},
        {"timeout_seconds": "soon"},
        {"output_format": "xml"},
        {"rpc_endpoint": "ftp://example.com"},
        {"rpc_endpoint": "not a url"},
        {"rpc_endpoint": "http://[bad"},
        {"parallel_requests": "false"},
        {"parallel_requests": 1},
    ],
)
def test_invalid_values_rejected(tmp_path, overrides):
    path = write_config(tmp_path / "bad.cfg", overrides)
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_validate_endpoint_strips_whitespace():
    assert validate_endpoint("  https://api.mainnet-beta.solana.com ") == "https://api.mainnet-beta.solana.com"
