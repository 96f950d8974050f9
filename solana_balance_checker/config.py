from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from .errors import ConfigurationError


CONFIG_FILENAME = "config.cfg"
DEFAULT_RPC_ENDPOINT = "https://api.mainnet-beta.solana.com"
RPC_ENDPOINT_ENV_VAR = "SOLANA_RPC_URL"
DEFAULT_TIMEOUT_SECONDS = 10.0
OUTPUT_FORMATS = ("table", "json")


def _read_config_file(config_path: Path) -> Dict[str, Any]:
    with config_path.open("r", encoding="utf-8") as handle:
        try:
            config = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Invalid JSON in configuration file: {exc}") from exc
    if not isinstance(config, dict):
        raise ConfigurationError("Configuration file must contain a JSON object.")
    return config


def validate_endpoint(endpoint: Any) -> str:
    value = str(endpoint or "").strip()
    try:
        parsed = urlparse(value)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid RPC endpoint: {value!r}") from exc
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ConfigurationError(f"Invalid RPC endpoint: {value!r}")
    return value


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    if config_path is not None:
        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found at {config_path}")
        config = _read_config_file(config_path)
    else:
        default_path = Path.cwd() / CONFIG_FILENAME
        config = _read_config_file(default_path) if default_path.exists() else {}

    rpc_endpoint = os.getenv(RPC_ENDPOINT_ENV_VAR) or config.get("rpc_endpoint") or DEFAULT_RPC_ENDPOINT
    config["rpc_endpoint"] = validate_endpoint(rpc_endpoint)

    try:
        timeout_seconds = float(config.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS))
    except (TypeError, ValueError) as exc:
        raise ConfigurationError("'timeout_seconds' must be a number.") from exc
    if timeout_seconds <= 0:
        raise ConfigurationError("'timeout_seconds' must be greater than zero.")
    config["timeout_seconds"] = timeout_seconds

    parallel_requests = config.get("parallel_requests", False)
    if not isinstance(parallel_requests, bool):
        raise ConfigurationError("'parallel_requests' must be true or false.")
    config["parallel_requests"] = parallel_requests

    output_format = str(config.get("output_format", "table")).strip().lower()
    if output_format not in OUTPUT_FORMATS:
        raise ConfigurationError("'output_format' must be either 'table' or 'json'.")
    config["output_format"] = output_format

    wallet_address = config.get("wallet_address")
    config["wallet_address"] = str(wallet_address).strip() if wallet_address else None

    config.setdefault("log_level", "WARNING")
    return config
