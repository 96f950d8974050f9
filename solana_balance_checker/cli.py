#!/usr/bin/env python3
"""Solana wallet balance checker.

Asks for a wallet address (or takes one from the command line or the
configuration file), queries the configured RPC node for the account's
liquid balance and its delegated stake, and prints a Category/Value summary.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import httpx
import pandas as pd
from solders.pubkey import Pubkey

from .balances import AccountBalances, resolve_account_balances
from .config import OUTPUT_FORMATS, load_config, validate_endpoint
from .errors import BalanceCheckError, ConfigurationError
from .rpc import Deadline, RPCTransport


ADDRESS_LENGTHS = (43, 44)
ADDRESS_PROMPT = "Please enter a Solana wallet address: "
INVALID_ADDRESS_MESSAGE = "Invalid address length. Please try again."

logger = logging.getLogger("solana_balance_checker")


def is_valid_address_length(address: str) -> bool:
    return len(address) in ADDRESS_LENGTHS


def prompt_for_address(
    input_func: Callable[[str], str] = input,
    output_func: Callable[[str], None] = print,
) -> str:
    while True:
        address = input_func(ADDRESS_PROMPT).strip()
        if is_valid_address_length(address):
            return address
        output_func(INVALID_ADDRESS_MESSAGE)


def validate_wallet_address(address: str) -> str:
    """Check an address supplied without the prompt: length first, then base58 decoding."""
    address = address.strip()
    if not is_valid_address_length(address):
        raise ConfigurationError(f"Invalid address length: {address!r}")
    try:
        Pubkey.from_string(address)
    except Exception as exc:  # pylint: disable=broad-except
        raise ConfigurationError(f"Invalid wallet address: {address}") from exc
    return address


def format_balance_table(balances: AccountBalances) -> str:
    rows = [
        ("Address", balances.address),
        ("Current Balance", f"{balances.balance_sol:.9f} SOL"),
        ("Staked Balance", f"{balances.staked_sol:.9f} SOL"),
        ("Total Balance", f"{balances.total_sol:.9f} SOL"),
    ]
    frame = pd.DataFrame(rows, columns=["Category", "Value"])
    return frame.to_string(index=False, justify="left")


def balances_to_dict(balances: AccountBalances) -> Dict[str, Any]:
    return {
        "address": balances.address,
        "lamports": balances.lamports,
        "staked_lamports": balances.staked_lamports,
        "balance_sol": balances.balance_sol,
        "staked_sol": balances.staked_sol,
        "total_sol": balances.total_sol,
    }


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Report a Solana wallet's current, staked and total balance.",
    )
    parser.add_argument("--address", type=str, help="Wallet address (prompted for when omitted)")
    parser.add_argument("--config", type=Path, help="Path to a JSON configuration file (default: ./config.cfg)")
    parser.add_argument("--rpc-url", type=str, help="RPC endpoint (overrides config and SOLANA_RPC_URL)")
    parser.add_argument("--timeout", type=float, help="Deadline in seconds for the whole lookup (default: 10)")
    parser.add_argument(
        "--parallel",
        action="store_true",
        default=None,
        help="Issue both RPC calls concurrently instead of one after the other",
    )
    parser.add_argument("--log-level", type=str, help="Logging level (default: WARNING)")
    parser.add_argument("--output", choices=OUTPUT_FORMATS, help="Output format (default: table)")
    return parser


def apply_overrides(config: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    if args.rpc_url:
        config["rpc_endpoint"] = validate_endpoint(args.rpc_url)
    if args.timeout is not None:
        if args.timeout <= 0:
            raise ConfigurationError("--timeout must be greater than zero.")
        config["timeout_seconds"] = args.timeout
    if args.parallel is not None:
        config["parallel_requests"] = args.parallel
    if args.log_level:
        config["log_level"] = args.log_level
    if args.output:
        config["output_format"] = args.output
    if args.address:
        config["wallet_address"] = args.address
    return config


async def run(
    config: Dict[str, Any], address: str, transport: Optional[httpx.AsyncBaseTransport] = None
) -> AccountBalances:
    deadline = Deadline.after(config["timeout_seconds"])
    async with RPCTransport(config["rpc_endpoint"], timeout=config["timeout_seconds"], transport=transport) as client:
        return await resolve_account_balances(
            client,
            address,
            deadline=deadline,
            parallel=config["parallel_requests"],
        )


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    try:
        config = apply_overrides(load_config(args.config), args)
        configure_logging(config["log_level"])

        if config.get("wallet_address"):
            address = validate_wallet_address(config["wallet_address"])
        else:
            address = prompt_for_address()

        balances = asyncio.run(run(config, address))
    except BalanceCheckError as exc:
        logger.error("Fatal error: %s", exc)
        raise SystemExit(1) from exc
    except EOFError:
        logger.error("No wallet address provided")
        raise SystemExit(1) from None
    except KeyboardInterrupt:
        logger.warning("Execution interrupted by user")
        raise SystemExit(130) from None

    if config["output_format"] == "json":
        print(json.dumps(balances_to_dict(balances), indent=2))
    else:
        print(format_balance_table(balances))


if __name__ == "__main__":
    main()
