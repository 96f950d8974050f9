from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Any, Awaitable, Optional, Tuple, Union

from .errors import ProtocolParseError
from .rpc import Deadline, RPCTransport
from .stake import sum_delegated_stake


LAMPORTS_PER_SOL = 1_000_000_000
STAKE_PROGRAM_ID = "Stake11111111111111111111111111111111111111"
# Byte offset of the authorized staker inside a stake account's data.
STAKER_AUTHORITY_OFFSET = 12

logger = logging.getLogger(__name__)


def lamports_to_sol(value: Optional[Union[int, float]]) -> float:
    return 0.0 if value in (None, 0) else value / LAMPORTS_PER_SOL


@dataclass(frozen=True)
class AccountBalances:
    address: str
    lamports: Union[int, float]
    staked_lamports: int

    @property
    def balance_sol(self) -> float:
        return lamports_to_sol(self.lamports)

    @property
    def staked_sol(self) -> float:
        return lamports_to_sol(self.staked_lamports)

    @property
    def total_sol(self) -> float:
        return self.balance_sol + self.staked_sol


def parse_account_lamports(result: Any) -> Union[int, float]:
    """Extract ``value.lamports`` from a ``getAccountInfo`` result.

    A null ``value`` means the account does not exist yet and holds nothing.
    """
    if not isinstance(result, dict) or "value" not in result:
        raise ProtocolParseError("Error parsing account info: missing 'value'", "getAccountInfo")
    value = result["value"]
    if value is None:
        return 0
    if not isinstance(value, dict):
        raise ProtocolParseError("Error parsing account info: 'value' is not an object", "getAccountInfo")
    lamports = value.get("lamports")
    if isinstance(lamports, bool) or not isinstance(lamports, (int, float)):
        raise ProtocolParseError(
            f"Error parsing account info: lamports {lamports!r} is not a number", "getAccountInfo"
        )
    try:
        finite = math.isfinite(float(lamports))
    except OverflowError:
        finite = False
    if not finite:
        raise ProtocolParseError(
            "Error parsing account info: lamports value is out of range", "getAccountInfo"
        )
    return lamports


async def fetch_account_lamports(
    transport: RPCTransport, address: str, deadline: Optional[Deadline] = None
) -> Union[int, float]:
    result = await transport.send("getAccountInfo", [address, {"encoding": "jsonParsed"}], deadline)
    return parse_account_lamports(result)


async def fetch_staked_lamports(transport: RPCTransport, address: str, deadline: Optional[Deadline] = None) -> int:
    params = [
        STAKE_PROGRAM_ID,
        {
            "encoding": "jsonParsed",
            "filters": [
                {"memcmp": {"offset": STAKER_AUTHORITY_OFFSET, "bytes": address}},
            ],
        },
    ]
    result = await transport.send("getProgramAccounts", params, deadline)
    return sum_delegated_stake(result)


async def _run_both(
    account_call: Awaitable[Union[int, float]], stake_call: Awaitable[int]
) -> Tuple[Union[int, float], int]:
    """Run both calls concurrently; the first failure cancels the other.

    If both have already failed, the account-info error is the one raised.
    """
    account_task = asyncio.ensure_future(account_call)
    stake_task = asyncio.ensure_future(stake_call)
    tasks = (account_task, stake_task)
    try:
        _, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)
    errors = [task.exception() for task in tasks if not task.cancelled()]
    for error in errors:
        if error is not None:
            raise error
    return account_task.result(), stake_task.result()


async def resolve_account_balances(
    transport: RPCTransport,
    address: str,
    deadline: Optional[Deadline] = None,
    parallel: bool = False,
) -> AccountBalances:
    """Fetch liquid and delegated balances for ``address``.

    Both RPC calls share ``deadline``; any failure aborts the whole resolve.
    """
    logger.info("Resolving balances for %s via %s", address, transport.endpoint)
    if parallel:
        lamports, staked_lamports = await _run_both(
            fetch_account_lamports(transport, address, deadline),
            fetch_staked_lamports(transport, address, deadline),
        )
    else:
        lamports = await fetch_account_lamports(transport, address, deadline)
        staked_lamports = await fetch_staked_lamports(transport, address, deadline)

    balances = AccountBalances(address=address, lamports=lamports, staked_lamports=staked_lamports)
    logger.info(
        "Resolved %s: balance=%.9f SOL staked=%.9f SOL",
        address,
        balances.balance_sol,
        balances.staked_sol,
    )
    return balances
