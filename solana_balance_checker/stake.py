"""Summing delegated stake from a ``getProgramAccounts`` result.

The node returns one wrapper per stake account owned by the Stake program.
With ``jsonParsed`` encoding each wrapper looks like::

    {"pubkey": "...",
     "account": {"lamports": ...,
                 "data": {"parsed": {"type": "delegated",
                                     "info": {"stake": {"delegation": {"stake": "500000000", ...}}}}}}}

Only accounts whose parsed ``type`` is ``"delegated"`` carry a delegation.
Every other state contributes nothing to the total.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional

from .errors import ProtocolParseError, ValueParseError


DELEGATED_STAKE_TYPE = "delegated"
U64_MAX = 2**64 - 1

_DIGITS = re.compile(r"[0-9]+")

logger = logging.getLogger(__name__)


def parse_u64(value: Any) -> int:
    """Parse a base-10 unsigned 64-bit integer string (no sign, no whitespace)."""
    if not isinstance(value, str) or not _DIGITS.fullmatch(value):
        raise ValueParseError(f"Error parsing stake value: {value!r} is not an unsigned integer", value)
    parsed = int(value)
    if parsed > U64_MAX:
        raise ValueParseError(f"Error parsing stake value: {value} is out of range for uint64", value)
    return parsed


def _child(node: Any, key: str) -> Any:
    return node.get(key) if isinstance(node, dict) else None


def stake_account_type(entry: Dict[str, Any]) -> Optional[str]:
    parsed = _child(_child(_child(entry, "account"), "data"), "parsed")
    account_type = _child(parsed, "type")
    if account_type is not None and not isinstance(account_type, str):
        raise ProtocolParseError(f"Error parsing stake accounts: type {account_type!r} is not a string")
    return account_type


def delegated_stake_amount(entry: Dict[str, Any]) -> Any:
    parsed = _child(_child(_child(entry, "account"), "data"), "parsed")
    delegation = _child(_child(_child(parsed, "info"), "stake"), "delegation")
    return _child(delegation, "stake")


def sum_delegated_stake(payload: Any) -> int:
    """Return the total delegated stake, in lamports, across ``payload``.

    A delegated account with a malformed amount fails the whole call rather
    than being skipped.
    """
    if not isinstance(payload, list):
        raise ProtocolParseError("Error parsing stake accounts: expected a list of program accounts")

    total_stake = 0
    for index, entry in enumerate(payload):
        if not isinstance(entry, dict):
            raise ProtocolParseError(f"Error parsing stake accounts: entry {index} is not an object")
        account_type = stake_account_type(entry)
        if account_type != DELEGATED_STAKE_TYPE:
            logger.debug("Skipping stake account %s with type %s", entry.get("pubkey"), account_type)
            continue
        total_stake += parse_u64(delegated_stake_amount(entry))
    return total_stake
