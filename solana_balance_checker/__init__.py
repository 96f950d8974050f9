"""Report a Solana wallet's liquid and delegated stake balances."""

from .balances import (
    LAMPORTS_PER_SOL,
    STAKE_PROGRAM_ID,
    AccountBalances,
    lamports_to_sol,
    resolve_account_balances,
)
from .errors import (
    BalanceCheckError,
    ConfigurationError,
    HTTPStatusError,
    ProtocolParseError,
    RPCError,
    RPCResponseError,
    RPCTimeoutError,
    SerializationError,
    TransportError,
    ValueParseError,
)
from .rpc import Deadline, RPCTransport
from .stake import sum_delegated_stake

__version__ = "0.1.0"
