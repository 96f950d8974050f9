"""Exceptions raised while checking a wallet's balances."""

from __future__ import annotations

from typing import Any, Optional


def truncate_text(text: str, limit: int = 800) -> str:
    if len(text) > limit:
        return text[: limit - 3] + "..."
    return text


class BalanceCheckError(RuntimeError):
    """Base class for every failure surfaced to the caller."""


class ConfigurationError(BalanceCheckError):
    """Raised when configuration is invalid."""


class ValueParseError(BalanceCheckError):
    """Raised when a stake amount is not an unsigned 64-bit integer string."""

    def __init__(self, message: str, value: Any = None) -> None:
        super().__init__(message)
        self.value = value


class RPCError(BalanceCheckError):
    """Raised when a single JSON-RPC call fails."""

    def __init__(self, message: str, method: Optional[str] = None) -> None:
        super().__init__(message)
        self.method = method


class SerializationError(RPCError):
    """Raised when the request body cannot be encoded as JSON."""


class TransportError(RPCError):
    """Raised when the HTTP exchange itself fails."""


class RPCTimeoutError(TransportError):
    """Raised when the deadline passes before the response arrives."""


class HTTPStatusError(RPCError):
    """Raised when the node answers with anything other than 200."""

    def __init__(self, method: str, status_code: int, body: str) -> None:
        super().__init__(
            f"Unexpected HTTP status {status_code} on method {method}: {truncate_text(body)}",
            method,
        )
        self.status_code = status_code
        self.body = body


class ProtocolParseError(RPCError):
    """Raised when a response envelope or an expected field is malformed."""

    def __init__(self, message: str, method: Optional[str] = None, body: Optional[str] = None) -> None:
        if body is not None:
            message = f"{message}; response: {truncate_text(body)}"
        super().__init__(message, method)
        self.body = body


class RPCResponseError(RPCError):
    """Raised when the node returns a JSON-RPC error object."""

    def __init__(self, method: str, code: Optional[int], message: str) -> None:
        super().__init__(f"RPC error on method {method} (code {code}): {message}", method)
        self.code = code
        self.rpc_message = message
