from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from .errors import (
    ConfigurationError,
    HTTPStatusError,
    ProtocolParseError,
    RPCResponseError,
    RPCTimeoutError,
    SerializationError,
    TransportError,
)


JSONRPC_VERSION = "2.0"
REQUEST_ID = 1
DEFAULT_TIMEOUT_SECONDS = 10.0


def summarize_payload(payload: Any, limit: int = 800) -> str:
    try:
        serialized = json.dumps(payload, default=str)
    except (TypeError, ValueError):
        serialized = str(payload)
    if len(serialized) > limit:
        return serialized[: limit - 3] + "..."
    return serialized


@dataclass(frozen=True)
class Deadline:
    """An absolute point on the monotonic clock shared by several calls."""

    expires_at: float

    @classmethod
    def after(cls, seconds: float) -> "Deadline":
        return cls(time.monotonic() + seconds)

    def remaining(self) -> float:
        return max(0.0, self.expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0.0


class RPCTransport:
    """Single-shot JSON-RPC 2.0 over HTTP POST against one endpoint.

    The endpoint is fixed for the lifetime of the instance; use
    :meth:`with_endpoint` to target another node.
    """

    def __init__(
        self,
        endpoint: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        value = endpoint.strip() if isinstance(endpoint, str) else ""
        if not value:
            raise ConfigurationError("An RPC endpoint must be provided")
        self._endpoint = value
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def with_endpoint(self, endpoint: str) -> "RPCTransport":
        return RPCTransport(endpoint, timeout=self._timeout, transport=self._transport)

    async def __aenter__(self) -> "RPCTransport":
        self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def send(self, method: str, params: List[Any], deadline: Optional[Deadline] = None) -> Any:
        if self._client is None:
            raise RuntimeError("RPC transport not initialized; use async context manager")
        if not isinstance(method, str) or not method:
            raise ValueError("RPC method name must be a non-empty string")

        payload: Dict[str, Any] = {
            "jsonrpc": JSONRPC_VERSION,
            "id": REQUEST_ID,
            "method": method,
            "params": params,
        }
        try:
            body = json.dumps(payload)
        except (TypeError, ValueError) as exc:
            raise SerializationError(f"JSON marshaling error on method {method}: {exc}", method) from exc

        self.logger.debug(
            "RPC Request -> method=%s endpoint=%s payload=%s",
            method,
            self._endpoint,
            summarize_payload(payload),
        )
        response = await self._post(method, body, deadline)
        text = response.text
        self.logger.debug(
            "RPC Response <- method=%s status=%s body=%s",
            method,
            response.status_code,
            summarize_payload(text),
        )

        if response.status_code != 200:
            raise HTTPStatusError(method, response.status_code, text)

        try:
            envelope = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ProtocolParseError(f"JSON parsing error on method {method}: {exc}", method, text) from exc
        if not isinstance(envelope, dict):
            raise ProtocolParseError(f"Response to {method} is not a JSON-RPC envelope", method, text)

        error = envelope.get("error")
        if error is not None:
            if isinstance(error, dict):
                raise RPCResponseError(method, error.get("code"), str(error.get("message", "Unknown RPC error")))
            raise RPCResponseError(method, None, str(error))
        if "result" not in envelope:
            raise ProtocolParseError(f"Response to {method} has no result", method, text)
        return envelope["result"]

    async def _post(self, method: str, body: str, deadline: Optional[Deadline]) -> httpx.Response:
        assert self._client is not None
        remaining: Optional[float] = None
        if deadline is not None:
            remaining = deadline.remaining()
            if remaining <= 0.0:
                raise RPCTimeoutError(f"Deadline exceeded before sending {method}", method)
        try:
            # wait_for(timeout=None) waits without bound
            return await asyncio.wait_for(
                self._client.post(
                    self._endpoint,
                    content=body.encode("utf-8"),
                    headers={"Content-Type": "application/json"},
                ),
                remaining,
            )
        except asyncio.TimeoutError as exc:
            raise RPCTimeoutError(f"Deadline exceeded waiting for {method}", method) from exc
        except httpx.TimeoutException as exc:
            raise RPCTimeoutError(f"HTTP timeout on method {method}: {exc}", method) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"HTTP request error on method {method}: {exc}", method) from exc
