"""
JSON-RPC 2.0 transport for Ethereum-style nodes.

Request:  {"jsonrpc": "2.0", "method": ..., "params": [...], "id": n}
Response: {"jsonrpc": "2.0", "result": ... | "error": {code, message}, "id": n}
"""

from __future__ import annotations

import itertools
import logging
import threading
from typing import Any, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from blockcred.errors import RPCError, UpstreamError
from blockcred.schemas.ledger import JsonRpcRequest, JsonRpcResponse

logger = logging.getLogger("blockcred.ledger.rpc")


def hex_to_int(value: Any) -> int:
    """Parse a ``0x``-prefixed quantity. Raises UpstreamError on garbage."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if not isinstance(value, str):
        raise UpstreamError(f"expected hex quantity, got {value!r}")
    text = value[2:] if value.lower().startswith("0x") else value
    if not text:
        return 0
    try:
        return int(text, 16)
    except ValueError as e:
        raise UpstreamError(f"invalid hex quantity {value!r}") from e


def int_to_hex(value: int) -> str:
    return hex(value)


class JsonRpcTransport:
    """
    Thread-safe JSON-RPC client over HTTP POST.

    Args:
        url: Node endpoint.
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (tests inject a MockTransport).
    """

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.url = url
        self._client = httpx.Client(timeout=timeout, transport=transport)
        self._ids = itertools.count(1)
        self._id_lock = threading.Lock()

    def _next_id(self) -> int:
        with self._id_lock:
            return next(self._ids)

    def call(self, method: str, params: Optional[list[Any]] = None) -> Any:
        """
        Invoke ``method`` and return its ``result``.

        Raises:
            RPCError: the node returned an error object.
            UpstreamError: transport failure or malformed response.
        """
        request = JsonRpcRequest(method=method, params=params or [], id=self._next_id())
        try:
            response = self._client.post(self.url, json=request.model_dump())
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise UpstreamError(f"RPC {method} to {self.url} failed: {e}") from e

        try:
            envelope = JsonRpcResponse.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            raise UpstreamError(f"RPC {method}: malformed response: {response.text[:200]}") from e

        if envelope.error is not None:
            raise RPCError(method, envelope.error.code, envelope.error.message)

        logger.debug(f"RPC {method} -> {str(envelope.result)[:80]}")
        return envelope.result

    def close(self) -> None:
        self._client.close()
