"""
JSON-RPC chain client.

Lightweight alternative to web3.py: uses httpx for HTTP.  A ``ChainClient``
is an explicit handle passed to every routine that talks to the node;
there is no process-wide connection object.

Every method is a single blocking request/response.  Reads fail with
``QueryFailed``; submissions fail with ``TransactionReverted``.
"""

from __future__ import annotations

import itertools
import logging
import time
from typing import Any, Optional

import httpx

from ..errors import DeployError, QueryFailed, ReceiptTimeout, TransactionReverted

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


def to_quantity(value: int) -> str:
    """Encode an integer as a JSON-RPC hex quantity."""
    return hex(value)


def from_quantity(value: str | int | None) -> int:
    if value is None:
        return 0
    if isinstance(value, int):
        return value
    return int(value, 16)


class ChainClient:
    """Blocking JSON-RPC 2.0 client bound to one node endpoint.

    Args:
        url: Node endpoint URL
        timeout: Per-request timeout in seconds
        http: Pre-built httpx client (tests inject one backed by
            ``httpx.MockTransport``)
    """

    def __init__(
        self,
        url: str,
        timeout: float = DEFAULT_TIMEOUT,
        http: Optional[httpx.Client] = None,
    ) -> None:
        self.url = url
        self._http = http or httpx.Client(timeout=timeout)
        self._ids = itertools.count(1)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "ChainClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"ChainClient({self.url!r})"

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def request(
        self,
        method: str,
        params: list,
        error_cls: type[DeployError] = QueryFailed,
    ) -> Any:
        """
        Make a JSON-RPC call.

        Args:
            method: RPC method name (e.g., "eth_call")
            params: RPC parameters
            error_cls: Exception raised on failure

        Returns:
            Result field from the RPC response

        Raises:
            QueryFailed: (or ``error_cls``) on transport or RPC error
        """
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": next(self._ids),
        }
        logger.debug("rpc -> %s %s", method, params)

        try:
            response = self._http.post(self.url, json=payload)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise error_cls(f"{method} failed against {self.url}: {exc}") from exc

        if not isinstance(data, dict):
            raise error_cls(f"Malformed response to {method}: {data!r}")
        if "error" in data:
            raise error_cls(f"RPC error from {method}: {data['error']}")

        result = data.get("result")
        logger.debug("rpc <- %s %s", method, result)
        return result

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_transaction_count(self, address: str, block: str = "latest") -> int:
        """Get the transaction count (nonce) of an account."""
        return from_quantity(self.request("eth_getTransactionCount", [address, block]))

    def get_balance(self, address: str, block: str = "latest") -> int:
        """Get the balance of an account in wei."""
        return from_quantity(self.request("eth_getBalance", [address, block]))

    def get_code(self, address: str, block: str = "latest") -> str:
        """Get deployed bytecode at an address ("0x" when empty)."""
        return self.request("eth_getCode", [address, block]) or "0x"

    def get_gas_price(self) -> int:
        return from_quantity(self.request("eth_gasPrice", []))

    def get_chain_id(self) -> int:
        return from_quantity(self.request("eth_chainId", []))

    def get_accounts(self) -> list[str]:
        """Accounts managed (unlocked) by the node itself."""
        return list(self.request("eth_accounts", []) or [])

    def call(
        self,
        to: str,
        data: str,
        sender: Optional[str] = None,
        block: str = "latest",
    ) -> str:
        """Execute a read-only message call (eth_call) and return hex data."""
        message: dict[str, Any] = {"to": to, "data": data}
        if sender is not None:
            message["from"] = sender
        return self.request("eth_call", [message, block]) or "0x"

    def get_transaction_receipt(self, tx_hash: str) -> Optional[dict]:
        return self.request("eth_getTransactionReceipt", [tx_hash])

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def send_raw_transaction(self, raw_tx: str) -> str:
        """
        Send a signed raw transaction.

        Returns:
            Transaction hash (0x-prefixed hex)
        """
        return self.request("eth_sendRawTransaction", [raw_tx], error_cls=TransactionReverted)

    def send_transaction(self, tx: dict[str, Any]) -> str:
        """Send a transaction signed by a node-managed account."""
        return self.request("eth_sendTransaction", [tx], error_cls=TransactionReverted)

    def wait_for_receipt(
        self,
        tx_hash: str,
        timeout: float = 120,
        poll_interval: float = 1.0,
    ) -> dict:
        """
        Wait for a transaction receipt.

        Raises:
            ReceiptTimeout: If receipt not found within timeout
        """
        start = time.monotonic()
        while True:
            receipt = self.get_transaction_receipt(tx_hash)
            if receipt is not None:
                return receipt
            if time.monotonic() - start >= timeout:
                break
            time.sleep(poll_interval)

        raise ReceiptTimeout(f"Transaction {tx_hash} not confirmed within {timeout}s")
