"""
Contract handles for the deployed sale contracts.

Only the public getters and transactions the tooling needs are wrapped;
the contract logic itself lives on-chain.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from eth_utils import to_checksum_address

from .chain.abi import Artifact, decode_event_logs, decode_function_result, encode_function_call
from .chain.rpc import ChainClient
from .chain.tx import Transactor, TxResult
from .errors import DeployError, PredictionMismatch

logger = logging.getLogger(__name__)

TREASURY_PHASES = 10


class Contract:
    def __init__(
        self,
        client: ChainClient,
        address: str,
        abi: Sequence[dict[str, Any]],
        name: str = "Contract",
    ) -> None:
        self.client = client
        self.address = to_checksum_address(address)
        self.abi = list(abi)
        self.name = name

    @classmethod
    def at(cls, client: ChainClient, address: str, artifact: Artifact) -> "Contract":
        """Bind to an existing deployment, checking code is present."""
        code = client.get_code(address)
        if code in ("0x", "0x0", ""):
            raise DeployError(f"No {artifact.name} contract code at {address}")
        return cls(client, address, artifact.abi, name=artifact.name)

    def __repr__(self) -> str:
        return f"{self.name}({self.address})"

    def call(self, function_name: str, *args: Any, sender: Optional[str] = None) -> Any:
        """Read from the contract (eth_call)."""
        calldata = encode_function_call(self.abi, function_name, args)
        result = self.client.call(self.address, calldata, sender=sender)
        if result == "0x":
            return None
        return decode_function_result(self.abi, function_name, result, len(args))

    def transact(
        self,
        transactor: Transactor,
        function_name: str,
        *args: Any,
        value: int = 0,
    ) -> TxResult:
        return transactor.transact(self.address, self.abi, function_name, args, value=value)

    def events(self, result: TxResult, event_name: str) -> list[dict[str, Any]]:
        return decode_event_logs(self.abi, result.receipt, event_name)


def sale_summary(sale: Contract) -> dict[str, Any]:
    return {
        "token": sale.call("token"),
        "whitelist": sale.call("whitelist"),
        "treasury": sale.call("treasury"),
        "owner": sale.call("owner"),
        "currentRate": sale.call("currentRate"),
        "futureRate": sale.call("futureRate"),
        "availableTokens": sale.call("availableTokens"),
    }


def treasury_summary(treasury: Contract) -> dict[str, Any]:
    return {
        "token": treasury.call("token"),
        "sale": treasury.call("sale"),
        "phaseNum": treasury.call("phaseNum"),
        "phases": [treasury.call("phases", i) for i in range(TREASURY_PHASES)],
    }


def whitelist_summary(whitelist: Contract) -> dict[str, Any]:
    return {"owner": whitelist.call("owner")}


def check_links(sale: Contract, treasury: Contract, whitelist: Contract) -> None:
    """
    Verify the three contracts reference each other.

    Raises:
        PredictionMismatch: If Treasury was built with a Sale address other
            than the real one, or Sale points elsewhere
    """
    treasury_sale = treasury.call("sale")
    if treasury_sale is None or to_checksum_address(treasury_sale) != sale.address:
        raise PredictionMismatch(
            f"Treasury.sale() is {treasury_sale}, Sale is at {sale.address}",
            expected=sale.address,
            actual=treasury_sale,
        )

    for getter, target in (("treasury", treasury), ("whitelist", whitelist)):
        value = sale.call(getter)
        if value is None or to_checksum_address(value) != target.address:
            raise DeployError(f"Sale.{getter}() is {value}, expected {target.address}")

    logger.info("Contract links verified: %s %s %s", sale, treasury, whitelist)
