"""
Transaction Builder - Build, sign, and send deployer transactions.

A ``Transactor`` binds one chain client to one signing source: either a
local eth-account key, or an account unlocked on the node itself (the
development and coverage profiles).  Every submission reads the account
nonce, sends, and blocks until the receipt is mined.  Only one process
may send from a given account at a time.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from eth_account.signers.local import LocalAccount
from eth_utils import ValidationError, to_checksum_address

from ..config import NetworkProfile
from ..errors import ConfigError, TransactionReverted
from ..keys import get_account, load_account
from .abi import Artifact, deployment_data, encode_function_call
from .rpc import ChainClient, from_quantity, to_quantity

logger = logging.getLogger(__name__)


def local_account(profile: NetworkProfile) -> Optional[LocalAccount]:
    """
    Load the deployer key from the environment for a network profile.

    Mnemonic accounts default to the profile's address index.  Returns None
    when no key is configured.

    Raises:
        ConfigError: If the configured key, mnemonic or index is malformed
    """
    try:
        return load_account(default_index=profile.address_index)
    except (ValueError, ValidationError) as exc:
        raise ConfigError(f"Invalid deployer key for '{profile.name}': {exc}") from exc


@dataclass
class TxResult:
    tx_hash: str
    nonce: int
    receipt: dict[str, Any] = field(default_factory=dict)
    contract_address: Optional[str] = None

    @property
    def status(self) -> int:
        return from_quantity(self.receipt.get("status", "0x0"))


class Transactor:
    """Signs and submits transactions for a single deployer account."""

    def __init__(
        self,
        client: ChainClient,
        account: Optional[LocalAccount] = None,
        sender: Optional[str] = None,
        gas: int = 6_721_974,
        gas_price: Optional[int] = None,
        chain_id: Optional[int] = None,
        receipt_timeout: float = 120,
        poll_interval: float = 1.0,
    ) -> None:
        if account is None and sender is None:
            raise ValueError("Either account or sender must be provided")
        if account is not None and sender is not None:
            if to_checksum_address(sender) != account.address:
                raise ConfigError(
                    f"Deployer address {sender} does not match signing key {account.address}"
                )

        self.client = client
        self.account = account
        self.address = account.address if account is not None else to_checksum_address(sender)
        self.gas = gas
        self.gas_price = gas_price
        self.chain_id = chain_id
        self.receipt_timeout = receipt_timeout
        self.poll_interval = poll_interval

    @classmethod
    def from_profile(
        cls,
        client: ChainClient,
        profile: NetworkProfile,
        private_key: Optional[str] = None,
    ) -> "Transactor":
        """
        Pick the signing source for a network profile.

        A local key (``PRIVATE_KEY`` or ``MNEMONIC``) always wins.  Profiles
        with a node signer otherwise use ``DEPLOYER_ADDRESS`` or the node's
        first account.
        """
        sender = os.environ.get("DEPLOYER_ADDRESS") or None
        if private_key:
            account = get_account(private_key)
        else:
            account = local_account(profile)

        if account is None:
            if not profile.node_signer:
                raise ConfigError(
                    f"Network '{profile.name}' needs PRIVATE_KEY or MNEMONIC to sign"
                )
            if sender is None:
                accounts = client.get_accounts()
                if not accounts:
                    raise ConfigError(f"Node for '{profile.name}' manages no accounts")
                sender = accounts[0]

        return cls(
            client,
            account=account,
            sender=sender,
            gas=profile.gas,
            gas_price=profile.gas_price,
            chain_id=profile.chain_id,
        )

    @property
    def is_local(self) -> bool:
        return self.account is not None

    def nonce(self) -> int:
        return self.client.get_transaction_count(self.address)

    def resolve_chain_id(self) -> int:
        if self.chain_id is None:
            self.chain_id = self.client.get_chain_id()
        return self.chain_id

    def send(self, tx: dict[str, Any]) -> TxResult:
        """
        Fill in nonce and gas fields, submit, and wait for the receipt.

        Args:
            tx: Partial transaction with ``data`` and optionally ``to``,
                ``value`` and ``gas``

        Raises:
            TransactionReverted: If the node rejects the transaction or the
                receipt reports failure
        """
        nonce = self.nonce()
        gas_price = self.gas_price if self.gas_price is not None else self.client.get_gas_price()
        full: dict[str, Any] = {
            "nonce": nonce,
            "gas": tx.get("gas") or self.gas,
            "gasPrice": gas_price,
            "value": tx.get("value", 0),
            "data": tx["data"],
        }
        if tx.get("to"):
            full["to"] = to_checksum_address(tx["to"])

        if self.account is not None:
            full["chainId"] = self.resolve_chain_id()
            signed = self.account.sign_transaction(full)
            raw_tx = "0x" + signed.raw_transaction.hex().removeprefix("0x")
            tx_hash = self.client.send_raw_transaction(raw_tx)
        else:
            node_tx = {
                "from": self.address,
                "data": full["data"],
                "nonce": to_quantity(nonce),
                "gas": to_quantity(full["gas"]),
                "gasPrice": to_quantity(gas_price),
                "value": to_quantity(full["value"]),
            }
            if "to" in full:
                node_tx["to"] = full["to"]
            tx_hash = self.client.send_transaction(node_tx)

        logger.info("Sent %s from %s at nonce %d", tx_hash, self.address, nonce)

        receipt = self.client.wait_for_receipt(
            tx_hash, timeout=self.receipt_timeout, poll_interval=self.poll_interval
        )
        result = TxResult(tx_hash=tx_hash, nonce=nonce, receipt=receipt)
        if result.status != 1:
            raise TransactionReverted(f"Transaction {tx_hash} reverted", tx_hash=tx_hash)
        return result

    def deploy(
        self,
        artifact: Artifact,
        constructor_args: Sequence[Any] = (),
        gas: Optional[int] = None,
    ) -> TxResult:
        """
        Deploy a contract.

        Builds a creation transaction (no ``to``), sends it and extracts the
        deployed contract address from the receipt.
        """
        logger.info("Deploying %s with args %s", artifact.name, list(constructor_args))
        result = self.send({"data": deployment_data(artifact, constructor_args), "gas": gas})

        contract_address = result.receipt.get("contractAddress")
        if not contract_address:
            raise TransactionReverted(
                f"No contract address in receipt for {artifact.name}", tx_hash=result.tx_hash
            )
        result.contract_address = to_checksum_address(contract_address)
        logger.info("%s deployed at %s", artifact.name, result.contract_address)
        return result

    def transact(
        self,
        contract_address: str,
        abi: Sequence[dict[str, Any]],
        function_name: str,
        args: Sequence[Any] = (),
        value: int = 0,
        gas: Optional[int] = None,
    ) -> TxResult:
        """Build, sign, and send a contract call transaction."""
        calldata = encode_function_call(abi, function_name, args)
        return self.send({"to": contract_address, "data": calldata, "value": value, "gas": gas})
