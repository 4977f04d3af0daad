"""
Address Predictor - compute the address of a future contract deployment.

A contract created by an ordinary transaction gets the address

    keccak256(rlp([sender, nonce]))[12:]

so the address of a deployment that has not happened yet is known as soon
as the nonce it will be sent at is known.  This breaks the circular
dependency between Treasury (which needs the Sale address) and Sale
(which needs the Treasury address).

The prediction is only valid while nobody else sends from ``sender``
between the nonce query and the predicted deployment.  Violations are not
detectable at prediction time; ``verify_deployed`` catches them afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import rlp
from eth_utils import keccak, to_canonical_address, to_checksum_address

from .chain.rpc import ChainClient
from .errors import PredictionMismatch

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Prediction:
    sender: str
    current_nonce: int
    nonce_offset: int
    address: str

    @property
    def nonce(self) -> int:
        return self.current_nonce + self.nonce_offset


def contract_address(sender: str | bytes, nonce: int) -> str:
    """
    Derive the CREATE address for ``sender`` at ``nonce``.

    Args:
        sender: 20-byte address, raw or 0x-prefixed hex
        nonce: Nonce of the creation transaction

    Returns:
        0x-prefixed checksummed contract address

    Raises:
        ValueError: If sender is not 20 bytes or nonce is negative
    """
    sender_bytes = sender if isinstance(sender, bytes) else to_canonical_address(sender)
    if len(sender_bytes) != 20:
        raise ValueError(f"Sender must be 20 bytes, got {len(sender_bytes)}")
    if nonce < 0:
        raise ValueError(f"Nonce must be non-negative, got {nonce}")

    digest = keccak(rlp.encode([sender_bytes, nonce]))
    return to_checksum_address(digest[12:])


def predict_address(client: ChainClient, sender: str, nonce_offset: int = 0) -> Prediction:
    """
    Predict where a future deployment from ``sender`` will land.

    Args:
        client: Chain client used for the single nonce query
        sender: Account that will send the deployment
        nonce_offset: Number of transactions ``sender`` sends before the
            deployment.  Not bounds-checked: a wrong offset, negative
            included, gives a wrong address rather than an error

    Raises:
        QueryFailed: If the nonce query fails
    """
    current_nonce = client.get_transaction_count(sender)
    nonce = current_nonce + nonce_offset
    if nonce < 0:
        # RLP has no negative integers; the magnitude is encoded instead
        logger.warning("Nonce offset %d is below the current nonce %d", nonce_offset, current_nonce)
    address = contract_address(sender, abs(nonce))
    logger.info(
        "Predicted %s for %s at nonce %d (current %d + %d)",
        address,
        sender,
        nonce,
        current_nonce,
        nonce_offset,
    )
    return Prediction(
        sender=to_checksum_address(sender),
        current_nonce=current_nonce,
        nonce_offset=nonce_offset,
        address=address,
    )


def verify_deployed(client: ChainClient, address: str) -> str:
    """Check the chain holds code at a predicted address; returns the code."""
    code = client.get_code(address)
    if code in ("0x", "0x0", ""):
        raise PredictionMismatch(f"No contract code at predicted address {address}", expected=address)
    return code
