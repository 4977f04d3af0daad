"""
Migration - deploy the Treasury, Whitelist and Sale contracts.

Order is fixed:

1. Treasury(token, predictedSale)   at nonce N
2. Whitelist()                      at nonce N+1
3. Sale(token, whitelist, treasury, price) at nonce N+2

Treasury's constructor receives the address Sale *will* get, predicted
from the deployer nonce before anything is sent.  Any other transaction
from the deployer in between invalidates that prediction, so the nonce is
re-checked before Sale goes out.  There is no retry or rollback: a failed
run is restarted from scratch, which re-predicts every address.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional

from eth_utils import to_checksum_address

from .chain.abi import Artifact, load_artifact
from .chain.tx import Transactor, TxResult
from .config import DEFAULT_PRICE, DEFAULT_TOKEN
from .contracts import Contract, check_links
from .errors import PredictionMismatch
from .predictor import Prediction, predict_address, verify_deployed

logger = logging.getLogger(__name__)

# Treasury and Whitelist are sent before Sale
SALE_NONCE_OFFSET = 2


@dataclass(frozen=True)
class MigrationArtifacts:
    sale: Artifact
    treasury: Artifact
    whitelist: Artifact

    @classmethod
    def load(cls, artifacts_dir: Optional[Path] = None) -> "MigrationArtifacts":
        return cls(
            sale=load_artifact("Sale", artifacts_dir),
            treasury=load_artifact("Treasury", artifacts_dir),
            whitelist=load_artifact("Whitelist", artifacts_dir),
        )


@dataclass
class MigrationResult:
    network: str
    chain_id: int
    deployer: str
    start_nonce: int
    token: str
    price: int
    treasury: str
    whitelist: str
    sale: str
    predicted_sale: str
    tx_hashes: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def write(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(), indent=2) + "\n", encoding="utf-8")


def deploy_treasury(
    transactor: Transactor,
    artifacts: MigrationArtifacts,
    token: str,
) -> tuple[TxResult, Prediction]:
    prediction = predict_address(transactor.client, transactor.address, SALE_NONCE_OFFSET)
    result = transactor.deploy(artifacts.treasury, [token, prediction.address])
    return result, prediction


def deploy_whitelist(transactor: Transactor, artifacts: MigrationArtifacts) -> TxResult:
    return transactor.deploy(artifacts.whitelist)


def deploy_sale(
    transactor: Transactor,
    artifacts: MigrationArtifacts,
    token: str,
    whitelist: str,
    treasury: str,
    price: int,
    prediction: Prediction,
) -> TxResult:
    """Deploy Sale, refusing to send at any nonce but the predicted one."""
    nonce = transactor.nonce()
    if nonce != prediction.nonce:
        raise PredictionMismatch(
            f"Deployer nonce is {nonce} but Sale was predicted at nonce "
            f"{prediction.nonce}; another transaction was sent from "
            f"{transactor.address}. Restart the migration.",
            expected=prediction.address,
        )

    result = transactor.deploy(artifacts.sale, [token, whitelist, treasury, price])
    if result.contract_address != prediction.address:
        raise PredictionMismatch(
            f"Sale deployed at {result.contract_address}, predicted {prediction.address}",
            expected=prediction.address,
            actual=result.contract_address,
        )
    return result


def run_migration(
    transactor: Transactor,
    artifacts: MigrationArtifacts,
    token: str = DEFAULT_TOKEN,
    price: int = DEFAULT_PRICE,
    network: str = "development",
) -> MigrationResult:
    """
    Run the full deployment sequence.

    Returns:
        Deployed addresses and transaction hashes

    Raises:
        QueryFailed, TransactionReverted, PredictionMismatch: first failure
            aborts the remaining steps
    """
    token = to_checksum_address(token)
    treasury_tx, prediction = deploy_treasury(transactor, artifacts, token)
    whitelist_tx = deploy_whitelist(transactor, artifacts)
    sale_tx = deploy_sale(
        transactor,
        artifacts,
        token,
        whitelist_tx.contract_address,
        treasury_tx.contract_address,
        price,
        prediction,
    )

    client = transactor.client
    verify_deployed(client, prediction.address)
    check_links(
        Contract(client, sale_tx.contract_address, artifacts.sale.abi, name="Sale"),
        Contract(client, treasury_tx.contract_address, artifacts.treasury.abi, name="Treasury"),
        Contract(client, whitelist_tx.contract_address, artifacts.whitelist.abi, name="Whitelist"),
    )

    return MigrationResult(
        network=network,
        chain_id=transactor.resolve_chain_id(),
        deployer=transactor.address,
        start_nonce=prediction.current_nonce,
        token=token,
        price=price,
        treasury=treasury_tx.contract_address,
        whitelist=whitelist_tx.contract_address,
        sale=sale_tx.contract_address,
        predicted_sale=prediction.address,
        tx_hashes={
            "treasury": treasury_tx.tx_hash,
            "whitelist": whitelist_tx.tx_hash,
            "sale": sale_tx.tx_hash,
        },
    )
