__all__ = [
    # Address prediction
    "Prediction",
    "contract_address",
    "predict_address",
    "verify_deployed",
    # Chain access
    "Artifact",
    "ChainClient",
    "Transactor",
    "TxResult",
    "load_artifact",
    # Contracts
    "Contract",
    "check_links",
    # Migration
    "MigrationArtifacts",
    "MigrationResult",
    "run_migration",
    # Configuration
    "NetworkProfile",
    "PROFILES",
    "get_profile",
    # Errors
    "DeployError",
    "ConfigError",
    "QueryFailed",
    "ReceiptTimeout",
    "TransactionReverted",
    "PredictionMismatch",
]

from .chain.abi import Artifact, load_artifact
from .chain.rpc import ChainClient
from .chain.tx import Transactor, TxResult
from .config import PROFILES, NetworkProfile, get_profile
from .contracts import Contract, check_links
from .errors import (
    ConfigError,
    DeployError,
    PredictionMismatch,
    QueryFailed,
    ReceiptTimeout,
    TransactionReverted,
)
from .migration import MigrationArtifacts, MigrationResult, run_migration
from .predictor import Prediction, contract_address, predict_address, verify_deployed
