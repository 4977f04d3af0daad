"""
Chain - JSON-RPC interaction layer for DGTX deployment tooling.

Provides an explicit chain client handle, Truffle artifact / ABI
management, and transaction submission.

Uses httpx + eth-abi + eth-account instead of the heavyweight web3.py.
"""

from .abi import Artifact, load_artifact
from .rpc import ChainClient
from .tx import Transactor, TxResult

__all__ = ["Artifact", "ChainClient", "Transactor", "TxResult", "load_artifact"]
