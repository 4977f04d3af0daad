"""
Network profiles and environment configuration.

Profiles mirror the networks the sale contracts were deployed to: a local
development node, a coverage node, the Ropsten test network and mainnet.
Each profile selects the node endpoint, the signing key source and gas
parameters.  Secrets and endpoints come from the environment, optionally
loaded from a dotenv file (default: ~/.dgtx-deploy/.env).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from eth_utils import to_checksum_address

from .errors import ConfigError

logger = logging.getLogger(__name__)

DGTX_DIR = Path.home() / ".dgtx-deploy"
DGTX_ENV = DGTX_DIR / ".env"

# DGTX token contract on mainnet
DEFAULT_TOKEN = to_checksum_address("0x1c83501478f1320977047008496dacbd60bb15ef")
DEFAULT_PRICE = 1000


@dataclass(frozen=True)
class NetworkProfile:
    name: str
    rpc_url: Optional[str]
    rpc_env: str
    chain_id: Optional[int] = None
    gas: int = 6_721_974
    gas_price: Optional[int] = None
    node_signer: bool = False
    address_index: int = 0

    def resolve_rpc_url(self) -> str:
        url = os.environ.get(self.rpc_env) or self.rpc_url
        if not url:
            raise ConfigError(f"No endpoint for network '{self.name}'. Set {self.rpc_env}.")
        return url


PROFILES: dict[str, NetworkProfile] = {
    "development": NetworkProfile(
        name="development",
        rpc_url="http://localhost:8545",
        rpc_env="DEVELOPMENT_RPC_URL",
        node_signer=True,
    ),
    "coverage": NetworkProfile(
        name="coverage",
        rpc_url="http://localhost:8555",
        rpc_env="COVERAGE_RPC_URL",
        gas=0xFFFFFFFFFFF,
        gas_price=0x01,
        node_signer=True,
    ),
    "ropsten": NetworkProfile(
        name="ropsten",
        rpc_url=None,
        rpc_env="ROPSTEN_RPC_URL",
        chain_id=3,
        address_index=1,
    ),
    "mainnet": NetworkProfile(
        name="mainnet",
        rpc_url=None,
        rpc_env="MAINNET_RPC_URL",
        chain_id=1,
        gas=3_000_000,
        gas_price=10_000_000_000,  # 10 gwei
    ),
}


def get_profile(name: str) -> NetworkProfile:
    try:
        return PROFILES[name]
    except KeyError:
        known = ", ".join(sorted(PROFILES))
        raise ConfigError(f"Unknown network '{name}'. Known networks: {known}") from None


def load_env(env_path: Optional[Path] = None) -> Optional[Path]:
    """Load a dotenv file into the process environment.

    Existing environment variables win over file values.  Returns the path
    loaded, or None when the file does not exist.
    """
    env_path = env_path or DGTX_ENV
    if not env_path.exists():
        return None
    load_dotenv(env_path, override=False)
    logger.debug("Loaded environment from %s", env_path)
    return env_path
