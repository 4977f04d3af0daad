from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from eth_account import Account
from eth_account.signers.local import LocalAccount

from dgtx_deploy.chain.rpc import ChainClient
from dgtx_deploy.chain.tx import Transactor
from dgtx_deploy.migration import MigrationArtifacts

from fake_chain import DEPLOYER_KEY, NODE_ACCOUNT, FakeNode, write_artifacts

_ENV_KEYS = (
    "PRIVATE_KEY",
    "MNEMONIC",
    "ADDRESS_INDEX",
    "DEPLOYER_ADDRESS",
    "DGTX_TOKEN",
    "SALE_PRICE",
    "DGTX_ARTIFACTS_DIR",
    "DGTX_NETWORK",
    "DEVELOPMENT_RPC_URL",
    "ROPSTEN_RPC_URL",
    "MAINNET_RPC_URL",
)


@pytest.fixture(autouse=True)
def clean_env():
    """Keep deployer keys and endpoints from the developer's shell out of tests."""
    env = {k: v for k, v in os.environ.items() if k not in _ENV_KEYS}
    with patch.dict(os.environ, env, clear=True):
        yield


@pytest.fixture()
def node() -> FakeNode:
    return FakeNode(accounts=[NODE_ACCOUNT])


@pytest.fixture()
def client(node: FakeNode) -> ChainClient:
    chain = ChainClient("http://fake-node:8545", http=node.client())
    yield chain
    chain.close()


@pytest.fixture()
def deployer() -> LocalAccount:
    return Account.from_key(DEPLOYER_KEY)


@pytest.fixture()
def transactor(client: ChainClient, deployer: LocalAccount) -> Transactor:
    return Transactor(client, account=deployer, poll_interval=0)


@pytest.fixture()
def artifacts_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "build" / "contracts"
    write_artifacts(directory)
    return directory


@pytest.fixture()
def artifacts(artifacts_dir: Path) -> MigrationArtifacts:
    return MigrationArtifacts.load(artifacts_dir)
