"""
Commands - CLI command implementations for dgtx-deploy.

Each module corresponds to a top-level CLI command:
- predict: Predict the address of a future deployment (and ``address``,
  the offline derivation)
- migrate: Deploy Treasury, Whitelist and Sale in order
- inspect: Read deployed contracts and check their cross references
"""

from __future__ import annotations

import sys
from typing import NoReturn

import click
from eth_utils import is_address, to_checksum_address

from ..chain.rpc import ChainClient
from ..config import NetworkProfile
from ..errors import ConfigError, DeployError


def open_client(profile: NetworkProfile, check_chain_id: bool = True) -> ChainClient:
    """Open a client for a profile, refusing to talk to the wrong chain."""
    client = ChainClient(profile.resolve_rpc_url())
    if check_chain_id and profile.chain_id is not None:
        try:
            actual = client.get_chain_id()
        except DeployError:
            client.close()
            raise
        if actual != profile.chain_id:
            client.close()
            raise ConfigError(
                f"Network '{profile.name}' expects chain id {profile.chain_id}, "
                f"node reports {actual}"
            )
    return client


def fail(exc: DeployError) -> NoReturn:
    click.secho(f"  {type(exc).__name__}: {exc}", fg="red")
    sys.exit(exc.exit_code)


def validate_address(ctx: click.Context, param: click.Parameter, value: str | None) -> str | None:
    """Click callback: accept any 0x address and return it checksummed."""
    if value is None:
        return None
    if not is_address(value):
        raise click.BadParameter(f"not a 20-byte hex address: {value}")
    return to_checksum_address(value)
