"""
dgtx-deploy CLI

Command-line interface for deploying the DGTX Sale, Treasury and
Whitelist contracts.

Commands:
  predict   - Predict a future contract address from the current nonce
  address   - Derive a contract address offline from (sender, nonce)
  migrate   - Deploy Treasury, Whitelist and Sale
  inspect   - Read deployed contracts and verify their links
  networks  - List network profiles
  whoami    - Show the deployer address
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from .chain.tx import Transactor, local_account
from .commands import fail, open_client
from .config import PROFILES, get_profile, load_env
from .errors import DeployError

# ============ Constants ============

VERSION = "1.0.0"


# ============ Main CLI Group ============


@click.group()
@click.version_option(version=VERSION, prog_name="dgtx-deploy")
@click.option(
    "--network",
    "-n",
    envvar="DGTX_NETWORK",
    default="development",
    show_default=True,
    help="Network profile",
)
@click.option(
    "--env-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="dotenv file with keys and endpoints (default: ~/.dgtx-deploy/.env)",
)
@click.option("--verbose", "-v", is_flag=True, help="Log RPC traffic")
@click.pass_context
def cli(ctx: click.Context, network: str, env_file: Optional[Path], verbose: bool) -> None:
    """Deploy and inspect the DGTX token sale contracts."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    load_env(env_file)
    try:
        profile = get_profile(network)
    except DeployError as exc:
        raise click.BadParameter(str(exc), param_hint="--network") from exc
    ctx.ensure_object(dict)
    ctx.obj["profile"] = profile


# ============ Top-level Commands ============

from .commands.inspect import inspect
from .commands.migrate import migrate
from .commands.predict import address, predict

cli.add_command(predict)
cli.add_command(address)
cli.add_command(migrate)
cli.add_command(inspect)


# ============ Profiles & Identity ============


@cli.command()
def networks() -> None:
    """List network profiles."""
    for profile in PROFILES.values():
        endpoint = profile.rpc_url or f"${profile.rpc_env}"
        chain = str(profile.chain_id) if profile.chain_id is not None else "any"
        signer = "node account" if profile.node_signer else "local key"
        click.echo(
            click.style(f"  {profile.name:<12}", fg="bright_white", bold=True)
            + click.style(f"{endpoint:<24}", dim=True)
            + f" chain={chain:<4} gas={profile.gas} signer={signer}"
        )


@cli.command()
@click.pass_context
def whoami(ctx: click.Context) -> None:
    """Show the deployer address for the selected network."""
    profile = ctx.obj["profile"]
    try:
        account = local_account(profile)
    except DeployError as exc:
        fail(exc)
    if account is not None:
        click.echo(f"Address: {account.address}")
        return

    if not profile.node_signer:
        click.echo("No deployer key found.")
        click.echo("Set PRIVATE_KEY or MNEMONIC in ~/.dgtx-deploy/.env.")
        sys.exit(1)

    try:
        with open_client(profile) as client:
            transactor = Transactor.from_profile(client, profile)
    except DeployError as exc:
        fail(exc)
    click.echo(f"Address: {transactor.address} (node account)")


# ============ Entry Points ============


def main() -> None:
    """dgtx-deploy CLI entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
