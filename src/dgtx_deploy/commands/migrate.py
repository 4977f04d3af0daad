"""
Migrate - deploy the sale contracts.

Flow:
1. Predict the Sale address (deployer nonce + 2)
2. Deploy Treasury with the predicted Sale address
3. Deploy Whitelist
4. Deploy Sale with the real Whitelist and Treasury addresses
5. Verify Treasury.sale() is the real Sale address

Nothing is retried.  If a step fails, fix the cause and run the whole
migration again; addresses are re-predicted from the new nonce.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from ..chain.tx import Transactor
from ..config import DEFAULT_PRICE, DEFAULT_TOKEN
from ..errors import DeployError
from ..migration import MigrationArtifacts, run_migration
from . import fail, open_client, validate_address


@click.command()
@click.option(
    "--token",
    envvar="DGTX_TOKEN",
    default=DEFAULT_TOKEN,
    show_default=True,
    callback=validate_address,
    help="DGTX token contract address",
)
@click.option(
    "--price",
    envvar="SALE_PRICE",
    default=DEFAULT_PRICE,
    type=click.IntRange(min=1),
    show_default=True,
    help="Initial Sale rate",
)
@click.option(
    "--artifacts",
    "artifacts_dir",
    envvar="DGTX_ARTIFACTS_DIR",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Directory of Truffle build artifacts (default: nearest build/contracts)",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the deployed addresses to a JSON file",
)
@click.pass_context
def migrate(
    ctx: click.Context,
    token: str,
    price: int,
    artifacts_dir: Optional[Path],
    output: Optional[Path],
) -> None:
    """Deploy Treasury, Whitelist and Sale in that order.

    Treasury is given the address Sale will receive, so nothing else may
    send from the deployer account while the migration runs.
    """
    profile = ctx.obj["profile"]

    click.echo()
    click.echo(
        click.style("  ◆ ", fg="cyan")
        + click.style("Migrate", fg="bright_white", bold=True)
        + click.style(f" ─── {profile.name}", fg="cyan")
    )
    click.echo()

    try:
        artifacts = MigrationArtifacts.load(artifacts_dir)
    except (FileNotFoundError, ValueError) as exc:
        click.secho(f"  {exc}", fg="red")
        ctx.exit(2)

    try:
        with open_client(profile) as client:
            transactor = Transactor.from_profile(client, profile)
            click.echo(click.style("  Deployer: ", dim=True) + transactor.address)
            click.echo(click.style("  Token:    ", dim=True) + token)
            click.echo(click.style("  Price:    ", dim=True) + str(price))
            click.echo()

            result = run_migration(transactor, artifacts, token=token, price=price, network=profile.name)
    except DeployError as exc:
        fail(exc)

    click.secho("  Deployed:", fg="cyan")
    click.echo(f"    Treasury:  {result.treasury}")
    click.echo(f"    Whitelist: {result.whitelist}")
    click.echo(f"    Sale:      {result.sale}")
    click.echo(click.style(f"    (start nonce {result.start_nonce})", dim=True))
    click.echo()

    if output is not None:
        result.write(output)
        click.echo(click.style("  Saved: ", dim=True) + str(output))
        click.echo()

    click.echo(
        click.style("  ◆ ", fg="green")
        + click.style("Migration Complete", fg="green", bold=True)
    )
    click.echo()
