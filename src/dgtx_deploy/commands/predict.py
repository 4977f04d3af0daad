"""
Predict - show where a future deployment from an account will land.
"""

from __future__ import annotations

import click

from ..errors import DeployError
from ..predictor import contract_address, predict_address
from . import fail, open_client, validate_address


@click.command()
@click.option(
    "--sender",
    required=True,
    callback=validate_address,
    help="Account that will send the deployment",
)
@click.option(
    "--offset",
    default=0,
    type=int,
    show_default=True,
    help="Transactions the sender sends before the deployment",
)
@click.pass_context
def predict(ctx: click.Context, sender: str, offset: int) -> None:
    """Predict a future contract address from the sender's current nonce.

    The prediction holds only if the sender sends exactly OFFSET other
    transactions before the deployment.
    """
    profile = ctx.obj["profile"]
    try:
        with open_client(profile) as client:
            prediction = predict_address(client, sender, offset)
    except DeployError as exc:
        fail(exc)

    click.echo(click.style("  Network:       ", dim=True) + profile.name)
    click.echo(click.style("  Sender:        ", dim=True) + prediction.sender)
    click.echo(click.style("  Current nonce: ", dim=True) + str(prediction.current_nonce))
    click.echo(click.style("  Target nonce:  ", dim=True) + str(prediction.nonce))
    click.echo(
        click.style("  Address:       ", dim=True)
        + click.style(prediction.address, fg="bright_white", bold=True)
    )


@click.command()
@click.option("--sender", required=True, callback=validate_address, help="Creator account")
@click.option("--nonce", required=True, type=click.IntRange(min=0), help="Creation nonce")
def address(sender: str, nonce: int) -> None:
    """Derive a contract address offline from (sender, nonce)."""
    click.echo(contract_address(sender, nonce))
