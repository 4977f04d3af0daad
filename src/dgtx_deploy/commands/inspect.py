"""
Inspect - read the deployed sale contracts and check their links.

Reads Sale, Treasury and Whitelist public state and verifies:
- Treasury.sale() is the Sale address (the predicted address was right)
- Sale.treasury() and Sale.whitelist() point at the other two
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import click

from ..chain.abi import load_artifact
from ..contracts import Contract, check_links, sale_summary, treasury_summary, whitelist_summary
from ..errors import DeployError
from . import fail, open_client, validate_address


def _print_section(title: str, values: dict) -> None:
    click.secho(f"  {title} ─────────────────────────", fg="cyan")
    for key, value in values.items():
        click.echo(click.style(f"    {key:<16}", dim=True) + str(value))
    click.echo()


@click.command()
@click.option("--sale", required=True, callback=validate_address, help="Sale contract address")
@click.option("--treasury", required=True, callback=validate_address, help="Treasury contract address")
@click.option("--whitelist", required=True, callback=validate_address, help="Whitelist contract address")
@click.option(
    "--artifacts",
    "artifacts_dir",
    envvar="DGTX_ARTIFACTS_DIR",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Directory of Truffle build artifacts",
)
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON")
@click.pass_context
def inspect(
    ctx: click.Context,
    sale: str,
    treasury: str,
    whitelist: str,
    artifacts_dir: Optional[Path],
    as_json: bool,
) -> None:
    """Show on-chain state of a deployment and verify its links."""
    profile = ctx.obj["profile"]

    try:
        artifacts = {
            name: load_artifact(name, artifacts_dir) for name in ("Sale", "Treasury", "Whitelist")
        }
    except (FileNotFoundError, ValueError) as exc:
        click.secho(f"  {exc}", fg="red")
        ctx.exit(2)

    try:
        with open_client(profile) as client:
            sale_c = Contract.at(client, sale, artifacts["Sale"])
            treasury_c = Contract.at(client, treasury, artifacts["Treasury"])
            whitelist_c = Contract.at(client, whitelist, artifacts["Whitelist"])

            report = {
                "sale": sale_summary(sale_c),
                "treasury": treasury_summary(treasury_c),
                "whitelist": whitelist_summary(whitelist_c),
            }
            check_links(sale_c, treasury_c, whitelist_c)
    except DeployError as exc:
        fail(exc)

    if as_json:
        click.echo(json.dumps(report, indent=2, default=str))
        return

    _print_section("Sale", report["sale"])
    _print_section("Treasury", report["treasury"])
    _print_section("Whitelist", report["whitelist"])
    click.secho("  Links OK", fg="green", bold=True)
