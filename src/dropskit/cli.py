"""
dropskit CLI

Command-line interface for the Drops contracts on Antelope networks.

Identity = ACCOUNT_NAME@PERMISSION_LEVEL signing with PRIVATE_KEY, read from
the environment or a ``.env`` file in the working directory.

Commands:
  whoami    - Show the configured actor, key and endpoint
  info      - Show chain information from the API node
  balance   - Show how many drops an account owns
  generate  - Mint new drops
  transfer  - Transfer drops to another account
  destroy   - Destroy drops and reclaim RAM
  epoch     - Show epoch details
  enroll    - Enroll in an epoch
"""

from __future__ import annotations

import logging
import sys

import click

from .commands import COMMAND_ERRORS, fail, load_context
from .commands.drops import balance, destroy, generate, transfer
from .commands.epoch import enroll, epoch

# ============ Constants ============

VERSION = "0.1.0"


# ============ Main CLI Group ============


@click.group(invoke_without_command=True)
@click.version_option(version=VERSION, prog_name="dropskit")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """dropskit - Drops client for Antelope chains."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] [%(name)s] %(message)s",
    )
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


cli.add_command(balance)
cli.add_command(generate)
cli.add_command(transfer)
cli.add_command(destroy)
cli.add_command(epoch)
cli.add_command(enroll)


# ============ Identity ============


@cli.command()
def whoami() -> None:
    """Show the configured identity."""
    context = load_context()
    public_key = context.session.wallet_plugin.public_key

    click.echo(f"Actor:      {context.session.actor}@{context.session.permission}")
    click.echo(f"Public key: {public_key.to_legacy_string()}")
    click.echo(f"            {public_key.to_string()}")
    click.echo(f"Endpoint:   {context.url}")
    click.echo(f"Chain:      {context.session.chain.name} ({context.session.chain.id})")


# ============ Info ============


@cli.command()
def info() -> None:
    """Show chain information from the API node."""
    context = load_context()

    try:
        chain_info = context.client.get_info()
    except COMMAND_ERRORS as exc:
        fail(f"Failed to reach {context.url}: {exc}")

    chain_id = chain_info.get("chain_id", "?")
    click.echo(f"  Endpoint:      {context.url}")
    click.echo(f"  Chain ID:      {chain_id}")
    click.echo(f"  Server:        {chain_info.get('server_version_string', '?')}")
    click.echo(f"  Head block:    {chain_info.get('head_block_num', '?')}")
    click.echo(f"  Irreversible:  {chain_info.get('last_irreversible_block_num', '?')}")

    if chain_id != context.session.chain.id:
        click.secho(
            f"WARNING: endpoint serves a different chain than {context.session.chain.name}",
            fg="yellow",
        )


# ============ Entry Points ============


def main() -> None:
    """dropskit CLI entry point."""
    # Ensure UTF-8 output on Windows (for box-drawing characters)
    if sys.platform == "win32":
        try:
            sys.stdout.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
            sys.stderr.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
        except (AttributeError, OSError):
            pass
    cli()


if __name__ == "__main__":
    main()
