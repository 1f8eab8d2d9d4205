"""
Commands - CLI command implementations for dropskit.

Each module groups the commands of one contract:
- drops: balance, generate, transfer, destroy
- epoch: epoch, enroll
"""

from __future__ import annotations

import sys
from typing import NoReturn

import click
import httpx

from ..chain.rpc import APIError
from ..config import ConfigError, load_env_file
from ..context import ClientContext, bootstrap_from_env
from ..session import ChainMismatchError, TransactResult
from ..sigil.keys import InvalidKeyError, SigningError

# Errors a command may hit after configuration is loaded.
COMMAND_ERRORS = (APIError, ChainMismatchError, SigningError, ValueError, httpx.HTTPError)


def load_context() -> ClientContext:
    """
    Load ``.env`` and bootstrap, exiting with status 1 on bad configuration.

    The context is closed when the running click command finishes.
    """
    load_env_file()
    try:
        context = bootstrap_from_env()
    except (ConfigError, InvalidKeyError) as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(1)
    click.get_current_context().call_on_close(context.close)
    return context


def fail(message: str) -> NoReturn:
    click.secho(f"ERROR: {message}", fg="red")
    sys.exit(1)


def report_transaction(result: TransactResult, broadcast: bool) -> None:
    if broadcast:
        click.secho("SUCCESS: Transaction broadcast!", fg="green")
    else:
        click.secho("Signed (not broadcast):", fg="yellow")
        click.echo(f"  Packed: {result.packed_trx}")
    click.echo(f"  TX: {result.transaction_id}")
    for signature in result.signatures:
        click.echo(f"  Signature: {signature}")
