"""
Drops commands - Query balances and mint, transfer or destroy drops.
"""

from __future__ import annotations

from typing import Optional

import click

from ..contracts.drops import drop_ids
from . import COMMAND_ERRORS, fail, load_context, report_transaction


@click.command()
@click.argument("account", required=False)
def balance(account: Optional[str]) -> None:
    """Show how many drops an account owns (default: ACCOUNT_NAME)."""
    context = load_context()
    account = account or context.session.actor

    try:
        total = context.drops_contract.balance(account)
    except COMMAND_ERRORS as exc:
        fail(f"Failed to read balance: {exc}")

    click.echo(f"  Account: {account}")
    click.echo(f"  Drops:   {total}")


@click.command()
@click.argument("amount", type=int)
@click.argument("data")
@click.option("--quantity", required=True, help='Tokens sent to cover RAM, e.g. "1.0000 EOS"')
@click.option("--token-contract", default="eosio.token", show_default=True, help="System token contract")
@click.option("--dry-run", is_flag=True, help="Sign but do not broadcast")
def generate(amount: int, data: str, quantity: str, token_contract: str, dry_run: bool) -> None:
    """
    Mint AMOUNT drops seeded with DATA.

    Sends QUANTITY to the drops contract; unused tokens are refunded
    by the contract.
    """
    context = load_context()
    session = context.session

    try:
        action = context.drops_contract.generate(
            owner=session.actor,
            amount=amount,
            data=data,
            quantity=quantity,
            token_contract=token_contract,
        )
        result = session.transact([action], broadcast=not dry_run)
    except COMMAND_ERRORS as exc:
        fail(f"Generate failed: {exc}")

    report_transaction(result, broadcast=not dry_run)
    click.echo(f"  Drops: {', '.join(str(i) for i in drop_ids(amount, data))}")


@click.command()
@click.argument("to")
@click.argument("ids", nargs=-1, type=int, required=True)
@click.option("--memo", default="", help="Transfer memo")
@click.option("--dry-run", is_flag=True, help="Sign but do not broadcast")
def transfer(to: str, ids: tuple[int, ...], memo: str, dry_run: bool) -> None:
    """Transfer drops IDS to account TO."""
    context = load_context()
    session = context.session

    try:
        action = context.drops_contract.transfer(session.actor, to, list(ids), memo)
        result = session.transact([action], broadcast=not dry_run)
    except COMMAND_ERRORS as exc:
        fail(f"Transfer failed: {exc}")

    report_transaction(result, broadcast=not dry_run)


@click.command()
@click.argument("ids", nargs=-1, type=int, required=True)
@click.option("--memo", default="", help="Destroy memo")
@click.option("--dry-run", is_flag=True, help="Sign but do not broadcast")
def destroy(ids: tuple[int, ...], memo: str, dry_run: bool) -> None:
    """Destroy drops IDS and reclaim their RAM."""
    context = load_context()
    session = context.session

    try:
        action = context.drops_contract.destroy(session.actor, list(ids), memo)
        result = session.transact([action], broadcast=not dry_run)
    except COMMAND_ERRORS as exc:
        fail(f"Destroy failed: {exc}")

    report_transaction(result, broadcast=not dry_run)
