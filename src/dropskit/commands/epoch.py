"""
Epoch commands - Inspect epochs and enroll for them.
"""

from __future__ import annotations

from typing import Optional

import click

from . import COMMAND_ERRORS, fail, load_context, report_transaction


@click.command()
@click.option("--number", "-n", type=int, default=None, help="Epoch number (default: current)")
def epoch(number: Optional[int]) -> None:
    """Show the current (or a given) epoch."""
    context = load_context()
    contract = context.epoch_contract

    try:
        row = contract.get_epoch(number) if number is not None else contract.current_epoch()
    except COMMAND_ERRORS as exc:
        fail(f"Failed to read epoch: {exc}")

    if row is None:
        fail("Epoch not found.")

    click.echo(f"  Epoch #{row.epoch}")
    click.echo("  ─────────────────────────────")
    click.echo(f"  Start:     {row.start}")
    click.echo(f"  End:       {row.end}")
    click.echo(f"  Oracles:   {', '.join(row.oracles) or '-'}")
    click.echo(f"  Completed: {'yes' if row.is_completed else 'no'}")


@click.command()
@click.option("--epoch", "epoch_number", type=int, default=None, help="Epoch to enroll in (default: current)")
@click.option("--dry-run", is_flag=True, help="Sign but do not broadcast")
def enroll(epoch_number: Optional[int], dry_run: bool) -> None:
    """Enroll ACCOUNT_NAME in an epoch."""
    context = load_context()
    session = context.session

    try:
        if epoch_number is None:
            current = context.epoch_contract.current_epoch()
            if current is None:
                fail("No current epoch found.")
            epoch_number = current.epoch

        action = context.drops_contract.enroll(session.actor, epoch_number)
        result = session.transact([action], broadcast=not dry_run)
    except COMMAND_ERRORS as exc:
        fail(f"Enroll failed: {exc}")

    if dry_run:
        click.echo(f"  Signed enroll for {session.actor} in epoch {epoch_number} (not broadcast)")
    else:
        click.echo(f"  Enrolled {session.actor} in epoch {epoch_number}")
    report_transaction(result, broadcast=not dry_run)
