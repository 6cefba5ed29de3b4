"""Settlement commands."""

import click
from pointledger.cli.error_handling import exit_on_failure, handle_domain_error
from pointledger.domain.engine import PointsEngine
from pointledger.domain.errors import DomainError
from pointledger.utils.amount_parser import parse_points


@click.command("settle")
@click.argument("account")
@click.argument("entry_id", type=int)
@click.option("--amount", help="Pay only this many points (optional entries only)")
@click.pass_context
def settle(ctx, account: str, entry_id: int, amount: str | None):
    """Pay negative entry ENTRY_ID owed by ACCOUNT.

    Examples:
        pointledger settle student-1 4
        pointledger settle student-1 4 --amount 10
    """
    partial_amount = None
    if amount is not None:
        try:
            partial_amount = parse_points(amount)
        except DomainError as e:
            handle_domain_error(ctx, e)
            return

    result = PointsEngine(ctx.obj["db"]).settle(entry_id, account, partial_amount=partial_amount)
    exit_on_failure(ctx, result)
    click.echo(result.message)


@click.command("settle-mandatory")
@click.argument("account")
@click.pass_context
def settle_mandatory(ctx, account: str):
    """Deduct every pending mandatory negative entry of ACCOUNT."""
    result = PointsEngine(ctx.obj["db"]).settle_all_mandatory(account)
    exit_on_failure(ctx, result)
    click.echo(result.message)


def register_commands(cli):
    """Register settlement commands with main CLI."""
    cli.add_command(settle)
    cli.add_command(settle_mandatory)
