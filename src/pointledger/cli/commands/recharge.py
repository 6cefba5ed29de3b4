"""Recharge card commands."""

import click
from pointledger.cli.error_handling import handle_domain_error
from pointledger.domain.errors import DomainError
from pointledger.domain.ledger import LedgerService


@click.group("recharge")
def recharge_group():
    """Redeem recharge cards."""
    pass


@recharge_group.command("redeem")
@click.argument("account")
@click.argument("code")
@click.pass_context
def redeem(ctx, account: str, code: str):
    """Redeem recharge card CODE for ACCOUNT."""
    service = LedgerService(ctx.obj["db"])
    try:
        points = service.redeem_recharge_card(code=code, account_id=account)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Redeemed card {code}: {points} points credited to {account}")


def register_commands(cli):
    """Register recharge commands with main CLI."""
    cli.add_command(recharge_group)
