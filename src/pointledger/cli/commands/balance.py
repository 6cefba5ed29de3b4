"""Balance command."""

import click
from pointledger.cli.error_handling import exit_on_failure
from pointledger.domain.engine import PointsEngine


@click.command("balance")
@click.argument("account")
@click.option("--force-refresh", is_flag=True, help="Also notify dependent caches")
@click.pass_context
def balance(ctx, account: str, force_refresh: bool):
    """Recompute and show the balance of ACCOUNT."""
    result = PointsEngine(ctx.obj["db"]).recompute_balance(account, force_refresh=force_refresh)
    exit_on_failure(ctx, result)

    computation = result.data
    click.echo(f"Balance for {account}: {computation.amount} points (method: {computation.method})")
    if computation.low_confidence:
        click.echo("Warning: balance sources disagree; value taken from a fallback source.")


def register_commands(cli):
    """Register balance command with main CLI."""
    cli.add_command(balance)
