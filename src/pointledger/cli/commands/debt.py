"""Negative points commands."""

import click
from pointledger.cli.error_handling import exit_on_failure, handle_domain_error
from pointledger.domain.category import CategoryService
from pointledger.domain.debts import DebtService
from pointledger.domain.engine import PointsEngine
from pointledger.domain.errors import DomainError
from pointledger.utils.amount_parser import parse_points


@click.group("debt")
def debt_group():
    """Record and list negative points."""
    pass


@debt_group.command("add")
@click.argument("account")
@click.argument("amount")
@click.argument("reason")
@click.option("--category", help="Category name or ID (no category means mandatory)")
@click.pass_context
def add_debt(ctx, account: str, amount: str, reason: str, category: str | None):
    """Record AMOUNT negative points owed by ACCOUNT.

    Examples:
        pointledger debt add student-1 10 "Missing homework"
        pointledger debt add student-1 30 "Talking in class" --category "Behaviour"
    """
    db = ctx.obj["db"]
    try:
        points = parse_points(amount)
        category_id = None
        if category:
            category_id = CategoryService(db).require_category(category).id
        entry_id = DebtService(db).record_negative_entry(
            account_id=account, amount=points, reason=reason, category_id=category_id
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Recorded negative entry {entry_id}: {points} points for {account}")


@debt_group.command("list")
@click.argument("account")
@click.option("--all", "show_all", is_flag=True, help="Include paid and cancelled entries")
@click.pass_context
def list_debts(ctx, account: str, show_all: bool):
    """List negative points for ACCOUNT."""
    result = PointsEngine(ctx.obj["db"]).get_pending_debts(account)
    exit_on_failure(ctx, result)

    debts = result.data
    entries = debts.entries if show_all else debts.pending_entries
    if not entries:
        click.echo("No negative points found.")
        return

    click.echo(f"\nNegative points for {account}:")
    click.echo("-" * 72)
    for entry in entries:
        kind = "mandatory" if entry.mandatory else "optional"
        click.echo(f"ID: {entry.id:4d} | {entry.amount:5d} | {entry.status.value:9s} | {kind:9s} | {entry.reason}")
    click.echo("-" * 72)
    click.echo(f"Mandatory pending: {debts.mandatory_total}  Optional pending: {debts.optional_total}")


def register_commands(cli):
    """Register debt commands with main CLI."""
    cli.add_command(debt_group)
