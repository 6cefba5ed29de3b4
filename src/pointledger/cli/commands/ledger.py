"""Ledger commands: credit, debit and history."""

import click
from pointledger.cli.error_handling import handle_domain_error
from pointledger.domain.category import CategoryService
from pointledger.domain.errors import DomainError
from pointledger.domain.ledger import LedgerService
from pointledger.utils.amount_parser import parse_points


def _append(ctx, sign: str, account: str, amount: str, description: str, category: str | None, by: str | None):
    db = ctx.obj["db"]
    service = LedgerService(db)
    try:
        points = parse_points(amount)
        category_id = None
        if category:
            category_id = CategoryService(db).require_category(category).id
        append = service.credit if sign == "credit" else service.debit
        transaction_id = append(
            account_id=account,
            amount=points,
            description=description,
            created_by=by,
            category_id=category_id,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Recorded {sign} of {points} points for {account} (transaction {transaction_id})")


@click.command("credit")
@click.argument("account")
@click.argument("amount")
@click.option("--description", default="Points awarded", show_default=True)
@click.option("--category", help="Category name or ID")
@click.option("--by", help="Who recorded the transaction")
@click.pass_context
def credit(ctx, account: str, amount: str, description: str, category: str | None, by: str | None):
    """Credit AMOUNT points to ACCOUNT.

    Examples:
        pointledger credit student-1 100 --description "Quiz winner"
    """
    _append(ctx, "credit", account, amount, description, category, by)


@click.command("debit")
@click.argument("account")
@click.argument("amount")
@click.option("--description", default="Points deducted", show_default=True)
@click.option("--category", help="Category name or ID")
@click.option("--by", help="Who recorded the transaction")
@click.pass_context
def debit(ctx, account: str, amount: str, description: str, category: str | None, by: str | None):
    """Debit AMOUNT points from ACCOUNT."""
    _append(ctx, "debit", account, amount, description, category, by)


@click.command("history")
@click.argument("account")
@click.pass_context
def history(ctx, account: str):
    """Show the ledger for ACCOUNT, newest first."""
    service = LedgerService(ctx.obj["db"])
    transactions = service.list_transactions(account)
    if not transactions:
        click.echo(f"No transactions for {account}.")
        return

    click.echo(f"\nTransactions for {account}:")
    click.echo("-" * 72)
    for txn in transactions:
        click.echo(f"{txn.id:5d} | {txn.created_at:%Y-%m-%d %H:%M} | {txn.signed_amount:+7d} | {txn.description}")


def register_commands(cli):
    """Register ledger commands with main CLI."""
    cli.add_command(credit)
    cli.add_command(debit)
    cli.add_command(history)
