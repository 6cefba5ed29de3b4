"""CLI error handling helpers."""

import click

from pointledger.domain.engine import OperationResult
from pointledger.domain.errors import DomainError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def exit_on_failure(ctx: click.Context, result: OperationResult) -> None:
    """Render a failed engine result and exit with failure."""
    if result.success:
        return
    kind = result.error_kind.value if result.error_kind else "error"
    click.echo(f"Error ({kind}): {result.message}", err=True)
    ctx.exit(1)
