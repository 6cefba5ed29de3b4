"""Point category commands."""

import click
from pointledger.cli.error_handling import handle_domain_error
from pointledger.domain.category import CategoryService
from pointledger.domain.errors import DomainError


@click.group("category")
def category_group():
    """Manage point categories."""
    pass


@category_group.command("create")
@click.argument("name")
@click.option(
    "--optional/--mandatory",
    "optional",
    default=False,
    help="Optional categories allow partial payment of negative points (default: mandatory)",
)
@click.option("--positive", is_flag=True, help="Category awards points instead of deducting them")
@click.option("--default-points", type=int, default=0, show_default=True, help="Suggested points")
@click.pass_context
def create_category(ctx, name: str, optional: bool, positive: bool, default_points: int):
    """Create a point category.

    Examples:
        pointledger category create "Homework"
        pointledger category create "Late arrival" --optional --default-points 5
    """
    service = CategoryService(ctx.obj["db"])
    try:
        category_id = service.create_category(
            name=name,
            is_mandatory=not optional,
            is_positive=positive,
            default_points=default_points,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    kind = "optional" if optional else "mandatory"
    click.echo(f"Created {kind} category '{name}' (ID: {category_id})")


@category_group.command("list")
@click.pass_context
def list_categories(ctx):
    """List all point categories."""
    service = CategoryService(ctx.obj["db"])
    categories = service.list_categories()
    if not categories:
        click.echo("No categories found.")
        return

    click.echo("\nCategories:")
    click.echo("-" * 60)
    for cat in categories:
        kind = "mandatory" if cat.mandatory else "optional"
        click.echo(f"ID: {cat.id:3d} | {cat.name:24s} | {kind:9s} | default: {cat.default_points}")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group)
