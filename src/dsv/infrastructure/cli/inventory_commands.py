"""CLI commands for inventory management."""

from __future__ import annotations

import click

from dsv.infrastructure import bootstrap
from dsv.infrastructure.cli.formatting import USER_ERRORS


@click.command("set")
@click.option("--product-id", required=True, type=int, help="Product ID.")
@click.option("--quantity", required=True, type=int, help="New stock level.")
def inventory_set(product_id: int, quantity: int) -> None:
    """Set the stock level of a product."""
    handler = bootstrap.set_stock_handler()

    try:
        handler.handle(product_id=product_id, quantity=quantity)
    except USER_ERRORS as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Stock for product #{product_id} set to {quantity}")


@click.command("show")
def inventory_show() -> None:
    """Show current stock levels."""
    handler = bootstrap.show_inventory_handler()
    try:
        lines = handler.handle()
    except USER_ERRORS as exc:
        raise click.ClickException(str(exc))

    if not lines:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':>5} {'Product':<30} {'Stock':>8}  Flags")
    click.echo("-" * 58)
    for line in lines:
        flags = []
        if not line.active:
            flags.append("inactive")
        if line.low_stock:
            flags.append("LOW")
        click.echo(
            f"{line.product_id:>5} {line.product_name:<30} {line.stock_quantity:>8}  {' '.join(flags)}"
        )
