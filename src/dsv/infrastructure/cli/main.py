import click

from dsv.infrastructure import bootstrap
from dsv.infrastructure.cli.db_commands import db_init, db_load_catalog
from dsv.infrastructure.cli.inventory_commands import inventory_set, inventory_show
from dsv.infrastructure.cli.order_commands import (
    order_cancel,
    order_confirm_delivery,
    order_create,
    order_list,
    order_show,
    order_stats,
    order_status,
)
from dsv.infrastructure.cli.payment_commands import (
    payment_discrepancies,
    payment_verify,
    payment_webhook,
)
from dsv.infrastructure.logging import configure_logging


@click.group()
def cli() -> None:
    """DSV: Dac San Viet checkout and inventory."""
    try:
        settings = bootstrap.settings()
    except ValueError as exc:
        raise click.ClickException(f"Invalid configuration: {exc}")
    configure_logging(settings.log_level, settings.log_format)


@cli.group()
def db() -> None:
    """Manage the database."""


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def payment() -> None:
    """Reconcile payments."""


@cli.group()
def inventory() -> None:
    """Manage stock."""


# Register subcommands
db.add_command(db_init)
db.add_command(db_load_catalog)
order.add_command(order_cancel)
order.add_command(order_confirm_delivery)
order.add_command(order_create)
order.add_command(order_list)
order.add_command(order_show)
order.add_command(order_stats)
order.add_command(order_status)
payment.add_command(payment_discrepancies)
payment.add_command(payment_verify)
payment.add_command(payment_webhook)
inventory.add_command(inventory_set)
inventory.add_command(inventory_show)
