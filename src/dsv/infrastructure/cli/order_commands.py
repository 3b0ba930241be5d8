"""CLI commands for the Order aggregate."""

from __future__ import annotations

from decimal import Decimal

import click

from dsv.application.dto import CreateOrderRequest
from dsv.domain.model.cart import ClientCartItem
from dsv.domain.model.order_status import OrderStatus
from dsv.domain.model.value_objects import Money
from dsv.infrastructure import bootstrap
from dsv.infrastructure.cli.formatting import AMOUNT, USER_ERRORS, display_order, vnd

_STATUS_CHOICE = click.Choice([status.value for status in OrderStatus], case_sensitive=False)


def _parse_items(raw: str) -> list[ClientCartItem]:
    """Parse '3:2:120000,5:1:85000' (product:qty:price) into client cart lines."""
    items: list[ClientCartItem] = []
    for chunk in raw.split(","):
        chunk = chunk.strip()
        parts = chunk.split(":")
        if len(parts) != 3:
            raise click.BadParameter(
                f"Invalid item format '{chunk}'. Expected 'ProductID:Quantity:UnitPrice'."
            )
        try:
            product_id, quantity = int(parts[0]), int(parts[1])
        except ValueError:
            raise click.BadParameter(f"Invalid product ID or quantity in '{chunk}'.")
        items.append(
            ClientCartItem(
                product_id=product_id, quantity=quantity, unit_price=Money.of(parts[2])
            )
        )
    return items


@click.command("create")
@click.option("--user-id", type=int, default=None, help="Signed-in customer; omit for a guest order.")
@click.option("--payment-method", required=True, help="COD, BANK_TRANSFER, ...")
@click.option("--items", "items_str", default=None, help="Client cart as 'ProductID:Qty:Price,...'. Omit to use the saved cart.")
@click.option("--name", default=None, help="Customer name.")
@click.option("--phone", default=None, help="Customer phone.")
@click.option("--email", default=None, help="Customer email.")
@click.option("--address", default=None, help="Shipping address.")
@click.option("--subtotal", type=AMOUNT, default=None, help="Subtotal computed by the client.")
@click.option("--shipping-fee", type=AMOUNT, default=None, help="Shipping fee.")
@click.option("--notes", default=None, help="Order notes.")
def order_create(
    user_id: int | None,
    payment_method: str,
    items_str: str | None,
    name: str | None,
    phone: str | None,
    email: str | None,
    address: str | None,
    subtotal: Decimal | None,
    shipping_fee: Decimal | None,
    notes: str | None,
) -> None:
    """Place an order from a client cart or the saved cart."""
    try:
        request = CreateOrderRequest(
            payment_method=payment_method,
            user_id=user_id,
            items=_parse_items(items_str) if items_str else [],
            customer_name=name,
            customer_phone=phone,
            customer_email=email,
            shipping_address=address,
            subtotal=subtotal,
            shipping_fee=shipping_fee,
            notes=notes,
        )
        dto = bootstrap.create_order_handler().handle(request)
    except USER_ERRORS as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} created (#{dto.id}, status={dto.status})")
    click.echo()
    display_order(dto)


@click.command("show")
@click.option("--id", "order_id", type=int, default=None, help="Order ID.")
@click.option("--number", "order_number", default=None, help="Order number, e.g. DSV2412250A3B5C.")
def order_show(order_id: int | None, order_number: str | None) -> None:
    """Show details of an existing order."""
    if (order_id is None) == (order_number is None):
        raise click.UsageError("Give exactly one of --id or --number.")

    handler = bootstrap.show_order_handler()
    try:
        if order_id is not None:
            dto = handler.handle(order_id)
        else:
            dto = handler.by_order_number(order_number)
    except USER_ERRORS as exc:
        raise click.ClickException(str(exc))

    display_order(dto)


@click.command("list")
@click.option("--user-id", required=True, type=int, help="Customer whose orders to list.")
@click.option("--status", type=_STATUS_CHOICE, default=None, help="Only orders in this status.")
def order_list(user_id: int, status: str | None) -> None:
    """List a customer's orders, newest first."""
    try:
        orders = bootstrap.show_order_handler().list_for_user(user_id, status)
    except USER_ERRORS as exc:
        raise click.ClickException(str(exc))

    if not orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'Number':<17} {'Status':<11} {'Payment':<10} {'Total':>15}  Placed")
    click.echo("-" * 75)
    for dto in orders:
        click.echo(
            f"{dto.order_number:<17} {dto.status:<11} {dto.payment_status:<10} "
            f"{vnd(dto.total):>15}  {dto.order_date:%Y-%m-%d %H:%M}"
        )


@click.command("cancel")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to cancel.")
@click.option("--user-id", type=int, default=None, help="Requesting customer.")
def order_cancel(order_id: int, user_id: int | None) -> None:
    """Cancel an order and put its items back into stock."""
    try:
        dto = bootstrap.cancel_order_handler().handle(order_id, user_id)
    except USER_ERRORS as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} cancelled; inventory restored.")


@click.command("status")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--to", "new_status", required=True, type=_STATUS_CHOICE, help="Target status.")
@click.option("--tracking", default=None, help="Tracking number.")
@click.option("--notes", default=None, help="Note appended to the order.")
def order_status(
    order_id: int, new_status: str, tracking: str | None, notes: str | None
) -> None:
    """Move an order to a new status (admin)."""
    try:
        dto = bootstrap.update_order_status_handler().handle(
            order_id, new_status, tracking_number=tracking, notes=notes
        )
    except USER_ERRORS as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} is now {dto.status}")


@click.command("confirm-delivery")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--user-id", type=int, default=None, help="Requesting customer.")
def order_confirm_delivery(order_id: int, user_id: int | None) -> None:
    """Confirm receipt of a shipped cash-on-delivery order."""
    try:
        dto = bootstrap.confirm_delivery_handler().handle(order_id, user_id)
    except USER_ERRORS as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} delivered and paid.")


@click.command("stats")
def order_stats() -> None:
    """Show order counts per status and revenue."""
    try:
        stats = bootstrap.order_statistics_handler().handle()
    except USER_ERRORS as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Total orders: {stats.total_orders}")
    for status, count in stats.by_status.items():
        click.echo(f"  {status:<11} {count:>6}")
    click.echo(f"Revenue:      {vnd(stats.total_revenue)}")
