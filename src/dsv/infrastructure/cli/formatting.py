"""Shared output helpers for the CLI commands."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

import click

from dsv.application.dto import OrderDTO
from dsv.application.unit_of_work import PersistenceError
from dsv.domain.exceptions import DomainException, ReconciliationError
from dsv.domain.model.value_objects import Money

# Errors shown to the user as a plain message instead of a traceback.
USER_ERRORS = (DomainException, PersistenceError, ReconciliationError)


class DecimalType(click.ParamType):
    name = "amount"

    def convert(self, value, param, ctx):
        if isinstance(value, Decimal):
            return value
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            self.fail(f"{value!r} is not a valid amount", param, ctx)
        if not amount.is_finite():
            self.fail(f"{value!r} is not a valid amount", param, ctx)
        return amount


AMOUNT = DecimalType()


def vnd(amount: Decimal) -> str:
    return str(Money(amount))


def display_order(dto: OrderDTO) -> None:
    click.echo(f"Order {dto.order_number} (#{dto.id})  status={dto.status}  payment={dto.payment_status}")
    click.echo(f"Customer: {dto.customer_name or '-'}  {dto.customer_phone or ''}")
    if dto.shipping_address:
        click.echo(f"Ship to:  {dto.shipping_address}")
    click.echo(f"Method:   {dto.payment_method}")
    click.echo(f"Placed:   {dto.order_date:%Y-%m-%d %H:%M UTC}")
    if dto.tracking_number:
        click.echo(f"Tracking: {dto.tracking_number}")
    click.echo()
    click.echo(f"  {'Product':<30} {'Qty':>5} {'Price':>15} {'Total':>15}")
    click.echo(f"  {'-'*68}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name:<30} {item.quantity:>5} "
            f"{vnd(item.unit_price):>15} {vnd(item.line_total):>15}"
        )
    click.echo(f"  {'-'*68}")
    click.echo(f"  {'Shipping':<36} {vnd(dto.shipping_fee):>31}")
    click.echo(f"  {'Order Total':<36} {vnd(dto.total):>31}")
    if dto.notes:
        click.echo()
        click.echo("Notes:")
        for line in dto.notes.splitlines():
            click.echo(f"  {line}")
