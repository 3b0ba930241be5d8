"""CLI commands for payment reconciliation."""

from __future__ import annotations

from decimal import Decimal

import click

from dsv.infrastructure import bootstrap
from dsv.infrastructure.cli.formatting import AMOUNT, USER_ERRORS, vnd


@click.command("verify")
@click.option("--order-id", required=True, type=int, help="Order the payment is for.")
@click.option("--amount", required=True, type=AMOUNT, help="Amount received.")
@click.option("--method", "payment_method", default="BANK_TRANSFER", show_default=True)
@click.option("--transaction-id", required=True, help="Payment provider's transaction ID.")
@click.option("--description", default="", help="Transfer description.")
def payment_verify(
    order_id: int,
    amount: Decimal,
    payment_method: str,
    transaction_id: str,
    description: str,
) -> None:
    """Apply a payment confirmation to an order."""
    try:
        applied = bootstrap.verify_payment_handler().handle(
            order_id, amount, payment_method, transaction_id, description
        )
    except USER_ERRORS as exc:
        raise click.ClickException(str(exc))

    if not applied:
        raise click.ClickException(
            f"Payment {transaction_id} was not applied to order #{order_id}; see payment discrepancies."
        )
    click.echo(f"Payment {transaction_id} applied to order #{order_id}.")


@click.command("webhook")
@click.argument("payload", type=click.File("r", encoding="utf-8"))
def payment_webhook(payload) -> None:
    """Process a bank-transfer webhook payload (file or '-' for stdin)."""
    try:
        result = bootstrap.payment_webhook_handler().handle(payload.read())
    except USER_ERRORS as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Processed {result.processed} of {result.received} transactions")
    for outcome in result.outcomes:
        order = f"#{outcome.order_id}" if outcome.order_id is not None else "-"
        click.echo(f"  {outcome.transaction_id:<20} {order:<8} {outcome.outcome}")


@click.command("discrepancies")
def payment_discrepancies() -> None:
    """List rejected payments awaiting manual review."""
    try:
        records = bootstrap.list_discrepancies_handler().handle()
    except USER_ERRORS as exc:
        raise click.ClickException(str(exc))

    if not records:
        click.echo("No payment discrepancies.")
        return

    for record in records:
        expected = vnd(record.expected_amount) if record.expected_amount is not None else "-"
        received = vnd(record.received_amount) if record.received_amount is not None else "-"
        click.echo(
            f"#{record.order_id:<6} {record.reason:<16} expected {expected:>15}  "
            f"received {received:>15}  tx {record.transaction_id}"
        )
