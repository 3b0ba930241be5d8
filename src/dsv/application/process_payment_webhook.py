"""Application service: bank-transfer webhook intake.

The payload has already been authenticated upstream.  Customers put ``DH``
followed by the order ID in the transfer description (``DH123``,
``DH 123``, ``Don hang DH123``); every transaction carrying such a
reference is handed to payment reconciliation.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

import structlog

from dsv.application.verify_payment import VerifyPaymentHandler
from dsv.domain.exceptions import ReconciliationError, ValidationError

logger = structlog.get_logger(__name__)

BANK_TRANSFER = "BANK_TRANSFER"

_ORDER_REFERENCE = re.compile(r"DH\s*(\d+)", re.IGNORECASE)


@dataclass(frozen=True)
class TransactionOutcome:
    transaction_id: str
    order_id: int | None
    outcome: str  # APPLIED, REJECTED, SKIPPED or ERROR


@dataclass
class WebhookResult:
    received: int = 0
    processed: int = 0
    outcomes: list[TransactionOutcome] = field(default_factory=list)


def extract_order_id(description: str | None) -> int | None:
    if not description:
        return None
    match = _ORDER_REFERENCE.search(description)
    if match is None:
        return None
    return int(match.group(1))


class ProcessPaymentWebhookHandler:

    def __init__(self, verify_payment: VerifyPaymentHandler) -> None:
        self._verify_payment = verify_payment

    def handle(self, payload: dict[str, Any] | str) -> WebhookResult:
        """Reconcile every transaction in *payload*.

        Raises ValidationError when the payload is not valid JSON or its
        ``error`` code is missing or non-zero.  A failure on one transaction
        never stops the others.
        """
        body = self._parse(payload)
        transactions = body.get("data") or []

        result = WebhookResult(received=len(transactions))
        if not transactions:
            logger.warning("webhook_without_transactions")
            return result

        for transaction in transactions:
            outcome = self._process(transaction)
            result.outcomes.append(outcome)
            if outcome.outcome == "APPLIED":
                result.processed += 1

        logger.info(
            "webhook_processed", received=result.received, processed=result.processed
        )
        return result

    @staticmethod
    def _parse(payload: dict[str, Any] | str) -> dict[str, Any]:
        if isinstance(payload, str):
            try:
                payload = json.loads(payload)
            except json.JSONDecodeError:
                raise ValidationError("Invalid webhook data") from None
        if not isinstance(payload, dict) or payload.get("error") != 0:
            logger.error(
                "webhook_rejected",
                error=payload.get("error") if isinstance(payload, dict) else None,
            )
            raise ValidationError("Invalid webhook data")
        return payload

    def _process(self, transaction: dict[str, Any]) -> TransactionOutcome:
        tid = str(transaction.get("tid") or transaction.get("id") or "")
        description = transaction.get("description") or ""

        order_id = extract_order_id(description)
        if order_id is None:
            logger.warning(
                "webhook_reference_missing", transaction_id=tid, description=description
            )
            return TransactionOutcome(tid, None, "SKIPPED")

        try:
            amount = Decimal(str(transaction.get("amount")))
        except InvalidOperation:
            logger.warning(
                "webhook_amount_invalid",
                transaction_id=tid,
                amount=transaction.get("amount"),
            )
            return TransactionOutcome(tid, order_id, "REJECTED")

        try:
            applied = self._verify_payment.handle(
                order_id=order_id,
                amount=amount,
                payment_method=BANK_TRANSFER,
                transaction_id=tid,
                description=description,
            )
        except ReconciliationError:
            logger.exception(
                "webhook_transaction_failed", transaction_id=tid, order_id=order_id
            )
            return TransactionOutcome(tid, order_id, "ERROR")

        return TransactionOutcome(tid, order_id, "APPLIED" if applied else "REJECTED")
