"""Payment events and rejected reconciliations kept for manual review."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal


@dataclass(frozen=True)
class PaymentEvent:
    """An already-authenticated payment confirmation for one order."""

    order_id: int
    amount: Decimal | None
    payment_method: str
    transaction_id: str
    description: str = ""


@dataclass
class PaymentDiscrepancy:
    order_id: int
    expected_amount: Decimal | None
    received_amount: Decimal | None
    payment_method: str
    transaction_id: str
    reason: str
    description: str = ""
    recorded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: int | None = None
