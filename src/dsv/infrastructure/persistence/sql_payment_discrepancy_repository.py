"""SQLAlchemy implementation of PaymentDiscrepancyRepository."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from dsv.domain.model.payment import PaymentDiscrepancy
from dsv.domain.repository.payment_discrepancy_repository import (
    PaymentDiscrepancyRepository,
)
from dsv.infrastructure.persistence.tables import PaymentDiscrepancyRow, as_utc


class SqlPaymentDiscrepancyRepository(PaymentDiscrepancyRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, discrepancy: PaymentDiscrepancy) -> None:
        row = PaymentDiscrepancyRow(
            order_id=discrepancy.order_id,
            expected_amount=discrepancy.expected_amount,
            received_amount=discrepancy.received_amount,
            payment_method=discrepancy.payment_method,
            transaction_id=discrepancy.transaction_id,
            reason=discrepancy.reason,
            description=discrepancy.description,
            recorded_at=discrepancy.recorded_at,
        )
        self._session.add(row)
        self._session.flush()
        discrepancy.id = row.id

    def list_all(self) -> list[PaymentDiscrepancy]:
        stmt = select(PaymentDiscrepancyRow).order_by(PaymentDiscrepancyRow.id)
        return [
            PaymentDiscrepancy(
                id=row.id,
                order_id=row.order_id,
                expected_amount=row.expected_amount,
                received_amount=row.received_amount,
                payment_method=row.payment_method,
                transaction_id=row.transaction_id,
                reason=row.reason,
                description=row.description,
                recorded_at=as_utc(row.recorded_at),
            )
            for row in self._session.execute(stmt).scalars()
        ]
