"""Application service: list rejected payments awaiting manual review."""

from __future__ import annotations

from dsv.application.unit_of_work import UnitOfWorkFactory
from dsv.domain.model.payment import PaymentDiscrepancy


class ListPaymentDiscrepanciesHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self) -> list[PaymentDiscrepancy]:
        with self._uow_factory() as uow:
            return uow.discrepancies.list_all()
