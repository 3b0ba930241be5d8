"""Abstract repository for rejected payment reconciliations."""

from __future__ import annotations

from abc import ABC, abstractmethod

from dsv.domain.model.payment import PaymentDiscrepancy


class PaymentDiscrepancyRepository(ABC):

    @abstractmethod
    def add(self, discrepancy: PaymentDiscrepancy) -> None:
        """Record a discrepancy for manual review."""

    @abstractmethod
    def list_all(self) -> list[PaymentDiscrepancy]:
        """Return every recorded discrepancy, oldest first."""
