"""Ledger recomputation and document status derivation."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from furnledger.domain.entities import DocumentStatus, PaymentStatus

if TYPE_CHECKING:
    from furnledger.database.base import Database

# Forward order of the payable lifecycle
PAYABLE_STATUS_ORDER = (
    DocumentStatus.POSTED,
    DocumentStatus.PARTIALLY_PAID,
    DocumentStatus.PAID,
)


def derive_status(total: Decimal, paid: Decimal) -> DocumentStatus:
    """Map a document's total and paid amount to its payable status.

    Draft and cancelled are managed by the document lifecycle and are never
    produced here.
    """
    if paid >= total:
        return DocumentStatus.PAID
    if paid > 0:
        return DocumentStatus.PARTIALLY_PAID
    return DocumentStatus.POSTED


class LedgerRecalculator:
    """Recomputes paid amounts from the payment ledger."""

    def __init__(self, db: Database):
        """Initialize ledger recalculator.

        Args:
            db: Database instance
        """
        self.db = db

    def recompute(self, document_id: int) -> Decimal:
        """Sum the completed ledger entries of a document.

        Always a full scan of the document's entries, never a running total.

        Args:
            document_id: Document ID

        Returns:
            Paid amount
        """
        return self.db.sum_payment_entries(document_id, PaymentStatus.COMPLETED)
