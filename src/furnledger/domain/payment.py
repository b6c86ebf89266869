"""Payment recording, reversal and reconciliation against the ledger."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Callable, Optional, TypeVar, Union

from furnledger.domain.entities import (
    Balance,
    DocumentStatus,
    FinancialDocument,
    PaymentEntry,
    PaymentMode,
    PaymentResult,
    PaymentStatus,
    ReconciliationResult,
)
from furnledger.domain.errors import (
    ConcurrentModificationError,
    ConflictError,
    NotFoundError,
    PaymentRejection,
    PaymentValidationError,
    ValidationError,
    document_not_payable,
    not_found,
    payment_exceeds_balance,
)
from furnledger.domain.ledger import LedgerRecalculator, derive_status

if TYPE_CHECKING:
    from furnledger.database.base import Database

logger = logging.getLogger(__name__)

T = TypeVar("T")

CENT = Decimal("0.01")
_LIFECYCLE_STATUSES = (DocumentStatus.DRAFT, DocumentStatus.CANCELLED)


class PaymentService:
    """Records payments against invoices and bills.

    The ledger of payment entries is the source of truth. A document's
    ``paid_amount`` and ``status`` are rewritten from the ledger after every
    entry, inside the same transaction as the entry itself and guarded by the
    document version. A lost version race is retried up to ``max_attempts``
    times.
    """

    def __init__(
        self,
        db: Database,
        max_attempts: int = 3,
        today: Callable[[], date] = date.today,
    ):
        """Initialize payment service.

        Args:
            db: Database instance
            max_attempts: Attempts per payment before giving up on a version race
            today: Source of the default payment date
        """
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.db = db
        self.ledger = LedgerRecalculator(db)
        self.max_attempts = max_attempts
        self._today = today

    def pay(
        self,
        document_id: int,
        amount: Decimal,
        mode: Union[PaymentMode, str] = PaymentMode.CASH,
        reference: Optional[str] = None,
        notes: Optional[str] = None,
        payment_date: Optional[date] = None,
    ) -> PaymentResult:
        """Record a payment against a document.

        Args:
            document_id: Invoice or bill ID
            amount: Payment amount, positive with at most two decimals
            mode: Payment mode
            reference: Optional external reference (cheque number, UTR, ...)
            notes: Optional notes
            payment_date: Date of payment; defaults to today

        Returns:
            PaymentResult with the new entry and the document's derived state

        Raises:
            NotFoundError: If the document doesn't exist
            PaymentValidationError: If the payment is refused; ``reason`` tells why
            ConcurrentModificationError: If the document kept changing underneath
        """
        amount = _to_amount(amount)
        mode = _to_mode(mode)
        on = payment_date or self._today()

        def record(document: FinancialDocument) -> PaymentResult:
            _check_payable(document)
            if amount <= 0:
                raise PaymentValidationError(
                    PaymentRejection.NON_POSITIVE_AMOUNT, "Payment amount must be positive"
                )

            balance = document.total_amount - self.ledger.recompute(document.id)
            if balance <= 0:
                raise PaymentValidationError(
                    PaymentRejection.ALREADY_PAID,
                    f"{document.kind.value.capitalize()} {document.number} is already fully paid",
                )
            if amount > balance:
                raise PaymentValidationError(
                    PaymentRejection.EXCEEDS_BALANCE, payment_exceeds_balance(amount, balance)
                )

            entry_id = self.db.create_payment_entry(
                document_id=document.id,
                payment_number=self._next_payment_number(document, on),
                payment_date=on,
                amount=amount,
                mode=mode,
                status=PaymentStatus.COMPLETED,
                reference=reference,
                notes=notes,
            )
            return self._apply_ledger(document, entry_id)

        result = self._run_locked(document_id, record)
        logger.info(
            "Recorded payment %s of %s on document %s; status now %s",
            result.entry.payment_number,
            amount,
            document_id,
            result.status.value,
        )
        return result

    def reverse_payment(
        self,
        entry_id: int,
        notes: Optional[str] = None,
        reversal_date: Optional[date] = None,
    ) -> PaymentResult:
        """Append a negating entry for a completed payment.

        The original entry is left untouched. The document's status may move
        back (e.g. paid to partially paid) as a result.

        Raises:
            NotFoundError: If the entry doesn't exist
            PaymentValidationError: If the entry is a reversal, not completed,
                or already reversed
        """
        original = self.db.get_payment_entry(entry_id)
        if original is None:
            raise NotFoundError(not_found("Payment", entry_id))
        on = reversal_date or self._today()

        def record(document: FinancialDocument) -> PaymentResult:
            if original.reversal_of_id is not None:
                raise PaymentValidationError(
                    PaymentRejection.NOT_REVERSIBLE,
                    f"Payment {original.payment_number} is itself a reversal",
                )
            if original.status is not PaymentStatus.COMPLETED:
                raise PaymentValidationError(
                    PaymentRejection.NOT_REVERSIBLE,
                    f"Payment {original.payment_number} is {original.status.value} and cannot be reversed",
                )
            if self.db.get_reversal_of(original.id) is not None:
                raise PaymentValidationError(
                    PaymentRejection.ALREADY_REVERSED,
                    f"Payment {original.payment_number} has already been reversed",
                )

            reversal_id = self.db.create_payment_entry(
                document_id=document.id,
                payment_number=self._next_payment_number(document, on),
                payment_date=on,
                amount=-original.amount,
                mode=original.mode,
                status=PaymentStatus.COMPLETED,
                reference=original.payment_number,
                notes=notes,
                reversal_of_id=original.id,
            )
            return self._apply_ledger(document, reversal_id)

        result = self._run_locked(original.document_id, record)
        logger.info(
            "Reversed payment %s with %s; document %s status now %s",
            original.payment_number,
            result.entry.payment_number,
            original.document_id,
            result.status.value,
        )
        return result

    def get_balance(self, document_id: int) -> Balance:
        """Compute a document's balance from the ledger, ignoring cached fields.

        Raises:
            NotFoundError: If the document doesn't exist
        """
        document = self._require_document(document_id)
        paid = self.ledger.recompute(document_id)
        return Balance(
            document_id=document_id,
            total=document.total_amount,
            paid=paid,
            balance=document.total_amount - paid,
            status=_expected_status(document, paid),
        )

    def list_payments(self, document_id: int) -> list[PaymentEntry]:
        """List a document's ledger entries in the order they were recorded.

        Raises:
            NotFoundError: If the document doesn't exist
        """
        self._require_document(document_id)
        return self.db.list_payment_entries(document_id)

    def reconcile_document(self, document_id: int) -> ReconciliationResult:
        """Rewrite a document's cached payment fields from its ledger if they drifted.

        Draft and cancelled documents keep their status; only their paid
        amount is repaired.

        Raises:
            NotFoundError: If the document doesn't exist
        """

        def repair(document: FinancialDocument) -> ReconciliationResult:
            ledger_paid = self.ledger.recompute(document.id)
            expected = _expected_status(document, ledger_paid)
            drifted = ledger_paid != document.paid_amount or expected is not document.status
            if drifted:
                self.db.update_document_payment_state(
                    document.id, ledger_paid, expected, expected_version=document.version
                )
                logger.warning(
                    "Repaired document %s: paid %s -> %s, status %s -> %s",
                    document.id,
                    document.paid_amount,
                    ledger_paid,
                    document.status.value,
                    expected.value,
                )
            return ReconciliationResult(
                document_id=document.id,
                cached_paid=document.paid_amount,
                ledger_paid=ledger_paid,
                cached_status=document.status,
                derived_status=expected,
                repaired=drifted,
            )

        return self._run_locked(document_id, repair)

    def reconcile_all(self) -> list[ReconciliationResult]:
        """Reconcile every document, archived ones included.

        Returns:
            One result per document, in ID order
        """
        results = [
            self.reconcile_document(document.id)
            for document in self.db.list_documents(include_archived=True)
        ]
        repaired = sum(1 for r in results if r.repaired)
        if repaired:
            logger.warning("Reconciliation repaired %d of %d documents", repaired, len(results))
        else:
            logger.info("Reconciliation found %d documents in sync", len(results))
        return results

    def _run_locked(self, document_id: int, step: Callable[[FinancialDocument], T]) -> T:
        """Run ``step`` in a transaction holding the document, retrying version races."""
        last_error: Optional[ConflictError] = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                with self.db.transaction():
                    document = self.db.get_document(document_id, for_update=True)
                    if document is None:
                        raise NotFoundError(not_found("Document", document_id))
                    return step(document)
            except ConflictError as exc:
                last_error = exc
                logger.warning(
                    "Attempt %d/%d on document %s lost a race: %s",
                    attempt,
                    self.max_attempts,
                    document_id,
                    exc,
                )
        raise ConcurrentModificationError(
            f"Document {document_id} was modified concurrently; gave up after {self.max_attempts} attempts"
        ) from last_error

    def _apply_ledger(self, document: FinancialDocument, entry_id: int) -> PaymentResult:
        """Recompute from the ledger and persist the derived fields."""
        paid = self.ledger.recompute(document.id)
        if paid > document.total_amount:
            raise PaymentValidationError(
                PaymentRejection.EXCEEDS_BALANCE,
                f"Ledger of document {document.id} would exceed its total of {document.total_amount:,.2f}",
            )
        status = derive_status(document.total_amount, paid)
        self.db.update_document_payment_state(document.id, paid, status, expected_version=document.version)
        return PaymentResult(
            entry=self.db.get_payment_entry(entry_id),
            paid_amount=paid,
            balance_due=document.total_amount - paid,
            status=status,
        )

    def _next_payment_number(self, document: FinancialDocument, on: date) -> str:
        """Next number in the document kind's month bucket, e.g. PAY-2403-0007."""
        bucket = f"{document.kind.payment_prefix}-{on:%y%m}-"
        sequences = [_sequence_of(number, bucket) for number in self.db.list_payment_numbers(bucket)]
        return f"{bucket}{max((s for s in sequences if s is not None), default=0) + 1:04d}"

    def _require_document(self, document_id: int) -> FinancialDocument:
        document = self.db.get_document(document_id)
        if document is None:
            raise NotFoundError(not_found("Document", document_id))
        return document


def _check_payable(document: FinancialDocument) -> None:
    if document.is_archived:
        raise PaymentValidationError(
            PaymentRejection.NOT_PAYABLE,
            document_not_payable(document.kind.value, document.number, "archived"),
        )
    if document.status in _LIFECYCLE_STATUSES:
        raise PaymentValidationError(
            PaymentRejection.NOT_PAYABLE,
            document_not_payable(document.kind.value, document.number, document.status.value),
        )


def _expected_status(document: FinancialDocument, paid: Decimal) -> DocumentStatus:
    if document.status in _LIFECYCLE_STATUSES:
        return document.status
    return derive_status(document.total_amount, paid)


def _sequence_of(number: str, bucket: str) -> Optional[int]:
    suffix = number[len(bucket):]
    return int(suffix) if suffix.isdigit() else None


def _to_amount(amount) -> Decimal:
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        raise ValidationError(f"Invalid amount: {amount}") from None
    if not value.is_finite():
        raise ValidationError(f"Invalid amount: {amount}")
    if value != value.quantize(CENT):
        raise ValidationError(f"Amount {amount} has more than two decimal places")
    return value


def _to_mode(mode: Union[PaymentMode, str]) -> PaymentMode:
    try:
        return PaymentMode(mode)
    except ValueError:
        valid = ", ".join(m.value for m in PaymentMode)
        raise ValidationError(f"Unknown payment mode '{mode}'. Valid modes: {valid}") from None
