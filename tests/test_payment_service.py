"""Tests for payment recording, reversal and reconciliation."""

from datetime import date
from decimal import Decimal

import pytest

from furnledger.domain.entities import DocumentKind, DocumentStatus, PaymentMode, PaymentStatus
from furnledger.domain.errors import (
    ConcurrentModificationError,
    ConflictError,
    NotFoundError,
    PaymentRejection,
    PaymentValidationError,
    ValidationError,
)
from furnledger.domain.payment import PaymentService


@pytest.fixture
def small_invoice(document_service, sample_data):
    """A posted invoice with a total of 100."""
    document_id = document_service.create_document(
        kind=DocumentKind.INVOICE,
        number="INV-SMALL",
        partner_id=sample_data["walk_in"],
        document_date=date(2024, 3, 1),
        due_date=date(2024, 3, 31),
    )
    document_service.add_line(
        document_id, product_id=sample_data["polish"], quantity=Decimal("2"), unit_price=Decimal("50")
    )
    document_service.post_document(document_id)
    return document_id


class TestPay:
    """Tests for PaymentService.pay."""

    def test_partial_then_full_payment(self, payment_service, posted_invoice, temp_db):
        first = payment_service.pay(posted_invoice, Decimal("60000"), mode=PaymentMode.BANK_TRANSFER)

        assert first.status is DocumentStatus.PARTIALLY_PAID
        assert first.paid_amount == Decimal("60000")
        assert first.balance_due == Decimal("58000")
        assert first.entry.payment_number == "PAY-2403-0001"
        assert first.entry.status is PaymentStatus.COMPLETED

        second = payment_service.pay(posted_invoice, Decimal("58000"), mode="cheque", reference="004512")

        assert second.status is DocumentStatus.PAID
        assert second.paid_amount == Decimal("118000")
        assert second.balance_due == Decimal("0")
        assert second.entry.payment_number == "PAY-2403-0002"
        assert second.entry.reference == "004512"

        document = temp_db.get_document(posted_invoice)
        assert document.paid_amount == Decimal("118000")
        assert document.status is DocumentStatus.PAID

    def test_overpayment_rejected_without_ledger_write(self, payment_service, small_invoice):
        payment_service.pay(small_invoice, Decimal("80"))

        with pytest.raises(PaymentValidationError) as excinfo:
            payment_service.pay(small_invoice, Decimal("25"))

        assert excinfo.value.reason is PaymentRejection.EXCEEDS_BALANCE
        assert "exceeds balance due (20.00)" in str(excinfo.value)
        assert len(payment_service.list_payments(small_invoice)) == 1
        assert payment_service.get_balance(small_invoice).paid == Decimal("80")

    def test_exact_balance_accepted(self, payment_service, small_invoice):
        payment_service.pay(small_invoice, Decimal("80"))
        result = payment_service.pay(small_invoice, Decimal("20"))

        assert result.status is DocumentStatus.PAID

    def test_fully_paid_document_rejects_more(self, payment_service, small_invoice):
        payment_service.pay(small_invoice, Decimal("100"))

        with pytest.raises(PaymentValidationError) as excinfo:
            payment_service.pay(small_invoice, Decimal("1"))

        assert excinfo.value.reason is PaymentRejection.ALREADY_PAID

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5")])
    def test_non_positive_amount_rejected(self, payment_service, small_invoice, amount):
        with pytest.raises(PaymentValidationError) as excinfo:
            payment_service.pay(small_invoice, amount)

        assert excinfo.value.reason is PaymentRejection.NON_POSITIVE_AMOUNT
        assert payment_service.list_payments(small_invoice) == []

    def test_sub_cent_amount_rejected(self, payment_service, small_invoice):
        with pytest.raises(ValidationError, match="two decimal places"):
            payment_service.pay(small_invoice, Decimal("10.005"))

    def test_unknown_mode_rejected(self, payment_service, small_invoice):
        with pytest.raises(ValidationError, match="Unknown payment mode"):
            payment_service.pay(small_invoice, Decimal("10"), mode="barter")

    def test_draft_not_payable(self, payment_service, draft_invoice):
        with pytest.raises(PaymentValidationError) as excinfo:
            payment_service.pay(draft_invoice, Decimal("10"))

        assert excinfo.value.reason is PaymentRejection.NOT_PAYABLE
        assert "Invoice INV-2024-001 is draft" in str(excinfo.value)

    def test_cancelled_not_payable(self, payment_service, document_service, posted_invoice):
        document_service.cancel_document(posted_invoice)

        with pytest.raises(PaymentValidationError) as excinfo:
            payment_service.pay(posted_invoice, Decimal("10"))

        assert excinfo.value.reason is PaymentRejection.NOT_PAYABLE

    def test_archived_not_payable(self, payment_service, document_service, posted_invoice):
        document_service.archive_document(posted_invoice)

        with pytest.raises(PaymentValidationError) as excinfo:
            payment_service.pay(posted_invoice, Decimal("10"))

        assert excinfo.value.reason is PaymentRejection.NOT_PAYABLE
        assert "archived" in str(excinfo.value)

    def test_missing_document(self, payment_service):
        with pytest.raises(NotFoundError):
            payment_service.pay(9999, Decimal("10"))

    def test_bill_payments_use_bill_prefix(self, payment_service, document_service, sample_data):
        bill_id = document_service.create_document(
            kind=DocumentKind.BILL,
            number="VB-778",
            partner_id=sample_data["vendor"],
            document_date=date(2024, 3, 1),
            due_date=date(2024, 3, 31),
        )
        document_service.add_line(bill_id, product_id=sample_data["sofa"], quantity=Decimal("2"))
        document_service.post_document(bill_id)

        result = payment_service.pay(bill_id, Decimal("20000"), payment_date=date(2024, 4, 2))

        assert result.entry.payment_number == "BPAY-2404-0001"
        assert result.entry.payment_date == date(2024, 4, 2)
        assert result.balance_due == Decimal("40000")

    def test_numbering_restarts_each_month(self, payment_service, small_invoice):
        march = payment_service.pay(small_invoice, Decimal("10"), payment_date=date(2024, 3, 31))
        april = payment_service.pay(small_invoice, Decimal("10"), payment_date=date(2024, 4, 1))
        april_again = payment_service.pay(small_invoice, Decimal("10"), payment_date=date(2024, 4, 2))

        assert march.entry.payment_number == "PAY-2403-0001"
        assert april.entry.payment_number == "PAY-2404-0001"
        assert april_again.entry.payment_number == "PAY-2404-0002"


class TestConcurrency:
    """Tests for the version guard and retry loop."""

    def test_lost_race_is_retried(self, temp_db, small_invoice, monkeypatch):
        original = temp_db.update_document_payment_state
        calls = []

        def flaky_update(*args, **kwargs):
            calls.append(args)
            if len(calls) == 1:
                raise ConflictError("Document was modified concurrently")
            return original(*args, **kwargs)

        monkeypatch.setattr(temp_db, "update_document_payment_state", flaky_update)
        service = PaymentService(temp_db, today=lambda: date(2024, 3, 15))

        result = service.pay(small_invoice, Decimal("40"))

        assert len(calls) == 2
        assert result.entry.payment_number == "PAY-2403-0001"
        assert [e.amount for e in service.list_payments(small_invoice)] == [Decimal("40")]

    def test_gives_up_after_max_attempts(self, temp_db, small_invoice, monkeypatch):
        calls = []

        def always_conflict(*args, **kwargs):
            calls.append(args)
            raise ConflictError("Document was modified concurrently")

        monkeypatch.setattr(temp_db, "update_document_payment_state", always_conflict)
        service = PaymentService(temp_db, max_attempts=3)

        with pytest.raises(ConcurrentModificationError):
            service.pay(small_invoice, Decimal("40"))

        assert len(calls) == 3
        monkeypatch.undo()
        assert service.list_payments(small_invoice) == []
        assert temp_db.get_document(small_invoice).paid_amount == Decimal("0")

    def test_stale_version_conflicts(self, temp_db, small_invoice):
        document = temp_db.get_document(small_invoice)
        temp_db.update_document_payment_state(
            small_invoice, Decimal("0"), DocumentStatus.POSTED, expected_version=document.version
        )

        with pytest.raises(ConflictError):
            temp_db.update_document_payment_state(
                small_invoice, Decimal("0"), DocumentStatus.POSTED, expected_version=document.version
            )

    def test_max_attempts_must_be_positive(self, temp_db):
        with pytest.raises(ValueError):
            PaymentService(temp_db, max_attempts=0)


class TestReversal:
    """Tests for PaymentService.reverse_payment."""

    def test_reversal_moves_status_back(self, payment_service, posted_invoice):
        payment_service.pay(posted_invoice, Decimal("60000"))
        second = payment_service.pay(posted_invoice, Decimal("58000"))

        result = payment_service.reverse_payment(second.entry.id, notes="Cheque bounced")

        assert result.status is DocumentStatus.PARTIALLY_PAID
        assert result.paid_amount == Decimal("60000")
        assert result.entry.amount == Decimal("-58000")
        assert result.entry.reversal_of_id == second.entry.id
        assert result.entry.reference == second.entry.payment_number
        assert result.entry.notes == "Cheque bounced"

        entries = payment_service.list_payments(posted_invoice)
        assert len(entries) == 3
        assert entries[1].amount == Decimal("58000")

    def test_full_reversal_returns_to_posted(self, payment_service, small_invoice):
        payment = payment_service.pay(small_invoice, Decimal("100"))

        result = payment_service.reverse_payment(payment.entry.id)

        assert result.status is DocumentStatus.POSTED
        assert result.balance_due == Decimal("100")
        assert payment_service.pay(small_invoice, Decimal("100")).status is DocumentStatus.PAID

    def test_cannot_reverse_twice(self, payment_service, small_invoice):
        payment = payment_service.pay(small_invoice, Decimal("30"))
        payment_service.reverse_payment(payment.entry.id)

        with pytest.raises(PaymentValidationError) as excinfo:
            payment_service.reverse_payment(payment.entry.id)

        assert excinfo.value.reason is PaymentRejection.ALREADY_REVERSED

    def test_cannot_reverse_a_reversal(self, payment_service, small_invoice):
        payment = payment_service.pay(small_invoice, Decimal("30"))
        reversal = payment_service.reverse_payment(payment.entry.id)

        with pytest.raises(PaymentValidationError) as excinfo:
            payment_service.reverse_payment(reversal.entry.id)

        assert excinfo.value.reason is PaymentRejection.NOT_REVERSIBLE

    def test_missing_entry(self, payment_service):
        with pytest.raises(NotFoundError):
            payment_service.reverse_payment(9999)


class TestBalanceAndReconciliation:
    """Tests for ledger-derived balances and drift repair."""

    def test_balance_comes_from_ledger(self, payment_service, temp_db, posted_invoice):
        payment_service.pay(posted_invoice, Decimal("60000"))
        document = temp_db.get_document(posted_invoice)
        # Corrupt the cached projection
        temp_db.update_document_payment_state(
            posted_invoice, Decimal("1"), DocumentStatus.PAID, expected_version=document.version
        )

        balance = payment_service.get_balance(posted_invoice)

        assert balance.paid == Decimal("60000")
        assert balance.balance == Decimal("58000")
        assert balance.status is DocumentStatus.PARTIALLY_PAID

    def test_balance_of_draft_keeps_draft_status(self, payment_service, draft_invoice):
        balance = payment_service.get_balance(draft_invoice)

        assert balance.status is DocumentStatus.DRAFT
        assert balance.balance == Decimal("118000")

    def test_reconcile_repairs_drift(self, payment_service, temp_db, posted_invoice):
        payment_service.pay(posted_invoice, Decimal("60000"))
        document = temp_db.get_document(posted_invoice)
        temp_db.update_document_payment_state(
            posted_invoice, Decimal("0"), DocumentStatus.POSTED, expected_version=document.version
        )

        result = payment_service.reconcile_document(posted_invoice)

        assert result.repaired
        assert result.cached_paid == Decimal("0")
        assert result.ledger_paid == Decimal("60000")
        assert result.cached_status is DocumentStatus.POSTED
        assert result.derived_status is DocumentStatus.PARTIALLY_PAID
        repaired = temp_db.get_document(posted_invoice)
        assert repaired.paid_amount == Decimal("60000")
        assert repaired.status is DocumentStatus.PARTIALLY_PAID

        assert not payment_service.reconcile_document(posted_invoice).repaired

    def test_reconcile_all(self, payment_service, temp_db, posted_invoice, small_invoice):
        payment_service.pay(small_invoice, Decimal("100"))
        document = temp_db.get_document(small_invoice)
        temp_db.update_document_payment_state(
            small_invoice, Decimal("50"), DocumentStatus.PARTIALLY_PAID, expected_version=document.version
        )

        results = payment_service.reconcile_all()

        assert [r.document_id for r in results] == [posted_invoice, small_invoice]
        assert [r.repaired for r in results] == [False, True]
        assert temp_db.get_document(small_invoice).status is DocumentStatus.PAID

    def test_reconcile_keeps_cancelled_status(self, payment_service, document_service, draft_invoice):
        document_service.cancel_document(draft_invoice)

        result = payment_service.reconcile_document(draft_invoice)

        assert not result.repaired
        assert result.derived_status is DocumentStatus.CANCELLED

    def test_reconcile_missing_document(self, payment_service):
        with pytest.raises(NotFoundError):
            payment_service.reconcile_document(9999)
