"""Tests for the invoice and bill lifecycle service."""

from datetime import date
from decimal import Decimal

import pytest

from furnledger.domain.entities import DocumentKind, DocumentStatus
from furnledger.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
)


def _create_invoice(document_service, partner_id, number="INV-100"):
    return document_service.create_document(
        kind="invoice",
        number=number,
        partner_id=partner_id,
        document_date=date(2024, 3, 1),
        due_date=date(2024, 3, 31),
    )


class TestCreateDocument:
    """Tests for creating documents."""

    def test_creates_draft_with_zero_totals(self, document_service, sample_data):
        document_id = _create_invoice(document_service, sample_data["vip_customer"])

        document = document_service.get_document(document_id)
        assert document.kind is DocumentKind.INVOICE
        assert document.status is DocumentStatus.DRAFT
        assert document.total_amount == Decimal("0")
        assert document.paid_amount == Decimal("0")

    def test_duplicate_number_per_kind(self, document_service, sample_data):
        _create_invoice(document_service, sample_data["vip_customer"])

        with pytest.raises(ConflictError, match="already exists"):
            _create_invoice(document_service, sample_data["walk_in"])

    def test_same_number_allowed_across_kinds(self, document_service, sample_data):
        _create_invoice(document_service, sample_data["vip_customer"], number="DOC-1")
        bill_id = document_service.create_document(
            kind=DocumentKind.BILL,
            number="DOC-1",
            partner_id=sample_data["vendor"],
            document_date=date(2024, 3, 1),
            due_date=date(2024, 3, 1),
        )

        assert document_service.get_document(bill_id).kind is DocumentKind.BILL

    def test_validation(self, document_service, sample_data):
        with pytest.raises(ValidationError, match="kind"):
            document_service.create_document("receipt", "R-1", sample_data["walk_in"], date(2024, 3, 31))
        with pytest.raises(ValidationError, match="number"):
            document_service.create_document("invoice", " ", sample_data["walk_in"], date(2024, 3, 31))
        with pytest.raises(NotFoundError, match="Contact"):
            document_service.create_document("invoice", "INV-9", 9999, date(2024, 3, 31))
        with pytest.raises(ValidationError, match="before document date"):
            document_service.create_document(
                "invoice", "INV-9", sample_data["walk_in"], date(2024, 2, 1), document_date=date(2024, 3, 1)
            )


class TestLines:
    """Tests for adding lines and automatic cost centers."""

    def test_line_total_and_document_total(self, document_service, sample_data):
        document_id = _create_invoice(document_service, sample_data["walk_in"])
        document_service.add_line(document_id, sample_data["sofa"], Decimal("2"), Decimal("45000"))
        document_service.add_line(document_id, sample_data["polish"], Decimal("3"), Decimal("499.99"))

        lines = document_service.list_lines(document_id)
        assert [line.subtotal for line in lines] == [Decimal("90000.00"), Decimal("1499.97")]
        assert document_service.get_document(document_id).total_amount == Decimal("91499.97")

    def test_unit_price_defaults_to_product_price(self, document_service, sample_data):
        document_id = _create_invoice(document_service, sample_data["walk_in"])
        line_id = document_service.add_line(document_id, sample_data["sofa"], Decimal("1"))

        line = [line for line in document_service.list_lines(document_id) if line.id == line_id][0]
        assert line.unit_price == Decimal("45000")

    def test_rule_assigns_cost_center_on_add(self, document_service, assignment_service, sample_data):
        assignment_service.create_rule(
            name="VIP living room",
            cost_center_id=sample_data["living_room"],
            partner_tag_id=sample_data["vip"],
            product_category_id=sample_data["living_room_category"],
        )
        document_id = _create_invoice(document_service, sample_data["vip_customer"])

        document_service.add_line(document_id, sample_data["sofa"], Decimal("1"), Decimal("118000"))
        document_service.add_line(document_id, sample_data["chair"], Decimal("1"), Decimal("8000"))

        lines = document_service.list_lines(document_id)
        assert lines[0].cost_center_id == sample_data["living_room"]
        assert lines[1].cost_center_id is None

    def test_explicit_cost_center_wins_over_rules(self, document_service, assignment_service, sample_data):
        assignment_service.create_rule(
            name="Sofas", cost_center_id=sample_data["living_room"], product_id=sample_data["sofa"]
        )
        document_id = _create_invoice(document_service, sample_data["vip_customer"])

        document_service.add_line(
            document_id, sample_data["sofa"], Decimal("1"), cost_center_id=sample_data["general"]
        )

        assert document_service.list_lines(document_id)[0].cost_center_id == sample_data["general"]

    def test_assign_fills_only_unset_lines(self, document_service, assignment_service, sample_data):
        document_id = _create_invoice(document_service, sample_data["vip_customer"])
        document_service.add_line(document_id, sample_data["sofa"], Decimal("1"))
        document_service.add_line(document_id, sample_data["chair"], Decimal("1"), cost_center_id=sample_data["general"])
        document_service.add_line(document_id, sample_data["polish"], Decimal("1"))
        assignment_service.create_rule(
            name="VIP", cost_center_id=sample_data["living_room"], partner_tag_id=sample_data["vip"]
        )

        assignments = document_service.assign_cost_centers(document_id)

        assert len(assignments) == 2
        lines = document_service.list_lines(document_id)
        assert [line.cost_center_id for line in lines] == [
            sample_data["living_room"],
            sample_data["general"],
            sample_data["living_room"],
        ]
        assert document_service.assign_cost_centers(document_id) == []

    def test_lines_only_on_drafts(self, document_service, posted_invoice, sample_data):
        with pytest.raises(ValidationError, match="draft"):
            document_service.add_line(posted_invoice, sample_data["sofa"], Decimal("1"))

    def test_line_validation(self, document_service, draft_invoice, sample_data, cost_center_service):
        with pytest.raises(ValidationError, match="Quantity"):
            document_service.add_line(draft_invoice, sample_data["sofa"], Decimal("0"))
        with pytest.raises(NotFoundError, match="Product"):
            document_service.add_line(draft_invoice, 9999, Decimal("1"))
        cost_center_service.archive_cost_center(sample_data["living_room"])
        with pytest.raises(ValidationError, match="archived"):
            document_service.add_line(
                draft_invoice, sample_data["sofa"], Decimal("1"), cost_center_id=sample_data["living_room"]
            )


class TestLifecycle:
    """Tests for posting, cancelling and archiving."""

    def test_post_draft(self, document_service, draft_invoice):
        document_service.post_document(draft_invoice)

        assert document_service.get_document(draft_invoice).status is DocumentStatus.POSTED

    def test_post_requires_positive_total(self, document_service, sample_data):
        document_id = _create_invoice(document_service, sample_data["walk_in"])

        with pytest.raises(ValidationError, match="positive total"):
            document_service.post_document(document_id)

    def test_post_twice(self, document_service, posted_invoice):
        with pytest.raises(ConflictError):
            document_service.post_document(posted_invoice)

    def test_cancel_with_payments_blocked(self, document_service, payment_service, posted_invoice):
        payment_service.pay(posted_invoice, Decimal("1000"))

        with pytest.raises(DependencyError, match="Reverse them first"):
            document_service.cancel_document(posted_invoice)

    def test_cancel_after_reversal(self, document_service, payment_service, posted_invoice):
        payment = payment_service.pay(posted_invoice, Decimal("1000"))
        payment_service.reverse_payment(payment.entry.id)

        document_service.cancel_document(posted_invoice)

        assert document_service.get_document(posted_invoice).status is DocumentStatus.CANCELLED
        with pytest.raises(ConflictError):
            document_service.cancel_document(posted_invoice)

    def test_archive(self, document_service, draft_invoice):
        document_service.archive_document(draft_invoice)

        assert document_service.list_documents() == []
        assert [d.id for d in document_service.list_documents(include_archived=True)] == [draft_invoice]
        with pytest.raises(ConflictError):
            document_service.archive_document(draft_invoice)

    def test_list_by_kind(self, document_service, draft_invoice, sample_data):
        bill_id = document_service.create_document(
            DocumentKind.BILL, "VB-1", sample_data["vendor"], date(2024, 4, 30), document_date=date(2024, 4, 1)
        )

        assert [d.id for d in document_service.list_documents(kind="bill")] == [bill_id]
        assert [d.id for d in document_service.list_documents(kind=DocumentKind.INVOICE)] == [draft_invoice]

    def test_list_unknown_kind(self, document_service):
        with pytest.raises(ValidationError, match="Unknown document kind 'receipt'"):
            document_service.list_documents(kind="receipt")

    def test_missing_document(self, document_service):
        assert document_service.get_document(9999) is None
        with pytest.raises(NotFoundError):
            document_service.list_lines(9999)
        with pytest.raises(NotFoundError):
            document_service.post_document(9999)
