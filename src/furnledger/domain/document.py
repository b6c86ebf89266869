"""Invoice and bill lifecycle service."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Optional, Union

from furnledger.domain.assignment import AssignmentService
from furnledger.domain.entities import (
    DocumentKind,
    DocumentLine,
    DocumentStatus,
    FinancialDocument,
    LineAssignment,
    LineRef,
)
from furnledger.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
    not_found,
)
from furnledger.domain.ledger import LedgerRecalculator

if TYPE_CHECKING:
    from furnledger.database.base import Database

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


class DocumentService:
    """Service for drafting, posting and cancelling invoices and bills.

    Lines added without a cost center are assigned one by the assignment
    engine. Payment fields are never touched here; see PaymentService.
    """

    def __init__(self, db: Database, assignment: Optional[AssignmentService] = None):
        """Initialize document service.

        Args:
            db: Database instance
            assignment: Assignment service used for automatic cost centers
        """
        self.db = db
        self.assignment = assignment if assignment is not None else AssignmentService(db)
        self.ledger = LedgerRecalculator(db)

    def create_document(
        self,
        kind: Union[DocumentKind, str],
        number: str,
        partner_id: int,
        due_date: date,
        document_date: Optional[date] = None,
    ) -> int:
        """Create a draft invoice or bill.

        Args:
            kind: "invoice" or "bill"
            number: Document number, unique per kind
            partner_id: Customer (invoice) or vendor (bill) contact ID
            due_date: Payment due date
            document_date: Issue date; defaults to today

        Returns:
            Document ID

        Raises:
            ValidationError: If the kind, number or dates are invalid
            NotFoundError: If the partner doesn't exist
            ConflictError: If the number is already used for this kind
        """
        kind = _to_kind(kind)

        number = (number or "").strip()
        if not number:
            raise ValidationError("Document number must not be empty")
        if self.db.get_contact(partner_id) is None:
            raise NotFoundError(not_found("Contact", partner_id))

        document_date = document_date or date.today()
        if due_date < document_date:
            raise ValidationError(f"Due date {due_date} is before document date {document_date}")

        document_id = self.db.create_document(
            kind=kind,
            number=number,
            partner_id=partner_id,
            document_date=document_date,
            due_date=due_date,
        )
        logger.info("Created %s %s (%s)", kind.value, number, document_id)
        return document_id

    def add_line(
        self,
        document_id: int,
        product_id: int,
        quantity: Decimal,
        unit_price: Optional[Decimal] = None,
        cost_center_id: Optional[int] = None,
    ) -> int:
        """Add a line to a draft document and recompute its total.

        Args:
            document_id: Document ID
            product_id: Product ID
            quantity: Positive quantity
            unit_price: Unit price; defaults to the product's sales price on
                invoices and its purchase price on bills
            cost_center_id: Explicit cost center; assigned by rule if None

        Returns:
            Line ID

        Raises:
            NotFoundError: If the document, product or cost center doesn't exist
            ValidationError: If the document is not a draft or an amount is invalid
        """
        document = self._require_document(document_id)
        if document.status is not DocumentStatus.DRAFT:
            raise ValidationError(
                f"Lines can only be added to draft documents; {document.number} is {document.status.value}"
            )

        product = self.db.get_product(product_id)
        if product is None:
            raise NotFoundError(not_found("Product", product_id))
        if unit_price is None:
            unit_price = product.sales_price if document.kind is DocumentKind.INVOICE else product.purchase_price
        if quantity <= 0:
            raise ValidationError("Quantity must be positive")
        if unit_price < 0:
            raise ValidationError("Unit price must not be negative")

        if cost_center_id is not None:
            cost_center = self.db.get_cost_center(cost_center_id)
            if cost_center is None:
                raise NotFoundError(not_found("Cost center", cost_center_id))
            if cost_center.is_archived:
                raise ValidationError(f"Cost center '{cost_center.code}' is archived")
        else:
            match = self.assignment.evaluate(partner_id=document.partner_id, product_id=product_id)
            cost_center_id = match.cost_center_id

        subtotal = (quantity * unit_price).quantize(CENT)
        with self.db.transaction():
            line_id = self.db.create_document_line(
                document_id=document_id,
                product_id=product_id,
                quantity=quantity,
                unit_price=unit_price,
                subtotal=subtotal,
                cost_center_id=cost_center_id,
            )
            total = sum((line.subtotal for line in self.db.list_document_lines(document_id)), Decimal("0"))
            self.db.set_document_total(document_id, total)

        logger.debug("Added line %s to document %s; total now %s", line_id, document_id, total)
        return line_id

    def assign_cost_centers(self, document_id: int) -> list[LineAssignment]:
        """Assign cost centers to every line of a document that has none.

        Lines with a cost center already set are never overwritten.

        Returns:
            Assignments for the lines that were evaluated; lines no rule
            matched have ``cost_center_id`` None

        Raises:
            NotFoundError: If the document doesn't exist
        """
        document = self._require_document(document_id)
        pending = [
            LineRef(line_id=line.id, partner_id=document.partner_id, product_id=line.product_id)
            for line in self.db.list_document_lines(document_id)
            if line.cost_center_id is None
        ]
        assignments = self.assignment.evaluate_batch(pending)

        with self.db.transaction():
            for assignment in assignments:
                if assignment.cost_center_id is not None:
                    self.db.update_line_cost_center(assignment.line_id, assignment.cost_center_id)
        return assignments

    def post_document(self, document_id: int) -> None:
        """Post a draft so it can receive payments.

        Raises:
            NotFoundError: If the document doesn't exist
            ConflictError: If the document is not a draft
            ValidationError: If the total is not positive
        """
        document = self._require_document(document_id)
        if document.status is not DocumentStatus.DRAFT:
            raise ConflictError(f"{document.number} is {document.status.value}; only drafts can be posted")
        if document.total_amount <= 0:
            raise ValidationError(f"{document.number} has no positive total and cannot be posted")

        self.db.set_document_status(document_id, DocumentStatus.POSTED)
        logger.info("Posted %s %s", document.kind.value, document.number)

    def cancel_document(self, document_id: int) -> None:
        """Cancel a draft or posted document that has no payments.

        Raises:
            NotFoundError: If the document doesn't exist
            ConflictError: If the document is already cancelled
            DependencyError: If payments are recorded against it
        """
        document = self._require_document(document_id)
        if document.status is DocumentStatus.CANCELLED:
            raise ConflictError(f"{document.number} is already cancelled")

        paid = self.ledger.recompute(document_id)
        if paid != 0 or document.status not in (DocumentStatus.DRAFT, DocumentStatus.POSTED):
            raise DependencyError(
                f"Cannot cancel {document.number}: it has payments of {paid:,.2f}. Reverse them first."
            )

        self.db.set_document_status(document_id, DocumentStatus.CANCELLED)
        logger.info("Cancelled %s %s", document.kind.value, document.number)

    def archive_document(self, document_id: int) -> None:
        """Archive a document. Archived documents no longer accept payments.

        Raises:
            NotFoundError: If the document doesn't exist
            ConflictError: If it is already archived
        """
        document = self._require_document(document_id)
        if document.is_archived:
            raise ConflictError(f"{document.number} is already archived")
        self.db.archive_document(document_id)
        logger.info("Archived %s %s", document.kind.value, document.number)

    def get_document(self, document_id: int) -> Optional[FinancialDocument]:
        """Get document by ID.

        Args:
            document_id: Document ID

        Returns:
            FinancialDocument or None if not found
        """
        return self.db.get_document(document_id)

    def list_documents(
        self,
        kind: Optional[Union[DocumentKind, str]] = None,
        include_archived: bool = False,
    ) -> list[FinancialDocument]:
        """List documents ordered by ID, optionally of one kind.

        Raises:
            ValidationError: If the kind is unknown
        """
        if kind is not None:
            kind = _to_kind(kind)
        return self.db.list_documents(kind=kind, include_archived=include_archived)

    def list_lines(self, document_id: int) -> list[DocumentLine]:
        """List the lines of a document.

        Raises:
            NotFoundError: If the document doesn't exist
        """
        self._require_document(document_id)
        return self.db.list_document_lines(document_id)

    def _require_document(self, document_id: int) -> FinancialDocument:
        document = self.db.get_document(document_id)
        if document is None:
            raise NotFoundError(not_found("Document", document_id))
        return document


def _to_kind(kind: Union[DocumentKind, str]) -> DocumentKind:
    try:
        return DocumentKind(kind)
    except ValueError:
        raise ValidationError(f"Unknown document kind '{kind}'. Use 'invoice' or 'bill'") from None
