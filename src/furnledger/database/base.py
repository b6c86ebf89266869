"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Optional, Iterable
from datetime import date
from decimal import Decimal

from furnledger.domain.entities import (
    CostCenter,
    Tag,
    Contact,
    ProductCategory,
    Product,
    AssignmentRule,
    FinancialDocument,
    DocumentLine,
    PaymentEntry,
    Budget,
    BudgetRevision,
    BudgetState,
    BudgetType,
    DocumentKind,
    DocumentStatus,
    PaymentMode,
    PaymentStatus,
)


class Database(ABC):
    """Abstract database interface for furnledger.

    Write methods commit immediately unless they run inside
    ``transaction()``, in which case they only flush and the outermost block
    decides whether everything is committed or rolled back.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def transaction(self) -> AbstractContextManager[None]:
        """Run the enclosed writes as one atomic unit of work."""
        pass

    # Cost center operations
    @abstractmethod
    def create_cost_center(self, code: str, name: str, description: Optional[str] = None) -> int:
        """Create a cost center. Returns cost center ID."""
        pass

    @abstractmethod
    def get_cost_center(self, cost_center_id: int) -> Optional[CostCenter]:
        """Get cost center by ID."""
        pass

    @abstractmethod
    def get_cost_center_by_code(self, code: str) -> Optional[CostCenter]:
        """Get cost center by its unique code."""
        pass

    @abstractmethod
    def list_cost_centers(self, include_archived: bool = False) -> list[CostCenter]:
        """List cost centers ordered by code."""
        pass

    @abstractmethod
    def archive_cost_center(self, cost_center_id: int) -> None:
        """Mark a cost center archived."""
        pass

    # Tag and contact operations
    @abstractmethod
    def create_tag(self, name: str) -> int:
        """Create a partner tag. Returns tag ID."""
        pass

    @abstractmethod
    def get_tag(self, tag_id: int) -> Optional[Tag]:
        """Get tag by ID."""
        pass

    @abstractmethod
    def get_tag_by_name(self, name: str) -> Optional[Tag]:
        """Get tag by name."""
        pass

    @abstractmethod
    def list_tags(self) -> list[Tag]:
        """List all tags ordered by name."""
        pass

    @abstractmethod
    def create_contact(self, name: str, email: Optional[str] = None) -> int:
        """Create a contact. Returns contact ID."""
        pass

    @abstractmethod
    def get_contact(self, contact_id: int) -> Optional[Contact]:
        """Get contact by ID."""
        pass

    @abstractmethod
    def list_contacts(self, include_archived: bool = False) -> list[Contact]:
        """List contacts ordered by name."""
        pass

    @abstractmethod
    def add_contact_tag(self, contact_id: int, tag_id: int) -> None:
        """Attach a tag to a contact. Attaching twice is a no-op."""
        pass

    @abstractmethod
    def remove_contact_tag(self, contact_id: int, tag_id: int) -> None:
        """Detach a tag from a contact."""
        pass

    @abstractmethod
    def get_contact_tag_ids(self, contact_id: int) -> set[int]:
        """Get the tag IDs of a contact. Unknown contacts have no tags."""
        pass

    @abstractmethod
    def get_contact_tag_map(self, contact_ids: Iterable[int]) -> dict[int, set[int]]:
        """Get tag IDs for many contacts in one query.

        Contacts without tags are absent from the result.
        """
        pass

    # Product operations
    @abstractmethod
    def create_product_category(self, name: str) -> int:
        """Create a product category. Returns category ID."""
        pass

    @abstractmethod
    def get_product_category(self, category_id: int) -> Optional[ProductCategory]:
        """Get product category by ID."""
        pass

    @abstractmethod
    def get_product_category_by_name(self, name: str) -> Optional[ProductCategory]:
        """Get product category by name."""
        pass

    @abstractmethod
    def list_product_categories(self) -> list[ProductCategory]:
        """List product categories ordered by name."""
        pass

    @abstractmethod
    def create_product(
        self,
        name: str,
        category_id: Optional[int] = None,
        sales_price: Decimal = Decimal("0"),
        purchase_price: Decimal = Decimal("0"),
    ) -> int:
        """Create a product. Returns product ID."""
        pass

    @abstractmethod
    def get_product(self, product_id: int) -> Optional[Product]:
        """Get product by ID."""
        pass

    @abstractmethod
    def list_products(self, category_id: Optional[int] = None) -> list[Product]:
        """List products, optionally filtered by category."""
        pass

    @abstractmethod
    def get_product_category_id(self, product_id: int) -> Optional[int]:
        """Get the category ID of a product, if it has one."""
        pass

    @abstractmethod
    def get_product_category_map(self, product_ids: Iterable[int]) -> dict[int, int]:
        """Get category IDs for many products in one query.

        Products without a category are absent from the result.
        """
        pass

    # Assignment rule operations
    @abstractmethod
    def create_rule(
        self,
        name: str,
        cost_center_id: int,
        priority: int,
        partner_tag_id: Optional[int] = None,
        partner_id: Optional[int] = None,
        product_category_id: Optional[int] = None,
        product_id: Optional[int] = None,
    ) -> int:
        """Create an assignment rule. Returns rule ID."""
        pass

    @abstractmethod
    def get_rule(self, rule_id: int) -> Optional[AssignmentRule]:
        """Get rule by ID."""
        pass

    @abstractmethod
    def update_rule(
        self,
        rule_id: int,
        name: str,
        cost_center_id: int,
        priority: int,
        partner_tag_id: Optional[int] = None,
        partner_id: Optional[int] = None,
        product_category_id: Optional[int] = None,
        product_id: Optional[int] = None,
    ) -> None:
        """Replace the definition of a rule."""
        pass

    @abstractmethod
    def archive_rule(self, rule_id: int) -> None:
        """Mark a rule archived."""
        pass

    @abstractmethod
    def list_rules(self, include_archived: bool = False) -> list[AssignmentRule]:
        """List rules ordered by ID."""
        pass

    @abstractmethod
    def list_active_rules(self) -> list[AssignmentRule]:
        """List non-archived rules, priority descending then creation ascending."""
        pass

    # Document operations
    @abstractmethod
    def create_document(
        self,
        kind: DocumentKind,
        number: str,
        partner_id: int,
        document_date: date,
        due_date: date,
    ) -> int:
        """Create a draft document with zero totals. Returns document ID."""
        pass

    @abstractmethod
    def get_document(self, document_id: int, for_update: bool = False) -> Optional[FinancialDocument]:
        """Get document by ID.

        Args:
            document_id: Document ID
            for_update: Re-read the row from the store and lock it for the
                rest of the current transaction where the backend supports it
        """
        pass

    @abstractmethod
    def list_documents(
        self, kind: Optional[DocumentKind] = None, include_archived: bool = False
    ) -> list[FinancialDocument]:
        """List documents, optionally filtered by kind."""
        pass

    @abstractmethod
    def set_document_status(self, document_id: int, status: DocumentStatus) -> None:
        """Set lifecycle status for draft/cancel transitions."""
        pass

    @abstractmethod
    def set_document_total(self, document_id: int, total_amount: Decimal) -> None:
        """Set document total amount."""
        pass

    @abstractmethod
    def archive_document(self, document_id: int) -> None:
        """Mark a document archived."""
        pass

    @abstractmethod
    def update_document_payment_state(
        self,
        document_id: int,
        paid_amount: Decimal,
        status: DocumentStatus,
        expected_version: int,
    ) -> int:
        """Persist derived payment fields if the document is still at ``expected_version``.

        Returns:
            The new version number

        Raises:
            ConflictError: If another writer changed the document first
        """
        pass

    # Document line operations
    @abstractmethod
    def create_document_line(
        self,
        document_id: int,
        product_id: int,
        quantity: Decimal,
        unit_price: Decimal,
        subtotal: Decimal,
        cost_center_id: Optional[int] = None,
    ) -> int:
        """Create a document line. Returns line ID."""
        pass

    @abstractmethod
    def get_document_line(self, line_id: int) -> Optional[DocumentLine]:
        """Get document line by ID."""
        pass

    @abstractmethod
    def list_document_lines(self, document_id: int) -> list[DocumentLine]:
        """List the lines of a document ordered by ID."""
        pass

    @abstractmethod
    def update_line_cost_center(self, line_id: int, cost_center_id: Optional[int]) -> None:
        """Set the cost center of a line."""
        pass

    # Payment ledger operations
    @abstractmethod
    def create_payment_entry(
        self,
        document_id: int,
        payment_number: str,
        payment_date: date,
        amount: Decimal,
        mode: PaymentMode,
        status: PaymentStatus,
        reference: Optional[str] = None,
        notes: Optional[str] = None,
        reversal_of_id: Optional[int] = None,
    ) -> int:
        """Append a ledger entry. Returns entry ID.

        Raises:
            ConflictError: If the payment number is already taken or the
                reversed entry already has a reversal
        """
        pass

    @abstractmethod
    def get_payment_entry(self, entry_id: int) -> Optional[PaymentEntry]:
        """Get ledger entry by ID."""
        pass

    @abstractmethod
    def get_reversal_of(self, entry_id: int) -> Optional[PaymentEntry]:
        """Get the entry that reverses ``entry_id``, if any."""
        pass

    @abstractmethod
    def list_payment_entries(self, document_id: int) -> list[PaymentEntry]:
        """List ledger entries of a document in insertion order."""
        pass

    @abstractmethod
    def sum_payment_entries(self, document_id: int, status: PaymentStatus) -> Decimal:
        """Sum ledger entry amounts of a document with the given status."""
        pass

    @abstractmethod
    def list_payment_numbers(self, prefix: str) -> list[str]:
        """List issued payment numbers starting with ``prefix``."""
        pass

    # Budget operations
    @abstractmethod
    def create_budget(
        self,
        name: str,
        cost_center_id: int,
        budget_type: BudgetType,
        start_date: date,
        end_date: date,
        budgeted_amount: Decimal,
        state: BudgetState = BudgetState.DRAFT,
        parent_budget_id: Optional[int] = None,
    ) -> int:
        """Create a budget. Returns budget ID."""
        pass

    @abstractmethod
    def get_budget(self, budget_id: int) -> Optional[Budget]:
        """Get budget by ID."""
        pass

    @abstractmethod
    def list_budgets(
        self, cost_center_id: Optional[int] = None, include_archived: bool = False
    ) -> list[Budget]:
        """List budgets ordered by ID, optionally for one cost center."""
        pass

    @abstractmethod
    def set_budget_state(self, budget_id: int, state: BudgetState) -> None:
        """Set budget state. The archived state also sets the archived flag."""
        pass

    @abstractmethod
    def create_budget_revision(
        self,
        budget_id: int,
        revision_date: date,
        previous_amount: Decimal,
        new_amount: Decimal,
        reason: Optional[str] = None,
    ) -> int:
        """Record a budget revision. Returns revision ID."""
        pass

    @abstractmethod
    def list_budget_revisions(self, budget_id: int) -> list[BudgetRevision]:
        """List revisions of a budget in insertion order."""
        pass

    @abstractmethod
    def sum_line_subtotals(
        self,
        cost_center_id: int,
        kind: DocumentKind,
        start_date: date,
        end_date: date,
        statuses: Iterable[DocumentStatus],
    ) -> Decimal:
        """Sum subtotals of lines assigned to a cost center.

        Only lines on documents of ``kind`` whose status is in ``statuses``
        and whose document date falls within the inclusive date range count.
        """
        pass
