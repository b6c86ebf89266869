"""Domain model entities for furnledger.

These are pure data classes representing business concepts, independent of
database schema. Services and the matching engine only ever see these
types; the ORM models stay behind the database layer.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class DocumentKind(str, Enum):
    """Financial document kinds. Invoices and bills share one structure."""

    INVOICE = "invoice"
    BILL = "bill"

    @property
    def payment_prefix(self) -> str:
        """Prefix used for payment numbers issued against this kind."""
        return "PAY" if self is DocumentKind.INVOICE else "BPAY"


class DocumentStatus(str, Enum):
    """Document lifecycle status."""

    DRAFT = "draft"
    POSTED = "posted"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    """Ledger entry status. Only completed entries count toward paid amounts."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class PaymentMode(str, Enum):
    """Payment instrument."""

    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"
    CHEQUE = "cheque"
    ONLINE = "online"


class BudgetType(str, Enum):
    """Whether a budget tracks income or expense."""

    INCOME = "income"
    EXPENSE = "expense"

    @property
    def document_kind(self) -> DocumentKind:
        """Document kind whose lines count toward this budget type."""
        return DocumentKind.INVOICE if self is BudgetType.INCOME else DocumentKind.BILL


class BudgetState(str, Enum):
    """Budget lifecycle state."""

    DRAFT = "draft"
    CONFIRMED = "confirmed"
    REVISED = "revised"
    ARCHIVED = "archived"


@dataclass(frozen=True)
class CostCenter:
    """Analytical account that transaction value is attributed to."""

    id: int
    code: str
    name: str
    description: Optional[str]
    is_archived: bool
    created_at: datetime


@dataclass(frozen=True)
class Tag:
    """Partner tag domain entity."""

    id: int
    name: str
    created_at: datetime


@dataclass(frozen=True)
class Contact:
    """Customer or vendor domain entity."""

    id: int
    name: str
    email: Optional[str]
    is_archived: bool
    created_at: datetime


@dataclass(frozen=True)
class ProductCategory:
    """Product category domain entity."""

    id: int
    name: str
    is_archived: bool
    created_at: datetime


@dataclass(frozen=True)
class Product:
    """Product domain entity."""

    id: int
    name: str
    category_id: Optional[int]
    sales_price: Decimal
    purchase_price: Decimal
    is_archived: bool
    created_at: datetime


@dataclass(frozen=True)
class AssignmentRule:
    """Mapping from optional match conditions to a target cost center.

    Each of the four condition slots is either an ID or None (wildcard).
    ``priority`` is explicit and defaults to the derived ``specificity``.
    """

    id: int
    name: str
    partner_tag_id: Optional[int]
    partner_id: Optional[int]
    product_category_id: Optional[int]
    product_id: Optional[int]
    cost_center_id: int
    priority: int
    is_archived: bool
    created_at: datetime

    @property
    def specificity(self) -> int:
        """Number of conditions that are set."""
        return sum(
            1
            for value in (
                self.partner_tag_id,
                self.partner_id,
                self.product_category_id,
                self.product_id,
            )
            if value is not None
        )


@dataclass(frozen=True)
class MatchContext:
    """Facts about one transaction line that rules are matched against."""

    partner_id: Optional[int] = None
    partner_tag_ids: frozenset[int] = field(default_factory=frozenset)
    product_id: Optional[int] = None
    product_category_id: Optional[int] = None


@dataclass(frozen=True)
class RuleScore:
    """Outcome of scoring one rule against one context."""

    score: int
    matched_fields: tuple[str, ...]
    is_valid: bool


@dataclass(frozen=True)
class MatchResult:
    """Winning rule for a context, or an empty result when nothing matched."""

    rule_id: Optional[int] = None
    rule_name: Optional[str] = None
    cost_center_id: Optional[int] = None
    score: int = 0
    matched_fields: tuple[str, ...] = ()

    @property
    def is_auto_assigned(self) -> bool:
        """True if a rule supplied the cost center."""
        return self.rule_id is not None


@dataclass(frozen=True)
class LineRef:
    """Input for batch assignment."""

    line_id: int
    partner_id: Optional[int] = None
    product_id: Optional[int] = None


@dataclass(frozen=True)
class LineAssignment:
    """Batch assignment output for one line."""

    line_id: int
    cost_center_id: Optional[int]
    rule_id: Optional[int]
    rule_name: Optional[str]


@dataclass(frozen=True)
class FinancialDocument:
    """Invoice or vendor bill.

    ``paid_amount`` and ``status`` are projections of the payment ledger and
    are only ever written by the payment service.
    """

    id: int
    kind: DocumentKind
    number: str
    partner_id: int
    document_date: date
    due_date: date
    total_amount: Decimal
    paid_amount: Decimal
    status: DocumentStatus
    is_archived: bool
    version: int
    created_at: datetime

    @property
    def balance_due(self) -> Decimal:
        """Balance computed from the cached paid amount."""
        return self.total_amount - self.paid_amount


@dataclass(frozen=True)
class DocumentLine:
    """Line item on a financial document."""

    id: int
    document_id: int
    product_id: int
    quantity: Decimal
    unit_price: Decimal
    subtotal: Decimal
    cost_center_id: Optional[int]


@dataclass(frozen=True)
class PaymentEntry:
    """Append-only payment ledger entry.

    Reversals are entries with a negative amount that point at the entry
    they reverse.
    """

    id: int
    document_id: int
    payment_number: str
    payment_date: date
    amount: Decimal
    mode: PaymentMode
    status: PaymentStatus
    reference: Optional[str]
    notes: Optional[str]
    reversal_of_id: Optional[int]
    created_at: datetime


@dataclass(frozen=True)
class Balance:
    """Ledger-derived balance of a document."""

    document_id: int
    total: Decimal
    paid: Decimal
    balance: Decimal
    status: DocumentStatus


@dataclass(frozen=True)
class PaymentResult:
    """Outcome of a recorded payment or reversal."""

    entry: PaymentEntry
    paid_amount: Decimal
    balance_due: Decimal
    status: DocumentStatus


@dataclass(frozen=True)
class ReconciliationResult:
    """Comparison of a document's cached fields against its ledger."""

    document_id: int
    cached_paid: Decimal
    ledger_paid: Decimal
    cached_status: DocumentStatus
    derived_status: DocumentStatus
    repaired: bool



@dataclass(frozen=True)
class Budget:
    """Planned income or expense for one cost center over a date range.

    A revision never edits a confirmed budget; it marks it revised and
    creates a successor pointing back through ``parent_budget_id``.
    """

    id: int
    name: str
    cost_center_id: int
    budget_type: BudgetType
    start_date: date
    end_date: date
    budgeted_amount: Decimal
    state: BudgetState
    parent_budget_id: Optional[int]
    is_archived: bool
    created_at: datetime


@dataclass(frozen=True)
class BudgetRevision:
    """Record of a budgeted amount being changed."""

    id: int
    budget_id: int
    revision_date: date
    previous_amount: Decimal
    new_amount: Decimal
    reason: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class BudgetPerformance:
    """Achieved amount of a budget against what was planned."""

    budget_id: int
    budgeted: Decimal
    achieved: Decimal
    remaining: Decimal
    achievement_percentage: Decimal
