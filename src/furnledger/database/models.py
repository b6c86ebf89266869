"""SQLAlchemy models for furnledger database."""

from datetime import datetime, date, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    Table,
    UniqueConstraint,
    CheckConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()

MONEY = Numeric(14, 2)


contact_tags = Table(
    "contact_tags",
    Base.metadata,
    Column("contact_id", Integer, ForeignKey("contacts.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class CostCenter(Base):
    """Analytical account model."""

    __tablename__ = "cost_centers"

    id = Column(Integer, primary_key=True)
    code = Column(String, unique=True, nullable=False)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    is_archived = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class Tag(Base):
    """Partner tag model."""

    __tablename__ = "tags"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class Contact(Base):
    """Customer/vendor model."""

    __tablename__ = "contacts"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=True)
    is_archived = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    tags = relationship("Tag", secondary=contact_tags)


class ProductCategory(Base):
    """Product category model."""

    __tablename__ = "product_categories"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    is_archived = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class Product(Base):
    """Product model."""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    category_id = Column(Integer, ForeignKey("product_categories.id"), nullable=True)
    sales_price = Column(MONEY, default=0, nullable=False)
    purchase_price = Column(MONEY, default=0, nullable=False)
    is_archived = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        CheckConstraint("sales_price >= 0", name="ck_product_sales_price"),
        CheckConstraint("purchase_price >= 0", name="ck_product_purchase_price"),
    )

    # Relationships
    category = relationship("ProductCategory")


class AssignmentRule(Base):
    """Auto-assignment rule model."""

    __tablename__ = "assignment_rules"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    partner_tag_id = Column(Integer, ForeignKey("tags.id"), nullable=True)
    partner_id = Column(Integer, ForeignKey("contacts.id"), nullable=True)
    product_category_id = Column(Integer, ForeignKey("product_categories.id"), nullable=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=True)
    cost_center_id = Column(Integer, ForeignKey("cost_centers.id"), nullable=False)
    priority = Column(Integer, default=0, nullable=False)
    is_archived = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        CheckConstraint(
            "partner_tag_id IS NOT NULL OR partner_id IS NOT NULL "
            "OR product_category_id IS NOT NULL OR product_id IS NOT NULL",
            name="ck_rule_has_condition",
        ),
    )


class FinancialDocument(Base):
    """Invoice/bill model."""

    __tablename__ = "financial_documents"

    id = Column(Integer, primary_key=True)
    kind = Column(String, nullable=False)
    number = Column(String, nullable=False)
    partner_id = Column(Integer, ForeignKey("contacts.id"), nullable=False)
    document_date = Column(Date, default=date.today, nullable=False)
    due_date = Column(Date, nullable=False)
    total_amount = Column(MONEY, default=0, nullable=False)
    paid_amount = Column(MONEY, default=0, nullable=False)
    status = Column(String, default="draft", nullable=False)
    is_archived = Column(Boolean, default=False, nullable=False)
    version = Column(Integer, default=1, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Document numbers are unique per kind
    __table_args__ = (UniqueConstraint("kind", "number", name="uq_document_kind_number"),)

    # Relationships
    lines = relationship("DocumentLine", back_populates="document", cascade="all, delete-orphan")
    payments = relationship("PaymentEntry", back_populates="document")


class DocumentLine(Base):
    """Document line model."""

    __tablename__ = "document_lines"

    id = Column(Integer, primary_key=True)
    document_id = Column(Integer, ForeignKey("financial_documents.id"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Numeric(10, 2), default=1, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    subtotal = Column(MONEY, nullable=False)
    cost_center_id = Column(Integer, ForeignKey("cost_centers.id"), nullable=True)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_line_quantity"),
        CheckConstraint("unit_price >= 0", name="ck_line_unit_price"),
    )

    # Relationships
    document = relationship("FinancialDocument", back_populates="lines")


class PaymentEntry(Base):
    """Payment ledger entry model. Rows are only ever inserted."""

    __tablename__ = "payment_entries"

    id = Column(Integer, primary_key=True)
    document_id = Column(Integer, ForeignKey("financial_documents.id"), nullable=False)
    payment_number = Column(String, unique=True, nullable=False)
    payment_date = Column(Date, default=date.today, nullable=False)
    amount = Column(MONEY, nullable=False)
    mode = Column(String, nullable=False)
    status = Column(String, default="pending", nullable=False)
    reference = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    reversal_of_id = Column(Integer, ForeignKey("payment_entries.id"), unique=True, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (CheckConstraint("amount <> 0", name="ck_payment_amount_nonzero"),)

    # Relationships
    document = relationship("FinancialDocument", back_populates="payments")


class Budget(Base):
    """Cost center budget model."""

    __tablename__ = "budgets"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    cost_center_id = Column(Integer, ForeignKey("cost_centers.id"), nullable=False)
    budget_type = Column(String, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    budgeted_amount = Column(MONEY, nullable=False)
    state = Column(String, default="draft", nullable=False)
    parent_budget_id = Column(Integer, ForeignKey("budgets.id"), nullable=True)
    is_archived = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        CheckConstraint("budgeted_amount >= 0", name="ck_budget_amount"),
        CheckConstraint("end_date >= start_date", name="ck_budget_period"),
    )

    # Relationships
    revisions = relationship("BudgetRevision", back_populates="budget", cascade="all, delete-orphan")


class BudgetRevision(Base):
    """Budget revision history model."""

    __tablename__ = "budget_revisions"

    id = Column(Integer, primary_key=True)
    budget_id = Column(Integer, ForeignKey("budgets.id", ondelete="CASCADE"), nullable=False)
    revision_date = Column(Date, default=date.today, nullable=False)
    previous_amount = Column(MONEY, nullable=False)
    new_amount = Column(MONEY, nullable=False)
    reason = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    budget = relationship("Budget", back_populates="revisions")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
