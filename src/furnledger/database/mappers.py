"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so enum decoding and Decimal
handling live in one place rather than in every query.
"""

from decimal import Decimal

from furnledger.domain import entities as domain
from furnledger.database.models import (
    CostCenter as ORMCostCenter,
    Tag as ORMTag,
    Contact as ORMContact,
    ProductCategory as ORMProductCategory,
    Product as ORMProduct,
    AssignmentRule as ORMAssignmentRule,
    FinancialDocument as ORMFinancialDocument,
    DocumentLine as ORMDocumentLine,
    PaymentEntry as ORMPaymentEntry,
    Budget as ORMBudget,
    BudgetRevision as ORMBudgetRevision,
)


def _money(value) -> Decimal:
    return Decimal(value if value is not None else 0)


def cost_center_to_domain(orm_cost_center: ORMCostCenter) -> domain.CostCenter:
    """Convert SQLAlchemy CostCenter model to domain CostCenter entity."""
    return domain.CostCenter(
        id=orm_cost_center.id,
        code=orm_cost_center.code,
        name=orm_cost_center.name,
        description=orm_cost_center.description,
        is_archived=orm_cost_center.is_archived,
        created_at=orm_cost_center.created_at,
    )


def tag_to_domain(orm_tag: ORMTag) -> domain.Tag:
    """Convert SQLAlchemy Tag model to domain Tag entity."""
    return domain.Tag(id=orm_tag.id, name=orm_tag.name, created_at=orm_tag.created_at)


def contact_to_domain(orm_contact: ORMContact) -> domain.Contact:
    """Convert SQLAlchemy Contact model to domain Contact entity."""
    return domain.Contact(
        id=orm_contact.id,
        name=orm_contact.name,
        email=orm_contact.email,
        is_archived=orm_contact.is_archived,
        created_at=orm_contact.created_at,
    )


def product_category_to_domain(orm_category: ORMProductCategory) -> domain.ProductCategory:
    """Convert SQLAlchemy ProductCategory model to domain ProductCategory entity."""
    return domain.ProductCategory(
        id=orm_category.id,
        name=orm_category.name,
        is_archived=orm_category.is_archived,
        created_at=orm_category.created_at,
    )


def product_to_domain(orm_product: ORMProduct) -> domain.Product:
    """Convert SQLAlchemy Product model to domain Product entity."""
    return domain.Product(
        id=orm_product.id,
        name=orm_product.name,
        category_id=orm_product.category_id,
        sales_price=_money(orm_product.sales_price),
        purchase_price=_money(orm_product.purchase_price),
        is_archived=orm_product.is_archived,
        created_at=orm_product.created_at,
    )


def assignment_rule_to_domain(orm_rule: ORMAssignmentRule) -> domain.AssignmentRule:
    """Convert SQLAlchemy AssignmentRule model to domain AssignmentRule entity."""
    return domain.AssignmentRule(
        id=orm_rule.id,
        name=orm_rule.name,
        partner_tag_id=orm_rule.partner_tag_id,
        partner_id=orm_rule.partner_id,
        product_category_id=orm_rule.product_category_id,
        product_id=orm_rule.product_id,
        cost_center_id=orm_rule.cost_center_id,
        priority=orm_rule.priority,
        is_archived=orm_rule.is_archived,
        created_at=orm_rule.created_at,
    )


def document_to_domain(orm_document: ORMFinancialDocument) -> domain.FinancialDocument:
    """Convert SQLAlchemy FinancialDocument model to domain FinancialDocument entity."""
    return domain.FinancialDocument(
        id=orm_document.id,
        kind=domain.DocumentKind(orm_document.kind),
        number=orm_document.number,
        partner_id=orm_document.partner_id,
        document_date=orm_document.document_date,
        due_date=orm_document.due_date,
        total_amount=_money(orm_document.total_amount),
        paid_amount=_money(orm_document.paid_amount),
        status=domain.DocumentStatus(orm_document.status),
        is_archived=orm_document.is_archived,
        version=orm_document.version,
        created_at=orm_document.created_at,
    )


def document_line_to_domain(orm_line: ORMDocumentLine) -> domain.DocumentLine:
    """Convert SQLAlchemy DocumentLine model to domain DocumentLine entity."""
    return domain.DocumentLine(
        id=orm_line.id,
        document_id=orm_line.document_id,
        product_id=orm_line.product_id,
        quantity=Decimal(orm_line.quantity),
        unit_price=_money(orm_line.unit_price),
        subtotal=_money(orm_line.subtotal),
        cost_center_id=orm_line.cost_center_id,
    )


def payment_entry_to_domain(orm_entry: ORMPaymentEntry) -> domain.PaymentEntry:
    """Convert SQLAlchemy PaymentEntry model to domain PaymentEntry entity."""
    return domain.PaymentEntry(
        id=orm_entry.id,
        document_id=orm_entry.document_id,
        payment_number=orm_entry.payment_number,
        payment_date=orm_entry.payment_date,
        amount=_money(orm_entry.amount),
        mode=domain.PaymentMode(orm_entry.mode),
        status=domain.PaymentStatus(orm_entry.status),
        reference=orm_entry.reference,
        notes=orm_entry.notes,
        reversal_of_id=orm_entry.reversal_of_id,
        created_at=orm_entry.created_at,
    )


def budget_to_domain(orm_budget: ORMBudget) -> domain.Budget:
    """Convert SQLAlchemy Budget model to domain Budget entity."""
    return domain.Budget(
        id=orm_budget.id,
        name=orm_budget.name,
        cost_center_id=orm_budget.cost_center_id,
        budget_type=domain.BudgetType(orm_budget.budget_type),
        start_date=orm_budget.start_date,
        end_date=orm_budget.end_date,
        budgeted_amount=_money(orm_budget.budgeted_amount),
        state=domain.BudgetState(orm_budget.state),
        parent_budget_id=orm_budget.parent_budget_id,
        is_archived=orm_budget.is_archived,
        created_at=orm_budget.created_at,
    )


def budget_revision_to_domain(orm_revision: ORMBudgetRevision) -> domain.BudgetRevision:
    """Convert SQLAlchemy BudgetRevision model to domain BudgetRevision entity."""
    return domain.BudgetRevision(
        id=orm_revision.id,
        budget_id=orm_revision.budget_id,
        revision_date=orm_revision.revision_date,
        previous_amount=_money(orm_revision.previous_amount),
        new_amount=_money(orm_revision.new_amount),
        reason=orm_revision.reason,
        created_at=orm_revision.created_at,
    )
