"""Domain layer for furnledger application."""

from furnledger.domain.assignment import AssignmentService
from furnledger.domain.budget import BudgetService
from furnledger.domain.cost_center import CostCenterService
from furnledger.domain.document import DocumentService
from furnledger.domain.partner import ContactService
from furnledger.domain.payment import PaymentService
from furnledger.domain.product import ProductService

__all__ = [
    "AssignmentService",
    "BudgetService",
    "CostCenterService",
    "DocumentService",
    "ContactService",
    "PaymentService",
    "ProductService",
]
