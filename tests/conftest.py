"""Shared pytest fixtures for furnledger tests."""

import os
import tempfile
from datetime import date
from decimal import Decimal

import pytest

from furnledger.database.factories import create_sqlite_database
from furnledger.domain.assignment import AssignmentService
from furnledger.domain.budget import BudgetService
from furnledger.domain.cost_center import CostCenterService
from furnledger.domain.document import DocumentService
from furnledger.domain.entities import DocumentKind
from furnledger.domain.partner import ContactService
from furnledger.domain.payment import PaymentService
from furnledger.domain.product import ProductService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def cost_center_service(temp_db):
    """Create a CostCenterService with a temporary database."""
    return CostCenterService(temp_db)


@pytest.fixture
def contact_service(temp_db):
    """Create a ContactService with a temporary database."""
    return ContactService(temp_db)


@pytest.fixture
def product_service(temp_db):
    """Create a ProductService with a temporary database."""
    return ProductService(temp_db)


@pytest.fixture
def assignment_service(temp_db):
    """Create an AssignmentService with a temporary database."""
    return AssignmentService(temp_db)


@pytest.fixture
def document_service(temp_db, assignment_service):
    """Create a DocumentService sharing the assignment service's rule cache."""
    return DocumentService(temp_db, assignment=assignment_service)


@pytest.fixture
def payment_service(temp_db):
    """Create a PaymentService with a fixed 'today'."""
    return PaymentService(temp_db, today=lambda: date(2024, 3, 15))


@pytest.fixture
def budget_service(temp_db):
    """Create a BudgetService with a fixed 'today'."""
    return BudgetService(temp_db, today=lambda: date(2024, 3, 15))


@pytest.fixture
def sample_data(cost_center_service, contact_service, product_service):
    """Create cost centers, a tagged customer, a vendor and products.

    Returns a dict of IDs keyed by short names.
    """
    ids = {
        "general": cost_center_service.create_cost_center("CC-001", "Showroom General"),
        "living_room": cost_center_service.create_cost_center("CC-003", "Living Room Sales"),
        "vip": contact_service.create_tag("VIP"),
        "living_room_category": product_service.create_category("Living Room"),
        "office_category": product_service.create_category("Office"),
    }
    ids["vip_customer"] = contact_service.create_contact("Sharma Interiors", email="accounts@sharma.example")
    contact_service.tag_contact(ids["vip_customer"], ids["vip"])
    ids["walk_in"] = contact_service.create_contact("Walk-in Customer")
    ids["vendor"] = contact_service.create_contact("Teak Suppliers")
    ids["sofa"] = product_service.create_product(
        "3-Seater Sofa",
        category_id=ids["living_room_category"],
        sales_price=Decimal("45000"),
        purchase_price=Decimal("30000"),
    )
    ids["chair"] = product_service.create_product(
        "Office Chair",
        category_id=ids["office_category"],
        sales_price=Decimal("8000"),
    )
    ids["polish"] = product_service.create_product("Wood Polish", sales_price=Decimal("500"))
    return ids


@pytest.fixture
def draft_invoice(document_service, sample_data):
    """Create a draft invoice to the VIP customer with one 118000 line."""
    document_id = document_service.create_document(
        kind=DocumentKind.INVOICE,
        number="INV-2024-001",
        partner_id=sample_data["vip_customer"],
        document_date=date(2024, 3, 1),
        due_date=date(2024, 3, 31),
    )
    document_service.add_line(
        document_id,
        product_id=sample_data["sofa"],
        quantity=Decimal("1"),
        unit_price=Decimal("118000"),
        cost_center_id=sample_data["general"],
    )
    return document_id


@pytest.fixture
def posted_invoice(document_service, draft_invoice):
    """Post the draft invoice so it accepts payments."""
    document_service.post_document(draft_invoice)
    return draft_invoice


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
