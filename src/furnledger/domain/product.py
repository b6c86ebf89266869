"""Product and product category domain service."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from furnledger.domain.entities import Product, ProductCategory
from furnledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    duplicate_value,
    not_found,
)

if TYPE_CHECKING:
    from furnledger.database.base import Database


class ProductService:
    """Service for managing products and their categories."""

    def __init__(self, db: Database):
        """Initialize product service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(self, name: str) -> int:
        """Create a product category.

        Args:
            name: Category name (e.g., "Living Room")

        Returns:
            Category ID

        Raises:
            ValidationError: If the name is empty
            ConflictError: If a category with the name exists
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Product category name must not be empty")
        if self.db.get_product_category_by_name(name) is not None:
            raise ConflictError(duplicate_value("Product category", "name", name))
        return self.db.create_product_category(name)

    def get_category(self, category_id: int) -> Optional[ProductCategory]:
        return self.db.get_product_category(category_id)

    def get_category_by_name(self, name: str) -> Optional[ProductCategory]:
        return self.db.get_product_category_by_name(name)

    def list_categories(self) -> list[ProductCategory]:
        return self.db.list_product_categories()

    def create_product(
        self,
        name: str,
        category_id: Optional[int] = None,
        sales_price: Decimal = Decimal("0"),
        purchase_price: Decimal = Decimal("0"),
    ) -> int:
        """Create a product.

        Args:
            name: Product name
            category_id: Optional category ID
            sales_price: Default unit price on invoices
            purchase_price: Default unit price on bills

        Returns:
            Product ID

        Raises:
            ValidationError: If the name is empty or a price is negative
            NotFoundError: If the category doesn't exist
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Product name must not be empty")
        if sales_price < 0 or purchase_price < 0:
            raise ValidationError("Product prices must not be negative")
        if category_id is not None and self.db.get_product_category(category_id) is None:
            raise NotFoundError(not_found("Product category", category_id))

        return self.db.create_product(
            name=name,
            category_id=category_id,
            sales_price=sales_price,
            purchase_price=purchase_price,
        )

    def get_product(self, product_id: int) -> Optional[Product]:
        """Get product by ID.

        Args:
            product_id: Product ID

        Returns:
            Product or None if not found
        """
        return self.db.get_product(product_id)

    def list_products(self, category_id: Optional[int] = None) -> list[Product]:
        """List products.

        Args:
            category_id: Optional category ID to filter by

        Returns:
            List of products ordered by name
        """
        return self.db.list_products(category_id=category_id)
