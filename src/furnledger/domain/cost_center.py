"""Cost center domain service."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from furnledger.domain.entities import CostCenter
from furnledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    duplicate_value,
    not_found,
)

if TYPE_CHECKING:
    from furnledger.database.base import Database

logger = logging.getLogger(__name__)


class CostCenterService:
    """Service for managing cost centers."""

    def __init__(self, db: Database):
        """Initialize cost center service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_cost_center(self, code: str, name: str, description: Optional[str] = None) -> int:
        """Create a cost center.

        Args:
            code: Unique short code (e.g., "CC-003")
            name: Display name
            description: Optional description

        Returns:
            Cost center ID

        Raises:
            ValidationError: If code or name is empty
            ConflictError: If the code already exists
        """
        code = (code or "").strip()
        name = (name or "").strip()
        if not code:
            raise ValidationError("Cost center code must not be empty")
        if not name:
            raise ValidationError("Cost center name must not be empty")
        if self.db.get_cost_center_by_code(code) is not None:
            raise ConflictError(duplicate_value("Cost center", "code", code))

        cost_center_id = self.db.create_cost_center(code=code, name=name, description=description)
        logger.info("Created cost center %s (%s)", code, cost_center_id)
        return cost_center_id

    def get_cost_center(self, cost_center_id: int) -> Optional[CostCenter]:
        """Get cost center by ID.

        Args:
            cost_center_id: Cost center ID

        Returns:
            CostCenter or None if not found
        """
        return self.db.get_cost_center(cost_center_id)

    def get_cost_center_by_code(self, code: str) -> Optional[CostCenter]:
        """Get cost center by code.

        Args:
            code: Cost center code

        Returns:
            CostCenter or None if not found
        """
        return self.db.get_cost_center_by_code(code)

    def list_cost_centers(self, include_archived: bool = False) -> list[CostCenter]:
        """List cost centers ordered by code."""
        return self.db.list_cost_centers(include_archived=include_archived)

    def archive_cost_center(self, cost_center_id: int) -> None:
        """Archive a cost center.

        Rules pointing at it keep working; new or edited rules may no
        longer target it.

        Raises:
            NotFoundError: If the cost center doesn't exist
            ConflictError: If it is already archived
        """
        cost_center = self.db.get_cost_center(cost_center_id)
        if cost_center is None:
            raise NotFoundError(not_found("Cost center", cost_center_id))
        if cost_center.is_archived:
            raise ConflictError(f"Cost center '{cost_center.code}' is already archived")

        self.db.archive_cost_center(cost_center_id)
        logger.info("Archived cost center %s", cost_center.code)
