"""Cost center budget service."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Callable, Optional, Union

from furnledger.domain.entities import (
    Budget,
    BudgetPerformance,
    BudgetRevision,
    BudgetState,
    BudgetType,
)
from furnledger.domain.errors import ConflictError, NotFoundError, ValidationError, not_found
from furnledger.domain.ledger import PAYABLE_STATUS_ORDER

if TYPE_CHECKING:
    from furnledger.database.base import Database

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


class BudgetService:
    """Service for planning income and expense per cost center.

    Achieved amounts are never stored. They are summed on demand from the
    posted document lines assigned to the budget's cost center.
    """

    def __init__(self, db: Database, today: Callable[[], date] = date.today):
        """Initialize budget service.

        Args:
            db: Database instance
            today: Source of revision dates
        """
        self.db = db
        self._today = today

    def create_budget(
        self,
        name: str,
        cost_center_id: int,
        budget_type: Union[BudgetType, str],
        start_date: date,
        end_date: date,
        budgeted_amount: Decimal,
    ) -> int:
        """Create a draft budget.

        Args:
            name: Budget name
            cost_center_id: Cost center the budget is planned for
            budget_type: "income" (invoices) or "expense" (bills)
            start_date: First day of the period
            end_date: Last day of the period, inclusive
            budgeted_amount: Planned amount, zero or more

        Returns:
            Budget ID

        Raises:
            ValidationError: If a field is invalid or the cost center is archived
            NotFoundError: If the cost center doesn't exist
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Budget name must not be empty")
        budget_type = _to_type(budget_type)
        if end_date < start_date:
            raise ValidationError(f"Budget end date {end_date} is before start date {start_date}")
        budgeted_amount = _to_amount(budgeted_amount)

        cost_center = self.db.get_cost_center(cost_center_id)
        if cost_center is None:
            raise NotFoundError(not_found("Cost center", cost_center_id))
        if cost_center.is_archived:
            raise ValidationError(f"Cost center '{cost_center.code}' is archived")

        budget_id = self.db.create_budget(
            name=name,
            cost_center_id=cost_center_id,
            budget_type=budget_type,
            start_date=start_date,
            end_date=end_date,
            budgeted_amount=budgeted_amount,
        )
        logger.info(
            "Created %s budget '%s' (%s) for cost center %s", budget_type.value, name, budget_id, cost_center.code
        )
        return budget_id

    def confirm_budget(self, budget_id: int) -> None:
        """Confirm a draft budget.

        Raises:
            NotFoundError: If the budget doesn't exist
            ConflictError: If the budget is not a draft
        """
        budget = self._require_budget(budget_id)
        if budget.state is not BudgetState.DRAFT:
            raise ConflictError(f"Budget '{budget.name}' is {budget.state.value}; only drafts can be confirmed")
        self.db.set_budget_state(budget_id, BudgetState.CONFIRMED)
        logger.info("Confirmed budget %s", budget_id)

    def revise_budget(self, budget_id: int, new_amount: Decimal, reason: Optional[str] = None) -> int:
        """Replace a confirmed budget with a revised copy.

        The original is marked revised and keeps a revision record. The copy
        is confirmed, carries the new amount, and points back at the original.

        Args:
            budget_id: Confirmed budget ID
            new_amount: New budgeted amount
            reason: Optional reason for the revision

        Returns:
            ID of the new budget

        Raises:
            NotFoundError: If the budget doesn't exist
            ConflictError: If the budget is not confirmed
            ValidationError: If the amount is invalid
        """
        budget = self._require_budget(budget_id)
        if budget.state is not BudgetState.CONFIRMED:
            raise ConflictError(f"Budget '{budget.name}' is {budget.state.value}; only confirmed budgets can be revised")
        new_amount = _to_amount(new_amount)
        on = self._today()

        with self.db.transaction():
            self.db.create_budget_revision(
                budget_id=budget_id,
                revision_date=on,
                previous_amount=budget.budgeted_amount,
                new_amount=new_amount,
                reason=reason,
            )
            self.db.set_budget_state(budget_id, BudgetState.REVISED)
            revised_id = self.db.create_budget(
                name=f"{budget.name} Rev {on:%d-%m-%Y}",
                cost_center_id=budget.cost_center_id,
                budget_type=budget.budget_type,
                start_date=budget.start_date,
                end_date=budget.end_date,
                budgeted_amount=new_amount,
                state=BudgetState.CONFIRMED,
                parent_budget_id=budget_id,
            )

        logger.info(
            "Revised budget %s from %s to %s as budget %s",
            budget_id,
            budget.budgeted_amount,
            new_amount,
            revised_id,
        )
        return revised_id

    def archive_budget(self, budget_id: int) -> None:
        """Archive a budget.

        Raises:
            NotFoundError: If the budget doesn't exist
            ConflictError: If it is already archived
        """
        budget = self._require_budget(budget_id)
        if budget.is_archived:
            raise ConflictError(f"Budget '{budget.name}' is already archived")
        self.db.set_budget_state(budget_id, BudgetState.ARCHIVED)
        logger.info("Archived budget %s", budget_id)

    def get_budget(self, budget_id: int) -> Optional[Budget]:
        """Get budget by ID.

        Args:
            budget_id: Budget ID

        Returns:
            Budget or None if not found
        """
        return self.db.get_budget(budget_id)

    def list_budgets(self, cost_center_id: Optional[int] = None, include_archived: bool = False) -> list[Budget]:
        """List budgets ordered by ID, optionally for one cost center."""
        return self.db.list_budgets(cost_center_id=cost_center_id, include_archived=include_archived)

    def list_revisions(self, budget_id: int) -> list[BudgetRevision]:
        """List the revision history of a budget.

        Raises:
            NotFoundError: If the budget doesn't exist
        """
        self._require_budget(budget_id)
        return self.db.list_budget_revisions(budget_id)

    def get_performance(self, budget_id: int) -> BudgetPerformance:
        """Compare a budget against what its cost center achieved.

        Income budgets count invoice lines and expense budgets count bill
        lines. A line counts when it is assigned to the budget's cost center
        and its document is posted, partially paid or paid with a document
        date inside the budget period.

        Raises:
            NotFoundError: If the budget doesn't exist
        """
        budget = self._require_budget(budget_id)
        achieved = self.db.sum_line_subtotals(
            cost_center_id=budget.cost_center_id,
            kind=budget.budget_type.document_kind,
            start_date=budget.start_date,
            end_date=budget.end_date,
            statuses=PAYABLE_STATUS_ORDER,
        )
        if budget.budgeted_amount > 0:
            percentage = (achieved / budget.budgeted_amount * HUNDRED).quantize(CENT)
        else:
            percentage = Decimal("0.00")

        return BudgetPerformance(
            budget_id=budget_id,
            budgeted=budget.budgeted_amount,
            achieved=achieved,
            remaining=budget.budgeted_amount - achieved,
            achievement_percentage=percentage,
        )

    def _require_budget(self, budget_id: int) -> Budget:
        budget = self.db.get_budget(budget_id)
        if budget is None:
            raise NotFoundError(not_found("Budget", budget_id))
        return budget


def _to_type(budget_type: Union[BudgetType, str]) -> BudgetType:
    try:
        return BudgetType(budget_type)
    except ValueError:
        raise ValidationError(f"Unknown budget type '{budget_type}'. Use 'income' or 'expense'") from None


def _to_amount(amount: Decimal) -> Decimal:
    if not amount.is_finite() or amount < 0:
        raise ValidationError(f"Budgeted amount must be zero or more, got {amount}")
    if amount != amount.quantize(CENT):
        raise ValidationError(f"Budgeted amount {amount} has more than two decimal places")
    return amount
