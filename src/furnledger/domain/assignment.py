"""Automatic cost center assignment service."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional, Sequence

from furnledger.domain.context import ContextBuilder
from furnledger.domain.entities import AssignmentRule, LineAssignment, LineRef, MatchResult
from furnledger.domain.errors import (
    ConflictError,
    InvalidRuleError,
    NotFoundError,
    ValidationError,
    not_found,
    rule_without_conditions,
)
from furnledger.domain.matching import calculate_specificity, find_best_match
from furnledger.domain.rule_cache import RuleCache

if TYPE_CHECKING:
    from furnledger.database.base import Database

logger = logging.getLogger(__name__)


class AssignmentService:
    """Evaluates assignment rules and administers them.

    Every method that changes a rule invalidates the rule cache before
    returning, so the next evaluation never sees the old rule set.
    """

    def __init__(
        self,
        db: Database,
        cache: Optional[RuleCache] = None,
        cache_ttl: float = 30.0,
    ):
        """Initialize assignment service.

        Args:
            db: Database instance
            cache: Rule cache to use; one backed by ``db`` is created if None
            cache_ttl: TTL in seconds for the created cache
        """
        self.db = db
        self.cache = cache if cache is not None else RuleCache(db.list_active_rules, cache_ttl)
        self.contexts = ContextBuilder(db)

    def evaluate(self, partner_id: Optional[int] = None, product_id: Optional[int] = None) -> MatchResult:
        """Find the cost center for a single line.

        Args:
            partner_id: Optional partner (contact) ID
            product_id: Optional product ID

        Returns:
            MatchResult; ``cost_center_id`` is None when no rule matches
        """
        context = self.contexts.build(partner_id=partner_id, product_id=product_id)
        result = find_best_match(self.cache.get(), context)
        if result.is_auto_assigned:
            logger.info(
                "Rule %s (%s) matched partner=%s product=%s with score %d on %s",
                result.rule_id,
                result.rule_name,
                partner_id,
                product_id,
                result.score,
                ", ".join(result.matched_fields),
            )
        else:
            logger.debug("No rule matched partner=%s product=%s", partner_id, product_id)
        return result

    def evaluate_batch(self, lines: Sequence[LineRef]) -> list[LineAssignment]:
        """Find cost centers for many lines against one fresh rule set.

        Args:
            lines: Lines to evaluate

        Returns:
            One LineAssignment per input line, in input order
        """
        if not lines:
            return []

        rules = self.cache.get(force_refresh=True)
        contexts = self.contexts.build_many(lines)

        results = []
        for line, context in zip(lines, contexts):
            match = find_best_match(rules, context)
            results.append(
                LineAssignment(
                    line_id=line.line_id,
                    cost_center_id=match.cost_center_id,
                    rule_id=match.rule_id,
                    rule_name=match.rule_name,
                )
            )

        assigned = sum(1 for r in results if r.cost_center_id is not None)
        logger.info("Batch assignment matched %d of %d lines", assigned, len(results))
        return results

    def invalidate_rule_cache(self) -> None:
        """Force the next evaluation to refetch rules."""
        self.cache.invalidate()

    def get_rule(self, rule_id: int) -> Optional[AssignmentRule]:
        """Get rule by ID.

        Args:
            rule_id: Rule ID

        Returns:
            AssignmentRule or None if not found
        """
        return self.db.get_rule(rule_id)

    def list_rules(self, include_archived: bool = False) -> list[AssignmentRule]:
        """List rules.

        Args:
            include_archived: If True, include archived rules

        Returns:
            List of rules ordered by ID
        """
        return self.db.list_rules(include_archived=include_archived)

    def create_rule(
        self,
        name: str,
        cost_center_id: int,
        partner_tag_id: Optional[int] = None,
        partner_id: Optional[int] = None,
        product_category_id: Optional[int] = None,
        product_id: Optional[int] = None,
        priority: Optional[int] = None,
    ) -> int:
        """Create an assignment rule.

        Args:
            name: Rule name
            cost_center_id: Cost center assigned when the rule wins
            partner_tag_id: Optional partner tag condition
            partner_id: Optional partner condition
            product_category_id: Optional product category condition
            product_id: Optional product condition
            priority: Explicit priority; defaults to the rule's specificity

        Returns:
            Rule ID

        Raises:
            InvalidRuleError: If no condition is set
            NotFoundError: If a referenced entity doesn't exist
            ValidationError: If the cost center is archived or the name is empty
        """
        specificity = self._validate_definition(
            name, cost_center_id, partner_tag_id, partner_id, product_category_id, product_id
        )
        rule_id = self.db.create_rule(
            name=name.strip(),
            cost_center_id=cost_center_id,
            priority=specificity if priority is None else priority,
            partner_tag_id=partner_tag_id,
            partner_id=partner_id,
            product_category_id=product_category_id,
            product_id=product_id,
        )
        self.invalidate_rule_cache()
        logger.info("Created assignment rule %s '%s' (specificity %d)", rule_id, name, specificity)
        return rule_id

    def update_rule(
        self,
        rule_id: int,
        name: str,
        cost_center_id: int,
        partner_tag_id: Optional[int] = None,
        partner_id: Optional[int] = None,
        product_category_id: Optional[int] = None,
        product_id: Optional[int] = None,
        priority: Optional[int] = None,
    ) -> None:
        """Replace a rule's definition.

        Conditions not passed are cleared, matching how the rule form
        submits the whole model.

        Raises:
            NotFoundError: If the rule or a referenced entity doesn't exist
            ConflictError: If the rule is archived
            InvalidRuleError: If no condition is set
        """
        rule = self.db.get_rule(rule_id)
        if rule is None:
            raise NotFoundError(not_found("Rule", rule_id))
        if rule.is_archived:
            raise ConflictError(f"Rule {rule_id} is archived and cannot be edited")

        specificity = self._validate_definition(
            name, cost_center_id, partner_tag_id, partner_id, product_category_id, product_id
        )
        self.db.update_rule(
            rule_id=rule_id,
            name=name.strip(),
            cost_center_id=cost_center_id,
            priority=specificity if priority is None else priority,
            partner_tag_id=partner_tag_id,
            partner_id=partner_id,
            product_category_id=product_category_id,
            product_id=product_id,
        )
        self.invalidate_rule_cache()
        logger.info("Updated assignment rule %s", rule_id)

    def archive_rule(self, rule_id: int) -> None:
        """Archive a rule. Archived rules never match again.

        Raises:
            NotFoundError: If the rule doesn't exist
            ConflictError: If the rule is already archived
        """
        rule = self.db.get_rule(rule_id)
        if rule is None:
            raise NotFoundError(not_found("Rule", rule_id))
        if rule.is_archived:
            raise ConflictError(f"Rule {rule_id} is already archived")

        self.db.archive_rule(rule_id)
        self.invalidate_rule_cache()
        logger.info("Archived assignment rule %s", rule_id)

    def _validate_definition(
        self,
        name: str,
        cost_center_id: int,
        partner_tag_id: Optional[int],
        partner_id: Optional[int],
        product_category_id: Optional[int],
        product_id: Optional[int],
    ) -> int:
        """Validate a rule definition and return its specificity."""
        if not name or not name.strip():
            raise ValidationError("Rule name must not be empty")

        specificity = calculate_specificity(partner_tag_id, partner_id, product_category_id, product_id)
        if specificity == 0:
            raise InvalidRuleError(rule_without_conditions())

        cost_center = self.db.get_cost_center(cost_center_id)
        if cost_center is None:
            raise NotFoundError(not_found("Cost center", cost_center_id))
        if cost_center.is_archived:
            raise ValidationError(f"Cost center '{cost_center.code}' is archived")

        if partner_tag_id is not None and self.db.get_tag(partner_tag_id) is None:
            raise NotFoundError(not_found("Tag", partner_tag_id))
        if partner_id is not None and self.db.get_contact(partner_id) is None:
            raise NotFoundError(not_found("Contact", partner_id))
        if product_category_id is not None and self.db.get_product_category(product_category_id) is None:
            raise NotFoundError(not_found("Product category", product_category_id))
        if product_id is not None and self.db.get_product(product_id) is None:
            raise NotFoundError(not_found("Product", product_id))

        return specificity
