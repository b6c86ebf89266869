"""Rule matching and conflict resolution for cost center assignment.

A rule matches a context only if every condition it sets is satisfied;
conditions left unset are wildcards. Among matching rules the winner is
picked by a total order so repeated evaluation always agrees:

1. Higher match score (number of satisfied conditions)
2. Higher explicit priority
3. Earlier creation time
4. Lower rule ID
"""

from datetime import datetime
from typing import Iterable, Optional

from furnledger.domain.entities import AssignmentRule, MatchContext, MatchResult, RuleScore

PARTNER_TAG = "Partner Tag"
PARTNER = "Partner"
PRODUCT_CATEGORY = "Product Category"
PRODUCT = "Product"

NO_MATCH = RuleScore(score=0, matched_fields=(), is_valid=False)


def calculate_specificity(
    partner_tag_id: Optional[int] = None,
    partner_id: Optional[int] = None,
    product_category_id: Optional[int] = None,
    product_id: Optional[int] = None,
) -> int:
    """Count the conditions that are set."""
    return sum(
        1
        for value in (partner_tag_id, partner_id, product_category_id, product_id)
        if value is not None
    )


def specificity_label(specificity: int) -> str:
    """Human label for a rule's specificity."""
    if specificity >= 3:
        return "Very Specific"
    if specificity == 2:
        return "Specific"
    if specificity == 1:
        return "Generic"
    return "No Rules"


def score_rule(rule: AssignmentRule, context: MatchContext) -> RuleScore:
    """Score a rule against a context.

    Args:
        rule: Rule to evaluate
        context: Facts about the transaction line

    Returns:
        RuleScore; ``is_valid`` is False if any set condition fails or the
        rule has no conditions at all
    """
    checks = (
        (PARTNER_TAG, rule.partner_tag_id, lambda v: v in context.partner_tag_ids),
        (PARTNER, rule.partner_id, lambda v: v == context.partner_id),
        (PRODUCT_CATEGORY, rule.product_category_id, lambda v: v == context.product_category_id),
        (PRODUCT, rule.product_id, lambda v: v == context.product_id),
    )

    matched: list[str] = []
    for label, value, satisfied in checks:
        if value is None:
            continue
        if not satisfied(value):
            return NO_MATCH
        matched.append(label)

    # Rules without conditions are rejected at creation; never let one through
    if not matched:
        return NO_MATCH

    return RuleScore(score=len(matched), matched_fields=tuple(matched), is_valid=True)


def resolution_key(rule: AssignmentRule, score: RuleScore) -> tuple[int, int, datetime, int]:
    """Sort key that puts the winning rule first."""
    return (-score.score, -rule.priority, rule.created_at, rule.id)


def resolve(candidates: Iterable[tuple[AssignmentRule, RuleScore]]) -> MatchResult:
    """Pick the single winner among valid (rule, score) pairs.

    Returns:
        MatchResult for the winner, or an empty MatchResult if there are
        no candidates
    """
    best: Optional[tuple[AssignmentRule, RuleScore]] = None
    for rule, score in candidates:
        if best is None or resolution_key(rule, score) < resolution_key(*best):
            best = (rule, score)

    if best is None:
        return MatchResult()

    rule, score = best
    return MatchResult(
        rule_id=rule.id,
        rule_name=rule.name,
        cost_center_id=rule.cost_center_id,
        score=score.score,
        matched_fields=score.matched_fields,
    )


def find_best_match(rules: Iterable[AssignmentRule], context: MatchContext) -> MatchResult:
    """Score every active rule against a context and resolve the winner."""
    candidates = []
    for rule in rules:
        if rule.is_archived:
            continue
        score = score_rule(rule, context)
        if score.is_valid:
            candidates.append((rule, score))
    return resolve(candidates)
