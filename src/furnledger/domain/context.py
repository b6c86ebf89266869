"""Match context construction."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional, Sequence

from furnledger.domain.entities import LineRef, MatchContext

if TYPE_CHECKING:
    from furnledger.database.base import Database

logger = logging.getLogger(__name__)


class ContextBuilder:
    """Resolves partner tags and product category for rule matching.

    Partner and product are resolved independently. An unknown ID resolves
    to no tags or no category instead of failing, so rules keyed on the other
    dimension can still match.
    """

    def __init__(self, db: Database):
        """Initialize context builder.

        Args:
            db: Database instance
        """
        self.db = db

    def build(self, partner_id: Optional[int] = None, product_id: Optional[int] = None) -> MatchContext:
        """Build the context for a single line.

        Args:
            partner_id: Optional partner (contact) ID from the document header
            product_id: Optional product ID from the line

        Returns:
            MatchContext
        """
        tag_ids: set[int] = set()
        if partner_id is not None:
            tag_ids = self.db.get_contact_tag_ids(partner_id)

        category_id = None
        if product_id is not None:
            category_id = self.db.get_product_category_id(product_id)
            if category_id is None:
                logger.debug("Product %s has no category", product_id)

        return MatchContext(
            partner_id=partner_id,
            partner_tag_ids=frozenset(tag_ids),
            product_id=product_id,
            product_category_id=category_id,
        )

    def build_many(self, lines: Sequence[LineRef]) -> list[MatchContext]:
        """Build contexts for many lines with one bulk lookup per dimension.

        Args:
            lines: Lines to build contexts for

        Returns:
            Contexts in the same order as ``lines``
        """
        partner_ids = {line.partner_id for line in lines if line.partner_id is not None}
        product_ids = {line.product_id for line in lines if line.product_id is not None}

        tag_map = self.db.get_contact_tag_map(partner_ids) if partner_ids else {}
        category_map = self.db.get_product_category_map(product_ids) if product_ids else {}

        return [
            MatchContext(
                partner_id=line.partner_id,
                partner_tag_ids=frozenset(tag_map.get(line.partner_id, ())),
                product_id=line.product_id,
                product_category_id=category_map.get(line.product_id),
            )
            for line in lines
        ]
