"""Utility functions for furnledger."""

from furnledger.utils.date_parser import parse_date
from furnledger.utils.amount_parser import parse_amount
from furnledger.utils.resolvers import resolve_cost_center, resolve_product_category, resolve_tag

__all__ = [
    "parse_date",
    "parse_amount",
    "resolve_cost_center",
    "resolve_product_category",
    "resolve_tag",
]
