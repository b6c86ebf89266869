"""Resolve user-supplied codes and names to entity IDs."""

from furnledger.domain.cost_center import CostCenterService
from furnledger.domain.errors import NotFoundError, cost_center_not_found, not_found
from furnledger.domain.partner import ContactService
from furnledger.domain.product import ProductService


def resolve_cost_center(service: CostCenterService, cost_center: str | int) -> int:
    """Resolve a cost center code or ID to its ID.

    A code wins over an ID when a code happens to look numeric.

    Raises:
        NotFoundError: If no cost center matches
    """
    found = service.get_cost_center_by_code(str(cost_center).strip())
    if found is not None:
        return found.id

    cost_center_id = _as_int(cost_center)
    if cost_center_id is not None and service.get_cost_center(cost_center_id) is not None:
        return cost_center_id
    raise NotFoundError(cost_center_not_found(str(cost_center)))


def resolve_tag(service: ContactService, tag: str | int) -> int:
    """Resolve a tag name or ID to its ID.

    Raises:
        NotFoundError: If no tag matches
    """
    found = service.get_tag_by_name(str(tag).strip())
    if found is not None:
        return found.id

    tag_id = _as_int(tag)
    if tag_id is not None and service.get_tag(tag_id) is not None:
        return tag_id
    raise NotFoundError(f"Tag '{tag}' not found")


def resolve_product_category(service: ProductService, category: str | int) -> int:
    """Resolve a product category name or ID to its ID.

    Raises:
        NotFoundError: If no category matches
    """
    found = service.get_category_by_name(str(category).strip())
    if found is not None:
        return found.id

    category_id = _as_int(category)
    if category_id is not None and service.get_category(category_id) is not None:
        return category_id
    raise NotFoundError(not_found("Product category", category))


def _as_int(value: str | int):
    if isinstance(value, int):
        return value
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
