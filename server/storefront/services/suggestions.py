from __future__ import annotations

from typing import Sequence

from storefront.models.products import ProductRecord
from storefront.services.text import normalize


def generate_suggestions(term: str, catalog: Sequence[ProductRecord], max_count: int) -> list[str]:
    """
    Collects product names and brand names (as displayed, not normalized)
    whose normalized form contains the normalized term, in catalog order.
    """
    needle = normalize(term)
    if not needle or max_count <= 0:
        return []

    suggestions: dict[str, None] = {}
    for product in catalog:
        if needle in normalize(product.name):
            suggestions.setdefault(product.name, None)
            if len(suggestions) >= max_count:
                break
        if product.brandName and needle in normalize(product.brandName):
            suggestions.setdefault(product.brandName, None)
            if len(suggestions) >= max_count:
                break

    return list(suggestions)
