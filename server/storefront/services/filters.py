from __future__ import annotations

from typing import Callable, Sequence

from storefront.models.products import ProductRecord, StockStatus
from storefront.models.search import SearchOptions

Predicate = Callable[[ProductRecord], bool]


def build_predicates(options: SearchOptions) -> list[Predicate]:
    """Returns the predicates active for ``options``, cheapest first."""
    predicates: list[Predicate] = []

    if not options.includeOutOfStock:
        predicates.append(lambda product: product.stock is not StockStatus.OUT_OF_STOCK)

    if options.categoryIds:
        wanted_categories = set(options.categoryIds)
        predicates.append(lambda product: not wanted_categories.isdisjoint(product.categoryIds))

    if options.subCategoryIds:
        wanted_subcategories = set(options.subCategoryIds)
        predicates.append(lambda product: not wanted_subcategories.isdisjoint(product.subCategoryIds))

    if options.brandIds:
        wanted_brands = set(options.brandIds)
        predicates.append(lambda product: product.brandId is not None and product.brandId in wanted_brands)

    min_price = options.minPrice
    if min_price is not None:
        predicates.append(lambda product: product.price >= min_price)

    max_price = options.maxPrice
    if max_price is not None:
        predicates.append(lambda product: product.price <= max_price)

    return predicates


def apply_filters(catalog: Sequence[ProductRecord], options: SearchOptions) -> list[ProductRecord]:
    filtered = list(catalog)
    for predicate in build_predicates(options):
        filtered = [product for product in filtered if predicate(product)]
    return filtered
