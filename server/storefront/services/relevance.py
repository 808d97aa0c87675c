from __future__ import annotations

from dataclasses import dataclass

from storefront.models.products import ProductRecord
from storefront.services.text import normalize
from storefront.services.variants import expand

NAME_EXACT = 100
NAME_CONTAINS = 80
NAME_PREFIX_BONUS = 20
BRAND_EXACT = 70
BRAND_CONTAINS = 50
BRAND_PREFIX_BONUS = 15
SHORT_DESCRIPTION_CONTAINS = 40
DESCRIPTION_CONTAINS = 30
SKU_CONTAINS = 20
MULTI_WORD_BONUS = 10

SIMILARITY_THRESHOLD = 0.4
SIMILARITY_MULTIPLIER = 30

QUALITY_THRESHOLD = 80
QUALITY_BONUS = 5


@dataclass(frozen=True)
class PreparedQuery:
    normalized: str
    variants: frozenset[str]
    words: tuple[str, ...]


@dataclass(frozen=True)
class _ProductText:
    name: str
    brand: str
    short_description: str
    description: str
    sku: str

    @classmethod
    def from_product(cls, product: ProductRecord) -> "_ProductText":
        return cls(
            name=normalize(product.name),
            brand=normalize(product.brandName),
            short_description=normalize(product.shortDescription),
            description=normalize(product.description),
            sku=normalize(product.sku),
        )


def prepare_query(term: str) -> PreparedQuery:
    normalized = normalize(term)
    return PreparedQuery(
        normalized=normalized,
        variants=expand(normalized),
        words=tuple(word for word in normalized.split(" ") if len(word) > 1),
    )


def similarity(a: str, b: str) -> float:
    """
    Share of characters that agree position by position, relative to the
    longer string. Cheap, and blind to insertions or deletions: "lisage" and
    "lissage" only agree on their first three characters.
    """
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0
    longer = max(len(a), len(b))
    matches = sum(1 for left, right in zip(a, b) if left == right)
    return matches / longer


def _best_similarity(field: str, term: str) -> float:
    if not field:
        return 0.0
    best = similarity(field, term)
    for word in field.split(" "):
        best = max(best, similarity(word, term))
    return best


def score_product(product: ProductRecord, query: PreparedQuery) -> int:
    if not query.normalized:
        return 0

    text = _ProductText.from_product(product)
    score = 0

    for variant in query.variants:
        if text.name == variant:
            score += NAME_EXACT
        elif variant in text.name:
            score += NAME_CONTAINS
            if text.name.startswith(variant):
                score += NAME_PREFIX_BONUS

        if text.brand:
            if text.brand == variant:
                score += BRAND_EXACT
            elif variant in text.brand:
                score += BRAND_CONTAINS
                if text.brand.startswith(variant):
                    score += BRAND_PREFIX_BONUS

        if text.short_description and variant in text.short_description:
            score += SHORT_DESCRIPTION_CONTAINS
        if variant in text.description:
            score += DESCRIPTION_CONTAINS
        if variant in text.sku:
            score += SKU_CONTAINS

    if len(query.words) > 1:
        found = sum(1 for word in query.words if word in text.name or word in text.brand)
        if found > 1:
            score += found * MULTI_WORD_BONUS

    if score == 0:
        for field in (text.name, text.brand):
            closeness = _best_similarity(field, query.normalized)
            if closeness > SIMILARITY_THRESHOLD:
                score += int(closeness * SIMILARITY_MULTIPLIER)

    # Quality only reorders matches; it never turns a miss into a hit.
    if score > 0 and product.score > QUALITY_THRESHOLD:
        score += QUALITY_BONUS

    return score


def score(product: ProductRecord, term: str) -> int:
    return score_product(product, prepare_query(term))
