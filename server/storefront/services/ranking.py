from __future__ import annotations

import re
from typing import Any, Callable, Sequence

from storefront.models.products import ProductRecord
from storefront.models.search import ScoredCandidate, SortBy
from storefront.services.text import normalize

_DIGITS_RE = re.compile(r"(\d+)")

SortKey = Callable[[ScoredCandidate], Any]


def natural_key(value: str) -> tuple[tuple[int, int, str], ...]:
    """
    Accent- and case-insensitive key in which digit runs compare as numbers,
    so "Masque 2" sorts before "Masque 10".
    """
    parts: list[tuple[int, int, str]] = []
    for chunk in _DIGITS_RE.split(normalize(value)):
        if not chunk:
            continue
        if chunk.isdigit():
            parts.append((0, int(chunk), chunk))
        else:
            parts.append((1, 0, chunk))
    return tuple(parts)


_SORT_KEYS: dict[SortBy, SortKey] = {
    SortBy.RELEVANCE: lambda c: (-c.relevance_score, -c.product.score, c.product.id),
    SortBy.PRICE: lambda c: (c.product.price, -c.relevance_score, c.product.id),
    SortBy.NAME: lambda c: (natural_key(c.product.name), c.product.id),
    SortBy.NEWEST: lambda c: (-c.product.createdAt.timestamp(), c.product.id),
    SortBy.SCORE: lambda c: (-c.product.score, -c.relevance_score, c.product.id),
}


def rank(candidates: Sequence[ScoredCandidate], sort_by: SortBy | str = SortBy.RELEVANCE) -> list[ProductRecord]:
    key = _SORT_KEYS[SortBy(sort_by)]
    return [candidate.product for candidate in sorted(candidates, key=key)]
