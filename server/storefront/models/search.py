from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List

from pydantic import BaseModel, Field

from storefront.models.products import ProductRecord


class SortBy(str, Enum):
    RELEVANCE = "relevance"
    PRICE = "price"
    NAME = "name"
    NEWEST = "newest"
    SCORE = "score"


class SearchOptions(BaseModel):
    limit: int = Field(50, ge=1, description="Maximum number of products returned")
    includeOutOfStock: bool = Field(False, description="Keep products whose stock is Rupture")
    categoryIds: List[str] = Field(default_factory=list, description="Any-of category filter")
    subCategoryIds: List[str] = Field(default_factory=list, description="Any-of subcategory filter")
    brandIds: List[str] = Field(default_factory=list, description="Any-of brand filter")
    minPrice: float | None = Field(None, ge=0, description="Inclusive lower price bound")
    maxPrice: float | None = Field(None, ge=0, description="Inclusive upper price bound")
    sortBy: SortBy = Field(SortBy.RELEVANCE, description="Ordering of the returned products")


class SearchResult(BaseModel):
    products: List[ProductRecord] = Field(default_factory=list, description="Ranked products")
    totalCount: int = Field(0, ge=0, description="Number of matches before the limit was applied")
    searchTerm: str = Field(..., description="Query as submitted by the caller")
    executionTime: float = Field(0.0, ge=0, description="Elapsed time in milliseconds")
    suggestions: List[str] = Field(default_factory=list, description="Alternate queries from catalog names and brands")


class SuggestionsResponse(BaseModel):
    query: str = Field(..., description="Query as submitted by the caller")
    suggestions: List[str] = Field(default_factory=list, description="Distinct product or brand names")


@dataclass(frozen=True)
class ScoredCandidate:
    product: ProductRecord
    relevance_score: int
