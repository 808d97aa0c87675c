from functools import lru_cache
from typing import List

from fastapi import APIRouter, Depends, Query

from storefront.models.search import SearchOptions, SearchResult, SortBy, SuggestionsResponse
from storefront.services.search import SearchService

router = APIRouter(prefix="/search", tags=["search"])


@lru_cache
def get_search_service() -> SearchService:
    # One service per process so the catalog cache outlives individual requests.
    return SearchService.from_settings()


@router.get("", response_model=SearchResult)
async def search_products(
    q: str = Query(..., description="Free-text product query."),
    limit: int | None = Query(None, ge=1, le=200, description="Maximum number of products to return."),
    includeOutOfStock: bool = Query(False, description="Include products whose stock is Rupture."),
    categoryIds: List[str] | None = Query(None, description="Restrict to any of these categories."),
    subCategoryIds: List[str] | None = Query(None, description="Restrict to any of these subcategories."),
    brandIds: List[str] | None = Query(None, description="Restrict to any of these brands."),
    minPrice: float | None = Query(None, ge=0, description="Inclusive lower price bound."),
    maxPrice: float | None = Query(None, ge=0, description="Inclusive upper price bound."),
    sortBy: SortBy = Query(SortBy.RELEVANCE, description="Ordering of the returned products."),
    service: SearchService = Depends(get_search_service),
) -> SearchResult:
    options = SearchOptions(
        limit=limit or service.default_limit,
        includeOutOfStock=includeOutOfStock,
        categoryIds=categoryIds or [],
        subCategoryIds=subCategoryIds or [],
        brandIds=brandIds or [],
        minPrice=minPrice,
        maxPrice=maxPrice,
        sortBy=sortBy,
    )
    return await service.search_async(q, options)


@router.get("/suggestions", response_model=SuggestionsResponse)
async def search_suggestions(
    q: str = Query(..., description="Partial query typed by the shopper."),
    max_suggestions: int | None = Query(None, alias="max", ge=1, le=20, description="Maximum number of suggestions."),
    service: SearchService = Depends(get_search_service),
) -> SuggestionsResponse:
    suggestions = await service.suggest_async(q, max_suggestions)
    return SuggestionsResponse(query=q, suggestions=suggestions)


@router.delete("/cache")
async def clear_search_cache(service: SearchService = Depends(get_search_service)) -> dict[str, str]:
    service.clear_cache()
    return {"status": "cleared"}
