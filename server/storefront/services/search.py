from __future__ import annotations

import asyncio
import inspect
import logging
import time
from typing import Awaitable, Callable, Mapping, Sequence

from storefront.core.config import get_settings
from storefront.core.exceptions import AppError
from storefront.models.products import ProductRecord
from storefront.models.search import ScoredCandidate, SearchOptions, SearchResult
from storefront.services.catalog import CatalogStore, HttpCatalogStore, InMemoryCatalogStore
from storefront.services.catalog_cache import CatalogCache
from storefront.services.debounce import Debouncer
from storefront.services.filters import apply_filters
from storefront.services.ranking import rank
from storefront.services.relevance import prepare_query, score_product
from storefront.services.suggestions import generate_suggestions
from storefront.services.text import normalize

logger = logging.getLogger("storefront.search")

BrandLookup = Callable[[set[str]], Mapping[str, str] | Awaitable[Mapping[str, str]]]


class CatalogConfigError(AppError):
    status_code = 500
    error_type = "CATALOG_CONFIG_ERROR"


class SearchService:
    def __init__(
        self,
        cache: CatalogCache,
        brand_lookup: BrandLookup | None = None,
        *,
        default_limit: int = 50,
        max_suggestions: int = 5,
        min_term_length: int = 2,
        timer: Callable[[], float] = time.perf_counter,
        debouncer: Debouncer | None = None,
    ) -> None:
        self._cache = cache
        self._brand_lookup = brand_lookup
        self._brand_names: dict[str, str] = {}
        self._default_limit = max(1, default_limit)
        self._max_suggestions = max(0, max_suggestions)
        self._min_term_length = max(1, min_term_length)
        self._timer = timer
        self._debouncer = debouncer or Debouncer(0)

    @classmethod
    def from_settings(cls) -> "SearchService":
        settings = get_settings()
        backend = (settings.catalog_store_backend or "memory").strip().lower()

        store: CatalogStore
        if backend == "memory":
            store = InMemoryCatalogStore.from_file(settings.catalog_seed_path)
        elif backend == "http":
            if not settings.catalog_http_base_url:
                raise CatalogConfigError("CATALOG_HTTP_BASE_URL must be configured when CATALOG_STORE_BACKEND=http.")
            store = HttpCatalogStore(
                settings.catalog_http_base_url,
                timeout=float(settings.catalog_http_timeout_sec),
            )
        else:
            raise CatalogConfigError(f"Unsupported CATALOG_STORE_BACKEND: {settings.catalog_store_backend}")

        cache = CatalogCache(
            store,
            ttl_seconds=settings.catalog_cache_ttl_sec,
            max_records=settings.catalog_max_records,
        )
        return cls(
            cache,
            brand_lookup=store.fetch_brand_names,
            default_limit=settings.search_default_limit,
            max_suggestions=settings.search_max_suggestions,
            min_term_length=settings.search_min_term_length,
            debouncer=Debouncer.from_milliseconds(settings.suggest_debounce_ms),
        )

    @property
    def cache(self) -> CatalogCache:
        return self._cache

    @property
    def default_limit(self) -> int:
        return self._default_limit

    async def search_async(self, term: str, options: SearchOptions | None = None) -> SearchResult:
        started = self._timer()
        opts = options or SearchOptions(limit=self._default_limit)

        if len(normalize(term)) < self._min_term_length:
            return SearchResult(searchTerm=term, executionTime=self._elapsed_ms(started))

        catalog = await self._load_catalog()
        candidates = apply_filters(catalog, opts)

        query = prepare_query(term)
        scored: list[ScoredCandidate] = []
        for product in candidates:
            relevance = score_product(product, query)
            if relevance > 0:
                scored.append(ScoredCandidate(product=product, relevance_score=relevance))

        ranked = rank(scored, opts.sortBy)
        products = ranked[: opts.limit]
        suggestions = generate_suggestions(term, catalog, self._max_suggestions)

        execution_ms = self._elapsed_ms(started)
        logger.info(
            "search.complete",
            extra={
                "term": term,
                "catalog_size": len(catalog),
                "filtered": len(candidates),
                "matched": len(scored),
                "returned": len(products),
                "sort_by": opts.sortBy.value,
                "duration_ms": execution_ms,
            },
        )

        return SearchResult(
            products=products,
            totalCount=len(scored),
            searchTerm=term,
            executionTime=execution_ms,
            suggestions=suggestions,
        )

    def search(self, term: str, options: SearchOptions | None = None) -> SearchResult:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(self.search_async(term, options))

        raise RuntimeError("search() cannot be called from an active event loop; use search_async().")

    async def suggest_async(self, term: str, max_suggestions: int | None = None) -> list[str]:
        if len(normalize(term)) < self._min_term_length:
            return []

        limit = self._max_suggestions if max_suggestions is None else max_suggestions
        if limit <= 0:
            return []

        catalog = await self._load_catalog()
        return generate_suggestions(term, catalog, limit)

    def suggest(self, term: str, max_suggestions: int | None = None) -> list[str]:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(self.suggest_async(term, max_suggestions))

        raise RuntimeError("suggest() cannot be called from an active event loop; use suggest_async().")

    def suggest_debounced(
        self, stream: str, term: str, max_suggestions: int | None = None
    ) -> asyncio.Task[list[str]]:
        """
        Schedules suggestions for one input box. A newer keystroke on the same
        stream cancels the previous request while it is still waiting.
        """
        return self._debouncer.schedule(stream, lambda: self.suggest_async(term, max_suggestions))

    def clear_cache(self) -> None:
        self._debouncer.cancel_all()
        self._brand_names.clear()
        self._cache.clear()

    async def _load_catalog(self) -> list[ProductRecord]:
        catalog = await self._cache.get_async()
        return await self._with_brand_names(catalog)

    async def _with_brand_names(self, catalog: Sequence[ProductRecord]) -> list[ProductRecord]:
        """
        Fills in brand names the store did not denormalize. Returns copies so
        the cached snapshot is never modified.
        """
        missing = {product.brandId for product in catalog if product.brandId and not product.brandName}
        missing.difference_update(self._brand_names)
        if missing and self._brand_lookup is not None:
            await self._resolve_brand_names(missing)
        if not self._brand_names:
            return list(catalog)

        enriched: list[ProductRecord] = []
        for product in catalog:
            name = self._brand_names.get(product.brandId) if product.brandId and not product.brandName else None
            if name:
                product = product.model_copy(update={"brandName": name})
            enriched.append(product)
        return enriched

    async def _resolve_brand_names(self, missing: set[str]) -> None:
        """Looks up unknown brand ids once and remembers the names until the cache is cleared."""
        try:
            names = self._brand_lookup(missing)
            if inspect.isawaitable(names):
                names = await names
        except Exception:
            logger.warning("search.brand_lookup_failed", extra={"brand_ids": sorted(missing)}, exc_info=True)
            return

        if not isinstance(names, Mapping):
            logger.warning(
                "search.brand_lookup_failed",
                extra={"brand_ids": sorted(missing), "result_type": type(names).__name__},
            )
            return

        for brand_id, name in names.items():
            if brand_id in missing and isinstance(name, str) and name.strip():
                self._brand_names[brand_id] = name.strip()

    def _elapsed_ms(self, started: float) -> float:
        return round((self._timer() - started) * 1000, 2)
