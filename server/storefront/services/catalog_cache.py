from __future__ import annotations

import asyncio
import inspect
import logging
import time
from enum import Enum
from typing import Callable

from storefront.models.products import ProductRecord
from storefront.services.catalog import CatalogStore, load_catalog

logger = logging.getLogger("storefront.catalog")

Clock = Callable[[], float]

DEFAULT_TTL_SECONDS = 5 * 60
DEFAULT_MAX_RECORDS = 1000


class CacheState(str, Enum):
    FRESH = "fresh"
    STALE = "stale"


class CatalogCache:
    """
    TTL-bounded snapshot of the catalog store.

    The snapshot is replaced wholesale on every successful refresh. When a
    refresh fails the previous snapshot keeps being served, however old it is;
    with no previous snapshot the catalog is empty. Concurrent refreshes are
    not coordinated and the last one to finish wins.
    """

    def __init__(
        self,
        store: CatalogStore,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_records: int = DEFAULT_MAX_RECORDS,
        clock: Clock = time.monotonic,
    ) -> None:
        self._store = store
        self._ttl_seconds = ttl_seconds
        self._max_records = max(1, max_records)
        self._clock = clock
        self._snapshot: list[ProductRecord] | None = None
        self._timestamp: float | None = None

    @property
    def store(self) -> CatalogStore:
        return self._store

    @property
    def snapshot(self) -> list[ProductRecord] | None:
        return self._snapshot

    @property
    def state(self) -> CacheState:
        if self._timestamp is None:
            return CacheState.STALE
        if self._clock() - self._timestamp < self._ttl_seconds:
            return CacheState.FRESH
        return CacheState.STALE

    @property
    def age_seconds(self) -> float | None:
        if self._timestamp is None:
            return None
        return self._clock() - self._timestamp

    async def get_async(self) -> list[ProductRecord]:
        if self._snapshot is not None and self.state is CacheState.FRESH:
            return self._snapshot
        return await self.refresh_async()

    def get(self) -> list[ProductRecord]:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(self.get_async())

        raise RuntimeError("get() cannot be called from an active event loop; use get_async().")

    async def refresh_async(self) -> list[ProductRecord]:
        try:
            raw_records = self._store.fetch_top_products(self._max_records)
            if inspect.isawaitable(raw_records):
                raw_records = await raw_records
        except Exception as exc:  # CatalogFetchError or anything a third-party store raises
            return self._serve_stale(exc)

        products = load_catalog(raw_records)
        if not products:
            logger.warning("catalog.empty")

        self._snapshot = products
        self._timestamp = self._clock()
        logger.info("catalog.refresh", extra={"count": len(products)})
        return products

    def clear(self) -> None:
        self._snapshot = None
        self._timestamp = None
        logger.info("catalog.cleared")

    def _serve_stale(self, exc: Exception) -> list[ProductRecord]:
        if self._snapshot is not None:
            logger.warning(
                "catalog.refresh_failed",
                extra={"fallback": "stale", "count": len(self._snapshot), "age_seconds": self.age_seconds},
                exc_info=exc,
            )
            return self._snapshot
        logger.warning("catalog.refresh_failed", extra={"fallback": "empty"}, exc_info=exc)
        return []
