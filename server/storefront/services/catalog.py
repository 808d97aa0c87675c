from __future__ import annotations

import json
import logging
import math
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Awaitable, Iterable, Mapping, Protocol, Sequence

import httpx

from storefront.core.exceptions import AppError
from storefront.models.products import ProductRecord, StockStatus

logger = logging.getLogger("storefront.catalog")

RawRecord = Mapping[str, Any]

DEFAULT_PRODUCT_NAME = "Produit sans nom"


class CatalogFetchError(AppError):
    status_code = 503
    error_type = "CATALOG_FETCH_ERROR"


class RecordProcessingError(AppError):
    status_code = 422
    error_type = "CATALOG_RECORD_ERROR"


class CatalogStore(Protocol):
    def fetch_top_products(  # pragma: no cover - protocol definition
        self, max_count: int
    ) -> Sequence[RawRecord] | Awaitable[Sequence[RawRecord]]:
        ...

    def fetch_brand_names(  # pragma: no cover - protocol definition
        self, brand_ids: set[str]
    ) -> Mapping[str, str] | Awaitable[Mapping[str, str]]:
        ...


class InMemoryCatalogStore:
    """
    Catalog store backed by plain dictionaries, optionally loaded from a JSON
    export of the document store. The file is read on every fetch so that a
    missing or corrupt export surfaces as a fetch failure.
    """

    def __init__(
        self,
        products: Sequence[RawRecord] | None = None,
        brands: Mapping[str, str] | None = None,
        *,
        path: Path | None = None,
    ) -> None:
        self._products = list(products or [])
        self._brands = dict(brands or {})
        self._path = path

    @classmethod
    def from_file(cls, path: str | Path) -> "InMemoryCatalogStore":
        return cls(path=Path(path))

    def fetch_top_products(self, max_count: int) -> list[RawRecord]:
        products, _ = self._load()
        ranked = sorted(products, key=lambda raw: _coerce_number(raw.get("score"), 0.0), reverse=True)
        return ranked[: max(0, max_count)]

    def fetch_brand_names(self, brand_ids: set[str]) -> dict[str, str]:
        _, brands = self._load()
        return {brand_id: brands[brand_id] for brand_id in brand_ids if brand_id in brands}

    def _load(self) -> tuple[list[RawRecord], dict[str, str]]:
        if self._path is None:
            return self._products, self._brands

        try:
            with self._path.open("r", encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, ValueError) as exc:
            raise CatalogFetchError(f"Catalog export {self._path} could not be read.") from exc

        brands = payload.get("brands") if isinstance(payload, Mapping) else None
        return extract_documents(payload), extract_brand_names(brands)


class HttpCatalogStore:
    def __init__(self, base_url: str, *, timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def fetch_top_products(self, max_count: int) -> list[RawRecord]:
        payload = await self._get_json(
            "/products",
            params={"orderBy": "score", "direction": "desc", "limit": max_count},
        )
        return extract_documents(payload)[: max(0, max_count)]

    async def fetch_brand_names(self, brand_ids: set[str]) -> dict[str, str]:
        if not brand_ids:
            return {}
        payload = await self._get_json("/brands", params={"ids": ",".join(sorted(brand_ids))})
        return extract_brand_names(payload)

    async def _get_json(self, path: str, *, params: dict[str, Any]) -> Any:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, params=params)
        except httpx.RequestError as exc:
            raise CatalogFetchError("Catalog store is unavailable.", details={"url": url}) from exc

        if response.status_code != 200:
            raise CatalogFetchError(
                "Catalog store request failed.",
                details={"url": url, "status": response.status_code},
            )

        try:
            return response.json()
        except ValueError as exc:
            raise CatalogFetchError("Catalog store response was not valid JSON.", details={"url": url}) from exc


def extract_documents(payload: object) -> list[RawRecord]:
    """
    Normalizes the list shapes a document store export can take (a bare list,
    or an envelope keyed by ``products``/``documents``) into raw records.
    """
    if isinstance(payload, Mapping):
        for key in ("products", "documents", "items"):
            if key in payload:
                payload = payload[key]
                break
        else:
            return []

    if not isinstance(payload, (list, tuple)):
        return []

    return [item for item in payload if isinstance(item, Mapping)]


def extract_brand_names(payload: object) -> dict[str, str]:
    """
    Accepts ``{"brands": {...}}``, ``{"brands": [{"id", "name"}]}`` or either
    inner shape directly, and returns an id -> name mapping.
    """
    names: dict[str, str] = {}

    if isinstance(payload, Mapping) and "brands" in payload:
        payload = payload["brands"]

    if isinstance(payload, Mapping):
        for brand_id, name in payload.items():
            if isinstance(name, str) and name.strip():
                names[str(brand_id)] = name.strip()
        return names

    if isinstance(payload, (list, tuple)):
        for item in payload:
            if not isinstance(item, Mapping):
                continue
            brand_id = item.get("id")
            name = item.get("name")
            if brand_id and isinstance(name, str) and name.strip():
                names[str(brand_id)] = name.strip()

    return names


def parse_product_record(raw: object, fallback_id: str | None = None) -> ProductRecord:
    """
    Maps an untyped store document onto ``ProductRecord``. Each field falls
    back to its default when missing or malformed; only a document that is not
    a mapping at all is rejected.
    """
    if not isinstance(raw, Mapping):
        raise RecordProcessingError(
            "Catalog document is not an object.",
            details={"id": fallback_id, "type": type(raw).__name__},
        )

    raw_id = raw.get("id")
    if isinstance(raw_id, int) and not isinstance(raw_id, bool):
        raw_id = str(raw_id)
    record_id = _coerce_str(raw_id) or (fallback_id or "")

    category_ids = _coerce_str_list(raw.get("categoryIds"))
    if not category_ids and _coerce_str(raw.get("categoryId")):
        category_ids = [_coerce_str(raw.get("categoryId"))]
    sub_category_ids = _coerce_str_list(raw.get("subCategoryIds"))
    if not sub_category_ids and _coerce_str(raw.get("subCategoryId")):
        sub_category_ids = [_coerce_str(raw.get("subCategoryId"))]

    original_price = raw.get("originalPrice")

    return ProductRecord(
        id=record_id,
        name=_coerce_str(raw.get("name"), DEFAULT_PRODUCT_NAME),
        slug=_coerce_str(raw.get("slug"), record_id),
        description=_coerce_str(raw.get("description")),
        shortDescription=_coerce_str(raw.get("shortDescription")) or None,
        brandId=_coerce_str(raw.get("brandId")) or None,
        brandName=_coerce_str(raw.get("brandName")) or None,
        categoryIds=category_ids,
        subCategoryIds=sub_category_ids,
        price=max(0.0, _coerce_number(raw.get("price"), 0.0)),
        originalPrice=_coerce_number(original_price, 0.0) if original_price else None,
        stock=_coerce_stock(raw.get("stock")),
        sku=_coerce_str(raw.get("sku"), record_id),
        images=_coerce_str_list(raw.get("images")),
        imagePaths=_coerce_str_list(raw.get("imagePaths")),
        contenance=_coerce_str(raw.get("contenance")) or None,
        badgeText=_coerce_str(raw.get("badgeText")) or None,
        badgeColor=_coerce_str(raw.get("badgeColor")) or None,
        score=_coerce_number(raw.get("score"), 0.0),
        createdAt=_coerce_datetime(raw.get("createdAt")),
        updatedAt=_coerce_datetime(raw.get("updatedAt")),
    )


def load_catalog(raw_records: Iterable[object]) -> list[ProductRecord]:
    products: list[ProductRecord] = []
    skipped = 0
    for index, raw in enumerate(raw_records):
        try:
            products.append(parse_product_record(raw, fallback_id=f"record-{index}"))
        except RecordProcessingError as exc:
            skipped += 1
            logger.warning("catalog.record_skipped", extra={"index": index, "reason": exc.message})
        except Exception as exc:
            skipped += 1
            logger.warning("catalog.record_skipped", extra={"index": index, "reason": repr(exc)}, exc_info=True)
    if skipped:
        logger.info("catalog.parsed", extra={"parsed": len(products), "skipped": skipped})
    return products


def _coerce_str(value: object, default: str = "") -> str:
    if isinstance(value, str):
        return value.strip()
    return default


def _coerce_number(value: object, default: float) -> float:
    if value is None or value == "" or isinstance(value, bool):
        return default
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def _coerce_str_list(value: object) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    items: list[str] = []
    for item in value:
        if isinstance(item, str) and item.strip() and item.strip() not in items:
            items.append(item.strip())
    return items


_STOCK_ALIASES = {
    "en stock": StockStatus.IN_STOCK,
    "instock": StockStatus.IN_STOCK,
    "sur commande": StockStatus.ON_ORDER,
    "onorder": StockStatus.ON_ORDER,
    "rupture": StockStatus.OUT_OF_STOCK,
    "outofstock": StockStatus.OUT_OF_STOCK,
}


def _coerce_stock(value: object) -> StockStatus:
    if isinstance(value, StockStatus):
        return value
    if isinstance(value, str):
        return _STOCK_ALIASES.get(value.strip().lower(), StockStatus.IN_STOCK)
    return StockStatus.IN_STOCK


def _coerce_datetime(value: object) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    seconds: float | None = None
    if isinstance(value, Mapping):
        raw_seconds = value.get("seconds", value.get("_seconds"))
        if raw_seconds is not None:
            seconds = _coerce_number(raw_seconds, math.nan)
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        # Epoch values above 1e11 are milliseconds.
        seconds = _coerce_number(value, math.nan)
        if seconds > 1e11:
            seconds /= 1000
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            parsed = None
        if parsed is not None:
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)

    if seconds is not None and not math.isnan(seconds):
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            pass

    return datetime.now(timezone.utc)
