from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StockStatus(str, Enum):
    IN_STOCK = "En Stock"
    ON_ORDER = "Sur Commande"
    OUT_OF_STOCK = "Rupture"


class ProductRecord(BaseModel):
    id: str = Field(..., description="Document identifier in the catalog store")
    name: str = Field("", description="Display name")
    slug: str = Field("", description="URL slug")
    description: str = Field("", description="Long description")
    shortDescription: str | None = Field(None, description="Teaser shown on product cards")
    brandId: str | None = Field(None, description="Brand identifier")
    brandName: str | None = Field(None, description="Resolved brand display name")
    categoryIds: List[str] = Field(default_factory=list, description="Categories the product belongs to")
    subCategoryIds: List[str] = Field(default_factory=list, description="Subcategories the product belongs to")
    price: float = Field(0.0, ge=0, description="Current price")
    originalPrice: float | None = Field(None, description="Price before discount")
    stock: StockStatus = Field(StockStatus.IN_STOCK, description="Availability status")
    sku: str = Field("", description="Stock keeping unit")
    images: List[str] = Field(default_factory=list, description="Ordered image URLs")
    imagePaths: List[str] = Field(default_factory=list, description="Ordered storage paths of the images")
    contenance: str | None = Field(None, description="Volume or size label")
    badgeText: str | None = Field(None, description="Badge label such as NOUVEAU")
    badgeColor: str | None = Field(None, description="Badge color")
    score: float = Field(0.0, description="Catalog quality score")
    createdAt: datetime = Field(default_factory=_utcnow)
    updatedAt: datetime = Field(default_factory=_utcnow)
