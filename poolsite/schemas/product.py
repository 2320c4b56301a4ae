from decimal import Decimal
from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional

from poolsite.schemas.image import ImageSummary


class ProductQuickCreate(BaseModel):
    """Catalog entry created on the fly from the sale form."""

    name: str = Field(..., min_length=1)
    description: str = ""
    sku: Optional[str] = None

    price: Decimal = Field(
        Decimal("0"),
        ge=0,
        lt=100_000_000,
        description="Price must be below 100 million"
    )

    cost_price: Decimal = Field(
        Decimal("0"),
        ge=0,
        lt=100_000_000,
        description="Cost price must be below 100 million"
    )

    taxable: bool = True


class ProductSearchResult(BaseModel):
    id: int
    name: str
    sku: Optional[str]
    price: Decimal
    cost_price: Decimal
    taxable: bool
    description: str

    class Config:
        from_attributes = True


class ProductResponse(BaseModel):
    id: int
    name: str
    slug: str
    short_description: str
    description: str
    sku: Optional[str]
    price: Decimal
    cost_price: Decimal
    taxable: bool
    category: str
    sizes: List[str] = []
    status: str
    display_order: int
    is_active: bool
    featured_image: Optional[ImageSummary] = None
    images: List[ImageSummary] = []
    seo_title: str
    seo_description: str
    seo_keywords: List[str] = []
    seo_canonical_url: str
    seo_index: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
