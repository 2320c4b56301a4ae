from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional

from poolsite.schemas.image import ImageSummary


class ServiceResponse(BaseModel):
    id: int
    name: str
    slug: str
    short_description: str
    description: str
    icon_image: Optional[ImageSummary] = None
    hero_image: Optional[ImageSummary] = None
    display_order: int
    is_active: bool
    seo_title: str
    seo_description: str
    seo_keywords: List[str] = []
    seo_canonical_url: str
    seo_index: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
