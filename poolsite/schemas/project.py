from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional

from poolsite.schemas.image import ImageSummary


class ProjectResponse(BaseModel):
    id: int
    title: str
    slug: str
    short_description: str
    description: str
    featured_image: Optional[ImageSummary] = None
    images: List[ImageSummary] = []
    status: str
    show_in_portfolio: bool
    seo_title: str
    seo_description: str
    seo_keywords: List[str] = []
    seo_canonical_url: str
    seo_index: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
