# schemas/image.py

from pydantic import BaseModel
from datetime import datetime
from typing import List


class ImageResponse(BaseModel):
    id: int
    filename: str
    mime_type: str
    title: str
    alt_text: str
    category: str
    tags: List[str] = []
    created_at: datetime
    original_path: str
    thumbnail_path: str
    medium_path: str
    large_path: str

    class Config:
        from_attributes = True


class ImageSummary(BaseModel):
    id: int
    title: str
    alt_text: str
    thumbnail_path: str
    medium_path: str
    large_path: str

    class Config:
        from_attributes = True
