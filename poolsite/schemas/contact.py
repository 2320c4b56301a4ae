from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional


class ContactMessageResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: str
    town: str
    service_type: Optional[str]
    message: str
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ProductOrderResponse(BaseModel):
    id: int
    product_id: Optional[int]
    product_name: str
    sizes: List[str] = []
    name: str
    email: str
    phone: str
    status: str
    created_at: datetime

    class Config:
        from_attributes = True
