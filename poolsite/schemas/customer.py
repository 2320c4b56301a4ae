from pydantic import BaseModel
from datetime import datetime


class CustomerSummary(BaseModel):
    id: int
    name: str
    email: str
    phone: str

    class Config:
        from_attributes = True


class CustomerResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: str
    street: str
    city: str
    state: str
    zip: str
    notes: str
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
