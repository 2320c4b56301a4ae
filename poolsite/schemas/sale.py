# schemas/sale.py

from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional
from decimal import Decimal

from poolsite.schemas.customer import CustomerSummary


class SaleItemResponse(BaseModel):
    product_id: Optional[int]
    name: str
    sku: str
    description: str
    taxable: bool
    unit_price: Decimal
    unit_cost: Decimal
    quantity: int
    line_subtotal: Decimal
    line_tax: Decimal
    line_total: Decimal

    class Config:
        from_attributes = True

class SaleResponse(BaseModel):
    id: int
    customer_id: int
    customer: Optional[CustomerSummary] = None
    sale_date: datetime
    status: str
    payment_status: str
    notes: str
    tax_rate: Decimal
    subtotal: Decimal
    tax_total: Decimal
    total: Decimal
    created_at: datetime
    updated_at: datetime
    items: List[SaleItemResponse]

    class Config:
        from_attributes = True


class SaleListItem(BaseModel):
    id: int
    customer: Optional[CustomerSummary] = None
    sale_date: datetime
    status: str
    payment_status: str
    subtotal: Decimal
    tax_total: Decimal
    total: Decimal

    class Config:
        from_attributes = True
