# schemas/report.py

from pydantic import BaseModel
from datetime import date
from decimal import Decimal
from typing import Optional


class SalesReportResponse(BaseModel):
    start_date: Optional[date]
    end_date: Optional[date]
    total_orders: int
    total_items_sold: int
    subtotal: Decimal
    tax_total: Decimal
    total: Decimal
    total_cost: Decimal
    total_profit: Decimal
    profit_margin_percentage: Decimal
