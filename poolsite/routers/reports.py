# =========================================================
# REPORTS ROUTER
#
# Profit summary over non-cancelled sales:
# - revenue figures come from the stored, rounded sale totals
# - cost is the sum of unit_cost x quantity captured on each line
# - profit is measured against the pre-tax subtotal
# =========================================================

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import func
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional

from poolsite.database import get_db
from poolsite.core.auth import get_current_admin
from poolsite.core.pricing import round2
from poolsite.models.sales import Sale
from poolsite.models.sale_items import SaleItem
from poolsite.schemas.report import SalesReportResponse

router = APIRouter(prefix="/admin/reports", tags=["Reports"])


def report_filters(start_date: Optional[date], end_date: Optional[date]) -> list:
    filters = [Sale.status != "cancelled"]

    if start_date:
        filters.append(Sale.sale_date >= datetime.combine(start_date, time.min))
    if end_date:
        filters.append(Sale.sale_date <= datetime.combine(end_date, time.max))

    return filters


# =========================================================
# CORE SALES SUMMARY CALCULATION
# =========================================================
def calculate_report(
    db: Session,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> dict:
    base_filter = report_filters(start_date, end_date)

    total_orders, subtotal, tax_total, total = (
        db.query(
            func.count(Sale.id),
            func.coalesce(func.sum(Sale.subtotal), 0),
            func.coalesce(func.sum(Sale.tax_total), 0),
            func.coalesce(func.sum(Sale.total), 0),
        )
        .filter(*base_filter)
        .one()
    )

    total_items_sold, total_cost = (
        db.query(
            func.coalesce(func.sum(SaleItem.quantity), 0),
            func.coalesce(func.sum(SaleItem.unit_cost * SaleItem.quantity), 0),
        )
        .join(Sale, SaleItem.sale_id == Sale.id)
        .filter(*base_filter)
        .one()
    )

    subtotal = round2(Decimal(str(subtotal or 0)))
    total_cost = round2(Decimal(str(total_cost or 0)))
    total_profit = subtotal - total_cost

    #  PROFIT MARGIN %
    if subtotal == 0:
        profit_margin_percentage = Decimal("0.00")
    else:
        profit_margin_percentage = round2((total_profit / subtotal) * 100)

    return {
        "start_date": start_date,
        "end_date": end_date,
        "total_orders": total_orders or 0,
        "total_items_sold": int(total_items_sold or 0),
        "subtotal": subtotal,
        "tax_total": round2(Decimal(str(tax_total or 0))),
        "total": round2(Decimal(str(total or 0))),
        "total_cost": total_cost,
        "total_profit": total_profit,
        "profit_margin_percentage": profit_margin_percentage,
    }


@router.get("/sales", response_model=SalesReportResponse)
def sales_report(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    return calculate_report(db, start_date, end_date)
