from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session, joinedload
from datetime import date, datetime, timezone
from decimal import Decimal
from io import BytesIO
from typing import Optional

from openpyxl import Workbook
from fastapi.responses import StreamingResponse

from poolsite.database import get_db
from poolsite.core.auth import get_current_admin
from poolsite.core.pricing import ZERO, round2
from poolsite.core.rate_limiter import limiter
from poolsite.models.sales import Sale
from poolsite.routers.sales import filtered_sales_query

router = APIRouter(prefix="/admin/sales", tags=["Exports"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


# =========================================================
# EXPORT ROUTE
#
# Registered ahead of the sales router so "/admin/sales/export"
# is not read as a sale id.
# =========================================================
@router.get("/export")
@limiter.limit("10/minute")
def export_sales(
    request: Request,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    status: Optional[str] = None,
    payment_status: Optional[str] = None,
    customer_id: Optional[int] = None,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    sales = (
        filtered_sales_query(db, date_from, date_to, status, payment_status, customer_id)
        .options(joinedload(Sale.items), joinedload(Sale.customer))
        .order_by(Sale.sale_date.asc(), Sale.id.asc())
        .all()
    )

    today = datetime.now(timezone.utc).date()
    filename = f"sales_{date_from or 'all'}_to_{date_to or today}.xlsx"

    return _build_excel(sales, date_from, date_to, filename)


# =========================================================
# EXCEL BUILDER
# =========================================================
def _build_excel(
    sales: list[Sale],
    date_from: Optional[date],
    date_to: Optional[date],
    filename: str,
):

    workbook = Workbook()

    # =======================
    # SHEET 1 - LINE ITEMS
    # =======================
    sheet = workbook.active
    sheet.title = "Sales Data"

    sheet.append([
        "Date",
        "Sale ID",
        "Customer",
        "Status",
        "Payment",
        "Item",
        "SKU",
        "Taxable",
        "Quantity",
        "Unit Price",
        "Unit Cost",
        "Line Subtotal",
        "Line Tax",
        "Line Total",
        "Sale Total",
    ])

    subtotal = ZERO
    tax_total = ZERO
    total = ZERO
    total_cost = ZERO
    orders = 0

    for sale in sales:
        for item in sale.items:
            sheet.append([
                sale.sale_date.strftime("%Y-%m-%d"),
                sale.id,
                sale.customer.name if sale.customer else "",
                sale.status,
                sale.payment_status,
                item.name,
                item.sku,
                "Yes" if item.taxable else "No",
                item.quantity,
                float(item.unit_price),
                float(item.unit_cost),
                float(round2(item.line_subtotal)),
                float(round2(item.line_tax)),
                float(round2(item.line_total)),
                float(sale.total),
            ])

        # Cancelled sales are listed but not counted
        if sale.status == "cancelled":
            continue

        orders += 1
        subtotal += Decimal(sale.subtotal)
        tax_total += Decimal(sale.tax_total)
        total += Decimal(sale.total)
        total_cost += sum(
            (Decimal(item.unit_cost) * item.quantity for item in sale.items),
            ZERO,
        )

    # =======================
    # SHEET 2 - SUMMARY
    # =======================
    summary = workbook.create_sheet(title="Summary")

    summary.append(["Period", f"{date_from or 'start'} to {date_to or 'today'}"])
    summary.append([])

    total_cost = round2(total_cost)
    total_profit = subtotal - total_cost

    if subtotal == 0:
        margin = Decimal("0.00")
    else:
        margin = round2((total_profit / subtotal) * 100)

    summary.append(["Orders", orders])
    summary.append(["Subtotal", float(subtotal)])
    summary.append(["Tax", float(tax_total)])
    summary.append(["Total", float(total)])
    summary.append(["Total Cost", float(total_cost)])
    summary.append(["Total Profit", float(total_profit)])
    summary.append(["Profit Margin (%)", float(margin)])

    # =======================
    # RETURN FILE
    # =======================
    output = BytesIO()
    workbook.save(output)
    output.seek(0)

    return StreamingResponse(
        output,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
