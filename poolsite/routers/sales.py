# =========================================================
# SALES ROUTER
#
# Sales are created from a customer page and always carry their own
# tax rate. Line items are replaced wholesale on every edit and the
# totals are recalculated from them; "delete" only cancels the sale.
# =========================================================

import logging
from datetime import date, datetime, time
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload
from starlette.datastructures import FormData

from poolsite.database import get_db
from poolsite.core.auth import get_current_admin
from poolsite.core.flash import flash_redirect
from poolsite.core.forms import form_str, parse_bool, parse_datetime, parse_indexed, read_form
from poolsite.core.pages import page
from poolsite.core.pricing import (
    LineItemInput,
    calculate_totals,
    resolve_tax_rate,
    sanitize_quantity,
    sanitize_unit_cost,
    sanitize_unit_price,
)
from poolsite.core.site_settings import default_tax_rate
from poolsite.models.customers import Customer
from poolsite.models.products import Product
from poolsite.models.sale_items import SaleItem
from poolsite.models.sales import PAYMENT_STATUSES, SALE_STATUSES, Sale
from poolsite.schemas.customer import CustomerSummary
from poolsite.schemas.product import ProductSearchResult
from poolsite.schemas.sale import SaleListItem, SaleResponse

router = APIRouter(prefix="/admin", tags=["Sales"])

logger = logging.getLogger("poolsite")


class SaleFormError(ValueError):
    pass


# =========================================================
# FORM HELPERS
# =========================================================
def _line_items(db: Session, form) -> list[dict]:
    rows = parse_indexed(form, "lineItems")

    if not rows:
        raise SaleFormError("At least one line item is required")

    lines = []

    for row in rows:
        name = str(row.get("name") or "").strip()
        if not name:
            continue

        product = None
        product_id = str(row.get("productId") or "").strip()
        if product_id.isdigit():
            product = db.query(Product).filter(Product.id == int(product_id)).first()

        lines.append(
            {
                "product_id": product.id if product else None,
                "name": name,
                "sku": str(row.get("sku") or "").strip(),
                "description": str(row.get("description") or "").strip(),
                "taxable": parse_bool(row.get("taxable"), default=True),
                "unit_price": sanitize_unit_price(row.get("unitPrice")),
                "unit_cost": sanitize_unit_cost(
                    row.get("unitCost"),
                    fallback=product.cost_price if product else None,
                ),
                "quantity": sanitize_quantity(row.get("quantity")),
            }
        )

    if not lines:
        raise SaleFormError("At least one valid line item is required")

    return lines


def _apply_lines(sale: Sale, lines: list[dict]) -> None:
    totals = calculate_totals(
        sale.tax_rate,
        [
            LineItemInput(
                unit_price=line["unit_price"],
                quantity=line["quantity"],
                taxable=line["taxable"],
            )
            for line in lines
        ],
    )

    sale.items = [
        SaleItem(
            position=position,
            line_subtotal=line_totals.line_subtotal,
            line_tax=line_totals.line_tax,
            line_total=line_totals.line_total,
            **line,
        )
        for position, (line, line_totals) in enumerate(zip(lines, totals.lines))
    ]

    sale.subtotal = totals.subtotal
    sale.tax_total = totals.tax_total
    sale.total = totals.total


def _sale_date(form) -> Optional[datetime]:
    try:
        return parse_datetime(form_str(form, "saleDate"))
    except ValueError:
        raise SaleFormError("Invalid sale date")


def _choice(value: str, allowed: tuple, fallback: str) -> str:
    return value if value in allowed else fallback


def _product_choices(db: Session):
    products = (
        db.query(Product)
        .filter(Product.is_active == True)
        .order_by(Product.name.asc())
        .all()
    )
    return [ProductSearchResult.model_validate(p) for p in products]


def _load_sale(db: Session, sale_id: int) -> Optional[Sale]:
    return (
        db.query(Sale)
        .options(joinedload(Sale.items), joinedload(Sale.customer))
        .filter(Sale.id == sale_id)
        .first()
    )


def filtered_sales_query(
    db: Session,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    sale_status: Optional[str] = None,
    payment_status: Optional[str] = None,
    customer_id: Optional[int] = None,
):
    query = db.query(Sale)

    if date_from:
        query = query.filter(Sale.sale_date >= datetime.combine(date_from, time.min))

    if date_to:
        # Inclusive of the whole end day
        query = query.filter(Sale.sale_date <= datetime.combine(date_to, time.max))

    if sale_status:
        query = query.filter(Sale.status == sale_status)

    if payment_status:
        query = query.filter(Sale.payment_status == payment_status)

    if customer_id:
        query = query.filter(Sale.customer_id == customer_id)

    return query


# =========================================================
# LIST SALES
# =========================================================
@router.get("/sales")
def list_sales(
    request: Request,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    status: Optional[str] = None,
    payment_status: Optional[str] = None,
    customer_id: Optional[int] = None,
    limit: int = Query(100, ge=1, le=100),
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    sales = (
        filtered_sales_query(db, date_from, date_to, status, payment_status, customer_id)
        .options(joinedload(Sale.customer))
        .order_by(Sale.sale_date.desc(), Sale.created_at.desc())
        .limit(limit)
        .all()
    )

    customers = (
        db.query(Customer)
        .filter(Customer.status == "active")
        .order_by(Customer.name.asc())
        .all()
    )

    return page(
        request,
        "Sales",
        sales=[SaleListItem.model_validate(s) for s in sales],
        customers=[CustomerSummary.model_validate(c) for c in customers],
        filters={
            "date_from": date_from,
            "date_to": date_to,
            "status": status,
            "payment_status": payment_status,
            "customer_id": customer_id,
        },
    )


# =========================================================
# CREATE SALE
# =========================================================
@router.get("/customers/{customer_id}/sales/new")
def create_sale_form(
    customer_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    customer = db.query(Customer).filter(Customer.id == customer_id).first()

    if not customer:
        return flash_redirect(request, "/admin/customers", "Customer not found", "error")

    return page(
        request,
        f"New Sale - {customer.name}",
        sale=None,
        customer=CustomerSummary.model_validate(customer),
        products=_product_choices(db),
        default_tax_rate=default_tax_rate(db),
    )


@router.post("/customers/{customer_id}/sales")
def create_sale(
    customer_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
    form: FormData = Depends(read_form),
):
    customer = db.query(Customer).filter(Customer.id == customer_id).first()

    if not customer:
        return flash_redirect(request, "/admin/customers", "Customer not found", "error")

    form_url = f"/admin/customers/{customer_id}/sales/new"

    try:
        lines = _line_items(db, form)
        sale_date = _sale_date(form)
    except SaleFormError as exc:
        return flash_redirect(request, form_url, str(exc), "error")

    sale = Sale(
        customer_id=customer.id,
        status=_choice(form_str(form, "status"), SALE_STATUSES, "open"),
        payment_status=_choice(form_str(form, "paymentStatus"), PAYMENT_STATUSES, "unpaid"),
        tax_rate=resolve_tax_rate(form_str(form, "taxRate"), default=default_tax_rate(db)),
        notes=form_str(form, "notes"),
    )
    if sale_date:
        sale.sale_date = sale_date

    _apply_lines(sale, lines)

    try:
        db.add(sale)
        db.commit()

    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Create sale for customer {customer_id} failed")
        return flash_redirect(request, form_url, "Failed to create sale", "error")

    logger.info(f"Sale {sale.id} created for customer {customer_id} total={sale.total}")

    return flash_redirect(request, f"/admin/sales/{sale.id}", "Sale created successfully")


# =========================================================
# SHOW / EDIT / UPDATE
# =========================================================
@router.get("/sales/{sale_id}")
def show_sale(
    sale_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    sale = _load_sale(db, sale_id)

    if not sale:
        return flash_redirect(request, "/admin/sales", "Sale not found", "error")

    return page(request, f"Sale #{sale.id}", sale=SaleResponse.model_validate(sale))


@router.get("/sales/{sale_id}/edit")
def edit_sale_form(
    sale_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    sale = _load_sale(db, sale_id)

    if not sale:
        return flash_redirect(request, "/admin/sales", "Sale not found", "error")

    return page(
        request,
        f"Edit Sale - {sale.customer.name}",
        sale=SaleResponse.model_validate(sale),
        customer=CustomerSummary.model_validate(sale.customer),
        products=_product_choices(db),
        default_tax_rate=default_tax_rate(db),
    )


@router.post("/sales/{sale_id}")
def update_sale(
    sale_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
    form: FormData = Depends(read_form),
):
    sale = _load_sale(db, sale_id)

    if not sale:
        return flash_redirect(request, "/admin/sales", "Sale not found", "error")

    edit_url = f"/admin/sales/{sale_id}/edit"

    try:
        lines = _line_items(db, form)
        sale_date = _sale_date(form)
    except SaleFormError as exc:
        return flash_redirect(request, edit_url, str(exc), "error")

    try:
        if sale_date:
            sale.sale_date = sale_date
        sale.status = _choice(form_str(form, "status"), SALE_STATUSES, sale.status)
        sale.payment_status = _choice(
            form_str(form, "paymentStatus"), PAYMENT_STATUSES, sale.payment_status
        )
        # Blank keeps the sale's own rate
        sale.tax_rate = resolve_tax_rate(form_str(form, "taxRate"), default=sale.tax_rate)
        sale.notes = form_str(form, "notes")

        _apply_lines(sale, lines)
        db.commit()

    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Update sale {sale_id} failed")
        return flash_redirect(request, edit_url, "Failed to update sale", "error")

    return flash_redirect(request, f"/admin/sales/{sale_id}", "Sale updated successfully")


# =========================================================
# CANCEL SALE
# =========================================================
@router.post("/sales/{sale_id}/delete")
def cancel_sale(
    sale_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    sale = db.query(Sale).filter(Sale.id == sale_id).first()

    if not sale:
        return flash_redirect(request, "/admin/sales", "Sale not found", "error")

    try:
        sale.status = "cancelled"
        db.commit()

    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Cancel sale {sale_id} failed")
        return flash_redirect(request, "/admin/sales", "Failed to cancel sale", "error")

    return flash_redirect(request, "/admin/sales", "Sale cancelled successfully")
