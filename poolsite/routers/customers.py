# poolsite/routers/customers.py

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.datastructures import FormData

from poolsite.database import get_db
from poolsite.core.auth import get_current_admin
from poolsite.core.flash import flash_redirect
from poolsite.core.forms import form_str, read_form
from poolsite.core.pages import page
from poolsite.models.customers import Customer
from poolsite.models.sales import Sale
from poolsite.schemas.customer import CustomerResponse
from poolsite.schemas.sale import SaleListItem

router = APIRouter(prefix="/admin", tags=["Customers"])

logger = logging.getLogger("poolsite")

CUSTOMER_STATUSES = ("active", "inactive")


def _customer_fields(form) -> dict:
    status_value = form_str(form, "status", "active")

    return {
        "name": form_str(form, "name"),
        "email": form_str(form, "email").lower(),
        "phone": form_str(form, "phone"),
        "street": form_str(form, "street"),
        "city": form_str(form, "city"),
        "state": form_str(form, "state"),
        "zip": form_str(form, "zip"),
        "notes": form_str(form, "notes"),
        "status": status_value if status_value in CUSTOMER_STATUSES else "active",
    }


@router.get("/customers")
def list_customers(
    request: Request,
    search: str = "",
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    query = db.query(Customer)

    search = search.strip()
    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                Customer.name.ilike(pattern),
                Customer.email.ilike(pattern),
                Customer.phone.ilike(pattern),
            )
        )

    customers = query.order_by(Customer.created_at.desc()).all()

    return page(
        request,
        "Customers",
        customers=[CustomerResponse.model_validate(c) for c in customers],
        search=search,
    )


@router.get("/customers/new")
def create_customer_form(
    request: Request,
    admin=Depends(get_current_admin),
):
    return page(request, "Create Customer", customer=None)


@router.post("/customers")
def create_customer(
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
    form: FormData = Depends(read_form),
):
    fields = _customer_fields(form)

    if not fields["name"]:
        return flash_redirect(request, "/admin/customers/new", "Name is required", "error")

    try:
        db.add(Customer(**fields))
        db.commit()

    except SQLAlchemyError:
        db.rollback()
        logger.exception("Create customer failed")
        return flash_redirect(request, "/admin/customers/new", "Failed to create customer", "error")

    return flash_redirect(request, "/admin/customers", "Customer created successfully")


@router.get("/customers/{customer_id}")
def show_customer(
    customer_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    customer = db.query(Customer).filter(Customer.id == customer_id).first()

    if not customer:
        return flash_redirect(request, "/admin/customers", "Customer not found", "error")

    sales = (
        db.query(Sale)
        .filter(Sale.customer_id == customer_id)
        .order_by(Sale.sale_date.desc(), Sale.created_at.desc())
        .limit(20)
        .all()
    )

    return page(
        request,
        customer.name,
        customer=CustomerResponse.model_validate(customer),
        sales=[SaleListItem.model_validate(s) for s in sales],
    )


@router.get("/customers/{customer_id}/edit")
def edit_customer_form(
    customer_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    customer = db.query(Customer).filter(Customer.id == customer_id).first()

    if not customer:
        return flash_redirect(request, "/admin/customers", "Customer not found", "error")

    return page(request, "Edit Customer", customer=CustomerResponse.model_validate(customer))


@router.post("/customers/{customer_id}")
def update_customer(
    customer_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
    form: FormData = Depends(read_form),
):
    customer = db.query(Customer).filter(Customer.id == customer_id).first()

    if not customer:
        return flash_redirect(request, "/admin/customers", "Customer not found", "error")

    fields = _customer_fields(form)
    edit_url = f"/admin/customers/{customer_id}/edit"

    if not fields["name"]:
        return flash_redirect(request, edit_url, "Name is required", "error")

    try:
        for field_name, value in fields.items():
            setattr(customer, field_name, value)
        db.commit()

    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Update customer {customer_id} failed")
        return flash_redirect(request, edit_url, "Failed to update customer", "error")

    return flash_redirect(request, f"/admin/customers/{customer_id}", "Customer updated successfully")


@router.post("/customers/{customer_id}/delete")
def delete_customer(
    customer_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    customer = db.query(Customer).filter(Customer.id == customer_id).first()

    if not customer:
        return flash_redirect(request, "/admin/customers", "Customer not found", "error")

    sales_count = (
        db.query(func.count(Sale.id))
        .filter(Sale.customer_id == customer_id)
        .scalar()
    )

    # Sales keep their customer; retire the customer instead
    if sales_count:
        return flash_redirect(
            request,
            "/admin/customers",
            f"Cannot delete customer with {sales_count} sale(s). Set status to inactive instead.",
            "error",
        )

    try:
        db.delete(customer)
        db.commit()

    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Delete customer {customer_id} failed")
        return flash_redirect(request, "/admin/customers", "Failed to delete customer", "error")

    return flash_redirect(request, "/admin/customers", "Customer deleted successfully")
