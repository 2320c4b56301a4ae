# poolsite/routers/products.py

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload
from starlette.datastructures import FormData

from poolsite.database import get_db
from poolsite.core.auth import get_current_admin
from poolsite.core.flash import flash_redirect
from poolsite.core.forms import (
    form_bool,
    form_id,
    form_id_list,
    form_int,
    form_list,
    form_str,
    read_form,
    split_keywords,
)
from poolsite.core.pages import page
from poolsite.core.pricing import round2, sanitize_unit_cost, sanitize_unit_price
from poolsite.core.slugs import unique_slug
from poolsite.models.images import Image
from poolsite.models.products import Product
from poolsite.schemas.image import ImageResponse
from poolsite.schemas.product import (
    ProductQuickCreate,
    ProductResponse,
    ProductSearchResult,
)

router = APIRouter(
    prefix="/admin",
    tags=["Products"],
)

logger = logging.getLogger("poolsite")

PRODUCT_STATUSES = ("draft", "published")


def _image_choices(db: Session):
    images = db.query(Image).order_by(Image.created_at.desc()).all()
    return [ImageResponse.model_validate(i) for i in images]


def _product_fields(db: Session, form) -> dict:
    status_value = form_str(form, "status", "draft")

    return {
        "short_description": form_str(form, "short_description"),
        "description": form_str(form, "description"),
        "sku": form_str(form, "sku") or None,
        "price": round2(sanitize_unit_price(form_str(form, "price"))),
        "cost_price": round2(sanitize_unit_cost(form_str(form, "cost_price"))),
        "taxable": form_bool(form, "taxable", default=True),
        "category": form_str(form, "category") or "general",
        "sizes": form_list(form, "sizes"),
        "display_order": form_int(form, "display_order"),
        "is_active": form_bool(form, "is_active"),
        "status": status_value if status_value in PRODUCT_STATUSES else "draft",
        "seo_title": form_str(form, "seo_title"),
        "seo_description": form_str(form, "seo_description"),
        "seo_keywords": split_keywords(form_str(form, "seo_keywords")),
        "seo_canonical_url": form_str(form, "seo_canonical_url"),
        "seo_index": form_str(form, "seo_index") != "false",
        "featured_image_id": form_id(form, "featured_image_id"),
        "images": (
            db.query(Image).filter(Image.id.in_(form_id_list(form, "images"))).all()
        ),
    }


# =========================================================
# ADMIN PAGES
# =========================================================
@router.get("/products")
def list_products(
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    products = (
        db.query(Product)
        .options(joinedload(Product.featured_image))
        .order_by(Product.display_order.asc(), Product.created_at.desc())
        .all()
    )

    return page(
        request,
        "Products",
        products=[ProductResponse.model_validate(p) for p in products],
    )


@router.get("/products/new")
def create_product_form(
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    return page(request, "Create Product", product=None, images=_image_choices(db))


@router.post("/products")
def create_product(
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
    form: FormData = Depends(read_form),
):
    name = form_str(form, "name")
    fields = _product_fields(db, form)

    if not name or not fields["description"]:
        return flash_redirect(
            request, "/admin/products/new", "Name and description are required", "error"
        )

    try:
        product = Product(name=name, slug=unique_slug(db, Product, name), **fields)
        db.add(product)
        db.commit()

    except IntegrityError:
        db.rollback()
        return flash_redirect(
            request, "/admin/products/new", "A product with this SKU already exists", "error"
        )

    except SQLAlchemyError:
        db.rollback()
        logger.exception("Create product failed")
        return flash_redirect(request, "/admin/products/new", "Failed to create product", "error")

    return flash_redirect(request, "/admin/products", "Product created successfully")


@router.get("/products/{product_id}/edit")
def edit_product_form(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    product = db.query(Product).filter(Product.id == product_id).first()

    if not product:
        return flash_redirect(request, "/admin/products", "Product not found", "error")

    return page(
        request,
        "Edit Product",
        product=ProductResponse.model_validate(product),
        images=_image_choices(db),
    )


@router.post("/products/{product_id}")
def update_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
    form: FormData = Depends(read_form),
):
    product = db.query(Product).filter(Product.id == product_id).first()

    if not product:
        return flash_redirect(request, "/admin/products", "Product not found", "error")

    name = form_str(form, "name")
    fields = _product_fields(db, form)
    edit_url = f"/admin/products/{product_id}/edit"

    if not name or not fields["description"]:
        return flash_redirect(request, edit_url, "Name and description are required", "error")

    try:
        if name != product.name:
            product.slug = unique_slug(db, Product, name, exclude_id=product.id)
        product.name = name

        for field_name, value in fields.items():
            setattr(product, field_name, value)

        db.commit()

    except IntegrityError:
        db.rollback()
        return flash_redirect(request, edit_url, "A product with this SKU already exists", "error")

    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Update product {product_id} failed")
        return flash_redirect(request, edit_url, "Failed to update product", "error")

    return flash_redirect(request, "/admin/products", "Product updated successfully")


@router.post("/products/{product_id}/delete")
def delete_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    product = db.query(Product).filter(Product.id == product_id).first()

    if not product:
        return flash_redirect(request, "/admin/products", "Product not found", "error")

    try:
        db.delete(product)
        db.commit()

    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Delete product {product_id} failed")
        return flash_redirect(request, "/admin/products", "Failed to delete product", "error")

    return flash_redirect(request, "/admin/products", "Product deleted successfully")


# =========================================================
# CONTENT API (SALE ENTRY)
# =========================================================
@router.get("/api/products", response_model=list[ProductSearchResult])
def search_products(
    query: str = "",
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    products = db.query(Product).filter(Product.is_active == True)

    query = query.strip()
    if query:
        pattern = f"%{query}%"
        products = products.filter(
            or_(
                Product.name.ilike(pattern),
                Product.sku.ilike(pattern),
                Product.description.ilike(pattern),
            )
        )

    return products.order_by(Product.name.asc()).limit(limit).all()


@router.post(
    "/api/products",
    response_model=ProductSearchResult,
    status_code=status.HTTP_201_CREATED,
)
def quick_create_product(
    product_data: ProductQuickCreate,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    sku = (product_data.sku or "").strip() or None

    if sku and db.query(Product).filter(Product.sku == sku).first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Product with this SKU already exists",
        )

    name = product_data.name.strip()

    product = Product(
        name=name,
        slug=unique_slug(db, Product, name),
        description=product_data.description.strip() or name,
        sku=sku,
        price=product_data.price,
        cost_price=product_data.cost_price,
        taxable=product_data.taxable,
        status="draft",
        is_active=True,
    )

    try:
        db.add(product)
        db.commit()
        db.refresh(product)

    except SQLAlchemyError:
        db.rollback()
        logger.exception("Quick create product failed")
        raise HTTPException(status_code=500, detail="Unable to create product")

    return product
