# =========================================================
# PUBLIC SITE ROUTER
#
# Marketing pages render from published / active content only.
# Every page carries the site settings, the effective theme and
# an SEO block. Form posts always redirect back with a message.
# =========================================================

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload
from starlette.datastructures import FormData

from poolsite.database import get_db
from poolsite.core.email import contact_message_text, notify, product_order_text
from poolsite.core.flash import flash_redirect
from poolsite.core.forms import form_list, form_str, read_form
from poolsite.core.pages import page
from poolsite.core.rate_limiter import limiter
from poolsite.core.seo import default_seo, entity_seo
from poolsite.core.site_settings import apply_preset, get_settings
from poolsite.models.contact_messages import SERVICE_TYPES, ContactMessage
from poolsite.models.product_orders import ProductOrder
from poolsite.models.products import Product
from poolsite.models.projects import Project
from poolsite.models.services import Service
from poolsite.schemas.product import ProductResponse
from poolsite.schemas.project import ProjectResponse
from poolsite.schemas.service import ServiceResponse
from poolsite.schemas.settings import SiteSettingsResponse, ThemeResponse

router = APIRouter(tags=["Public"])

logger = logging.getLogger("poolsite")


def _not_found():
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Page not found")


def _public_page(request: Request, db: Session, title: str, seo: dict | None = None, **context):
    site_settings = get_settings(db)

    if seo is None:
        seo = default_seo(site_settings)
        seo["title"] = title

    return page(
        request,
        title,
        settings=SiteSettingsResponse.model_validate(site_settings),
        theme=ThemeResponse.model_validate(apply_preset(site_settings)),
        seo=seo,
        **context,
    )


def _published_products(db: Session):
    return (
        db.query(Product)
        .options(joinedload(Product.featured_image))
        .filter(Product.status == "published", Product.is_active == True)
        .order_by(Product.display_order.asc(), Product.created_at.desc())
    )


def _portfolio_projects(db: Session):
    return (
        db.query(Project)
        .options(joinedload(Project.featured_image))
        .filter(Project.status == "published", Project.show_in_portfolio == True)
        .order_by(Project.created_at.desc())
    )


def _active_services(db: Session):
    return (
        db.query(Service)
        .filter(Service.is_active == True)
        .order_by(Service.display_order.asc())
    )


# =========================================================
# PAGES
# =========================================================
@router.get("/")
def home(request: Request, db: Session = Depends(get_db)):
    site_settings = get_settings(db)

    return _public_page(
        request,
        db,
        site_settings.default_meta_title,
        services=[ServiceResponse.model_validate(s) for s in _active_services(db).limit(6)],
        products=[ProductResponse.model_validate(p) for p in _published_products(db).limit(3)],
        recent_projects=[
            ProjectResponse.model_validate(p) for p in _portfolio_projects(db).limit(4)
        ],
        service_types=SERVICE_TYPES,
    )


@router.get("/services")
def services(request: Request, db: Session = Depends(get_db)):
    site_settings = get_settings(db)

    return _public_page(
        request,
        db,
        f"Our Services - {site_settings.site_name}",
        services=[ServiceResponse.model_validate(s) for s in _active_services(db)],
    )


@router.get("/services/{slug}")
def service_detail(slug: str, request: Request, db: Session = Depends(get_db)):
    service = (
        db.query(Service)
        .filter(Service.slug == slug, Service.is_active == True)
        .first()
    )

    if not service:
        raise _not_found()

    site_settings = get_settings(db)
    seo = entity_seo(request, service, service.name, site_settings.site_name, service.hero_image)

    return _public_page(
        request,
        db,
        seo["title"],
        seo=seo,
        service=ServiceResponse.model_validate(service),
    )


@router.get("/portfolio")
def portfolio(request: Request, db: Session = Depends(get_db)):
    site_settings = get_settings(db)

    return _public_page(
        request,
        db,
        f"Our Portfolio - {site_settings.site_name}",
        projects=[ProjectResponse.model_validate(p) for p in _portfolio_projects(db)],
    )


@router.get("/projects/{slug}")
def project_detail(slug: str, request: Request, db: Session = Depends(get_db)):
    project = (
        db.query(Project)
        .filter(Project.slug == slug, Project.status == "published")
        .first()
    )

    if not project:
        raise _not_found()

    site_settings = get_settings(db)
    seo = entity_seo(
        request, project, project.title, site_settings.site_name, project.featured_image
    )

    return _public_page(
        request,
        db,
        seo["title"],
        seo=seo,
        project=ProjectResponse.model_validate(project),
    )


@router.get("/products")
def products(request: Request, db: Session = Depends(get_db)):
    site_settings = get_settings(db)

    return _public_page(
        request,
        db,
        f"Our Products - {site_settings.site_name}",
        products=[ProductResponse.model_validate(p) for p in _published_products(db)],
    )


@router.get("/products/{slug}")
def product_detail(slug: str, request: Request, db: Session = Depends(get_db)):
    product = _published_products(db).filter(Product.slug == slug).first()

    if not product:
        raise _not_found()

    site_settings = get_settings(db)
    seo = entity_seo(
        request, product, product.name, site_settings.site_name, product.featured_image
    )

    return _public_page(
        request,
        db,
        seo["title"],
        seo=seo,
        product=ProductResponse.model_validate(product),
    )


@router.get("/contact")
def contact(request: Request, db: Session = Depends(get_db)):
    site_settings = get_settings(db)

    return _public_page(
        request,
        db,
        f"Contact Us - {site_settings.site_name}",
        service_types=SERVICE_TYPES,
    )


# =========================================================
# FORM SUBMISSIONS
# =========================================================
@router.post("/products/{slug}/order")
@limiter.limit("10/minute")
def product_order(
    slug: str,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    form: FormData = Depends(read_form),
):
    product_url = f"/products/{slug}"
    product = _published_products(db).filter(Product.slug == slug).first()

    if not product:
        raise _not_found()

    name = form_str(form, "name")
    email = form_str(form, "email").lower()
    phone = form_str(form, "phone")

    if not name or not email or not phone:
        return flash_redirect(
            request, product_url, "Name, email, and phone are required fields.", "error"
        )

    order = ProductOrder(
        product_id=product.id,
        product_name=product.name,
        sizes=form_list(form, "sizes"),
        name=name,
        email=email,
        phone=phone,
        address=form_str(form, "address"),
        city=form_str(form, "city"),
        state=form_str(form, "state"),
        zip_code=form_str(form, "zip_code"),
        message=form_str(form, "message"),
        status="pending",
    )

    try:
        db.add(order)
        db.commit()

    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Saving order for product {product.id} failed")
        return flash_redirect(
            request,
            product_url,
            "Failed to submit order. Please try again or contact us directly.",
            "error",
        )

    logger.info(f"Product order {order.id} received for {product.name}")
    background_tasks.add_task(
        notify,
        f"New Product Order: {order.product_name}",
        product_order_text(order),
        reply_to=email,
    )

    return flash_redirect(
        request,
        product_url,
        "Thank you for your order! We will contact you shortly to confirm the details.",
    )


def _save_contact(db: Session, contact: ContactMessage, background_tasks: BackgroundTasks) -> bool:
    try:
        db.add(contact)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Saving contact message failed")
        return False

    # Sent after the response
    background_tasks.add_task(
        notify,
        f"New Contact Form Submission from {contact.name}",
        contact_message_text(contact),
        reply_to=contact.email,
    )
    return True


@router.post("/contact")
@limiter.limit("10/minute")
def contact_submit(
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    form: FormData = Depends(read_form),
):
    name = form_str(form, "name")
    email = form_str(form, "email")
    message = form_str(form, "message")

    if not name or not email or not message:
        return flash_redirect(request, "/contact", "Name, email, and message are required.", "error")

    contact_message = ContactMessage(
        name=name,
        email=email,
        phone=form_str(form, "phone"),
        message=message,
    )

    if not _save_contact(db, contact_message, background_tasks):
        return flash_redirect(request, "/contact", "Failed to send message. Please try again.", "error")

    return flash_redirect(
        request, "/contact", "Thank you for your message! We will get back to you soon."
    )


@router.post("/home-contact")
@limiter.limit("10/minute")
def home_contact_submit(
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    form: FormData = Depends(read_form),
):
    name = form_str(form, "name")
    email = form_str(form, "email")
    service_type = form_str(form, "service_type")

    if not name or not email:
        return flash_redirect(request, "/", "Name and email are required.", "error")

    if service_type not in SERVICE_TYPES:
        service_type = None

    contact_message = ContactMessage(
        name=name,
        email=email,
        phone=form_str(form, "phone"),
        town=form_str(form, "town"),
        service_type=service_type,
        message=form_str(form, "message") or f"Service Type: {service_type or 'Not specified'}",
    )

    if not _save_contact(db, contact_message, background_tasks):
        return flash_redirect(request, "/", "Failed to send message. Please try again.", "error")

    return flash_redirect(request, "/", "Thank you for your inquiry! We will get back to you soon.")
