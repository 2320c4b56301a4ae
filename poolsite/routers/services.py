# poolsite/routers/services.py

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.datastructures import FormData

from poolsite.database import get_db
from poolsite.core.auth import get_current_admin
from poolsite.core.flash import flash_redirect
from poolsite.core.forms import form_bool, form_id, form_int, form_str, read_form, split_keywords
from poolsite.core.pages import page
from poolsite.core.slugs import unique_slug
from poolsite.models.images import Image
from poolsite.models.services import Service
from poolsite.schemas.image import ImageResponse
from poolsite.schemas.service import ServiceResponse

router = APIRouter(prefix="/admin", tags=["Services"])

logger = logging.getLogger("poolsite")


def _image_choices(db: Session):
    images = db.query(Image).order_by(Image.created_at.desc()).all()
    return [ImageResponse.model_validate(i) for i in images]


def _service_fields(form) -> dict:
    return {
        "short_description": form_str(form, "short_description"),
        "description": form_str(form, "description"),
        "icon_image_id": form_id(form, "icon_image_id"),
        "hero_image_id": form_id(form, "hero_image_id"),
        "display_order": form_int(form, "display_order"),
        "is_active": form_bool(form, "is_active"),
        "seo_title": form_str(form, "seo_title"),
        "seo_description": form_str(form, "seo_description"),
        "seo_keywords": split_keywords(form_str(form, "seo_keywords")),
        "seo_canonical_url": form_str(form, "seo_canonical_url"),
        "seo_index": form_str(form, "seo_index") != "false",
    }


@router.get("/services")
def list_services(
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    services = (
        db.query(Service)
        .order_by(Service.display_order.asc(), Service.created_at.desc())
        .all()
    )

    return page(
        request,
        "Services",
        services=[ServiceResponse.model_validate(s) for s in services],
    )


@router.get("/services/new")
def create_service_form(
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    return page(request, "Create Service", service=None, images=_image_choices(db))


@router.post("/services")
def create_service(
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
    form: FormData = Depends(read_form),
):
    name = form_str(form, "name")
    fields = _service_fields(form)

    if not name or not fields["description"]:
        return flash_redirect(
            request, "/admin/services/new", "Name and description are required", "error"
        )

    try:
        service = Service(name=name, slug=unique_slug(db, Service, name), **fields)
        db.add(service)
        db.commit()

    except SQLAlchemyError:
        db.rollback()
        logger.exception("Create service failed")
        return flash_redirect(request, "/admin/services/new", "Failed to create service", "error")

    return flash_redirect(request, "/admin/services", "Service created successfully")


@router.get("/services/{service_id}/edit")
def edit_service_form(
    service_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    service = db.query(Service).filter(Service.id == service_id).first()

    if not service:
        return flash_redirect(request, "/admin/services", "Service not found", "error")

    return page(
        request,
        "Edit Service",
        service=ServiceResponse.model_validate(service),
        images=_image_choices(db),
    )


@router.post("/services/{service_id}")
def update_service(
    service_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
    form: FormData = Depends(read_form),
):
    service = db.query(Service).filter(Service.id == service_id).first()

    if not service:
        return flash_redirect(request, "/admin/services", "Service not found", "error")

    name = form_str(form, "name")
    fields = _service_fields(form)
    edit_url = f"/admin/services/{service_id}/edit"

    if not name or not fields["description"]:
        return flash_redirect(request, edit_url, "Name and description are required", "error")

    try:
        if name != service.name:
            service.slug = unique_slug(db, Service, name, exclude_id=service.id)
        service.name = name

        for field_name, value in fields.items():
            setattr(service, field_name, value)

        db.commit()

    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Update service {service_id} failed")
        return flash_redirect(request, edit_url, "Failed to update service", "error")

    return flash_redirect(request, "/admin/services", "Service updated successfully")


@router.post("/services/{service_id}/delete")
def delete_service(
    service_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    service = db.query(Service).filter(Service.id == service_id).first()

    if not service:
        return flash_redirect(request, "/admin/services", "Service not found", "error")

    try:
        db.delete(service)
        db.commit()

    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Delete service {service_id} failed")
        return flash_redirect(request, "/admin/services", "Failed to delete service", "error")

    return flash_redirect(request, "/admin/services", "Service deleted successfully")
