# poolsite/routers/settings.py

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.datastructures import FormData

from poolsite.database import get_db
from poolsite.core.auth import get_current_admin
from poolsite.core.flash import flash_redirect
from poolsite.core.forms import form_id, form_str, read_form
from poolsite.core.pages import page
from poolsite.core.site_settings import (
    THEME_COLOR_FIELDS,
    THEME_PRESETS,
    TEXT_FIELDS,
    apply_preset,
    get_settings,
    update_settings,
)
from poolsite.models.images import Image
from poolsite.schemas.image import ImageResponse
from poolsite.schemas.settings import SiteSettingsResponse, ThemeResponse

router = APIRouter(prefix="/admin", tags=["Settings"])

logger = logging.getLogger("poolsite")


@router.get("/settings")
def show_settings(
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    site_settings = get_settings(db)
    images = db.query(Image).order_by(Image.created_at.desc()).all()

    return page(
        request,
        "Settings",
        settings=SiteSettingsResponse.model_validate(site_settings),
        theme=ThemeResponse.model_validate(apply_preset(site_settings)),
        theme_presets=THEME_PRESETS,
        images=[ImageResponse.model_validate(i) for i in images],
    )


@router.post("/settings")
def save_settings(
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
    form: FormData = Depends(read_form),
):
    patch = {name: form_str(form, name) for name in TEXT_FIELDS + THEME_COLOR_FIELDS}
    patch["theme_preset"] = form_str(form, "theme_preset")
    patch["sales_tax_rate"] = form_str(form, "sales_tax_rate")
    patch["default_og_image_id"] = form_id(form, "default_og_image_id")

    try:
        update_settings(db, patch)

    except SQLAlchemyError:
        db.rollback()
        logger.exception("Update settings failed")
        return flash_redirect(request, "/admin/settings", "Failed to update settings", "error")

    return flash_redirect(request, "/admin/settings", "Settings updated successfully")
