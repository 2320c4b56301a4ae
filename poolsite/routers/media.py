# =========================================================
# MEDIA LIBRARY ROUTER
#
# Single upload (form post + redirect), multi upload (JSON for the
# drag-and-drop uploader), metadata edits and deletes.
# =========================================================

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from fastapi.responses import JSONResponse
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.datastructures import FormData

from poolsite.database import get_db
from poolsite.core.auth import get_current_admin
from poolsite.core.flash import flash, flash_redirect, redirect
from poolsite.core.forms import read_form
from poolsite.core.images import (
    MAX_FILES_PER_UPLOAD,
    ImageValidationError,
    read_upload,
    store_image,
)
from poolsite.core.pages import page
from poolsite.models.images import IMAGE_CATEGORIES, Image
from poolsite.schemas.image import ImageResponse, ImageSummary

router = APIRouter(prefix="/admin", tags=["Media"])

logger = logging.getLogger("poolsite")


def _wants_json(request: Request) -> bool:
    return "application/json" in request.headers.get("accept", "")


@router.get("/media")
def list_media(
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    images = db.query(Image).order_by(Image.created_at.desc()).all()

    return page(
        request,
        "Media Library",
        images=[ImageResponse.model_validate(i) for i in images],
        categories=IMAGE_CATEGORIES,
    )


# =========================================================
# UPLOADS
# =========================================================
@router.post("/media/upload")
def upload_image(
    request: Request,
    image: Optional[UploadFile] = File(None),
    title: str = Form(""),
    alt_text: str = Form(""),
    category: str = Form("general"),
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    if image is None or not image.filename:
        return flash_redirect(request, "/admin/media", "Please choose an image to upload", "error")

    data = read_upload(image)

    try:
        store_image(
            db,
            filename=image.filename,
            content_type=image.content_type,
            data=data,
            title=title.strip(),
            alt_text=alt_text.strip(),
            category=category,
        )

    except ImageValidationError as exc:
        return flash_redirect(request, "/admin/media", str(exc), "error")

    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Storing upload {image.filename} failed")
        return flash_redirect(request, "/admin/media", "Failed to upload image", "error")

    return flash_redirect(request, "/admin/media", "Image uploaded successfully")


@router.post("/media/upload-multiple")
def upload_images(
    request: Request,
    images: List[UploadFile] = File(default=[]),
    category: str = Form("general"),
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    if len(images) > MAX_FILES_PER_UPLOAD:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "success": False,
                "message": f"At most {MAX_FILES_PER_UPLOAD} images can be uploaded at once.",
            },
        )

    stored = []

    for upload in images:
        data = read_upload(upload)

        try:
            stored.append(
                store_image(
                    db,
                    filename=upload.filename or "upload",
                    content_type=upload.content_type,
                    data=data,
                    category=category,
                )
            )

        except ImageValidationError as exc:
            logger.warning(f"Skipped upload {upload.filename}: {exc}")

        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"Storing upload {upload.filename} failed")

    if not stored:
        flash(request, "No images were uploaded", "error")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "success": False,
                "message": "No images were uploaded. Please check your files and try again.",
            },
        )

    message = f"{len(stored)} image(s) uploaded successfully"
    flash(request, message)

    return {
        "success": True,
        "message": message,
        "count": len(stored),
        "images": [ImageSummary.model_validate(i).model_dump() for i in stored],
    }


# =========================================================
# EDIT / DELETE
# =========================================================
@router.post("/media/{image_id}")
def update_image(
    image_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
    form: FormData = Depends(read_form),
):
    image = db.query(Image).filter(Image.id == image_id).first()

    if not image:
        return flash_redirect(request, "/admin/media", "Image not found", "error")

    category = str(form.get("category") or "general")

    try:
        image.title = str(form.get("title") or "").strip()
        image.alt_text = str(form.get("alt_text") or "").strip()
        image.category = category if category in IMAGE_CATEGORIES else "general"
        db.commit()

    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Update image {image_id} failed")
        return flash_redirect(request, "/admin/media", "Failed to update image", "error")

    return flash_redirect(request, "/admin/media", "Image updated successfully")


@router.post("/media/{image_id}/delete")
def delete_image(
    image_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    wants_json = _wants_json(request)
    image = db.query(Image).filter(Image.id == image_id).first()

    if not image:
        if wants_json:
            return JSONResponse(
                status_code=status.HTTP_404_NOT_FOUND,
                content={"success": False, "message": "Image not found"},
            )
        return flash_redirect(request, "/admin/media", "Image not found", "error")

    try:
        db.delete(image)
        db.commit()

    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Delete image {image_id} failed")
        if wants_json:
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"success": False, "message": "Failed to delete image"},
            )
        return flash_redirect(request, "/admin/media", "Failed to delete image", "error")

    logger.info(f"Deleted image {image_id}")

    if wants_json:
        return {"success": True, "message": "Image deleted successfully", "id": image_id}

    flash(request, "Image deleted successfully")
    return redirect("/admin/media")


# =========================================================
# CONTENT API (IMAGE PICKERS)
# =========================================================
@router.get("/api/media", response_model=list[ImageResponse])
def search_media(
    query: str = "",
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    images = db.query(Image)

    query = query.strip()
    if query:
        pattern = f"%{query}%"
        images = images.filter(
            or_(
                Image.title.ilike(pattern),
                Image.filename.ilike(pattern),
                Image.alt_text.ilike(pattern),
            )
        )

    return images.order_by(Image.created_at.desc()).limit(limit).all()
