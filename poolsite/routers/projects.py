# poolsite/routers/projects.py

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload
from starlette.datastructures import FormData

from poolsite.database import get_db
from poolsite.core.auth import get_current_admin
from poolsite.core.flash import flash_redirect
from poolsite.core.forms import form_bool, form_id, form_id_list, form_str, read_form, split_keywords
from poolsite.core.pages import page
from poolsite.core.slugs import unique_slug
from poolsite.models.images import Image
from poolsite.models.projects import Project
from poolsite.schemas.image import ImageResponse
from poolsite.schemas.project import ProjectResponse

router = APIRouter(prefix="/admin", tags=["Projects"])

logger = logging.getLogger("poolsite")

PROJECT_STATUSES = ("draft", "published")


def _image_choices(db: Session):
    images = db.query(Image).order_by(Image.created_at.desc()).all()
    return [ImageResponse.model_validate(i) for i in images]


def _project_fields(db: Session, form) -> dict:
    status_value = form_str(form, "status", "draft")

    return {
        "short_description": form_str(form, "short_description"),
        "description": form_str(form, "description"),
        "featured_image_id": form_id(form, "featured_image_id"),
        "images": (
            db.query(Image).filter(Image.id.in_(form_id_list(form, "images"))).all()
        ),
        "status": status_value if status_value in PROJECT_STATUSES else "draft",
        "show_in_portfolio": form_bool(form, "show_in_portfolio"),
        "seo_title": form_str(form, "seo_title"),
        "seo_description": form_str(form, "seo_description"),
        "seo_keywords": split_keywords(form_str(form, "seo_keywords")),
        "seo_canonical_url": form_str(form, "seo_canonical_url"),
        "seo_index": form_str(form, "seo_index") != "false",
    }


@router.get("/projects")
def list_projects(
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    projects = (
        db.query(Project)
        .options(joinedload(Project.featured_image))
        .order_by(Project.created_at.desc())
        .all()
    )

    return page(
        request,
        "Projects",
        projects=[ProjectResponse.model_validate(p) for p in projects],
    )


@router.get("/projects/new")
def create_project_form(
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    return page(request, "Create Project", project=None, images=_image_choices(db))


@router.post("/projects")
def create_project(
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
    form: FormData = Depends(read_form),
):
    title = form_str(form, "title")
    fields = _project_fields(db, form)

    if not title or not fields["description"]:
        return flash_redirect(
            request, "/admin/projects/new", "Title and description are required", "error"
        )

    try:
        project = Project(title=title, slug=unique_slug(db, Project, title), **fields)
        db.add(project)
        db.commit()

    except SQLAlchemyError:
        db.rollback()
        logger.exception("Create project failed")
        return flash_redirect(request, "/admin/projects/new", "Failed to create project", "error")

    return flash_redirect(request, "/admin/projects", "Project created successfully")


@router.get("/projects/{project_id}/edit")
def edit_project_form(
    project_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    project = db.query(Project).filter(Project.id == project_id).first()

    if not project:
        return flash_redirect(request, "/admin/projects", "Project not found", "error")

    return page(
        request,
        "Edit Project",
        project=ProjectResponse.model_validate(project),
        images=_image_choices(db),
    )


@router.post("/projects/{project_id}")
def update_project(
    project_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
    form: FormData = Depends(read_form),
):
    project = db.query(Project).filter(Project.id == project_id).first()

    if not project:
        return flash_redirect(request, "/admin/projects", "Project not found", "error")

    title = form_str(form, "title")
    fields = _project_fields(db, form)
    edit_url = f"/admin/projects/{project_id}/edit"

    if not title or not fields["description"]:
        return flash_redirect(request, edit_url, "Title and description are required", "error")

    try:
        if title != project.title:
            project.slug = unique_slug(db, Project, title, exclude_id=project.id)
        project.title = title

        for field_name, value in fields.items():
            setattr(project, field_name, value)

        db.commit()

    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Update project {project_id} failed")
        return flash_redirect(request, edit_url, "Failed to update project", "error")

    return flash_redirect(request, "/admin/projects", "Project updated successfully")


@router.post("/projects/{project_id}/delete")
def delete_project(
    project_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    project = db.query(Project).filter(Project.id == project_id).first()

    if not project:
        return flash_redirect(request, "/admin/projects", "Project not found", "error")

    try:
        db.delete(project)
        db.commit()

    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Delete project {project_id} failed")
        return flash_redirect(request, "/admin/projects", "Failed to delete project", "error")

    return flash_redirect(request, "/admin/projects", "Project deleted successfully")
