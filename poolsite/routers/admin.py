# poolsite/routers/admin.py

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from sqlalchemy import func

from poolsite.database import get_db
from poolsite.core.auth import get_current_admin
from poolsite.core.pages import page
from poolsite.models.contact_messages import ContactMessage
from poolsite.models.images import Image
from poolsite.models.product_orders import ProductOrder
from poolsite.models.products import Product
from poolsite.models.projects import Project
from poolsite.models.services import Service
from poolsite.schemas.contact import ProductOrderResponse
from poolsite.schemas.image import ImageResponse
from poolsite.schemas.project import ProjectResponse


router = APIRouter(prefix="/admin", tags=["Admin"])


# =========================================================
# DASHBOARD
# =========================================================
@router.get("")
def dashboard(
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    stats = {
        "projects": db.query(func.count(Project.id)).scalar(),
        "services": db.query(func.count(Service.id)).scalar(),
        "products": db.query(func.count(Product.id)).scalar(),
        "published_projects": (
            db.query(func.count(Project.id))
            .filter(Project.status == "published", Project.show_in_portfolio == True)
            .scalar()
        ),
        "images": db.query(func.count(Image.id)).scalar(),
        "unread_contacts": (
            db.query(func.count(ContactMessage.id))
            .filter(ContactMessage.is_read == False)
            .scalar()
        ),
    }

    recent_projects = db.query(Project).order_by(Project.created_at.desc()).limit(5).all()
    recent_images = db.query(Image).order_by(Image.created_at.desc()).limit(5).all()

    pending_orders = (
        db.query(ProductOrder)
        .filter(ProductOrder.status == "pending")
        .order_by(ProductOrder.created_at.desc())
        .limit(5)
        .all()
    )

    return page(
        request,
        "Dashboard",
        admin=admin.username,
        stats=stats,
        recent_projects=[ProjectResponse.model_validate(p) for p in recent_projects],
        recent_images=[ImageResponse.model_validate(i) for i in recent_images],
        pending_orders=[ProductOrderResponse.model_validate(o) for o in pending_orders],
    )
