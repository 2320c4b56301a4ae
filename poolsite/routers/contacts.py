# poolsite/routers/contacts.py

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from poolsite.database import get_db
from poolsite.core.auth import get_current_admin
from poolsite.core.flash import flash_redirect
from poolsite.core.pages import page
from poolsite.models.contact_messages import ContactMessage
from poolsite.schemas.contact import ContactMessageResponse

router = APIRouter(prefix="/admin", tags=["Contacts"])

logger = logging.getLogger("poolsite")


@router.get("/contacts")
def list_contacts(
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    contacts = db.query(ContactMessage).order_by(ContactMessage.created_at.desc()).all()

    return page(
        request,
        "Recent Contacts",
        contact_messages=[ContactMessageResponse.model_validate(c) for c in contacts],
    )


@router.get("/contacts/{contact_id}")
def show_contact(
    contact_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    contact = db.query(ContactMessage).filter(ContactMessage.id == contact_id).first()

    if not contact:
        return flash_redirect(request, "/admin/contacts", "Contact message not found", "error")

    # Viewing marks the message read
    if not contact.is_read:
        try:
            contact.is_read = True
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"Marking contact {contact_id} read failed")

    return page(
        request,
        f"Contact from {contact.name}",
        contact_message=ContactMessageResponse.model_validate(contact),
    )


@router.post("/contacts/{contact_id}/delete")
def delete_contact(
    contact_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_current_admin),
):
    contact = db.query(ContactMessage).filter(ContactMessage.id == contact_id).first()

    if not contact:
        return flash_redirect(request, "/admin/contacts", "Contact message not found", "error")

    try:
        db.delete(contact)
        db.commit()

    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Delete contact {contact_id} failed")
        return flash_redirect(request, "/admin/contacts", "Failed to delete contact message", "error")

    return flash_redirect(request, "/admin/contacts", "Contact message deleted successfully")
