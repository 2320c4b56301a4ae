import logging

import requests

from poolsite.core.config import settings

logger = logging.getLogger("poolsite")

RESEND_URL = "https://api.resend.com/emails"


def email_configured() -> bool:
    return bool(settings.RESEND_API_KEY and settings.RESEND_FROM_EMAIL)


def send_notification_email(subject: str, text: str, reply_to: str | None = None):
    recipient = settings.CONTACT_EMAIL or settings.RESEND_FROM_EMAIL

    payload = {
        "from": settings.RESEND_FROM_EMAIL,
        "to": [recipient],
        "subject": subject,
        "text": text,
    }

    if reply_to:
        payload["reply_to"] = reply_to

    headers = {
        "Authorization": f"Bearer {settings.RESEND_API_KEY}",
        "Content-Type": "application/json",
    }

    response = requests.post(RESEND_URL, json=payload, headers=headers, timeout=10)

    if response.status_code >= 400:
        raise Exception(f"Email sending failed: {response.text}")


def notify(subject: str, text: str, reply_to: str | None = None) -> bool:
    """Send a site notification if email is configured. Failures are logged, not raised."""
    if not email_configured():
        return False

    try:
        send_notification_email(subject, text, reply_to=reply_to)
        return True
    except Exception:
        logger.exception(f"Notification email failed: {subject}")
        return False


def contact_message_text(contact) -> str:
    lines = [
        "New contact form submission",
        "",
        f"Name: {contact.name}",
        f"Email: {contact.email}",
        f"Phone: {contact.phone or 'Not provided'}",
    ]

    if contact.town:
        lines.append(f"Town: {contact.town}")
    if contact.service_type:
        lines.append(f"Service Type: {contact.service_type}")

    lines += ["", contact.message or ""]

    return "\n".join(lines)


def product_order_text(order) -> str:
    sizes_text = ", ".join(order.sizes) if order.sizes else "No sizes selected"

    lines = [
        "New product order",
        "",
        f"Product: {order.product_name}",
        f"Sizes: {sizes_text}",
        "",
        f"Name: {order.name}",
        f"Email: {order.email}",
        f"Phone: {order.phone}",
    ]

    if order.address:
        lines.append(f"Address: {order.address}")
    if order.city or order.state or order.zip_code:
        lines.append(f"City/State/Zip: {order.city} {order.state} {order.zip_code}".rstrip())
    if order.message:
        lines += ["", order.message]

    return "\n".join(lines)
