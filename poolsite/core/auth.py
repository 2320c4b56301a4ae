# poolsite/core/auth.py

import secrets
from dataclasses import dataclass

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from poolsite.database import get_db
from poolsite.models.users import AdminUser
from poolsite.core.config import settings
from poolsite.core.hashing import hash_password, verify_password
from poolsite.core.jwt import SESSION_COOKIE_NAME, decode_session_token
from poolsite.core.oauth2 import oauth2_scheme


class LoginRequired(Exception):
    """Raised by admin dependencies; handled in main by redirecting to the login page."""

    def __init__(self, return_to: str | None = None):
        super().__init__("Login required")
        self.return_to = return_to


@dataclass
class CurrentAdmin:
    username: str
    user_id: int | None = None


def _requested_url(request: Request) -> str:
    url = request.url.path
    if request.url.query:
        url = f"{url}?{request.url.query}"
    return url


def authenticate_admin(db: Session, username: str, password: str) -> CurrentAdmin | None:
    # Environment credentials take precedence over stored admin users
    if settings.ADMIN_USERNAME and settings.ADMIN_PASSWORD:
        # Compared as UTF-8 bytes; compare_digest rejects non-ASCII str
        if secrets.compare_digest(
            username.encode("utf-8"), settings.ADMIN_USERNAME.encode("utf-8")
        ) and secrets.compare_digest(
            password.encode("utf-8"), settings.ADMIN_PASSWORD.encode("utf-8")
        ):
            return CurrentAdmin(username=username)

    user = db.query(AdminUser).filter(AdminUser.username == username).first()

    if user and verify_password(password, user.password_hash):
        return CurrentAdmin(username=user.username, user_id=user.id)

    return None


def get_current_admin(
    request: Request,
    token: str | None = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
):
    token = token or request.cookies.get(SESSION_COOKIE_NAME)
    payload = decode_session_token(token) if token else None

    if payload is None or not payload.get("sub"):
        raise LoginRequired(return_to=_requested_url(request))

    user_id = payload.get("uid")

    if user_id is not None:
        user = db.query(AdminUser).filter(AdminUser.id == int(user_id)).first()
        if user is None:
            raise LoginRequired(return_to=_requested_url(request))

    return CurrentAdmin(username=payload["sub"], user_id=user_id)


def is_authenticated(request: Request) -> bool:
    token = request.cookies.get(SESSION_COOKIE_NAME)
    return bool(token and decode_session_token(token))


def upsert_admin_user(db: Session, username: str, password: str) -> tuple[AdminUser, bool]:
    """Create the admin user or reset its password. Returns (user, created)."""
    user = db.query(AdminUser).filter(AdminUser.username == username).first()
    created = user is None

    if created:
        user = AdminUser(username=username, password_hash=hash_password(password))
        db.add(user)
    else:
        user.password_hash = hash_password(password)

    db.commit()
    db.refresh(user)

    return user, created
