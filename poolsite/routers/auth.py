from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from starlette.datastructures import FormData

from poolsite.database import get_db
from poolsite.core.auth import authenticate_admin, is_authenticated
from poolsite.core.config import settings
from poolsite.core.flash import flash_redirect, redirect
from poolsite.core.forms import form_str, read_form
from poolsite.core.jwt import SESSION_COOKIE_NAME, create_session_token
from poolsite.core.pages import page
from poolsite.core.rate_limiter import limiter

router = APIRouter(prefix="/admin", tags=["Authentication"])

RETURN_TO_KEY = "return_to"


def _safe_return_to(value: str | None) -> str:
    # Only local admin paths
    if value and value.startswith("/admin") and not value.startswith("//"):
        return value
    return "/admin"


# ---------------- LOGIN FORM ----------------
@router.get("/login")
def login_form(request: Request):
    if is_authenticated(request):
        return redirect("/admin")

    return page(request, "Admin Login")


# ---------------- LOGIN (SESSION COOKIE) ----------------
@router.post("/login")
@limiter.limit("5/minute")
def login(
    request: Request,
    db: Session = Depends(get_db),
    form: FormData = Depends(read_form),
):
    username = form_str(form, "username")
    password = form.get("password") or ""

    admin = authenticate_admin(db, username, password)

    if admin is None:
        return flash_redirect(request, "/admin/login", "Invalid username or password", "error")

    token = create_session_token(
        data={"sub": admin.username, "uid": admin.user_id}
    )

    response = redirect(_safe_return_to(request.session.pop(RETURN_TO_KEY, None)))
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        max_age=settings.SESSION_MAX_AGE_HOURS * 3600,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )

    return response


# ---------------- TOKEN (API CLIENTS) ----------------
@router.post("/token")
@limiter.limit("5/minute")
def issue_token(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    admin = authenticate_admin(db, form_data.username, form_data.password)

    if admin is None:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_session_token(
        data={"sub": admin.username, "uid": admin.user_id}
    )

    return {
        "access_token": token,
        "token_type": "bearer"
    }


# ---------------- LOGOUT ----------------
@router.post("/logout")
def logout(request: Request):
    request.session.clear()

    response = redirect("/admin/login")
    response.delete_cookie(SESSION_COOKIE_NAME)

    return response
