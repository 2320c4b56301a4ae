# poolsite/core/flash.py
#
# Session-backed one-shot messages shown on the next rendered page.

from fastapi import Request
from fastapi.responses import RedirectResponse

FLASH_KEY = "_flash"


def flash(request: Request, message: str, category: str = "success") -> None:
    messages = request.session.get(FLASH_KEY) or []
    messages.append({"category": category, "message": message})
    request.session[FLASH_KEY] = messages


def pop_flashed(request: Request) -> list[dict]:
    return request.session.pop(FLASH_KEY, None) or []


def redirect(url: str) -> RedirectResponse:
    # 303 so the browser follows a form POST with a GET
    return RedirectResponse(url, status_code=303)


def flash_redirect(request: Request, url: str, message: str, category: str = "success") -> RedirectResponse:
    flash(request, message, category)
    return redirect(url)
