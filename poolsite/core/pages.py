# poolsite/core/pages.py

from fastapi import Request

from poolsite.core.flash import pop_flashed


def page(request: Request, title: str, **context) -> dict:
    """JSON page context: title, pending flash messages and the view data."""
    return {
        "title": title,
        "messages": pop_flashed(request),
        **context,
    }
