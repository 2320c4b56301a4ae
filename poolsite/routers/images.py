# =========================================================
# PUBLIC IMAGE SERVING
#
# GET /api/images/{id}/{size}
# - unknown size -> 404, matching ETag -> 304, both before any query
# - only the requested variant column is read, under a timeout
# - responses are immutable and cached for a year
# =========================================================

import asyncio
import logging
import time
from datetime import timezone
from email.utils import format_datetime

from fastapi import APIRouter, HTTPException, Request, Response, status

from poolsite.database import SessionLocal
from poolsite.core.config import settings
from poolsite.core.images import image_etag
from poolsite.models.images import IMAGE_SIZES, Image

router = APIRouter(prefix="/api/images", tags=["Images"])

logger = logging.getLogger("poolsite")

SLOW_SERVE_SECONDS = 3.0
CACHE_CONTROL = "public, max-age=31536000, immutable"


def _load_variant(image_id: int, size: str):
    """Fetch (mime_type, data, created_at) for one variant, or None."""
    column = getattr(Image, f"{size}_data")

    db = SessionLocal()
    try:
        return (
            db.query(Image.mime_type, column, Image.created_at)
            .filter(Image.id == image_id)
            .first()
        )
    finally:
        db.close()


def _http_date(value) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return format_datetime(value.astimezone(timezone.utc), usegmt=True)


@router.get("/{image_id}/{size}")
async def serve_image(image_id: int, size: str, request: Request):
    if size not in IMAGE_SIZES:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Image not found")

    etag = image_etag(image_id, size)

    if request.headers.get("if-none-match") == etag:
        return Response(status_code=status.HTTP_304_NOT_MODIFIED, headers={"ETag": etag})

    start_time = time.perf_counter()

    try:
        # On timeout the query thread is abandoned and finishes on its own
        loop = asyncio.get_running_loop()
        row = await asyncio.wait_for(
            loop.run_in_executor(None, _load_variant, image_id, size),
            timeout=settings.IMAGE_QUERY_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        logger.error(f"Image query timeout: {image_id}/{size}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Image temporarily unavailable",
        )

    if row is None or not row[1]:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Image not found")

    mime_type, data, created_at = row

    elapsed = time.perf_counter() - start_time
    if elapsed > SLOW_SERVE_SECONDS:
        logger.warning(f"Slow image load: {image_id}/{size} took {elapsed * 1000:.0f}ms")

    headers = {
        "Cache-Control": CACHE_CONTROL,
        "ETag": etag,
    }
    if created_at is not None:
        headers["Last-Modified"] = _http_date(created_at)

    # Content-Length is set by Response from the body
    return Response(
        content=bytes(data),
        media_type=mime_type or "image/jpeg",
        headers=headers,
    )
