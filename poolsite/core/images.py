# =========================================================
# IMAGE VARIANT PIPELINE
#
# One upload -> original + thumbnail (150x150 crop) + medium (<= 800px wide)
# + large (<= 1600px wide), all stored on a single Image row.
# =========================================================

import logging
import os
from dataclasses import dataclass
from io import BytesIO

from PIL import Image as PILImage, ImageOps, UnidentifiedImageError
from sqlalchemy.orm import Session

from poolsite.core.config import settings
from poolsite.models.images import IMAGE_CATEGORIES, Image

logger = logging.getLogger("poolsite")

ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif", ".webp"}
ALLOWED_MIME_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"}

THUMBNAIL_SIZE = (150, 150)
MEDIUM_WIDTH = 800
LARGE_WIDTH = 1600

MAX_FILES_PER_UPLOAD = 20

# Pillow format name for each stored MIME type
_FORMATS = {
    "image/jpeg": "JPEG",
    "image/jpg": "JPEG",
    "image/png": "PNG",
    "image/gif": "GIF",
    "image/webp": "WEBP",
}


class ImageValidationError(ValueError):
    pass


@dataclass
class ImageVariants:
    original: bytes
    thumbnail: bytes
    medium: bytes
    large: bytes


def validate_upload(filename: str, content_type: str | None, size: int) -> None:
    extension = os.path.splitext(filename or "")[1].lower()
    mime_type = (content_type or "").lower()

    if extension not in ALLOWED_EXTENSIONS or mime_type not in ALLOWED_MIME_TYPES:
        raise ImageValidationError("Only image files are allowed!")

    if size == 0:
        raise ImageValidationError("Uploaded file is empty")

    if size > settings.MAX_UPLOAD_BYTES:
        limit_mb = settings.MAX_UPLOAD_BYTES // (1024 * 1024)
        raise ImageValidationError(f"Image exceeds the {limit_mb}MB upload limit")


def read_upload(upload) -> bytes:
    """Upload body, read no further than one byte past MAX_UPLOAD_BYTES."""
    return upload.file.read(settings.MAX_UPLOAD_BYTES + 1)


def _encode(image: PILImage.Image, image_format: str) -> bytes:
    if image_format == "JPEG" and image.mode not in ("RGB", "L"):
        image = image.convert("RGB")

    output = BytesIO()
    image.save(output, format=image_format)
    return output.getvalue()


def _fit_width(image: PILImage.Image, max_width: int) -> PILImage.Image:
    # Never enlarge
    if image.width <= max_width:
        return image.copy()

    height = max(1, round(image.height * max_width / image.width))
    return image.resize((max_width, height), PILImage.LANCZOS)


def build_variants(data: bytes, mime_type: str) -> ImageVariants:
    """Decode ``data`` and derive the three resized variants in the source format."""
    try:
        with PILImage.open(BytesIO(data)) as source:
            image_format = source.format or _FORMATS.get(mime_type, "JPEG")
            source.load()
            # Apply camera rotation before cropping
            image = ImageOps.exif_transpose(source)
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageValidationError("Uploaded file is not a readable image") from exc

    thumbnail = ImageOps.fit(image, THUMBNAIL_SIZE, method=PILImage.LANCZOS)

    return ImageVariants(
        original=data,
        thumbnail=_encode(thumbnail, image_format),
        medium=_encode(_fit_width(image, MEDIUM_WIDTH), image_format),
        large=_encode(_fit_width(image, LARGE_WIDTH), image_format),
    )


def store_image(
    db: Session,
    *,
    filename: str,
    content_type: str | None,
    data: bytes,
    title: str = "",
    alt_text: str = "",
    category: str = "general",
) -> Image:
    """Validate, resize and persist one upload. Commits."""
    validate_upload(filename, content_type, len(data))

    mime_type = content_type.lower()
    variants = build_variants(data, mime_type)

    image = Image(
        filename=filename,
        mime_type=mime_type,
        original_data=variants.original,
        thumbnail_data=variants.thumbnail,
        medium_data=variants.medium,
        large_data=variants.large,
        title=title or filename,
        alt_text=alt_text,
        category=category if category in IMAGE_CATEGORIES else "general",
        tags=[],
    )

    db.add(image)
    db.commit()
    db.refresh(image)

    logger.info(f"Stored image {image.id} ({filename}, {len(data)} bytes)")

    return image


def image_etag(image_id: int, size: str) -> str:
    return f'"{image_id}-{size}"'
