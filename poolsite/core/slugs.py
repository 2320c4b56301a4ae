import re
import unicodedata

from sqlalchemy.orm import Session


def slugify(value: str) -> str:
    value = unicodedata.normalize("NFKD", value or "")
    value = value.encode("ascii", "ignore").decode("ascii").lower()
    value = re.sub(r"[^a-z0-9]+", "-", value)
    return value.strip("-")


def unique_slug(db: Session, model, source: str, exclude_id: int | None = None) -> str:
    """
    Slug for ``source`` that no other row of ``model`` uses.
    Appends ``-1``, ``-2``... while the candidate is taken.
    """
    base_slug = slugify(source) or "item"
    slug = base_slug
    num = 1

    while True:
        query = db.query(model.id).filter(model.slug == slug)
        if exclude_id is not None:
            query = query.filter(model.id != exclude_id)
        if query.first() is None:
            return slug
        slug = f"{base_slug}-{num}"
        num += 1
