# poolsite/models/images.py

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    LargeBinary,
    String,
    Table,
)
from sqlalchemy.orm import deferred
from sqlalchemy.sql import func

from poolsite.database import Base

IMAGE_SIZES = ("original", "thumbnail", "medium", "large")
IMAGE_CATEGORIES = ("project", "service", "hero", "portfolio", "general")


# Gallery associations
product_images = Table(
    "product_images",
    Base.metadata,
    Column("product_id", Integer, ForeignKey("products.id", ondelete="CASCADE"), primary_key=True),
    Column("image_id", Integer, ForeignKey("images.id", ondelete="CASCADE"), primary_key=True),
)

project_images = Table(
    "project_images",
    Base.metadata,
    Column("project_id", Integer, ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
    Column("image_id", Integer, ForeignKey("images.id", ondelete="CASCADE"), primary_key=True),
)


class Image(Base):
    __tablename__ = "images"

    id = Column(Integer, primary_key=True, index=True)
    filename = Column(String, nullable=False)
    mime_type = Column(String, nullable=False)

    # Binary variants are only loaded when accessed
    original_data = deferred(Column(LargeBinary, nullable=False))
    thumbnail_data = deferred(Column(LargeBinary, nullable=False))
    medium_data = deferred(Column(LargeBinary, nullable=False))
    large_data = deferred(Column(LargeBinary, nullable=False))

    alt_text = Column(String, nullable=False, default="")
    title = Column(String, nullable=False, default="")
    category = Column(String, nullable=False, default="general")
    tags = Column(JSON, nullable=False, default=list)

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        CheckConstraint(
            "category IN ('project', 'service', 'hero', 'portfolio', 'general')",
            name="ck_image_category_valid",
        ),
    )

    def path(self, size: str) -> str:
        return f"/api/images/{self.id}/{size}"

    @property
    def original_path(self) -> str:
        return self.path("original")

    @property
    def thumbnail_path(self) -> str:
        return self.path("thumbnail")

    @property
    def medium_path(self) -> str:
        return self.path("medium")

    @property
    def large_path(self) -> str:
        return self.path("large")
