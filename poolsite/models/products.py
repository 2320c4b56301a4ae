# poolsite/models/products.py

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    Numeric,
    String,
    Text,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from poolsite.database import Base
from poolsite.models.images import product_images


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)
    short_description = Column(String, nullable=False, default="")
    description = Column(Text, nullable=False)

    # Unique when present; NULLs do not collide
    sku = Column(String, unique=True, nullable=True)

    price = Column(Numeric(10, 2), nullable=False, default=0)
    cost_price = Column(Numeric(10, 2), nullable=False, default=0)
    taxable = Column(Boolean, nullable=False, default=True)

    featured_image_id = Column(Integer, ForeignKey("images.id", ondelete="SET NULL"), nullable=True)
    category = Column(String, nullable=False, default="general")
    sizes = Column(JSON, nullable=False, default=list)

    status = Column(String, nullable=False, default="draft")
    display_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    seo_title = Column(String, nullable=False, default="")
    seo_description = Column(String, nullable=False, default="")
    seo_keywords = Column(JSON, nullable=False, default=list)
    seo_canonical_url = Column(String, nullable=False, default="")
    seo_index = Column(Boolean, nullable=False, default=True)

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    featured_image = relationship("Image", foreign_keys=[featured_image_id])
    images = relationship("Image", secondary=product_images, order_by="Image.id")

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_product_price_non_negative"),
        CheckConstraint("cost_price >= 0", name="ck_product_cost_price_non_negative"),
        CheckConstraint("status IN ('draft', 'published')", name="ck_product_status_valid"),
    )
