# poolsite/models/services.py

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from poolsite.database import Base


class Service(Base):
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)
    short_description = Column(String, nullable=False, default="")
    description = Column(Text, nullable=False)

    icon_image_id = Column(Integer, ForeignKey("images.id", ondelete="SET NULL"), nullable=True)
    hero_image_id = Column(Integer, ForeignKey("images.id", ondelete="SET NULL"), nullable=True)

    display_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    seo_title = Column(String, nullable=False, default="")
    seo_description = Column(String, nullable=False, default="")
    seo_keywords = Column(JSON, nullable=False, default=list)
    seo_canonical_url = Column(String, nullable=False, default="")
    seo_index = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    icon_image = relationship("Image", foreign_keys=[icon_image_id])
    hero_image = relationship("Image", foreign_keys=[hero_image_id])
