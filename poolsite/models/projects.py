# poolsite/models/projects.py

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from poolsite.database import Base
from poolsite.models.images import project_images


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)
    short_description = Column(String, nullable=False, default="")
    description = Column(Text, nullable=False)

    featured_image_id = Column(Integer, ForeignKey("images.id", ondelete="SET NULL"), nullable=True)

    status = Column(String, nullable=False, default="draft")
    show_in_portfolio = Column(Boolean, nullable=False, default=True)

    seo_title = Column(String, nullable=False, default="")
    seo_description = Column(String, nullable=False, default="")
    seo_keywords = Column(JSON, nullable=False, default=list)
    seo_canonical_url = Column(String, nullable=False, default="")
    seo_index = Column(Boolean, nullable=False, default=True)

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    featured_image = relationship("Image", foreign_keys=[featured_image_id])
    images = relationship("Image", secondary=project_images, order_by="Image.id")

    __table_args__ = (
        CheckConstraint("status IN ('draft', 'published')", name="ck_project_status_valid"),
    )
