# poolsite/models/site_settings.py

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.sql import func

from poolsite.database import Base

SETTINGS_ROW_ID = 1


class SiteSettings(Base):
    __tablename__ = "site_settings"

    # Exactly one row: the primary key is pinned to 1
    id = Column(Integer, primary_key=True, default=SETTINGS_ROW_ID, autoincrement=False)

    site_name = Column(String, nullable=False, default="New Generation Pools")
    default_meta_title = Column(
        String, nullable=False, default="New Generation Pools - Premium Pool Services"
    )
    default_meta_description = Column(
        String,
        nullable=False,
        default="New Generation Pools offers premium pool design, installation, and maintenance services.",
    )
    default_og_image_id = Column(Integer, ForeignKey("images.id", ondelete="SET NULL"), nullable=True)

    contact_email = Column(String, nullable=False, default="contact@newgenerationpools.com")
    contact_phone = Column(String, nullable=False, default="")
    sales_tax_rate = Column(Numeric(7, 6), nullable=False, default=0.0625)

    company_name = Column(String, nullable=False, default="New Generation Pools")
    address_street = Column(String, nullable=False, default="")
    address_city = Column(String, nullable=False, default="")
    address_state = Column(String, nullable=False, default="")
    address_zip = Column(String, nullable=False, default="")
    address_country = Column(String, nullable=False, default="")

    facebook = Column(String, nullable=False, default="")
    instagram = Column(String, nullable=False, default="")
    twitter = Column(String, nullable=False, default="")
    linkedin = Column(String, nullable=False, default="")

    theme_preset = Column(String, nullable=False, default="default")
    primary_color = Column(String, nullable=False, default="#0d6efd")
    secondary_color = Column(String, nullable=False, default="#6c757d")
    navbar_color = Column(String, nullable=False, default="#212529")
    footer_color = Column(String, nullable=False, default="#2c3e50")
    font_family = Column(String, nullable=False, default="system-ui, -apple-system, sans-serif")

    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint("id = 1", name="ck_site_settings_single_row"),
        CheckConstraint(
            "sales_tax_rate >= 0 AND sales_tax_rate <= 1",
            name="ck_site_settings_tax_rate_range",
        ),
        CheckConstraint(
            "theme_preset IN ('default', 'ocean', 'sky', 'navy', 'teal', 'custom')",
            name="ck_site_settings_theme_preset_valid",
        ),
    )
