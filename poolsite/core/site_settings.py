# =========================================================
# SITE SETTINGS STORE
#
# One settings row (primary key pinned to 1), created lazily on first read.
# A losing concurrent create hits the primary key and re-reads the winner.
# =========================================================

import logging
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from poolsite.core.config import settings as app_settings
from poolsite.core.pricing import resolve_tax_rate
from poolsite.models.site_settings import SETTINGS_ROW_ID, SiteSettings

logger = logging.getLogger("poolsite")

CUSTOM_PRESET = "custom"

THEME_PRESETS = {
    "default": {
        "primary_color": "#0d6efd",
        "secondary_color": "#6c757d",
        "navbar_color": "#212529",
        "footer_color": "#2c3e50",
    },
    "ocean": {
        "primary_color": "#0066cc",
        "secondary_color": "#4da6ff",
        "navbar_color": "#003366",
        "footer_color": "#004080",
    },
    "sky": {
        "primary_color": "#3399ff",
        "secondary_color": "#66b3ff",
        "navbar_color": "#1a5490",
        "footer_color": "#2d6ba3",
    },
    "navy": {
        "primary_color": "#1e3a8a",
        "secondary_color": "#3b82f6",
        "navbar_color": "#0f172a",
        "footer_color": "#1e293b",
    },
    "teal": {
        "primary_color": "#0d9488",
        "secondary_color": "#14b8a6",
        "navbar_color": "#0f172a",
        "footer_color": "#134e4a",
    },
}

THEME_COLOR_FIELDS = ("primary_color", "secondary_color", "navbar_color", "footer_color")

# Plain fields copied from a patch when a non-empty value is supplied
TEXT_FIELDS = (
    "site_name",
    "default_meta_title",
    "default_meta_description",
    "contact_email",
    "contact_phone",
    "company_name",
    "address_street",
    "address_city",
    "address_state",
    "address_zip",
    "address_country",
    "facebook",
    "instagram",
    "twitter",
    "linkedin",
    "font_family",
)


@dataclass(frozen=True)
class ResolvedTheme:
    preset: str
    primary_color: str
    secondary_color: str
    navbar_color: str
    footer_color: str
    font_family: str


def get_settings(db: Session) -> SiteSettings:
    site_settings = db.get(SiteSettings, SETTINGS_ROW_ID)
    if site_settings is not None:
        return site_settings

    try:
        site_settings = SiteSettings(id=SETTINGS_ROW_ID)
        db.add(site_settings)
        db.commit()
        db.refresh(site_settings)
        logger.info("Created default site settings")
        return site_settings

    except IntegrityError:
        # Another request created the row first
        db.rollback()
        return db.get(SiteSettings, SETTINGS_ROW_ID)


def update_settings(db: Session, patch: dict) -> SiteSettings:
    """
    Merge the non-empty values of ``patch`` into the settings row.

    Fields missing from the patch (or empty) keep their stored value.
    A named theme preset overwrites the four theme colors; ``custom``
    keeps the supplied colors, falling back to the stored ones.
    """
    site_settings = get_settings(db)

    for field_name in TEXT_FIELDS:
        value = patch.get(field_name)
        if value:
            setattr(site_settings, field_name, value)

    if patch.get("sales_tax_rate") not in (None, ""):
        site_settings.sales_tax_rate = resolve_tax_rate(
            patch["sales_tax_rate"],
            default=site_settings.sales_tax_rate,
        )

    if patch.get("default_og_image_id"):
        site_settings.default_og_image_id = patch["default_og_image_id"]

    preset = patch.get("theme_preset")

    if preset and preset != CUSTOM_PRESET and preset in THEME_PRESETS:
        site_settings.theme_preset = preset
        for color_field, color in THEME_PRESETS[preset].items():
            setattr(site_settings, color_field, color)
    else:
        if preset or any(patch.get(f) for f in THEME_COLOR_FIELDS):
            site_settings.theme_preset = CUSTOM_PRESET
        for color_field in THEME_COLOR_FIELDS:
            if patch.get(color_field):
                setattr(site_settings, color_field, patch[color_field])

    db.commit()
    db.refresh(site_settings)

    return site_settings


def apply_preset(site_settings: SiteSettings) -> ResolvedTheme:
    """Effective theme for rendering; never mutates the stored row."""
    colors = {f: getattr(site_settings, f) for f in THEME_COLOR_FIELDS}

    preset = site_settings.theme_preset or "default"
    if preset != CUSTOM_PRESET and preset in THEME_PRESETS:
        colors.update(THEME_PRESETS[preset])

    return ResolvedTheme(
        preset=preset,
        font_family=site_settings.font_family,
        **colors,
    )


def default_tax_rate(db: Session) -> Decimal:
    fallback = Decimal(str(app_settings.DEFAULT_TAX_RATE))
    return resolve_tax_rate(get_settings(db).sales_tax_rate, default=fallback)
