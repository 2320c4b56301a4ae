from pydantic import BaseModel
from datetime import datetime
from decimal import Decimal
from typing import Optional


class ThemeResponse(BaseModel):
    preset: str
    primary_color: str
    secondary_color: str
    navbar_color: str
    footer_color: str
    font_family: str

    class Config:
        from_attributes = True


class SiteSettingsResponse(BaseModel):
    site_name: str
    default_meta_title: str
    default_meta_description: str
    default_og_image_id: Optional[int]
    contact_email: str
    contact_phone: str
    sales_tax_rate: Decimal
    company_name: str
    address_street: str
    address_city: str
    address_state: str
    address_zip: str
    address_country: str
    facebook: str
    instagram: str
    twitter: str
    linkedin: str
    updated_at: datetime

    class Config:
        from_attributes = True
