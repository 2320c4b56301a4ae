# poolsite/core/seo.py

from fastapi import Request

from poolsite.models.site_settings import SiteSettings


def default_seo(site_settings: SiteSettings) -> dict:
    return {
        "title": site_settings.default_meta_title,
        "description": site_settings.default_meta_description,
        "keywords": [],
        "canonical_url": "",
        "og_image": "",
        "og_url": "",
        "index": True,
    }


def entity_seo(request: Request, entity, title: str, site_name: str, og_image=None) -> dict:
    """SEO block for a detail page; entity fields win over derived defaults."""
    base_url = str(request.base_url).rstrip("/")
    page_url = str(request.url)

    return {
        "title": entity.seo_title or f"{title} - {site_name}",
        "description": entity.seo_description or entity.short_description or site_name,
        "keywords": entity.seo_keywords or [],
        "canonical_url": entity.seo_canonical_url or page_url,
        "og_image": f"{base_url}{og_image.large_path}" if og_image is not None else "",
        "og_url": page_url,
        "index": entity.seo_index,
    }
