from decimal import Decimal

from poolsite.core.site_settings import (
    THEME_PRESETS,
    apply_preset,
    default_tax_rate,
    get_settings,
    update_settings,
)
from poolsite.database import SessionLocal
from poolsite.models.site_settings import SETTINGS_ROW_ID, SiteSettings


def test_first_read_creates_default_row(db):
    assert db.query(SiteSettings).count() == 0

    site_settings = get_settings(db)

    assert site_settings.id == SETTINGS_ROW_ID
    assert site_settings.sales_tax_rate == Decimal("0.0625")
    assert site_settings.theme_preset == "default"
    assert site_settings.site_name == "New Generation Pools"


def test_repeated_reads_share_one_row(db):
    first = get_settings(db)
    second = get_settings(db)

    assert first.id == second.id
    assert db.query(SiteSettings).count() == 1


def test_named_preset_overwrites_colors(db):
    site_settings = update_settings(
        db, {"theme_preset": "ocean", "primary_color": "#123456"}
    )

    assert site_settings.theme_preset == "ocean"
    for field_name, color in THEME_PRESETS["ocean"].items():
        assert getattr(site_settings, field_name) == color


def test_custom_colors_switch_preset_to_custom(db):
    site_settings = update_settings(
        db, {"theme_preset": "custom", "primary_color": "#112233", "footer_color": "#445566"}
    )

    assert site_settings.theme_preset == "custom"
    assert site_settings.primary_color == "#112233"
    assert site_settings.footer_color == "#445566"
    # Not supplied: stored value kept
    assert site_settings.navbar_color == "#212529"


def test_unknown_preset_is_treated_as_custom(db):
    site_settings = update_settings(db, {"theme_preset": "sunset"})

    assert site_settings.theme_preset == "custom"


def test_empty_values_keep_stored_fields(db):
    update_settings(db, {"site_name": "Blue Water Pools", "contact_phone": "555-0199"})

    site_settings = update_settings(db, {"site_name": "", "contact_phone": None})

    assert site_settings.site_name == "Blue Water Pools"
    assert site_settings.contact_phone == "555-0199"
    assert site_settings.theme_preset == "default"


def test_tax_rate_patch_is_sanitised(db):
    assert update_settings(db, {"sales_tax_rate": "0.07"}).sales_tax_rate == Decimal("0.07")
    assert update_settings(db, {"sales_tax_rate": "1.5"}).sales_tax_rate == Decimal("1")
    # Invalid values keep the stored rate
    assert update_settings(db, {"sales_tax_rate": "-2"}).sales_tax_rate == Decimal("1")


def test_apply_preset_uses_preset_colors_over_stored_ones(db):
    site_settings = get_settings(db)
    site_settings.theme_preset = "navy"
    site_settings.primary_color = "#000000"
    db.commit()

    theme = apply_preset(site_settings)

    assert theme.preset == "navy"
    assert theme.primary_color == THEME_PRESETS["navy"]["primary_color"]
    # Stored row is untouched
    assert site_settings.primary_color == "#000000"


def test_apply_preset_keeps_custom_colors(db):
    site_settings = update_settings(db, {"primary_color": "#abcdef"})

    theme = apply_preset(site_settings)

    assert theme.preset == "custom"
    assert theme.primary_color == "#abcdef"


def test_default_tax_rate_reads_settings(db):
    assert default_tax_rate(db) == Decimal("0.0625")

    update_settings(db, {"sales_tax_rate": "0.08"})

    assert default_tax_rate(db) == Decimal("0.08")


def test_settings_form_updates_theme(admin_client):
    response = admin_client.post(
        "/admin/settings",
        data={"site_name": "Sky Pools", "theme_preset": "teal"},
        follow_redirects=True,
    )

    body = response.json()
    assert response.status_code == 200
    assert body["settings"]["site_name"] == "Sky Pools"
    assert body["theme"]["preset"] == "teal"
    assert body["theme"]["primary_color"] == THEME_PRESETS["teal"]["primary_color"]
    assert {"category": "success", "message": "Settings updated successfully"} in body["messages"]


def test_losing_concurrent_create_returns_winning_row(db, monkeypatch):
    winner = SessionLocal()
    winner.add(SiteSettings(id=SETTINGS_ROW_ID, site_name="Winner Pools"))
    winner.commit()
    winner.close()

    real_get = db.get
    lookups = []

    def get_before_winner_commits(model, ident, **kwargs):
        # The first lookup happens before the other request's row is visible
        lookups.append(ident)
        if len(lookups) == 1:
            return None
        return real_get(model, ident, **kwargs)

    monkeypatch.setattr(db, "get", get_before_winner_commits)

    site_settings = get_settings(db)

    assert len(lookups) == 2
    assert site_settings.site_name == "Winner Pools"
    assert db.query(SiteSettings).count() == 1
