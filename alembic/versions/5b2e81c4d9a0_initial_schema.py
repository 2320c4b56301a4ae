"""initial_schema

Revision ID: 5b2e81c4d9a0
Revises:
Create Date: 2026-10-17 09:12:41.208113
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5b2e81c4d9a0'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(updated: bool = True) -> list:
    columns = [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]
    if updated:
        columns.append(
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)
        )
    return columns


def _seo_columns() -> list:
    return [
        sa.Column("seo_title", sa.String(), nullable=False),
        sa.Column("seo_description", sa.String(), nullable=False),
        sa.Column("seo_keywords", sa.JSON(), nullable=False),
        sa.Column("seo_canonical_url", sa.String(), nullable=False),
        sa.Column("seo_index", sa.Boolean(), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema."""

    # ADMIN USERS
    op.create_table(
        "admin_users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        *_timestamps(updated=False),
    )
    op.create_index("ix_admin_users_id", "admin_users", ["id"])
    op.create_index("ix_admin_users_username", "admin_users", ["username"], unique=True)

    # IMAGES
    op.create_table(
        "images",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("filename", sa.String(), nullable=False),
        sa.Column("mime_type", sa.String(), nullable=False),
        sa.Column("original_data", sa.LargeBinary(), nullable=False),
        sa.Column("thumbnail_data", sa.LargeBinary(), nullable=False),
        sa.Column("medium_data", sa.LargeBinary(), nullable=False),
        sa.Column("large_data", sa.LargeBinary(), nullable=False),
        sa.Column("alt_text", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        *_timestamps(updated=False),
        sa.CheckConstraint(
            "category IN ('project', 'service', 'hero', 'portfolio', 'general')",
            name="ck_image_category_valid",
        ),
    )
    op.create_index("ix_images_id", "images", ["id"])
    op.create_index("ix_images_created_at", "images", ["created_at"])

    # PRODUCTS
    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("short_description", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("sku", sa.String(), nullable=True, unique=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("cost_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("taxable", sa.Boolean(), nullable=False),
        sa.Column("featured_image_id", sa.Integer(), sa.ForeignKey("images.id", ondelete="SET NULL"), nullable=True),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("sizes", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_seo_columns(),
        *_timestamps(),
        sa.CheckConstraint("price >= 0", name="ck_product_price_non_negative"),
        sa.CheckConstraint("cost_price >= 0", name="ck_product_cost_price_non_negative"),
        sa.CheckConstraint("status IN ('draft', 'published')", name="ck_product_status_valid"),
    )
    op.create_index("ix_products_id", "products", ["id"])
    op.create_index("ix_products_slug", "products", ["slug"], unique=True)

    # SERVICES
    op.create_table(
        "services",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("short_description", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("icon_image_id", sa.Integer(), sa.ForeignKey("images.id", ondelete="SET NULL"), nullable=True),
        sa.Column("hero_image_id", sa.Integer(), sa.ForeignKey("images.id", ondelete="SET NULL"), nullable=True),
        sa.Column("display_order", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_seo_columns(),
        *_timestamps(),
    )
    op.create_index("ix_services_id", "services", ["id"])
    op.create_index("ix_services_slug", "services", ["slug"], unique=True)

    # PROJECTS
    op.create_table(
        "projects",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("short_description", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("featured_image_id", sa.Integer(), sa.ForeignKey("images.id", ondelete="SET NULL"), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("show_in_portfolio", sa.Boolean(), nullable=False),
        *_seo_columns(),
        *_timestamps(),
        sa.CheckConstraint("status IN ('draft', 'published')", name="ck_project_status_valid"),
    )
    op.create_index("ix_projects_id", "projects", ["id"])
    op.create_index("ix_projects_slug", "projects", ["slug"], unique=True)
    op.create_index("ix_projects_created_at", "projects", ["created_at"])

    # GALLERIES
    op.create_table(
        "product_images",
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("image_id", sa.Integer(), sa.ForeignKey("images.id", ondelete="CASCADE"), primary_key=True),
    )
    op.create_table(
        "project_images",
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("image_id", sa.Integer(), sa.ForeignKey("images.id", ondelete="CASCADE"), primary_key=True),
    )

    # CUSTOMERS
    op.create_table(
        "customers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("phone", sa.String(), nullable=False),
        sa.Column("street", sa.String(), nullable=False),
        sa.Column("city", sa.String(), nullable=False),
        sa.Column("state", sa.String(), nullable=False),
        sa.Column("zip", sa.String(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("status IN ('active', 'inactive')", name="ck_customer_status_valid"),
    )
    op.create_index("ix_customers_id", "customers", ["id"])
    op.create_index("ix_customers_name", "customers", ["name"])
    op.create_index("ix_customers_created_at", "customers", ["created_at"])

    # SALES
    op.create_table(
        "sales",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("customer_id", sa.Integer(), sa.ForeignKey("customers.id"), nullable=False),
        sa.Column("sale_date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("payment_status", sa.String(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=False),
        sa.Column("tax_rate", sa.Numeric(7, 6), nullable=False),
        sa.Column("subtotal", sa.Numeric(12, 2), nullable=False),
        sa.Column("tax_total", sa.Numeric(12, 2), nullable=False),
        sa.Column("total", sa.Numeric(12, 2), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("tax_rate >= 0 AND tax_rate <= 1", name="ck_sale_tax_rate_range"),
        sa.CheckConstraint(
            "status IN ('draft', 'open', 'paid', 'cancelled')",
            name="ck_sale_status_valid",
        ),
        sa.CheckConstraint(
            "payment_status IN ('unpaid', 'partial', 'paid')",
            name="ck_sale_payment_status_valid",
        ),
    )
    op.create_index("ix_sales_id", "sales", ["id"])
    op.create_index("ix_sales_customer_id", "sales", ["customer_id"])
    op.create_index("ix_sales_sale_date_created", "sales", ["sale_date", "created_at"])

    # SALE ITEMS
    op.create_table(
        "sale_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("sale_id", sa.Integer(), sa.ForeignKey("sales.id", ondelete="CASCADE"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id", ondelete="SET NULL"), nullable=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("sku", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("taxable", sa.Boolean(), nullable=False),
        sa.Column("unit_price", sa.Numeric(12, 4), nullable=False),
        sa.Column("unit_cost", sa.Numeric(12, 4), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("line_subtotal", sa.Numeric(22, 10), nullable=False),
        sa.Column("line_tax", sa.Numeric(22, 10), nullable=False),
        sa.Column("line_total", sa.Numeric(22, 10), nullable=False),
        sa.CheckConstraint("quantity >= 1", name="ck_sale_item_quantity_positive"),
        sa.CheckConstraint("unit_price >= 0", name="ck_sale_item_unit_price_non_negative"),
        sa.CheckConstraint("unit_cost >= 0", name="ck_sale_item_unit_cost_non_negative"),
    )
    op.create_index("ix_sale_items_id", "sale_items", ["id"])
    op.create_index("ix_sale_items_sale_id", "sale_items", ["sale_id"])
    op.create_index("ix_sale_items_product_id", "sale_items", ["product_id"])

    # SITE SETTINGS (single row)
    op.create_table(
        "site_settings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("site_name", sa.String(), nullable=False),
        sa.Column("default_meta_title", sa.String(), nullable=False),
        sa.Column("default_meta_description", sa.String(), nullable=False),
        sa.Column("default_og_image_id", sa.Integer(), sa.ForeignKey("images.id", ondelete="SET NULL"), nullable=True),
        sa.Column("contact_email", sa.String(), nullable=False),
        sa.Column("contact_phone", sa.String(), nullable=False),
        sa.Column("sales_tax_rate", sa.Numeric(7, 6), nullable=False),
        sa.Column("company_name", sa.String(), nullable=False),
        sa.Column("address_street", sa.String(), nullable=False),
        sa.Column("address_city", sa.String(), nullable=False),
        sa.Column("address_state", sa.String(), nullable=False),
        sa.Column("address_zip", sa.String(), nullable=False),
        sa.Column("address_country", sa.String(), nullable=False),
        sa.Column("facebook", sa.String(), nullable=False),
        sa.Column("instagram", sa.String(), nullable=False),
        sa.Column("twitter", sa.String(), nullable=False),
        sa.Column("linkedin", sa.String(), nullable=False),
        sa.Column("theme_preset", sa.String(), nullable=False),
        sa.Column("primary_color", sa.String(), nullable=False),
        sa.Column("secondary_color", sa.String(), nullable=False),
        sa.Column("navbar_color", sa.String(), nullable=False),
        sa.Column("footer_color", sa.String(), nullable=False),
        sa.Column("font_family", sa.String(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("id = 1", name="ck_site_settings_single_row"),
        sa.CheckConstraint(
            "sales_tax_rate >= 0 AND sales_tax_rate <= 1",
            name="ck_site_settings_tax_rate_range",
        ),
        sa.CheckConstraint(
            "theme_preset IN ('default', 'ocean', 'sky', 'navy', 'teal', 'custom')",
            name="ck_site_settings_theme_preset_valid",
        ),
    )

    # CONTACT MESSAGES
    op.create_table(
        "contact_messages",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("phone", sa.String(), nullable=False),
        sa.Column("town", sa.String(), nullable=False),
        sa.Column("service_type", sa.String(), nullable=True),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        *_timestamps(updated=False),
    )
    op.create_index("ix_contact_messages_id", "contact_messages", ["id"])
    op.create_index("ix_contact_messages_created_at", "contact_messages", ["created_at"])

    # PRODUCT ORDERS
    op.create_table(
        "product_orders",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id", ondelete="SET NULL"), nullable=True),
        sa.Column("product_name", sa.String(), nullable=False),
        sa.Column("sizes", sa.JSON(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("phone", sa.String(), nullable=False),
        sa.Column("address", sa.String(), nullable=False),
        sa.Column("city", sa.String(), nullable=False),
        sa.Column("state", sa.String(), nullable=False),
        sa.Column("zip_code", sa.String(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        *_timestamps(updated=False),
    )
    op.create_index("ix_product_orders_id", "product_orders", ["id"])
    op.create_index("ix_product_orders_product_id", "product_orders", ["product_id"])


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_table("product_orders")
    op.drop_table("contact_messages")
    op.drop_table("site_settings")
    op.drop_table("sale_items")
    op.drop_table("sales")
    op.drop_table("customers")
    op.drop_table("project_images")
    op.drop_table("product_images")
    op.drop_table("projects")
    op.drop_table("services")
    op.drop_table("products")
    op.drop_table("images")
    op.drop_table("admin_users")
