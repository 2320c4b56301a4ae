# models/sale_items.py

from sqlalchemy import Boolean, CheckConstraint, Column, Integer, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship

from poolsite.database import Base


class SaleItem(Base):
    __tablename__ = "sale_items"

    id = Column(Integer, primary_key=True, index=True)

    sale_id = Column(Integer, ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)

    # Optional: custom items are not in the catalog
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True, index=True)

    # Snapshot of the product at time of sale
    name = Column(String, nullable=False)
    sku = Column(String, nullable=False, default="")
    description = Column(String, nullable=False, default="")
    taxable = Column(Boolean, nullable=False, default=True)

    unit_price = Column(Numeric(12, 4), nullable=False)
    unit_cost = Column(Numeric(12, 4), nullable=False, default=0)
    quantity = Column(Integer, nullable=False)

    # Unrounded: 4 dp price x quantity x 6 dp rate is exact at scale 10
    line_subtotal = Column(Numeric(22, 10), nullable=False, default=0)
    line_tax = Column(Numeric(22, 10), nullable=False, default=0)
    line_total = Column(Numeric(22, 10), nullable=False, default=0)

    sale = relationship("Sale", back_populates="items")
    product = relationship("Product")

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_sale_item_quantity_positive"),
        CheckConstraint("unit_price >= 0", name="ck_sale_item_unit_price_non_negative"),
        CheckConstraint("unit_cost >= 0", name="ck_sale_item_unit_cost_non_negative"),
    )
