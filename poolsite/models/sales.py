# models/sales.py

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from poolsite.database import Base

SALE_STATUSES = ("draft", "open", "paid", "cancelled")
PAYMENT_STATUSES = ("unpaid", "partial", "paid")


class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)

    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)

    sale_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    status = Column(String, nullable=False, default="open")
    payment_status = Column(String, nullable=False, default="unpaid")
    notes = Column(Text, nullable=False, default="")

    tax_rate = Column(Numeric(7, 6), nullable=False)

    # Derived from the line items on every write
    subtotal = Column(Numeric(12, 2), nullable=False, default=0)
    tax_total = Column(Numeric(12, 2), nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False, default=0)

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

    customer = relationship("Customer", back_populates="sales")

    items = relationship(
        "SaleItem",
        back_populates="sale",
        cascade="all, delete-orphan",
        order_by="SaleItem.position",
    )

    __table_args__ = (
        Index("ix_sales_sale_date_created", "sale_date", "created_at"),
        CheckConstraint("tax_rate >= 0 AND tax_rate <= 1", name="ck_sale_tax_rate_range"),
        CheckConstraint(
            "status IN ('draft', 'open', 'paid', 'cancelled')",
            name="ck_sale_status_valid",
        ),
        CheckConstraint(
            "payment_status IN ('unpaid', 'partial', 'paid')",
            name="ck_sale_payment_status_valid",
        ),
    )
