# poolsite/models/customers.py

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from poolsite.database import Base


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    email = Column(String, nullable=False, default="")
    phone = Column(String, nullable=False, default="")

    street = Column(String, nullable=False, default="")
    city = Column(String, nullable=False, default="")
    state = Column(String, nullable=False, default="")
    zip = Column(String, nullable=False, default="")

    notes = Column(Text, nullable=False, default="")
    status = Column(String, nullable=False, default="active")

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

    sales = relationship("Sale", back_populates="customer")

    __table_args__ = (
        CheckConstraint("status IN ('active', 'inactive')", name="ck_customer_status_valid"),
    )
