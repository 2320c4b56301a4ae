# poolsite/models/contact_messages.py

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from poolsite.database import Base

SERVICE_TYPES = ("New pool", "pool install", "pool replacement", "pool removal")


class ContactMessage(Base):
    __tablename__ = "contact_messages"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String, nullable=False, default="")
    town = Column(String, nullable=False, default="")
    service_type = Column(String, nullable=True)
    message = Column(Text, nullable=False, default="")
    is_read = Column(Boolean, nullable=False, default=False)

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )
