# scripts/create_admin.py
#
# Create the admin user, or reset its password if it already exists.
# Credentials come from ADMIN_USERNAME / ADMIN_PASSWORD (.env supported).
#
#   python scripts/create_admin.py

import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from poolsite.core.auth import upsert_admin_user
from poolsite.core.config import settings
from poolsite.database import Base, SessionLocal, engine
from poolsite.models import users  # noqa: F401

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(message)s",
)

logger = logging.getLogger("poolsite")


def main() -> int:
    username = settings.ADMIN_USERNAME or "admin"
    password = settings.ADMIN_PASSWORD or "admin123"

    Base.metadata.create_all(bind=engine, tables=[users.AdminUser.__table__])

    db = SessionLocal()
    try:
        _, created = upsert_admin_user(db, username, password)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error creating admin user")
        return 1
    finally:
        db.close()

    if created:
        logger.info(f"Admin user '{username}' created successfully")
    else:
        logger.info(f"Admin user '{username}' already existed; password updated")

    return 0


if __name__ == "__main__":
    sys.exit(main())
