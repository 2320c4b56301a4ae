"""
Pytest fixtures: a throwaway SQLite database, the FastAPI app and
an authenticated admin client.
"""
import os
import sys
import tempfile
from decimal import Decimal
from io import BytesIO
from pathlib import Path

# Configure before the app (and its settings) are imported
_DB_DIR = tempfile.mkdtemp(prefix="poolsite-tests-")
os.environ["SECRET_KEY"] = "test-secret-key-for-sessions"
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR}/test.db"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ADMIN_USERNAME"] = "admin"
os.environ["ADMIN_PASSWORD"] = "pool-admin-pass"
for name in ("RESEND_API_KEY", "RESEND_FROM_EMAIL", "CONTACT_EMAIL", "ENV"):
    os.environ.pop(name, None)

import pytest
from fastapi.testclient import TestClient
from PIL import Image as PILImage

# Add the project's root directory to the system path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from poolsite.main import app
from poolsite.database import Base, SessionLocal, engine
from poolsite.models.customers import Customer
from poolsite.models.products import Product

ADMIN_USERNAME = os.environ["ADMIN_USERNAME"]
ADMIN_PASSWORD = os.environ["ADMIN_PASSWORD"]


@pytest.fixture(autouse=True)
def reset_database():
    """
    Fresh schema for every test.
    """
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    """
    Create a test client for the FastAPI application.
    """
    return TestClient(app)


@pytest.fixture
def admin_client(client):
    """
    Test client holding a logged-in admin session cookie.
    """
    response = client.post(
        "/admin/login",
        data={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD},
        follow_redirects=False,
    )
    assert response.status_code == 303
    return client


@pytest.fixture
def customer(db):
    customer = Customer(name="Jane Pool", email="jane@example.com", phone="555-0100")
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer


@pytest.fixture
def product(db):
    product = Product(
        name="Sand Filter",
        slug="sand-filter",
        description="High capacity sand filter",
        sku="SF-100",
        price=Decimal("499.00"),
        cost_price=Decimal("320.00"),
        taxable=True,
        status="published",
        is_active=True,
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


def make_image_bytes(width: int = 2000, height: int = 1000, image_format: str = "PNG") -> bytes:
    image = PILImage.new("RGB", (width, height), color=(20, 120, 200))
    output = BytesIO()
    image.save(output, format=image_format)
    return output.getvalue()


@pytest.fixture
def image_bytes():
    """
    Factory for encoded test images.
    """
    return make_image_bytes
