from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from poolsite.core.pricing import round2
from poolsite.core.site_settings import get_settings, update_settings
from poolsite.database import engine, get_db
from poolsite.main import app
from poolsite.models.sale_items import SaleItem
from poolsite.models.sales import Sale


def _line_fields(index, name, price, quantity, taxable=None, **extra):
    fields = {
        f"lineItems[{index}][name]": name,
        f"lineItems[{index}][unitPrice]": price,
        f"lineItems[{index}][quantity]": quantity,
    }
    if taxable is not None:
        fields[f"lineItems[{index}][taxable]"] = taxable
    for key, value in extra.items():
        fields[f"lineItems[{index}][{key}]"] = value
    return fields


def _create_sale(admin_client, customer_id, data):
    return admin_client.post(
        f"/admin/customers/{customer_id}/sales",
        data=data,
        follow_redirects=False,
    )


def _mixed_sale_form(**overrides):
    data = {"taxRate": "0.08", "status": "open", "paymentStatus": "unpaid"}
    data.update(_line_fields(0, "Pool pump", "5.00", "3", "true"))
    data.update(_line_fields(1, "Hose", "2.50", "1", "false"))
    data.update(overrides)
    return data


def test_create_sale_computes_totals(admin_client, db, customer):
    response = _create_sale(admin_client, customer.id, _mixed_sale_form())

    sale = db.query(Sale).one()
    assert response.status_code == 303
    assert response.headers["location"] == f"/admin/sales/{sale.id}"

    assert sale.customer_id == customer.id
    assert sale.tax_rate == Decimal("0.08")
    assert sale.subtotal == Decimal("17.50")
    assert sale.tax_total == Decimal("1.20")
    assert sale.total == Decimal("18.70")

    assert [item.name for item in sale.items] == ["Pool pump", "Hose"]
    assert [item.position for item in sale.items] == [0, 1]
    assert sale.items[1].taxable is False
    assert sale.items[1].line_tax == 0
    assert sale.items[0].line_total == sale.items[0].line_subtotal + sale.items[0].line_tax


def test_taxable_defaults_to_true_when_absent(admin_client, db, customer):
    data = {"taxRate": "0.0625"}
    data.update(_line_fields(0, "Chlorine", "10.00", "2"))

    _create_sale(admin_client, customer.id, data)

    sale = db.query(Sale).one()
    assert sale.items[0].taxable is True
    assert sale.total == Decimal("21.25")


def test_blank_tax_rate_uses_settings_default(admin_client, db, customer):
    update_settings(db, {"sales_tax_rate": "0.07"})
    data = _line_fields(0, "Skimmer", "100.00", "1")

    _create_sale(admin_client, customer.id, data)

    db.expire_all()
    sale = db.query(Sale).one()
    assert sale.tax_rate == Decimal("0.07")
    assert sale.tax_total == Decimal("7.00")


def test_invalid_inputs_are_sanitised(admin_client, db, customer):
    data = {"taxRate": "1.5"}
    data.update(_line_fields(0, "Odd item", "-4", "0"))
    data.update(_line_fields(1, "Bulk item", "2.00", "2.7"))

    _create_sale(admin_client, customer.id, data)

    sale = db.query(Sale).one()
    assert sale.tax_rate == Decimal("1")
    assert sale.items[0].unit_price == 0
    assert sale.items[0].quantity == 1
    assert sale.items[1].quantity == 2
    assert sale.subtotal == Decimal("4.00")


def test_unit_cost_falls_back_to_product_cost(admin_client, db, customer, product):
    data = _line_fields(0, product.name, "499.00", "2", "true", productId=str(product.id))

    _create_sale(admin_client, customer.id, data)

    sale = db.query(Sale).one()
    assert sale.items[0].product_id == product.id
    assert sale.items[0].unit_cost == Decimal("320.00")


def test_rows_without_names_are_skipped(admin_client, db, customer):
    data = _line_fields(0, "", "9.99", "1")
    data.update(_line_fields(1, "Filter cartridge", "40.00", "1"))

    _create_sale(admin_client, customer.id, data)

    sale = db.query(Sale).one()
    assert [item.name for item in sale.items] == ["Filter cartridge"]


def test_sale_needs_a_valid_line_item(admin_client, db, customer):
    response = admin_client.post(
        f"/admin/customers/{customer.id}/sales",
        data=_line_fields(0, "", "9.99", "1"),
        follow_redirects=True,
    )

    assert db.query(Sale).count() == 0
    assert response.json()["messages"] == [
        {"category": "error", "message": "At least one valid line item is required"}
    ]


def test_sale_without_line_items_is_rejected(admin_client, db, customer):
    response = admin_client.post(
        f"/admin/customers/{customer.id}/sales",
        data={"taxRate": "0.08"},
        follow_redirects=True,
    )

    assert db.query(Sale).count() == 0
    assert response.json()["messages"][0]["message"] == "At least one line item is required"


def test_invalid_sale_date_is_rejected(admin_client, db, customer):
    response = admin_client.post(
        f"/admin/customers/{customer.id}/sales",
        data=_mixed_sale_form(saleDate="not-a-date"),
        follow_redirects=True,
    )

    assert db.query(Sale).count() == 0
    assert response.json()["messages"][0]["message"] == "Invalid sale date"


def test_sale_for_unknown_customer_redirects(admin_client):
    response = _create_sale(admin_client, 404, _mixed_sale_form())

    assert response.headers["location"] == "/admin/customers"


def test_new_sale_form_context(admin_client, customer, product):
    body = admin_client.get(f"/admin/customers/{customer.id}/sales/new").json()

    assert body["customer"]["id"] == customer.id
    assert [p["name"] for p in body["products"]] == ["Sand Filter"]
    assert Decimal(str(body["default_tax_rate"])) == Decimal("0.0625")


def test_update_replaces_line_items(admin_client, db, customer):
    _create_sale(admin_client, customer.id, _mixed_sale_form())
    sale_id = db.query(Sale).one().id

    data = {"status": "paid", "paymentStatus": "paid", "taxRate": ""}
    data.update(_line_fields(0, "Heater", "1000.00", "1", "true"))

    response = admin_client.post(f"/admin/sales/{sale_id}", data=data, follow_redirects=False)

    db.expire_all()
    sale = db.query(Sale).one()
    assert response.headers["location"] == f"/admin/sales/{sale_id}"
    assert [item.name for item in sale.items] == ["Heater"]
    # Blank rate keeps the sale's own rate
    assert sale.tax_rate == Decimal("0.08")
    assert sale.subtotal == Decimal("1000.00")
    assert sale.tax_total == Decimal("80.00")
    assert sale.total == Decimal("1080.00")
    assert sale.status == "paid"
    assert sale.payment_status == "paid"


def test_invalid_status_keeps_current_value(admin_client, db, customer):
    _create_sale(admin_client, customer.id, _mixed_sale_form(status="draft"))
    sale_id = db.query(Sale).one().id

    admin_client.post(
        f"/admin/sales/{sale_id}",
        data=_mixed_sale_form(status="shipped", paymentStatus="sometime"),
    )

    db.expire_all()
    sale = db.query(Sale).one()
    assert sale.status == "draft"
    assert sale.payment_status == "unpaid"


def test_cancel_is_a_soft_delete(admin_client, db, customer):
    _create_sale(admin_client, customer.id, _mixed_sale_form())
    sale_id = db.query(Sale).one().id

    admin_client.post(f"/admin/sales/{sale_id}/delete")

    db.expire_all()
    sale = db.query(Sale).one()
    assert sale.status == "cancelled"
    assert len(sale.items) == 2


def test_show_sale(admin_client, db, customer):
    _create_sale(admin_client, customer.id, _mixed_sale_form())
    sale_id = db.query(Sale).one().id

    body = admin_client.get(f"/admin/sales/{sale_id}").json()

    assert body["title"] == f"Sale #{sale_id}"
    assert body["sale"]["customer"]["name"] == "Jane Pool"
    assert len(body["sale"]["items"]) == 2


def test_list_filters(admin_client, db, customer):
    _create_sale(admin_client, customer.id, _mixed_sale_form(saleDate="2026-03-01"))
    _create_sale(admin_client, customer.id, _mixed_sale_form(saleDate="2026-03-15T16:30:00", status="paid"))
    _create_sale(admin_client, customer.id, _mixed_sale_form(saleDate="2026-04-02"))

    def listed(**params):
        return admin_client.get("/admin/sales", params=params).json()["sales"]

    assert len(listed()) == 3
    assert len(listed(status="paid")) == 1
    # End date covers the whole day
    assert len(listed(date_from="2026-03-01", date_to="2026-03-15")) == 2
    assert len(listed(customer_id=customer.id + 1)) == 0

    dates = [datetime.fromisoformat(s["sale_date"]).date().isoformat() for s in listed()]
    assert dates == ["2026-04-02", "2026-03-15", "2026-03-01"]


def test_inputs_are_stored_at_column_precision(admin_client, db, customer):
    data = {"taxRate": "0.0712345678"}
    data.update(_line_fields(0, "Valve", "10.123456", "3", "true", unitCost="4.00005"))

    _create_sale(admin_client, customer.id, data)

    sale = db.query(Sale).one()
    item = sale.items[0]
    assert sale.tax_rate == Decimal("0.071235")
    assert item.unit_price == Decimal("10.1235")
    assert item.unit_cost == Decimal("4.0001")
    # Stored line values follow from the stored price and rate
    assert item.line_subtotal == item.unit_price * item.quantity == Decimal("30.3705")
    assert item.line_tax == item.line_subtotal * sale.tax_rate == Decimal("2.1634425675")
    assert sale.subtotal == Decimal("30.37")
    assert sale.tax_total == round2(item.line_tax) == Decimal("2.16")
    assert sale.total == Decimal("32.53")


class CommitFailsSession(Session):
    def commit(self):
        self.flush()
        raise OperationalError("COMMIT", {}, Exception("database is locked"))


@pytest.fixture
def fail_commits(db):
    """
    Call to make every request session fail on commit after flushing.
    """
    # Settings row exists up front so only the sale write reaches commit
    get_settings(db)
    FailingSession = sessionmaker(bind=engine, class_=CommitFailsSession, autoflush=False)

    def get_failing_db():
        session = FailingSession()
        try:
            yield session
        finally:
            session.close()

    def enable():
        app.dependency_overrides[get_db] = get_failing_db

    yield enable
    app.dependency_overrides.pop(get_db, None)


def test_failed_create_writes_nothing(admin_client, db, customer, fail_commits):
    fail_commits()

    response = admin_client.post(
        f"/admin/customers/{customer.id}/sales",
        data=_mixed_sale_form(),
        follow_redirects=True,
    )

    assert db.query(Sale).count() == 0
    assert db.query(SaleItem).count() == 0
    assert response.json()["messages"] == [{"category": "error", "message": "Failed to create sale"}]


def test_failed_update_keeps_existing_sale(admin_client, db, customer, fail_commits):
    _create_sale(admin_client, customer.id, _mixed_sale_form())
    sale_id = db.query(Sale).one().id
    fail_commits()

    data = {"status": "paid", "taxRate": "0.10"}
    data.update(_line_fields(0, "Heater", "1000.00", "1", "true"))
    response = admin_client.post(f"/admin/sales/{sale_id}", data=data, follow_redirects=True)

    db.expire_all()
    sale = db.query(Sale).one()
    assert response.json()["messages"] == [{"category": "error", "message": "Failed to update sale"}]
    assert [item.name for item in sale.items] == ["Pool pump", "Hose"]
    assert sale.status == "open"
    assert sale.tax_rate == Decimal("0.08")
    assert sale.total == Decimal("18.70")
