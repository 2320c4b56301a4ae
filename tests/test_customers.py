from poolsite.models.customers import Customer
from poolsite.models.sales import Sale


def _sale_for(db, customer):
    sale = Sale(customer_id=customer.id, tax_rate=0.0625, status="open", payment_status="unpaid")
    db.add(sale)
    db.commit()
    return sale


def test_create_customer(admin_client, db):
    response = admin_client.post(
        "/admin/customers",
        data={
            "name": "  Sam Rivers ",
            "email": "Sam.Rivers@Example.COM",
            "phone": "555-0142",
            "city": "Tampa",
            "status": "bogus",
        },
        follow_redirects=False,
    )

    customer = db.query(Customer).one()
    assert response.headers["location"] == "/admin/customers"
    assert customer.name == "Sam Rivers"
    assert customer.email == "sam.rivers@example.com"
    assert customer.city == "Tampa"
    assert customer.status == "active"


def test_customer_name_is_required(admin_client, db):
    response = admin_client.post(
        "/admin/customers",
        data={"name": "   ", "email": "x@example.com"},
        follow_redirects=True,
    )

    assert db.query(Customer).count() == 0
    assert response.json()["messages"] == [{"category": "error", "message": "Name is required"}]


def test_search_customers(admin_client, db):
    db.add_all([
        Customer(name="Ann Marsh", email="ann@example.com", phone="555-1000"),
        Customer(name="Bob Lake", email="bob@lake.org", phone="555-2000"),
    ])
    db.commit()

    def names(search):
        body = admin_client.get("/admin/customers", params={"search": search}).json()
        return sorted(c["name"] for c in body["customers"])

    assert names("") == ["Ann Marsh", "Bob Lake"]
    assert names("MARSH") == ["Ann Marsh"]
    assert names("lake.org") == ["Bob Lake"]
    assert names("555-2") == ["Bob Lake"]


def test_update_customer(admin_client, db, customer):
    response = admin_client.post(
        f"/admin/customers/{customer.id}",
        data={"name": "Jane Deep", "email": "jane@example.com", "status": "inactive"},
        follow_redirects=False,
    )

    db.expire_all()
    updated = db.query(Customer).one()
    assert response.headers["location"] == f"/admin/customers/{customer.id}"
    assert updated.name == "Jane Deep"
    assert updated.status == "inactive"


def test_show_customer_lists_sales(admin_client, db, customer):
    _sale_for(db, customer)

    body = admin_client.get(f"/admin/customers/{customer.id}").json()

    assert body["customer"]["name"] == "Jane Pool"
    assert len(body["sales"]) == 1


def test_delete_blocked_when_customer_has_sales(admin_client, db, customer):
    _sale_for(db, customer)
    _sale_for(db, customer)

    response = admin_client.post(f"/admin/customers/{customer.id}/delete", follow_redirects=True)

    assert db.query(Customer).count() == 1
    assert response.json()["messages"] == [
        {
            "category": "error",
            "message": "Cannot delete customer with 2 sale(s). Set status to inactive instead.",
        }
    ]


def test_delete_customer_without_sales(admin_client, db, customer):
    admin_client.post(f"/admin/customers/{customer.id}/delete")

    assert db.query(Customer).count() == 0


def test_missing_customer_redirects_to_list(admin_client):
    response = admin_client.get("/admin/customers/999", follow_redirects=True)

    assert response.json()["messages"] == [{"category": "error", "message": "Customer not found"}]
