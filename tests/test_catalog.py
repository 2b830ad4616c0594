from decimal import Decimal

from shop.db.models import CartItem, Order, OrderItem, Product

from tests.conftest import create_product


def test_list_and_get_products(client, product):
    r = client.get("/products")
    assert r.status_code == 200
    [p] = r.json()
    assert p["name"] == "Widget"
    assert p["price"] == 9.99
    assert client.get(f"/products/{product.id}").json()["id"] == product.id
    missing = client.get("/products/999")
    assert missing.status_code == 404
    assert missing.json() == {"error": "Product not found"}


def test_create_product_as_admin(client, db, admin_headers, category):
    body = {"name": "Hammer", "price": 12.5, "description": "Claw hammer", "stock": 4, "categoryId": category.id}
    r = client.post("/products", json=body, headers=admin_headers)
    assert r.status_code == 201
    created = r.json()
    assert created["category_id"] == category.id
    assert db.get(Product, created["id"]).price == Decimal("12.50")


def test_create_product_requires_admin(client, alice_headers):
    r = client.post("/products", json={"name": "Hammer", "price": 1}, headers=alice_headers)
    assert r.status_code == 403


def test_create_product_validation(client, admin_headers):
    r = client.post("/products", json={"description": "no name or price"}, headers=admin_headers)
    assert r.status_code == 400
    assert {e["field"] for e in r.json()["errors"]} == {"name", "price"}
    r = client.post("/products", json={"name": "Neg", "price": -1}, headers=admin_headers)
    assert r.status_code == 400


def test_create_product_unknown_category(client, admin_headers):
    r = client.post("/products", json={"name": "Orphan", "price": 1, "categoryId": 999}, headers=admin_headers)
    assert r.status_code == 404


def test_update_product(client, admin_headers, product):
    body = {"name": "Widget Pro", "price": 19.99, "description": "Better"}
    r = client.put(f"/products/{product.id}", json=body, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["name"] == "Widget Pro"
    assert r.json()["category_id"] == product.category_id
    assert client.put("/products/999", json=body, headers=admin_headers).status_code == 404
    assert client.put(f"/products/{product.id}", json={"name": "x"}, headers=admin_headers).status_code == 400


def test_delete_product(client, db, admin_headers, alice, product):
    db.add(CartItem(user_id=alice.id, product_id=product.id, quantity=1))
    db.commit()
    r = client.delete(f"/products/{product.id}", headers=admin_headers)
    assert r.status_code == 200
    assert r.json() == {"message": "Product deleted"}
    assert client.get(f"/products/{product.id}").status_code == 404
    assert db.query(CartItem).count() == 0
    assert client.delete(f"/products/{product.id}", headers=admin_headers).status_code == 404


def test_delete_ordered_product_conflicts(client, db, admin_headers, alice, product):
    order = Order(user_id=alice.id, total_amount=Decimal("9.99"), shipping_address="x")
    db.add(order)
    db.flush()
    db.add(OrderItem(order_id=order.id, product_id=product.id, quantity=1, price=Decimal("9.99")))
    db.commit()
    r = client.delete(f"/products/{product.id}", headers=admin_headers)
    assert r.status_code == 409
    assert client.get(f"/products/{product.id}").status_code == 200


def test_products_by_category(client, db, product):
    create_product(db, name="Uncategorized")
    r = client.get(f"/products/category/{product.category_id}")
    assert [p["name"] for p in r.json()] == ["Widget"]


def test_search_products(client, db, product):
    create_product(db, name="Gizmo", description="Contains a WIDGET inside")
    create_product(db, name="Other", description="nothing to see")
    r = client.get("/products/search", params={"term": "widget"})
    assert r.status_code == 200
    assert sorted(p["name"] for p in r.json()) == ["Gizmo", "Widget"]


def test_search_treats_wildcards_literally(client, db, product):
    create_product(db, name="100% cotton")
    r = client.get("/products/search", params={"term": "%"})
    assert [p["name"] for p in r.json()] == ["100% cotton"]


def test_search_requires_term(client):
    r = client.get("/products/search")
    assert r.status_code == 400
    assert r.json()["errors"][0]["field"] == "term"


def test_categories(client, admin_headers, alice_headers):
    r = client.post("/categories", json={"name": "Garden", "description": "Outdoor"}, headers=admin_headers)
    assert r.status_code == 201
    assert r.json()["name"] == "Garden"
    assert client.post("/categories", json={"name": "Nope"}, headers=alice_headers).status_code == 403
    assert client.post("/categories", json={}, headers=admin_headers).status_code == 400
    assert [c["name"] for c in client.get("/categories").json()] == ["Garden"]
