from decimal import Decimal

import pytest
from sqlalchemy import event, func, select
from sqlalchemy.exc import IntegrityError

from shop.core.config import settings
from shop.db.models import Order, OrderItem, Product

from tests.conftest import bearer, create_product


def order_body(user_id, items, total=None, address="1 Main St, Springfield"):
    if total is None:
        total = float(sum(Decimal(str(i["price"])) * i["quantity"] for i in items))
    return {"userId": user_id, "totalAmount": total, "shippingAddress": address, "items": items}


def count(db, model):
    return db.scalar(select(func.count()).select_from(model))


@pytest.fixture
def product7(db):
    obj = Product(id=7, name="Seven", price=Decimal("9.99"), stock=100, description="lucky")
    db.add(obj)
    db.commit()
    return obj


def test_place_order_creates_header_and_items(client, db, alice, alice_headers, product7):
    body = order_body(alice.id, [{"productId": 7, "quantity": 2, "price": 9.99}])
    r = client.post("/orders", json=body, headers=alice_headers)
    assert r.status_code == 201
    order_id = r.json()["orderId"]
    assert r.json()["message"] == "Order placed successfully"

    assert count(db, Order) == 1
    assert count(db, OrderItem) == 1
    item = db.execute(select(OrderItem)).scalar_one()
    assert item.order_id == order_id
    assert item.product_id == 7
    assert item.quantity == 2
    assert item.price == Decimal("9.99")
    order = db.get(Order, order_id)
    assert order.total_amount == Decimal("19.98")
    assert order.status.value == "pending"


def test_failed_item_insert_leaves_no_order(client, db, alice, alice_headers, product7):
    def boom(mapper, connection, target):
        raise IntegrityError("INSERT INTO order_items", {}, Exception("forced failure"))

    event.listen(OrderItem, "before_insert", boom)
    try:
        r = client.post("/orders", json=order_body(alice.id, [{"productId": 7, "quantity": 2, "price": 9.99}]),
                        headers=alice_headers)
    finally:
        event.remove(OrderItem, "before_insert", boom)

    assert r.status_code == 500
    assert r.json() == {"error": "Failed to place order"}
    assert count(db, Order) == 0
    assert count(db, OrderItem) == 0


def test_order_items_are_required(client, alice, alice_headers):
    r = client.post("/orders", json=order_body(alice.id, [], total=0), headers=alice_headers)
    assert r.status_code == 400
    assert r.json()["errors"][0]["field"] == "items"


def test_order_missing_fields(client, alice, alice_headers):
    r = client.post("/orders", json={"userId": alice.id}, headers=alice_headers)
    assert r.status_code == 400
    fields = {e["field"] for e in r.json()["errors"]}
    assert {"totalAmount", "shippingAddress", "items"} <= fields


def test_order_total_mismatch_rejected(client, db, alice, alice_headers, product7):
    body = order_body(alice.id, [{"productId": 7, "quantity": 2, "price": 9.99}], total=1.00)
    r = client.post("/orders", json=body, headers=alice_headers)
    assert r.status_code == 400
    assert r.json()["errors"][0]["field"] == "totalAmount"
    assert count(db, Order) == 0


def test_order_total_trusted_when_check_disabled(client, db, alice, alice_headers, product7, monkeypatch):
    monkeypatch.setattr(settings, "ENFORCE_ORDER_TOTAL", False)
    body = order_body(alice.id, [{"productId": 7, "quantity": 2, "price": 9.99}], total=1.00)
    r = client.post("/orders", json=body, headers=alice_headers)
    assert r.status_code == 201
    assert db.get(Order, r.json()["orderId"]).total_amount == Decimal("1.00")


def test_order_unknown_product(client, db, alice, alice_headers):
    r = client.post("/orders", json=order_body(alice.id, [{"productId": 404, "quantity": 1, "price": 1}]),
                    headers=alice_headers)
    assert r.status_code == 404
    assert count(db, Order) == 0


def test_order_for_another_user_is_forbidden(client, db, alice, bob, product7):
    r = client.post("/orders", json=order_body(alice.id, [{"productId": 7, "quantity": 1, "price": 9.99}]),
                    headers=bearer(bob))
    assert r.status_code == 403
    assert count(db, Order) == 0


def test_order_requires_token(client, alice, product7):
    r = client.post("/orders", json=order_body(alice.id, [{"productId": 7, "quantity": 1, "price": 9.99}]))
    assert r.status_code == 401


def test_list_orders_nests_items(client, db, alice, alice_headers, product7):
    other = create_product(db, name="Gadget", price="5.00")
    client.post("/orders", json=order_body(alice.id, [
        {"productId": 7, "quantity": 1, "price": 9.99},
        {"productId": other.id, "quantity": 3, "price": 5.00},
    ]), headers=alice_headers)

    r = client.get(f"/orders/{alice.id}", headers=alice_headers)
    assert r.status_code == 200
    orders = r.json()
    assert len(orders) == 1
    assert orders[0]["total_amount"] == pytest.approx(24.99)
    names = sorted(i["name"] for i in orders[0]["items"])
    assert names == ["Gadget", "Seven"]


def test_list_orders_of_other_user_forbidden(client, alice, bob):
    assert client.get(f"/orders/{alice.id}", headers=bearer(bob)).status_code == 403
