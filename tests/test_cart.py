from shop.api import cart
from shop.db.models import CartItem

from tests.conftest import bearer


def add(client, headers, user_id, product_id, quantity=1):
    return client.post("/cart", json={"userId": user_id, "productId": product_id, "quantity": quantity}, headers=headers)


def test_add_and_list_cart(client, alice, alice_headers, product):
    r = add(client, alice_headers, alice.id, product.id, 2)
    assert r.status_code == 201
    assert r.json() == {"user_id": alice.id, "product_id": product.id, "quantity": 2}

    r = client.get(f"/cart/{alice.id}", headers=alice_headers)
    assert r.status_code == 200
    [line] = r.json()
    assert line["name"] == "Widget"
    assert line["price"] == 9.99
    assert line["description"] == "A useful widget"
    assert line["quantity"] == 2


def test_adding_same_product_accumulates(client, db, alice, alice_headers, product):
    add(client, alice_headers, alice.id, product.id, 2)
    r = add(client, alice_headers, alice.id, product.id, 3)
    assert r.json()["quantity"] == 5
    assert db.query(CartItem).count() == 1


def test_add_validation(client, alice, alice_headers, product):
    assert add(client, alice_headers, alice.id, product.id, 0).status_code == 400
    r = client.post("/cart", json={"userId": alice.id}, headers=alice_headers)
    assert r.status_code == 400
    assert {e["field"] for e in r.json()["errors"]} == {"productId", "quantity"}


def test_add_unknown_product(client, alice, alice_headers):
    assert add(client, alice_headers, alice.id, 999).status_code == 404


def test_cart_is_owner_scoped(client, alice, bob, product):
    assert add(client, bearer(bob), alice.id, product.id).status_code == 403
    assert client.get(f"/cart/{alice.id}", headers=bearer(bob)).status_code == 403
    assert client.get(f"/cart/{alice.id}").status_code == 401


def test_admin_can_view_any_cart(client, alice, alice_headers, admin_headers, product):
    add(client, alice_headers, alice.id, product.id)
    assert len(client.get(f"/cart/{alice.id}", headers=admin_headers).json()) == 1


def test_remove_item(client, alice, alice_headers, product):
    add(client, alice_headers, alice.id, product.id)
    r = client.delete(f"/cart/{alice.id}/{product.id}", headers=alice_headers)
    assert r.status_code == 200
    assert client.get(f"/cart/{alice.id}", headers=alice_headers).json() == []
    again = client.delete(f"/cart/{alice.id}/{product.id}", headers=alice_headers)
    assert again.status_code == 404


def test_concurrent_first_add_accumulates(client, db, alice, alice_headers, product, monkeypatch):
    db.add(CartItem(user_id=alice.id, product_id=product.id, quantity=2))
    db.commit()
    real_find = cart.find_item
    calls = []

    def stale_find(session, user_id, product_id):
        # the first lookup runs before the competing request commits
        calls.append(product_id)
        return None if len(calls) == 1 else real_find(session, user_id, product_id)

    monkeypatch.setattr(cart, "find_item", stale_find)
    r = add(client, alice_headers, alice.id, product.id, 3)
    assert r.status_code == 201
    assert r.json()["quantity"] == 5
    db.expire_all()
    [item] = db.query(CartItem).all()
    assert item.quantity == 5
