from fastapi import APIRouter, Depends
from typing import List
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shop.api.deps import get_db
from shop.core.auth import get_current_user, ensure_owner
from shop.core.errors import NotFoundError
from shop.db.models import CartItem, Product, User
from shop.schemas import CartItemAdd, CartItemRead, CartLine

router = APIRouter()


def find_item(db: Session, user_id: int, product_id: int) -> CartItem | None:
    return db.get(CartItem, (user_id, product_id))


@router.post("", response_model=CartItemRead, status_code=201)
def add_item(payload: CartItemAdd, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    ensure_owner(user, payload.user_id)
    if not db.get(User, payload.user_id):
        raise NotFoundError("User not found")
    if not db.get(Product, payload.product_id):
        raise NotFoundError("Product not found")
    # one row per (user, product); adding again accumulates quantity
    item = find_item(db, payload.user_id, payload.product_id)
    if item:
        item.quantity += payload.quantity
    else:
        item = CartItem(user_id=payload.user_id, product_id=payload.product_id, quantity=payload.quantity)
        db.add(item)
    try:
        db.commit()
    except IntegrityError:
        # a concurrent first add created the row
        db.rollback()
        item = find_item(db, payload.user_id, payload.product_id)
        if item is None:
            raise
        item.quantity += payload.quantity
        db.commit()
    db.refresh(item)
    return item


@router.get("/{user_id}", response_model=List[CartLine])
def get_cart(user_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    ensure_owner(user, user_id)
    stmt = (
        select(CartItem.user_id, CartItem.product_id, CartItem.quantity, Product.name, Product.price, Product.description)
        .join(Product, CartItem.product_id == Product.id)
        .where(CartItem.user_id == user_id)
        .order_by(Product.name)
    )
    return [dict(r._mapping) for r in db.execute(stmt).all()]


@router.delete("/{user_id}/{product_id}")
def remove_item(user_id: int, product_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    ensure_owner(user, user_id)
    item = find_item(db, user_id, product_id)
    if not item:
        raise NotFoundError("Item not in cart")
    db.delete(item); db.commit()
    return {"message": "Item removed"}
