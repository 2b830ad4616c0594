from fastapi import APIRouter, Depends, status
from typing import List
from sqlalchemy.orm import Session

from shop.api.deps import get_db
from shop.core.auth import get_current_user, ensure_owner
from shop.db.models import User
from shop.schemas import OrderCreate, OrderPlaced, OrderRead
from shop.services.orders import place_order, list_orders

router = APIRouter()


@router.post("", response_model=OrderPlaced, status_code=status.HTTP_201_CREATED)
def create_order(payload: OrderCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    ensure_owner(user, payload.user_id)
    order = place_order(db, payload)
    return OrderPlaced(orderId=order.id)


@router.get("/{user_id}", response_model=List[OrderRead])
def get_orders(user_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    ensure_owner(user, user_id)
    return list_orders(db, user_id)
