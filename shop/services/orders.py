"""Order placement and order history."""
import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from shop.core.config import settings
from shop.core.errors import NotFoundError, PersistenceError, ValidationError
from shop.db.models import Order, OrderItem, OrderStatus, Product, User
from shop.schemas import OrderCreate, OrderItemIn
from shop.security.utils import now_utc

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')


def items_total(items: list[OrderItemIn]) -> Decimal:
    return sum((it.price * it.quantity for it in items), Decimal('0')).quantize(CENT)


def place_order(db: Session, payload: OrderCreate) -> Order:
    """Persist the order header and all of its items, or nothing.

    The header is flushed first to obtain its id; the items are written in the
    same transaction and any store failure rolls both back.
    """
    if not db.get(User, payload.user_id):
        raise NotFoundError('User not found')

    product_ids = {it.product_id for it in payload.items}
    found = set(db.execute(select(Product.id).where(Product.id.in_(sorted(product_ids)))).scalars())
    missing = sorted(product_ids - found)
    if missing:
        raise NotFoundError('Product not found: ' + ', '.join(str(pid) for pid in missing))

    if settings.ENFORCE_ORDER_TOTAL:
        expected = items_total(payload.items)
        if payload.total_amount.quantize(CENT) != expected:
            raise ValidationError.for_field('totalAmount', f'totalAmount does not match items total {expected}')

    order = Order(
        user_id=payload.user_id,
        total_amount=payload.total_amount,
        shipping_address=payload.shipping_address,
        status=OrderStatus.PENDING,
        created_at=now_utc(),
    )
    try:
        db.add(order)
        db.flush()
        db.add_all([
            OrderItem(order_id=order.id, product_id=it.product_id, quantity=it.quantity, price=it.price)
            for it in payload.items
        ])
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception('Failed to place order for user_id=%s', payload.user_id)
        raise PersistenceError('Failed to place order')

    logger.info('Placed order id=%s user_id=%s items=%d', order.id, order.user_id, len(payload.items))
    return order


def order_to_dict(order: Order) -> dict:
    return {
        'id': order.id,
        'user_id': order.user_id,
        'total_amount': order.total_amount,
        'shipping_address': order.shipping_address,
        'status': order.status,
        'created_at': order.created_at,
        'items': [
            {'product_id': it.product_id, 'name': it.product.name, 'quantity': it.quantity, 'price': it.price}
            for it in order.items
        ],
    }


def list_orders(db: Session, user_id: int) -> list[dict]:
    stmt = (
        select(Order)
        .where(Order.user_id == user_id)
        .options(selectinload(Order.items).selectinload(OrderItem.product))
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    return [order_to_dict(o) for o in db.execute(stmt).scalars().all()]
