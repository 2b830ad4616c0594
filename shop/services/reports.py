"""Read-only aggregates behind the admin dashboard and reports."""
from datetime import date, datetime, time, timedelta

from sqlalchemy import select, func, distinct
from sqlalchemy.orm import Session

from shop.core.config import settings
from shop.db.models import Category, Order, OrderItem, Product, User

TOP_PRODUCTS_LIMIT = 10


def dashboard_stats(db: Session, low_stock_threshold: int | None = None) -> dict:
    # independent aggregates, fetched together in a single round-trip
    threshold = settings.LOW_STOCK_THRESHOLD if low_stock_threshold is None else low_stock_threshold
    stmt = select(
        select(func.coalesce(func.sum(Order.total_amount), 0)).scalar_subquery().label('total_sales'),
        select(func.count(Order.id)).scalar_subquery().label('total_orders'),
        select(func.count(User.id)).scalar_subquery().label('total_users'),
        select(func.count(Product.id)).where(Product.stock < threshold).scalar_subquery().label('low_stock'),
    )
    row = db.execute(stmt).one()
    return {
        'totalSales': row.total_sales,
        'totalOrders': row.total_orders,
        'totalUsers': row.total_users,
        'lowStockProducts': row.low_stock,
    }


def admin_order_view(o: Order, name: str, email: str) -> dict:
    return {
        'id': o.id, 'user_id': o.user_id, 'total_amount': o.total_amount,
        'shipping_address': o.shipping_address, 'status': o.status, 'created_at': o.created_at,
        'customer_name': name, 'customer_email': email,
    }


def orders_with_customers(db: Session) -> list[dict]:
    stmt = (
        select(Order, User.name, User.email)
        .join(User, Order.user_id == User.id)
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    return [admin_order_view(o, name, email) for o, name, email in db.execute(stmt).all()]


def products_with_categories(db: Session) -> list[dict]:
    stmt = select(Product, Category.name).outerjoin(Category, Product.category_id == Category.id).order_by(Product.id)
    return [
        {
            'id': p.id, 'name': p.name, 'price': p.price, 'description': p.description,
            'stock': p.stock, 'category_id': p.category_id, 'category_name': cname,
        }
        for p, cname in db.execute(stmt).all()
    ]


def sales_report(db: Session, start_date: date, end_date: date) -> list[dict]:
    """Orders and revenue per day, newest first; both bounds are inclusive days."""
    start = datetime.combine(start_date, time.min)
    end = datetime.combine(end_date + timedelta(days=1), time.min)
    day = func.date(Order.created_at)
    stmt = (
        select(day.label('date'), func.count(Order.id).label('orders'), func.sum(Order.total_amount).label('revenue'))
        .where(Order.created_at >= start, Order.created_at < end)
        .group_by(day)
        .order_by(day.desc())
    )
    return [{'date': r.date, 'orders': r.orders, 'revenue': r.revenue} for r in db.execute(stmt).all()]


def top_products(db: Session, limit: int = TOP_PRODUCTS_LIMIT) -> list[dict]:
    total_sold = func.sum(OrderItem.quantity).label('total_sold')
    revenue = func.sum(OrderItem.quantity * OrderItem.price).label('revenue')
    stmt = (
        select(Product.id, Product.name, total_sold, revenue)
        .join(OrderItem, OrderItem.product_id == Product.id)
        .group_by(Product.id, Product.name)
        .order_by(total_sold.desc(), Product.id)
        .limit(limit)
    )
    return [dict(r._mapping) for r in db.execute(stmt).all()]


def customer_analytics(db: Session) -> list[dict]:
    total_spent = func.coalesce(func.sum(Order.total_amount), 0).label('total_spent')
    stmt = (
        select(User.id, User.name, func.count(distinct(Order.id)).label('total_orders'), total_spent)
        .outerjoin(Order, Order.user_id == User.id)
        .group_by(User.id, User.name)
        .order_by(total_spent.desc(), User.id)
    )
    return [dict(r._mapping) for r in db.execute(stmt).all()]
