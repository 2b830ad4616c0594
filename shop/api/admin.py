from datetime import date
from fastapi import APIRouter, Depends
from typing import List
from sqlalchemy.orm import Session

from shop.api.deps import get_db
from shop.api.products import get_product_or_404
from shop.api.users import get_user_or_404
from shop.core.auth import require_admin
from shop.core.errors import NotFoundError, ValidationError
from shop.db.models import Order, User
from shop.schemas import (
    AdminOrderRead, AdminProductRead, CustomerAnalyticsRow, DashboardStats, OrderStatusUpdate,
    ProductRead, RoleUpdate, SalesReportRow, StockUpdate, TopProductRow, UserRead,
)
from shop.services import reports

# every route below sits behind the admin gate
router = APIRouter(dependencies=[Depends(require_admin)])


@router.get('/dashboard', response_model=DashboardStats)
def dashboard(db: Session = Depends(get_db)):
    return reports.dashboard_stats(db)


# --- orders ---

@router.get('/orders', response_model=List[AdminOrderRead])
def list_all_orders(db: Session = Depends(get_db)):
    return reports.orders_with_customers(db)

@router.put('/orders/{order_id}', response_model=AdminOrderRead)
def update_order_status(order_id: int, payload: OrderStatusUpdate, db: Session = Depends(get_db)):
    order = db.get(Order, order_id)
    if not order: raise NotFoundError('Order not found')
    order.status = payload.status
    db.commit(); db.refresh(order)
    return reports.admin_order_view(order, order.user.name, order.user.email)


# --- users ---

@router.get('/users', response_model=List[UserRead])
def list_users(db: Session = Depends(get_db)):
    return db.query(User).order_by(User.id).all()

@router.put('/users/{user_id}', response_model=UserRead)
def update_user_role(user_id: int, payload: RoleUpdate, db: Session = Depends(get_db)):
    obj = get_user_or_404(db, user_id)
    obj.role = payload.role
    db.commit(); db.refresh(obj)
    return obj


# --- products ---

@router.get('/products', response_model=List[AdminProductRead])
def list_products(db: Session = Depends(get_db)):
    return reports.products_with_categories(db)

@router.put('/products/{product_id}/stock', response_model=ProductRead)
def update_stock(product_id: int, payload: StockUpdate, db: Session = Depends(get_db)):
    obj = get_product_or_404(db, product_id)
    obj.stock = payload.stock
    db.commit(); db.refresh(obj)
    return obj


# --- reports ---

@router.get('/reports/sales', response_model=List[SalesReportRow])
def sales_report(start_date: date, end_date: date, db: Session = Depends(get_db)):
    if end_date < start_date:
        raise ValidationError.for_field('end_date', 'end_date must not be before start_date')
    return reports.sales_report(db, start_date, end_date)

@router.get('/reports/top-products', response_model=List[TopProductRow])
def top_products(db: Session = Depends(get_db)):
    return reports.top_products(db)

@router.get('/reports/customer-analytics', response_model=List[CustomerAnalyticsRow])
def customer_analytics(db: Session = Depends(get_db)):
    return reports.customer_analytics(db)
