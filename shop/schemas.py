from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List
from datetime import datetime, date as Date
from decimal import Decimal
from shop.db.models import UserRole, OrderStatus
from shop.security.utils import normalize_email, password_rule_violations


def _clean_name(v: str) -> str:
    v = v.strip()
    if not 2 <= len(v) <= 50:
        raise ValueError('Name must be between 2 and 50 characters')
    return v


# --- users / auth ---

class RegisterPayload(BaseModel):
    name: str
    email: EmailStr
    password: str

    @field_validator('name')
    @classmethod
    def _name(cls, v: str) -> str:
        return _clean_name(v)

    @field_validator('email')
    @classmethod
    def _email(cls, v: str) -> str:
        return normalize_email(str(v))

    @field_validator('password')
    @classmethod
    def _password(cls, v: str) -> str:
        problems = password_rule_violations(v)
        if problems:
            raise ValueError('; '.join(problems))
        return v

class LoginPayload(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator('email')
    @classmethod
    def _email(cls, v: str) -> str:
        return normalize_email(str(v))

class UserUpdate(BaseModel):
    name: str
    email: EmailStr

    @field_validator('name')
    @classmethod
    def _name(cls, v: str) -> str:
        return _clean_name(v)

    @field_validator('email')
    @classmethod
    def _email(cls, v: str) -> str:
        return normalize_email(str(v))

class UserPublic(BaseModel):
    id: int
    name: str
    email: str
    class Config: from_attributes = True

class UserRead(UserPublic):
    role: UserRole
    created_at: datetime

class RegisterResponse(BaseModel):
    message: str = 'Registration successful'
    userId: int

class LoginResponse(BaseModel):
    message: str = 'Login successful'
    user: UserRead
    access_token: str
    token_type: str = 'bearer'

class RoleUpdate(BaseModel):
    role: UserRole


# --- catalog ---

class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    description: Optional[str] = ''

class CategoryRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = ''
    class Config: from_attributes = True

class ProductBase(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    description: Optional[str] = ''
    category_id: Optional[int] = Field(default=None, alias='categoryId')
    class Config: populate_by_name = True

class ProductCreate(ProductBase):
    stock: int = Field(default=0, ge=0)

class ProductUpdate(ProductBase): pass

class ProductRead(BaseModel):
    id: int
    name: str
    price: float
    description: Optional[str] = ''
    stock: int
    category_id: Optional[int] = None
    class Config: from_attributes = True

class AdminProductRead(ProductRead):
    category_name: Optional[str] = None

class StockUpdate(BaseModel):
    stock: int = Field(ge=0)


# --- cart ---

class CartItemAdd(BaseModel):
    user_id: int = Field(alias='userId')
    product_id: int = Field(alias='productId')
    quantity: int = Field(ge=1)
    class Config: populate_by_name = True

class CartItemRead(BaseModel):
    user_id: int
    product_id: int
    quantity: int
    class Config: from_attributes = True

class CartLine(CartItemRead):
    name: str
    price: float
    description: Optional[str] = ''


# --- orders ---

class OrderItemIn(BaseModel):
    product_id: int = Field(alias='productId')
    quantity: int = Field(ge=1)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    class Config: populate_by_name = True

class OrderCreate(BaseModel):
    user_id: int = Field(alias='userId')
    total_amount: Decimal = Field(alias='totalAmount', ge=0, max_digits=12, decimal_places=2)
    shipping_address: str = Field(alias='shippingAddress', min_length=1, max_length=1000)
    items: List[OrderItemIn] = Field(min_length=1)
    class Config: populate_by_name = True

class OrderPlaced(BaseModel):
    message: str = 'Order placed successfully'
    orderId: int

class OrderItemRead(BaseModel):
    product_id: int
    name: str
    quantity: int
    price: float

class OrderRead(BaseModel):
    id: int
    user_id: int
    total_amount: float
    shipping_address: str
    status: OrderStatus
    created_at: datetime
    items: List[OrderItemRead] = []

class AdminOrderRead(BaseModel):
    id: int
    user_id: int
    total_amount: float
    shipping_address: str
    status: OrderStatus
    created_at: datetime
    customer_name: str
    customer_email: str

class OrderStatusUpdate(BaseModel):
    status: OrderStatus


# --- reports ---

class DashboardStats(BaseModel):
    totalSales: float
    totalOrders: int
    totalUsers: int
    lowStockProducts: int

class SalesReportRow(BaseModel):
    date: Date
    orders: int
    revenue: float

class TopProductRow(BaseModel):
    id: int
    name: str
    total_sold: int
    revenue: float

class CustomerAnalyticsRow(BaseModel):
    id: int
    name: str
    total_orders: int
    total_spent: float
