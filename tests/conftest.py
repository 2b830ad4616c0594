import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret-key-with-at-least-32-bytes"
os.environ["LOG_LEVEL"] = "WARNING"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from shop.db.models import Category, Product, User, UserRole
from shop.db.session import Base, SessionLocal, engine
from shop.main import app
from shop.schemas import RegisterPayload
from shop.security.utils import create_access_token
from shop.services.auth import register_user

PASSWORD = "Passw0rd!"


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def create_user(db, email: str, name: str = "Test User", role: UserRole = UserRole.USER) -> User:
    user = register_user(db, RegisterPayload(name=name, email=email, password=PASSWORD))
    if role != UserRole.USER:
        user.role = role
        db.commit()
    return user


def bearer(user: User) -> dict:
    token, _ = create_access_token(user.id, user.role.value)
    return {"Authorization": f"Bearer {token}"}


def create_product(db, name: str = "Widget", price: str = "9.99", stock: int = 20, category: Category | None = None,
                   description: str = "A useful widget") -> Product:
    obj = Product(name=name, price=Decimal(price), stock=stock, description=description,
                  category_id=category.id if category else None)
    db.add(obj)
    db.commit()
    return obj


@pytest.fixture
def alice(db):
    return create_user(db, "alice@example.com", name="Alice")


@pytest.fixture
def bob(db):
    return create_user(db, "bob@example.com", name="Bob")


@pytest.fixture
def admin(db):
    return create_user(db, "admin@example.com", name="Admin", role=UserRole.ADMIN)


@pytest.fixture
def alice_headers(alice):
    return bearer(alice)


@pytest.fixture
def admin_headers(admin):
    return bearer(admin)


@pytest.fixture
def category(db):
    obj = Category(name="Tools", description="Hand tools")
    db.add(obj)
    db.commit()
    return obj


@pytest.fixture
def product(db, category):
    return create_product(db, category=category)
