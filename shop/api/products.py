import logging
from fastapi import APIRouter, Depends, Query
from typing import List
from sqlalchemy.orm import Session
from sqlalchemy import select, or_
from sqlalchemy.exc import IntegrityError
from shop.api.deps import get_db
from shop.core.auth import require_admin
from shop.core.errors import ConflictError, NotFoundError
from shop.db import models
from shop.schemas import ProductCreate, ProductUpdate, ProductRead

logger = logging.getLogger(__name__)

router = APIRouter()


def get_product_or_404(db: Session, product_id: int) -> models.Product:
    obj = db.get(models.Product, product_id)
    if not obj: raise NotFoundError('Product not found')
    return obj


def _check_category(db: Session, category_id: int | None):
    if category_id is not None and not db.get(models.Category, category_id):
        raise NotFoundError('Category not found')


@router.get('', response_model=List[ProductRead])
def list_products(db: Session = Depends(get_db)):
    return db.execute(select(models.Product).order_by(models.Product.id)).scalars().all()

@router.get('/search', response_model=List[ProductRead])
def search_products(term: str = Query(min_length=1, max_length=255), db: Session = Depends(get_db)):
    stmt = select(models.Product).where(or_(
        models.Product.name.icontains(term, autoescape=True),
        models.Product.description.icontains(term, autoescape=True),
    )).order_by(models.Product.id)
    return db.execute(stmt).scalars().all()

@router.get('/category/{category_id}', response_model=List[ProductRead])
def products_by_category(category_id: int, db: Session = Depends(get_db)):
    stmt = select(models.Product).where(models.Product.category_id == category_id).order_by(models.Product.id)
    return db.execute(stmt).scalars().all()

@router.get('/{product_id}', response_model=ProductRead)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return get_product_or_404(db, product_id)

@router.post('', response_model=ProductRead, status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db), _=Depends(require_admin)):
    _check_category(db, payload.category_id)
    obj = models.Product(**payload.model_dump())
    db.add(obj); db.commit(); db.refresh(obj)
    logger.info('Created product id=%s', obj.id)
    return obj

@router.put('/{product_id}', response_model=ProductRead)
def update_product(product_id: int, payload: ProductUpdate, db: Session = Depends(get_db), _=Depends(require_admin)):
    obj = get_product_or_404(db, product_id)
    _check_category(db, payload.category_id)
    for k, v in payload.model_dump(exclude_unset=True).items(): setattr(obj, k, v)
    db.add(obj); db.commit(); db.refresh(obj)
    return obj

@router.delete('/{product_id}')
def delete_product(product_id: int, db: Session = Depends(get_db), _=Depends(require_admin)):
    obj = get_product_or_404(db, product_id)
    db.delete(obj)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError('Product is referenced by existing orders')
    logger.info('Deleted product id=%s', product_id)
    return {'message': 'Product deleted'}
