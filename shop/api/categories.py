from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from shop.api.deps import get_db
from shop.core.auth import require_admin
from shop.db.models import Category
from shop.schemas import CategoryCreate, CategoryRead

router = APIRouter()

@router.get('', response_model=List[CategoryRead])
def list_categories(db: Session = Depends(get_db)):
    return db.query(Category).order_by(Category.name).all()

@router.post('', response_model=CategoryRead, status_code=201)
def create_category(payload: CategoryCreate, db: Session = Depends(get_db), _=Depends(require_admin)):
    obj = Category(name=payload.name, description=payload.description or '')
    db.add(obj); db.commit(); db.refresh(obj)
    return obj
