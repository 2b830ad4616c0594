from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shop.api.deps import get_db
from shop.core.auth import get_current_user, ensure_owner
from shop.core.errors import ConflictError, NotFoundError
from shop.db.models import User
from shop.schemas import UserPublic, UserUpdate
from shop.services.auth import EMAIL_TAKEN, find_user_by_email

router = APIRouter()


def get_user_or_404(db: Session, user_id: int) -> User:
    obj = db.get(User, user_id)
    if not obj: raise NotFoundError('User not found')
    return obj


@router.get('/{user_id}', response_model=UserPublic)
def get_profile(user_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    ensure_owner(user, user_id)
    return get_user_or_404(db, user_id)


@router.put('/{user_id}', response_model=UserPublic)
def update_profile(user_id: int, payload: UserUpdate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    ensure_owner(user, user_id)
    obj = get_user_or_404(db, user_id)
    other = find_user_by_email(db, payload.email)
    if other and other.id != obj.id:
        raise ConflictError(EMAIL_TAKEN)
    obj.name = payload.name
    obj.email = payload.email
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(EMAIL_TAKEN)
    db.refresh(obj)
    return obj
