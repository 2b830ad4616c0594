"""Registration and credential checks."""
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from shop.core.errors import AuthenticationError, ConflictError, PersistenceError
from shop.db.models import User, UserRole
from shop.schemas import RegisterPayload
from shop.security.utils import hash_password, verify_password, normalize_email, now_utc, pwd_ctx

logger = logging.getLogger(__name__)

EMAIL_TAKEN = 'Email already registered'


def find_user_by_email(db: Session, email: str) -> User | None:
    return db.execute(select(User).where(User.email == normalize_email(email))).scalar_one_or_none()


def register_user(db: Session, payload: RegisterPayload) -> User:
    if find_user_by_email(db, payload.email):
        raise ConflictError(EMAIL_TAKEN)

    user = User(
        name=payload.name,
        email=payload.email,
        password_hash=hash_password(payload.password),
        role=UserRole.USER,
        created_at=now_utc(),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # a concurrent registration won the unique index
        db.rollback()
        raise ConflictError(EMAIL_TAKEN)
    except SQLAlchemyError:
        db.rollback()
        logger.exception('Failed to insert user')
        raise PersistenceError('Failed to register user')
    db.refresh(user)
    logger.info('Registered user id=%s', user.id)
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    """Return the user for a valid email/password pair.

    Unknown email and wrong password raise the same error, and both paths pay
    for one hash verification, so callers cannot tell which check failed.
    """
    user = find_user_by_email(db, email)
    if user is None:
        pwd_ctx.dummy_verify()
        ok = False
    else:
        ok = verify_password(password, user.password_hash)
    if not ok:
        logger.info('Failed login attempt')
        raise AuthenticationError('Invalid credentials')
    return user
