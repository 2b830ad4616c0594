"""Request guards.

Identity always comes from a verified bearer access token issued at login;
request bodies and paths only name the *target* of an operation, never the
caller.
"""
import logging

import jwt

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from shop.api.deps import get_db
from shop.core.errors import AuthenticationError, AuthorizationError
from shop.db.models import User, UserRole
from shop.security.utils import decode_token

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

ADMIN_REQUIRED = 'Admin access required'


def get_current_identity(creds: HTTPAuthorizationCredentials = Depends(security)) -> dict:
    if not creds:
        raise AuthenticationError('Not authenticated')
    try:
        payload = decode_token(creds.credentials)
    except jwt.PyJWTError:
        raise AuthenticationError('Not authenticated')
    if payload.get('type') != 'access' or not str(payload.get('sub', '')).isdigit():
        raise AuthenticationError('Not authenticated')
    return payload


def get_current_user(identity: dict = Depends(get_current_identity), db: Session = Depends(get_db)) -> User:
    user = db.get(User, int(identity['sub']))
    if not user:
        raise AuthenticationError('Not authenticated')
    return user


def authorize_admin(db: Session, user_id: int) -> User:
    """Allow only when ``user_id`` names an existing user whose stored role is admin.

    The role is read from the store on every call, so a demotion takes effect
    on the next request even while older tokens still carry ``role=admin``.
    """
    user = db.get(User, user_id)
    if not user or user.role != UserRole.ADMIN:
        logger.warning('Admin access denied for user_id=%s', user_id)
        raise AuthorizationError(ADMIN_REQUIRED)
    return user


def require_admin(identity: dict = Depends(get_current_identity), db: Session = Depends(get_db)) -> User:
    return authorize_admin(db, int(identity['sub']))


def ensure_owner(user: User, target_user_id: int) -> None:
    if user.id != target_user_id and user.role != UserRole.ADMIN:
        raise AuthorizationError('Forbidden')
