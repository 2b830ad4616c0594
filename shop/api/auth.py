from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from shop.api.deps import get_db
from shop.schemas import RegisterPayload, LoginPayload, RegisterResponse, LoginResponse, UserRead
from shop.security.utils import create_access_token
from shop.services.auth import register_user, authenticate

router = APIRouter()  # main.py mounts at the root


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterPayload, db: Session = Depends(get_db)) -> RegisterResponse:
    user = register_user(db, payload)
    return RegisterResponse(userId=user.id)


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginPayload, db: Session = Depends(get_db)) -> LoginResponse:
    user = authenticate(db, payload.email, payload.password)
    access, _ = create_access_token(user.id, user.role.value)
    return LoginResponse(user=UserRead.model_validate(user), access_token=access)
