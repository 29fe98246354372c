from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.rate_limit import rate_limit
from app.core.security import create_access_token, get_password_hash, new_guest_name, verify_password
from app.db.session import get_db
from app.models.users import UserAuth
from app.schemas.auth import RegisterRequest, TokenResponse

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=201,
    dependencies=[rate_limit("auth:register")],
)
def register(payload: RegisterRequest, db: Session = Depends(get_db)) -> TokenResponse:
    existing = db.scalar(select(UserAuth).where(UserAuth.email == payload.email))
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    user = UserAuth(
        email=payload.email,
        password_hash=get_password_hash(payload.password),
        display_name=payload.name.strip(),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("User registered: id=%s", user.id)

    return TokenResponse(access_token=create_access_token(user.id))


@router.post("/token", response_model=TokenResponse, dependencies=[rate_limit("auth:login")])
def login(form: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)) -> TokenResponse:
    user = db.scalar(select(UserAuth).where(UserAuth.email == form.username))
    if not user or not verify_password(form.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User inactive")

    return TokenResponse(access_token=create_access_token(user.id))


@router.post("/guest", response_model=TokenResponse, status_code=201, dependencies=[rate_limit("auth:guest")])
def sign_in_as_guest(db: Session = Depends(get_db)) -> TokenResponse:
    user = UserAuth(display_name=new_guest_name(), is_guest=True)
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Guest signed in: id=%s", user.id)

    return TokenResponse(access_token=create_access_token(user.id))
