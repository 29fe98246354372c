from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.orm import Session

from app.core.identity import Identity
from app.core.security import decode_access_token
from app.db.session import get_db
from app.models.users import UserAuth

logger = logging.getLogger(__name__)

# auto_error=False: a missing token reaches the services as identity=None,
# which raise AuthenticationRequired themselves.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)


def _user_from_token(token: str, db: Session) -> UserAuth:
    try:
        payload = decode_access_token(token)
        user_id: str | None = payload.get("sub")
        if not user_id:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    user = db.get(UserAuth, user_id)
    if not user or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User inactive or not found")
    return user


def get_current_user(
    token: str | None = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> UserAuth:
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _user_from_token(token, db)


def get_identity(
    token: str | None = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> Identity | None:
    if not token:
        return None
    user = _user_from_token(token, db)
    return Identity(user_id=user.id, display_name=user.display_name, is_guest=user.is_guest)
