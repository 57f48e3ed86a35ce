from datetime import datetime, timedelta, timezone
from jose import jwt, JWTError
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from worklog.db.session import get_db
from worklog.models.user import User, UserRole
from worklog.core.config import settings
from worklog.core.errors import unauthenticated

# auto_error=False so a missing header goes through the envelope-producing 401 below
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)


def create_access_token(data: dict, expires_delta: timedelta | None = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})
    # Role travels as its number (0 BA, 1 Client, 2 Developer)
    if "role" in data and isinstance(data["role"], UserRole):
        to_encode["role"] = int(data["role"])
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt


def verify_token(token: str, db: Session) -> User:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise unauthenticated("Invalid or expired token")

    user_id = payload.get("sub")
    if user_id is None:
        raise unauthenticated("Invalid token")

    try:
        user = db.query(User).filter(User.id == int(user_id)).first()
    except ValueError:
        raise unauthenticated("Invalid token")
    if not user:
        raise unauthenticated("Invalid token. User not found.")
    if not user.is_active:
        raise unauthenticated("Account is inactive")
    return user


def get_current_user(token: str | None = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    if not token:
        raise unauthenticated("Access denied. No token provided.")
    return verify_token(token, db)
