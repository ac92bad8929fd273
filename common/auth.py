"""Staff credentials: password hashing and bearer tokens keyed by email."""
from datetime import datetime, timedelta
from typing import Optional

from fastapi import HTTPException, status
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from .config import get_settings
from .models import User

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
settings = get_settings()


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def find_user(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def authenticate(db: Session, email: str, password: str) -> Optional[User]:
    """Return the staff member for a correct email/password pair, else None."""

    user = find_user(db, email)
    if user is None or not verify_password(password, user.hashed_password):
        return None
    return user


def issue_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a bearer token naming the user by email and carrying their role."""

    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    claims = {"sub": user.email, "role": user.role.value, "exp": expire}
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def token_subject(token: str) -> str:
    """Email named by a valid token; 401 for bad signatures, expiry or a missing subject."""

    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc
    email = claims.get("sub")
    if not email:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing subject in token")
    return email
