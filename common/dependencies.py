"""Reusable FastAPI dependencies for auth, authorization and the booking core."""
from typing import Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from .auth import find_user, token_subject
from .availability import AvailabilityChecker
from .database import get_db
from .lifecycle import BookingLifecycle
from .models import User
from .permissions import Capability, is_authorized
from .store import BookingStore

oauth_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def get_current_user(token: str = Depends(oauth_scheme), db: Session = Depends(get_db)) -> User:
    user = find_user(db, token_subject(token))
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user


def require(capability: Capability) -> Callable[[User], User]:
    """Authorization gate: the caller's role must be allowed for ``capability``."""

    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if not is_authorized(current_user.role, capability):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
        return current_user

    return dependency


def get_store(db: Session = Depends(get_db)) -> BookingStore:
    return BookingStore(db)


def get_availability_checker(store: BookingStore = Depends(get_store)) -> AvailabilityChecker:
    return AvailabilityChecker(store)


def get_lifecycle(store: BookingStore = Depends(get_store)) -> BookingLifecycle:
    return BookingLifecycle(store)
