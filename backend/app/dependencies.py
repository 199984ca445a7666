# backend/app/dependencies.py
"""
Shared FastAPI dependencies.

Caller identity arrives in the X-User-ID header set by the gateway,
which performs authentication before proxying.
"""

from datetime import datetime

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from .database import get_db
from .models.generated import Users as DBUsers


def get_now() -> datetime:
    """Clock dependency, overridden in tests."""
    return datetime.now()


def get_current_user(
    x_user_id: int | None = Header(None, alias="X-User-ID"),
    db: Session = Depends(get_db),
) -> DBUsers:
    if x_user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing X-User-ID")

    user = db.get(DBUsers, x_user_id)
    if not user or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unknown user")
    return user
