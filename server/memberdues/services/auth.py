from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from memberdues.auth.security import verify_password
from memberdues.models.user import User

logger = logging.getLogger(__name__)


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    try:
        user = db.query(User).filter(func.lower(User.email) == email.lower()).first()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("login_lookup_failed")
        raise
    if user is None:
        return None
    if not verify_password(password, user.hashed_password):
        logger.warning("login_failed", extra={"user_id": user.id})
        return None
    return user


def get_user(db: Session, user_id: int) -> Optional[User]:
    try:
        return db.get(User, user_id)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("user_lookup_failed", extra={"user_id": user_id})
        raise
