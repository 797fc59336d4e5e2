"""
User service: account creation and credential checks.
"""
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, UnauthorizedError, ValidationFailedError
from app.core.security import get_password_hash, verify_password
from app.core.utils import username_from_email
from app.db.session import persistence_errors
from app.models.user import User

logger = logging.getLogger(__name__)


def _available_username(base: str, db: Session) -> str:
    candidate = base
    suffix = 1
    while db.query(User.id).filter(User.username == candidate).first():
        suffix += 1
        candidate = f"{base}{suffix}"
    return candidate


def create_user(email: str, password: str, db: Session, username: Optional[str] = None) -> User:
    """
    Register a user. Without a username, the email's local part is used,
    numbered if already taken.
    """
    email = email.strip().lower()
    if not password:
        raise ValidationFailedError("empty_password")

    with persistence_errors(db, "create_user_failed"):
        if db.query(User.id).filter(User.email == email).first():
            raise ConflictError("email_in_use")

        if username:
            username = username.strip()
            if db.query(User.id).filter(User.username == username).first():
                raise ConflictError("username_in_use")
        else:
            username = _available_username(username_from_email(email), db)

        user = User(
            email=email,
            username=username,
            hashed_password=get_password_hash(password)
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise ConflictError("email_in_use") from exc
        db.refresh(user)

    logger.info(f"User {user.id} registered as {username}")
    return user


def authenticate(email: str, password: str, db: Session) -> User:
    """Return the active user matching the credentials."""
    with persistence_errors(db, "authenticate_failed"):
        user = db.query(User).filter(User.email == email.strip().lower()).first()

    if not user or not verify_password(password, user.hashed_password):
        raise UnauthorizedError("invalid_credentials")
    if not user.is_active:
        raise UnauthorizedError("inactive_user")
    return user
