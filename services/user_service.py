"""
User accounts: registration, profile edits, deletion, credential checks.

Passwords are only ever handled as bcrypt hashes here; callers serialize
users through response schemas that carry no password field.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.exceptions import ConflictError, NotFoundError, UnauthorizedError
from core.security import get_password_hash, verify_password
from models import User, parse_id
from schemas import UserCreate, UserUpdate

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _username_taken(db: Session, username: str, *, exclude_id=None) -> bool:
    query = db.query(User).filter(User.username == username)
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    return db.query(query.exists()).scalar()


def _email_taken(db: Session, email: str, *, exclude_id=None) -> bool:
    query = db.query(User).filter(User.email == email)
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    return db.query(query.exists()).scalar()


def _commit_or_conflict(db: Session) -> None:
    # A concurrent insert can still trip the unique constraints between the
    # check and the commit.
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Username or email already in use")


def create_user(db: Session, data: UserCreate) -> User:
    email = normalize_email(data.email)

    if _email_taken(db, email):
        raise ConflictError("User already exists")
    if _username_taken(db, data.username):
        raise ConflictError("Username already taken")

    user = User(
        username=data.username,
        email=email,
        password_hash=get_password_hash(data.password),
    )
    db.add(user)
    _commit_or_conflict(db)
    db.refresh(user)

    logger.info("User registered", extra={"extra_fields": {"user_id": str(user.id)}})
    return user


def list_users(db: Session) -> List[User]:
    return db.query(User).order_by(User.created_at).all()


def get_user(db: Session, user_id) -> User:
    parsed = parse_id(user_id)
    user = db.get(User, parsed) if parsed else None
    if not user:
        raise NotFoundError("User", str(user_id))
    return user


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def update_user(db: Session, user_id, data: UserUpdate) -> User:
    """
    Apply a partial update.

    Only fields present in the request are touched. Email and username
    changes are checked for uniqueness against other accounts first.
    """
    user = get_user(db, user_id)
    changes = data.model_dump(exclude_unset=True)

    email = changes.get("email")
    if email is not None:
        email = normalize_email(email)
        if email != user.email and _email_taken(db, email, exclude_id=user.id):
            raise ConflictError("This email is already associated with another account")
        user.email = email

    username = changes.get("username")
    if username is not None:
        if username != user.username and _username_taken(db, username, exclude_id=user.id):
            raise ConflictError("Username already taken")
        user.username = username

    password = changes.get("password")
    if password is not None:
        user.password_hash = get_password_hash(password)

    _commit_or_conflict(db)
    db.refresh(user)
    return user


def delete_user(db: Session, user_id) -> None:
    """Delete a user; exercises and their history go with it (ON DELETE CASCADE)."""
    user = get_user(db, user_id)
    db.delete(user)
    db.commit()
    logger.info("User deleted", extra={"extra_fields": {"user_id": str(user.id)}})


def authenticate_user(db: Session, email: str, password: str) -> User:
    """
    Check login credentials.

    Unknown email and wrong password raise the same error so callers
    cannot tell which one was wrong.
    """
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        logger.info("Login rejected", extra={"extra_fields": {"email": normalize_email(email)}})
        raise UnauthorizedError("Invalid credentials")
    return user
