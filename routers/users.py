"""
User API Endpoints

Registration and reads are public. Profile edits and deletion are limited
to the user the token was issued for.
"""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from typing import List

from core.database import get_db
from core.auth import require_owner
from core.security import TokenClaims
from models import parse_id
from schemas import UserCreate, UserUpdate, UserResponse
from services import user_service

router = APIRouter(prefix="/users", tags=["users"])


def _path_user_id(db: Session, id: str):
    # For self-service routes the resource id is the owner id.
    return parse_id(id) or id


require_self = require_owner(
    _path_user_id,
    invalid_detail="Invalid token",
    mismatch_detail="You can only access your own resources",
)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    user_data: UserCreate,
    db: Session = Depends(get_db)
):
    """Register a new user account."""
    user = user_service.create_user(db, user_data)
    return UserResponse.model_validate(user)


@router.get("", response_model=List[UserResponse])
def list_users(db: Session = Depends(get_db)):
    """List all users (passwords never included)."""
    return [UserResponse.model_validate(u) for u in user_service.list_users(db)]


@router.get("/{id}", response_model=UserResponse)
def get_user(id: str, db: Session = Depends(get_db)):
    """Get a user by ID."""
    return UserResponse.model_validate(user_service.get_user(db, id))


@router.patch("/{id}", response_model=UserResponse)
def update_user(
    id: str,
    user_data: UserUpdate,
    claims: TokenClaims = Depends(require_self),
    db: Session = Depends(get_db)
):
    """Update username, email and/or password of the caller's own account."""
    user = user_service.update_user(db, id, user_data)
    return UserResponse.model_validate(user)


@router.delete("/{id}")
def delete_user(
    id: str,
    claims: TokenClaims = Depends(require_self),
    db: Session = Depends(get_db)
):
    """Delete the caller's own account, with all exercises and history."""
    user_service.delete_user(db, id)
    return Response(status_code=status.HTTP_200_OK)
