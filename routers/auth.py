"""
Authentication API endpoints.

Provides:
- Login (JWT token generation)
- Current user lookup
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import logging

from core.database import get_db
from core.security import create_access_token, ACCESS_TOKEN_EXPIRE_MINUTES
from core.auth import get_current_user
from models import User
from schemas import LoginRequest, TokenResponse, UserResponse
from services import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def login(
    credentials: LoginRequest,
    db: Session = Depends(get_db)
):
    """
    Authenticate user and return JWT token.

    Returns an access token valid for ACCESS_TOKEN_EXPIRE_MINUTES (60 by
    default) and the user without its password.
    """
    user = user_service.authenticate_user(db, credentials.email, credentials.password)

    access_token = create_access_token(
        data={"sub": str(user.id), "email": user.email}
    )
    logger.info("User logged in", extra={"extra_fields": {"user_id": str(user.id)}})

    return TokenResponse(
        access_token=access_token,
        expires_in=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=UserResponse)
def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    """Get current authenticated user information."""
    return UserResponse.model_validate(current_user)
