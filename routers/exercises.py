"""
Exercise API Endpoints

Reads are public. Creation needs an authenticated user, who becomes the
owner. Updates and deletes go through the exercise owner guard, which
reports an unknown exercise the same way as a bad token.
"""
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from typing import List, Optional

from core.database import get_db
from core.auth import get_current_user, require_owner
from core.security import TokenClaims
from models import User
from schemas import ExerciseCreate, ExerciseUpdate, ExerciseResponse
from services import exercise_service

router = APIRouter(prefix="/exercises", tags=["exercises"])

require_exercise_owner = require_owner(
    exercise_service.get_owner_id,
    invalid_detail="Invalid token or exercise not found",
    mismatch_detail="You can only access your own exercises",
)


@router.post("", response_model=ExerciseResponse, status_code=status.HTTP_201_CREATED)
def create_exercise(
    exercise_data: ExerciseCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Create an exercise for the authenticated user.

    The owner always comes from the token, never from the request body.
    """
    exercise = exercise_service.create_exercise(db, exercise_data, current_user.id)
    return ExerciseResponse.model_validate(exercise)


@router.get("", response_model=List[ExerciseResponse])
def list_exercises(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    db: Session = Depends(get_db)
):
    """List exercises, optionally only those owned by ``userId``."""
    exercises = exercise_service.list_exercises(db, user_id=user_id)
    return [ExerciseResponse.model_validate(e) for e in exercises]


@router.get("/{id}", response_model=ExerciseResponse)
def get_exercise(id: str, db: Session = Depends(get_db)):
    """Get an exercise with its history, newest first."""
    return ExerciseResponse.model_validate(exercise_service.get_exercise(db, id))


@router.patch("/{id}", response_model=ExerciseResponse)
def update_exercise(
    id: str,
    exercise_data: ExerciseUpdate,
    claims: TokenClaims = Depends(require_exercise_owner),
    db: Session = Depends(get_db)
):
    """Partially update an exercise. Only the owner may do this."""
    exercise = exercise_service.update_exercise(db, id, exercise_data)
    return ExerciseResponse.model_validate(exercise)


@router.delete("/{id}")
def delete_exercise(
    id: str,
    claims: TokenClaims = Depends(require_exercise_owner),
    db: Session = Depends(get_db)
):
    """Delete an exercise and its history. Only the owner may do this."""
    exercise_service.delete_exercise(db, id)
    return Response(status_code=status.HTTP_200_OK)
