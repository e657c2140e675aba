"""
Exercise CRUD.

An exercise's owner is taken from the authenticated caller at creation and
never changes afterwards.
"""

from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session, selectinload

from core.exceptions import NotFoundError
from models import Exercise, parse_id
from schemas import ExerciseCreate, ExerciseUpdate

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "duration_minutes", "current_bpm_record")


def create_exercise(db: Session, data: ExerciseCreate, user_id: UUID) -> Exercise:
    exercise = Exercise(name=data.name, user_id=user_id)
    if data.duration_minutes is not None:
        exercise.duration_minutes = data.duration_minutes
    if data.current_bpm_record is not None:
        exercise.current_bpm_record = data.current_bpm_record

    db.add(exercise)
    db.commit()
    db.refresh(exercise)

    logger.info(
        "Exercise created",
        extra={"extra_fields": {"exercise_id": str(exercise.id), "user_id": str(user_id)}},
    )
    return exercise


def list_exercises(db: Session, user_id: Optional[str] = None) -> List[Exercise]:
    query = db.query(Exercise).options(selectinload(Exercise.history))
    if user_id is not None:
        parsed = parse_id(user_id)
        if parsed is None:
            return []
        query = query.filter(Exercise.user_id == parsed)
    return query.order_by(Exercise.created_at).all()


def get_exercise(db: Session, exercise_id) -> Exercise:
    parsed = parse_id(exercise_id)
    exercise = None
    if parsed:
        exercise = (
            db.query(Exercise)
            .options(selectinload(Exercise.history))
            .filter(Exercise.id == parsed)
            .first()
        )
    if not exercise:
        raise NotFoundError("Exercise", str(exercise_id))
    return exercise


def get_owner_id(db: Session, exercise_id) -> UUID:
    """Stored owner of an exercise; raises NotFoundError if it does not exist."""
    parsed = parse_id(exercise_id)
    owner_id = None
    if parsed:
        owner_id = db.query(Exercise.user_id).filter(Exercise.id == parsed).scalar()
    if owner_id is None:
        raise NotFoundError("Exercise", str(exercise_id))
    return owner_id


def update_exercise(db: Session, exercise_id, data: ExerciseUpdate) -> Exercise:
    exercise = get_exercise(db, exercise_id)

    for field, value in data.model_dump(exclude_unset=True).items():
        # Explicit nulls are ignored; every updatable column is NOT NULL.
        if field in UPDATABLE_FIELDS and value is not None:
            setattr(exercise, field, value)

    db.commit()
    db.refresh(exercise)
    return exercise


def delete_exercise(db: Session, exercise_id) -> None:
    exercise = get_exercise(db, exercise_id)
    db.delete(exercise)
    db.commit()
    logger.info("Exercise deleted", extra={"extra_fields": {"exercise_id": str(exercise.id)}})
