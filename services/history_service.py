"""
BPM history entries.

Every operation is scoped to the caller: history can only be written, read
or removed for exercises the caller owns. Unlike the exercise guard, a
missing exercise (404) and a foreign exercise (403) are reported separately.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from core.auth import ensure_owner
from core.exceptions import NotFoundError
from core.security import TokenClaims
from models import Exercise, History, parse_id
from services import exercise_service

logger = logging.getLogger(__name__)


def create_history(db: Session, bpm: int, exercise_id: str, claims: TokenClaims) -> History:
    """
    Record a BPM reading.

    The parent exercise is loaded before insert: missing -> 404, owned by
    someone else -> 403. Nothing is written in either case.
    """
    owner_id = exercise_service.get_owner_id(db, exercise_id)
    ensure_owner(claims, owner_id, "You can only create history for your own exercises")

    entry = History(bpm=bpm, exercise_id=parse_id(exercise_id))
    db.add(entry)
    db.commit()
    db.refresh(entry)

    logger.info(
        "History recorded",
        extra={"extra_fields": {"history_id": str(entry.id), "exercise_id": str(entry.exercise_id)}},
    )
    return entry


def list_history(db: Session, claims: TokenClaims, exercise_id: Optional[str] = None) -> List[History]:
    """Caller's history, newest first; optionally narrowed to one exercise."""
    if exercise_id is not None:
        owner_id = exercise_service.get_owner_id(db, exercise_id)
        ensure_owner(claims, owner_id, "You can only view history for your own exercises")
        return (
            db.query(History)
            .filter(History.exercise_id == parse_id(exercise_id))
            .order_by(History.date.desc())
            .all()
        )

    return (
        db.query(History)
        .join(Exercise, History.exercise_id == Exercise.id)
        .filter(Exercise.user_id == parse_id(claims.subject))
        .order_by(History.date.desc())
        .all()
    )


def get_history(db: Session, history_id, claims: TokenClaims) -> History:
    parsed = parse_id(history_id)
    entry = db.get(History, parsed) if parsed else None
    if not entry:
        raise NotFoundError("History", str(history_id))

    ensure_owner(claims, entry.exercise.user_id, "You can only view history for your own exercises")
    return entry


def delete_history(db: Session, history_id, claims: TokenClaims) -> None:
    entry = get_history(db, history_id, claims)
    db.delete(entry)
    db.commit()
