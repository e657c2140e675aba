from sqlalchemy import Column, Integer, DateTime, ForeignKey, Text, Uuid, CheckConstraint, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from core.database import Base
import uuid
from typing import Optional
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "user"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    username = Column(Text, unique=True, nullable=False)
    email = Column(Text, unique=True, nullable=False)
    password_hash = Column(Text, nullable=False)

    # passive_deletes lets the database ON DELETE CASCADE do the work; the ORM
    # cascade keeps already-loaded children out of the identity map.
    exercises = relationship(
        "Exercise",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Exercise(Base):
    __tablename__ = "exercise"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    name = Column(Text, nullable=False)
    duration_minutes = Column(Integer, nullable=False, default=10, server_default="10")
    current_bpm_record = Column(Integer, nullable=False, default=0, server_default="0")
    # Set once at creation; nothing in the update path writes it.
    user_id = Column(Uuid(as_uuid=True), ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)

    user = relationship("User", back_populates="exercises")
    history = relationship(
        "History",
        back_populates="exercise",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="History.date.desc()",
    )

    __table_args__ = (
        CheckConstraint("duration_minutes >= 1", name="ck_exercise_duration_positive"),
        CheckConstraint("current_bpm_record >= 0", name="ck_exercise_bpm_record_non_negative"),
    )


class History(Base):
    __tablename__ = "history"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    bpm = Column(Integer, nullable=False)
    date = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())
    exercise_id = Column(Uuid(as_uuid=True), ForeignKey("exercise.id", ondelete="CASCADE"), nullable=False)

    exercise = relationship("Exercise", back_populates="history")

    __table_args__ = (
        CheckConstraint("bpm >= 0", name="ck_history_bpm_non_negative"),
        Index("ix_history_exercise_id_date", "exercise_id", "date"),
    )


def parse_id(value) -> Optional[uuid.UUID]:
    """Parse a path/body id; malformed ids resolve to None so lookups miss."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (ValueError, TypeError, AttributeError):
        return None
