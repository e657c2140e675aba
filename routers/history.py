"""
History API Endpoints

All routes require a valid token and only ever touch history belonging to
the caller's own exercises.
"""
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from typing import List, Optional

from core.database import get_db
from core.auth import get_token_claims
from core.security import TokenClaims
from schemas import HistoryCreate, HistoryResponse
from services import history_service

router = APIRouter(prefix="/history", tags=["history"])


@router.post("", response_model=HistoryResponse, status_code=status.HTTP_201_CREATED)
def create_history(
    history_data: HistoryCreate,
    claims: TokenClaims = Depends(get_token_claims),
    db: Session = Depends(get_db)
):
    """Record a BPM reading; the server assigns the date."""
    entry = history_service.create_history(db, history_data.bpm, history_data.exercise_id, claims)
    return HistoryResponse.model_validate(entry)


@router.get("", response_model=List[HistoryResponse])
def list_history(
    exercise_id: Optional[str] = Query(default=None, alias="exerciseId"),
    claims: TokenClaims = Depends(get_token_claims),
    db: Session = Depends(get_db)
):
    """Caller's history entries, newest first."""
    entries = history_service.list_history(db, claims, exercise_id=exercise_id)
    return [HistoryResponse.model_validate(h) for h in entries]


@router.get("/{id}", response_model=HistoryResponse)
def get_history(
    id: str,
    claims: TokenClaims = Depends(get_token_claims),
    db: Session = Depends(get_db)
):
    return HistoryResponse.model_validate(history_service.get_history(db, id, claims))


@router.delete("/{id}")
def delete_history(
    id: str,
    claims: TokenClaims = Depends(get_token_claims),
    db: Session = Depends(get_db)
):
    history_service.delete_history(db, id, claims)
    return Response(status_code=status.HTTP_200_OK)
