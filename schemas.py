from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, field_serializer
from pydantic.alias_generators import to_camel
from datetime import datetime
from uuid import UUID
from typing import Optional, List

from core.password_policy import validate_password

USERNAME_PATTERN = r"^[A-Za-z0-9_.\-]+$"

# Upper bound of the 32-bit INTEGER columns
MAX_INT = 2**31 - 1


class CamelModel(BaseModel):
    """Accepts camelCase or snake_case keys, emits camelCase."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _check_password(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    valid, errors = validate_password(value)
    if not valid:
        raise ValueError("; ".join(errors))
    return value


# --- Users ---

class UserCreate(CamelModel):
    username: str = Field(min_length=3, max_length=30, pattern=USERNAME_PATTERN)
    email: EmailStr
    password: str

    @field_validator("password")
    @classmethod
    def password_policy(cls, value: str) -> str:
        return _check_password(value)


class UserUpdate(CamelModel):
    """Partial update; only fields present in the request are applied."""
    username: Optional[str] = Field(default=None, min_length=3, max_length=30, pattern=USERNAME_PATTERN)
    email: Optional[EmailStr] = None
    password: Optional[str] = None

    @field_validator("password")
    @classmethod
    def password_policy(cls, value: Optional[str]) -> Optional[str]:
        return _check_password(value)


class UserResponse(CamelModel):
    id: UUID
    username: str
    email: str
    created_at: Optional[datetime] = None

    @field_serializer("id")
    def serialize_id(self, id: UUID) -> str:
        return str(id)


# --- Auth ---

class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


# --- History ---

class HistoryCreate(CamelModel):
    bpm: int = Field(ge=0, le=MAX_INT)
    exercise_id: str


class HistoryResponse(CamelModel):
    id: UUID
    bpm: int
    date: datetime
    exercise_id: UUID

    @field_serializer("id", "exercise_id")
    def serialize_uuid(self, value: UUID) -> str:
        return str(value)


# --- Exercises ---

def _check_name(value: str) -> str:
    if not value.strip():
        raise ValueError("name must not be blank")
    return value


class ExerciseCreate(CamelModel):
    name: str = Field(min_length=1)
    duration_minutes: Optional[int] = Field(default=None, ge=1, le=MAX_INT)
    current_bpm_record: Optional[int] = Field(default=None, ge=0, le=MAX_INT)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        return _check_name(value)


class ExerciseUpdate(CamelModel):
    """Partial update. The owning user is fixed at creation and has no field here."""
    name: Optional[str] = Field(default=None, min_length=1)
    duration_minutes: Optional[int] = Field(default=None, ge=1, le=MAX_INT)
    current_bpm_record: Optional[int] = Field(default=None, ge=0, le=MAX_INT)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return _check_name(value)


class ExerciseResponse(CamelModel):
    id: UUID
    name: str
    duration_minutes: int
    current_bpm_record: int
    user_id: UUID
    created_at: Optional[datetime] = None
    history: List[HistoryResponse] = []

    @field_serializer("id", "user_id")
    def serialize_uuid(self, value: UUID) -> str:
        return str(value)
