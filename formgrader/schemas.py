from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Feedback(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    score: Optional[str] = None
    bonus: Optional[str] = None
    comments: Optional[str] = None


class User(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    email: str
    is_master: bool = Field(False, alias="isMaster")
    # Only populated by lookups that explicitly ask for it; never serialised.
    password_hash: Optional[str] = Field(None, alias="passwordHash", exclude=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class ReviewableUser(User):
    ungraded_count: int = Field(0, alias="ungradedCount")


class FormSubmission(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    owner_id: str = Field(..., alias="userId")
    owner_full_name: str = Field(..., alias="userFullName")
    submitted_at: datetime = Field(..., alias="date")
    payload: Any = Field(..., alias="formData")
    feedback: Optional[Feedback] = None

    @property
    def is_graded(self) -> bool:
        return self.feedback is not None


class RegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(..., alias="firstName", min_length=1)
    last_name: str = Field(..., alias="lastName", min_length=1)
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    email: str
    password: str


class FormCreateRequest(BaseModel):
    """Only ``formData`` is read; owner fields sent by the client are dropped."""

    model_config = ConfigDict(populate_by_name=True)

    payload: Any = Field(..., alias="formData")

    @field_validator("payload")
    @classmethod
    def _payload_present(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("formData is required")
        return value


class TokenResponse(BaseModel):
    token: str


class MessageResponse(BaseModel):
    msg: str
