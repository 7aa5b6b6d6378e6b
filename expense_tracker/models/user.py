from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Dict, Optional
from uuid import uuid4
from datetime import datetime


class UserCreate(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6, max_length=72)  # bcrypt input limit

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()


class UserLogin(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()


class UserInDB(BaseModel):
    user_id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    email: EmailStr
    password_hash: str
    created_at: str = Field(default_factory=lambda: datetime.utcnow().isoformat())
    budgets: Optional[Dict[str, float]] = None


class UserPublic(BaseModel):
    user_id: str
    name: str
    email: EmailStr
    created_at: str
