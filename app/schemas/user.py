from datetime import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, EmailStr, Field, field_validator

from app.models.user import UserRole

MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_BYTES = 72


def _not_blank(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("must not be blank")
    return v


NonBlankStr = Annotated[str, AfterValidator(_not_blank)]
EmailAddress = Annotated[EmailStr, AfterValidator(str.lower)]


class UserCreate(BaseModel):
    username: NonBlankStr = Field(..., max_length=100)
    email: EmailAddress
    password: str

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"must be at least {MIN_PASSWORD_LENGTH} characters")
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"must be at most {MAX_PASSWORD_BYTES} bytes")
        return v


class UserLogin(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.strip().lower()


class UserUpdate(BaseModel):
    username: NonBlankStr = Field(..., max_length=100)


class RoleUpdate(BaseModel):
    role: UserRole


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    role: str
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None

    class Config:
        from_attributes = True
