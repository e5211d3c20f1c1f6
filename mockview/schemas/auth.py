import re
from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator, model_validator

from mockview.schemas.base import CamelModel

_PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")


def _check_password_strength(value: str) -> str:
    if not _PASSWORD_PATTERN.match(value):
        raise ValueError(
            "Password must contain at least one uppercase letter, one lowercase letter, and one number"
        )
    return value


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=8)
    remember_me: Optional[bool] = None


class RegisterRequest(CamelModel):
    full_name: str = Field(min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(min_length=8)
    confirm_password: str = Field(min_length=1)
    agree_to_terms: bool

    @field_validator("password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        return _check_password_strength(value)

    @field_validator("agree_to_terms")
    @classmethod
    def must_agree(cls, value: bool) -> bool:
        if value is not True:
            raise ValueError("You must agree to the terms of service")
        return value

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class ForgotPasswordRequest(CamelModel):
    email: EmailStr


class ResetPasswordRequest(CamelModel):
    password: str = Field(min_length=8)
    confirm_password: str = Field(min_length=1)

    @field_validator("password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        return _check_password_strength(value)

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class RefreshTokenRequest(CamelModel):
    refresh_token: str = Field(min_length=1)


class UserResponse(CamelModel):
    id: str
    email: Optional[str] = None
    full_name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    credits: Optional[int] = None


class SessionResponse(CamelModel):
    user: UserResponse
    access_token: str
    refresh_token: str
    expires_at: Optional[datetime] = None


class AuthResponse(CamelModel):
    user: UserResponse
    session: Optional[SessionResponse] = None
    message: Optional[str] = None
