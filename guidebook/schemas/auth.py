"""Registration and login payloads."""

import re

from pydantic import EmailStr, Field, field_validator

from .base import ResponseModel, StrictRequestModel

PASSWORD_SPECIAL_CHARACTERS = " !\"#$%&'()*+,-./:;<=>?@[\\]^_{|}~"


class RegisterRequest(StrictRequestModel):
    name: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    # bcrypt only looks at the first 72 bytes
    password: str = Field(..., min_length=8, max_length=72)

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        checks = (
            re.search(r"[a-z]", v),
            re.search(r"[A-Z]", v),
            re.search(r"\d", v),
            any(ch in PASSWORD_SPECIAL_CHARACTERS for ch in v),
        )
        if not all(checks):
            raise ValueError(
                "Password must include at least one uppercase letter, one lowercase "
                "letter, one digit, and one special character"
            )
        return v


class LoginRequest(StrictRequestModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)


class UserResponse(ResponseModel):
    id: int
    name: str
    email: str


class AuthResponse(ResponseModel):
    token: str
    user: UserResponse
