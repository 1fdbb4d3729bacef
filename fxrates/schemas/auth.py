"""Schemas for authentication endpoints."""

from pydantic import BaseModel, Field, field_validator

from fxrates.schemas.common import CamelModel

# bcrypt rejects or ignores anything past 72 bytes
MAX_PASSWORD_BYTES = 72


class UserRegister(BaseModel):
    """Schema for user registration."""

    username: str = Field(min_length=3, max_length=100)
    password: str = Field(min_length=8, max_length=MAX_PASSWORD_BYTES)

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return v


class UserLogin(BaseModel):
    """Schema for user login."""

    username: str
    password: str


class TokenResponse(CamelModel):
    """Schema for token response."""

    token: str
    token_type: str = "bearer"
    expires_in: int
