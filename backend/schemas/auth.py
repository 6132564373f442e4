"""
Authentication and credential-flow request schemas.

Password length policy differs per principal kind and is enforced by the
realm, so these schemas only bound the raw input.
"""

from pydantic import BaseModel, Field, field_validator

from backend.schemas.common import validate_email


class LoginRequest(BaseModel):
    """Login request for either principal kind."""
    email: str = Field(..., min_length=1, max_length=254)
    password: str = Field(..., min_length=1, max_length=200)

    @field_validator('email')
    @classmethod
    def check_email(cls, v: str) -> str:
        return validate_email(v)


class EmailRequest(BaseModel):
    """Body carrying only an email (forgot password, change email)."""
    email: str = Field(..., min_length=1, max_length=254)

    @field_validator('email')
    @classmethod
    def check_email(cls, v: str) -> str:
        return validate_email(v)


class PasswordRequest(BaseModel):
    """New password, set through a reset or session token."""
    password: str = Field(..., min_length=1, max_length=200)
