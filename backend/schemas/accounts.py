"""
Administrator and client account schemas.
"""

from typing import Optional
from pydantic import BaseModel, Field, field_validator

from backend.schemas.common import strip_required, validate_email


class CreateAdminRequest(BaseModel):
    """Create administrator request."""
    name: str = Field(..., min_length=1, max_length=30)
    email: str = Field(..., max_length=254)
    password: str = Field(..., min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=30)

    @field_validator('email')
    @classmethod
    def check_email(cls, v: str) -> str:
        return validate_email(v)

    @field_validator('name')
    @classmethod
    def check_name(cls, v: str) -> str:
        return strip_required(v)


class UpdateAdminRequest(BaseModel):
    """Update own administrator profile. Email here does not reset confirmation."""
    name: Optional[str] = Field(None, min_length=1, max_length=30)
    email: Optional[str] = Field(None, max_length=254)
    phone: Optional[str] = Field(None, max_length=30)

    @field_validator('email')
    @classmethod
    def check_email(cls, v: Optional[str]) -> Optional[str]:
        return validate_email(v)


class CreateClientRequest(BaseModel):
    """Create client request (admin only)."""
    firstName: str = Field(..., min_length=3, max_length=30)
    lastName: str = Field(..., min_length=3, max_length=50)
    email: str = Field(..., max_length=254)
    password: str = Field(..., min_length=1, max_length=200)
    address: str = Field(..., min_length=1, max_length=255)
    phoneNumber: str = Field(..., min_length=1, max_length=30)
    newsletter: bool = False
    note: Optional[str] = Field(None, max_length=255)

    @field_validator('email')
    @classmethod
    def check_email(cls, v: str) -> str:
        return validate_email(v)

    @field_validator('address', 'phoneNumber')
    @classmethod
    def check_required(cls, v: str) -> str:
        return strip_required(v)


class UpdateClientRequest(BaseModel):
    """Partial client profile update."""
    firstName: Optional[str] = Field(None, min_length=3, max_length=30)
    lastName: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[str] = Field(None, max_length=254)
    address: Optional[str] = Field(None, min_length=1, max_length=255)
    phoneNumber: Optional[str] = Field(None, min_length=1, max_length=30)
    newsletter: Optional[bool] = None
    note: Optional[str] = Field(None, max_length=255)

    @field_validator('email')
    @classmethod
    def check_email(cls, v: Optional[str]) -> Optional[str]:
        return validate_email(v)
