"""
Schemas for the public submission endpoints (messages, donations, newsletters).
"""

from typing import Optional
from pydantic import BaseModel, Field, field_validator

from backend.schemas.common import LocationFields, strip_required, validate_email


class _Submitter(LocationFields):
    firstName: str = Field(..., min_length=1, max_length=30)
    lastName: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., max_length=254)

    @field_validator('email')
    @classmethod
    def check_email(cls, v: str) -> str:
        return validate_email(v)

    @field_validator('firstName', 'lastName')
    @classmethod
    def check_names(cls, v: str) -> str:
        return strip_required(v)


class MessageRequest(_Submitter):
    """Contact form message."""
    message: str = Field(..., min_length=1, max_length=2000)


class DonationRequest(_Submitter):
    """Offer to donate equipment."""
    equipmentType: str = Field(..., min_length=1, max_length=50)
    message: Optional[str] = Field(None, max_length=2000)


class SubscribeRequest(_Submitter):
    """Newsletter subscription."""


class UnsubscribeRequest(BaseModel):
    email: str = Field(..., max_length=254)

    @field_validator('email')
    @classmethod
    def check_email(cls, v: str) -> str:
        return validate_email(v)
