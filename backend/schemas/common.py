"""
Common schemas and validators used across multiple route modules.
"""

from typing import Optional

from email_validator import EmailNotValidError
from email_validator import validate_email as check_email_address
from pydantic import BaseModel, Field


def validate_email(v: Optional[str]) -> Optional[str]:
    """Trim and check an email address with email-validator.

    The address is returned as submitted, not normalized: addresses are
    matched exactly as stored.
    """
    if v is None:
        return None
    v = v.strip()
    try:
        check_email_address(v, check_deliverability=False)
    except EmailNotValidError:
        raise ValueError('Please provide a valid email address')
    return v


def strip_required(v: str) -> str:
    """Strip surrounding whitespace and reject blank strings."""
    v = v.strip()
    if not v:
        raise ValueError('Cannot be empty')
    return v


class LocationFields(BaseModel):
    """Optional submitter location attached to public submissions."""
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    ipAddress: Optional[str] = Field(None, max_length=64)
