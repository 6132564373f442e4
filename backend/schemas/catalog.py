"""
Equipment and order schemas.
"""

from datetime import date
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from backend.schemas.common import strip_required


class CreateEquipmentRequest(BaseModel):
    """Add equipment to the inventory."""
    name: str = Field(..., min_length=1, max_length=100)
    type: str = Field(..., min_length=1, max_length=50)
    serialId: int = Field(..., ge=0)
    sellPrice: float = Field(..., ge=0)
    rentPrice: float = Field(..., ge=0)

    @field_validator('name', 'type')
    @classmethod
    def check_text(cls, v: str) -> str:
        return strip_required(v)


class UpdateEquipmentRequest(BaseModel):
    """Partial equipment update; serialId is fixed once assigned."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    type: Optional[str] = Field(None, min_length=1, max_length=50)
    sellPrice: Optional[float] = Field(None, ge=0)
    rentPrice: Optional[float] = Field(None, ge=0)


class CreateOrderRequest(BaseModel):
    """Place an order for a client."""
    clientId: str = Field(..., min_length=1, max_length=64)
    equipmentId: str = Field(..., min_length=1, max_length=64)
    totalPrice: float = Field(..., ge=0)
    isRent: bool = False
    rentExpiry: Optional[date] = None


class UpdateOrderRequest(BaseModel):
    totalPrice: float = Field(..., ge=0)
    isRent: bool
    rentExpiry: Optional[date] = None
