"""
Pydantic schemas for space catalog requests/responses.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field

from app.domain.enums import PriceUnit


class PricePolicySchema(BaseModel):
    amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    unit: PriceUnit

    model_config = {"from_attributes": True}


class SpaceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    address: Optional[str] = Field(None, max_length=255)
    capacity: Optional[int] = Field(None, gt=0)
    price: PricePolicySchema


class SpaceActiveUpdate(BaseModel):
    is_active: bool


class SpaceResponse(BaseModel):
    id: int
    owner_id: int
    name: str
    description: Optional[str]
    address: Optional[str]
    capacity: Optional[int]
    price: PricePolicySchema
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class SpaceListResponse(BaseModel):
    spaces: list[SpaceResponse]
    total: int
    page: int
    page_size: int
    cached: bool = False
