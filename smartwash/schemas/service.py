# smartwash/schemas/service.py
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class Service(BaseModel):
    """A catalog entry. Also used as the snapshot embedded in a Transaction."""
    id: str
    name: str
    price: Decimal = Field(ge=0, decimal_places=2)

    class Config:
        frozen = True
        from_attributes = True


class ServiceCreate(BaseModel):
    name: str = Field(min_length=3)
    price: Decimal = Field(ge=0, decimal_places=2)


class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=3)
    price: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
