# smartwash/schemas/vehicle.py
import re
from enum import Enum
from typing import Optional

from pydantic import BaseModel, field_validator

_WHITESPACE = re.compile(r"\s+")


def normalize_plate(plate: str) -> str:
    """Uppercase and drop all whitespace: 'abc 123' → 'ABC123'."""
    return _WHITESPACE.sub("", plate or "").upper()


class VehicleType(str, Enum):
    SEDAN = "Sedan"
    SUV = "SUV"
    TRUCK = "Truck"
    MINIBUS = "Minibus"


class Vehicle(BaseModel):
    license_plate: str
    type: VehicleType
    owner_name: Optional[str] = None
    phone_number: Optional[str] = None
    photo_data_uri: Optional[str] = None

    class Config:
        frozen = True
        from_attributes = True

    @field_validator("license_plate")
    @classmethod
    def _normalize(cls, v: str) -> str:
        plate = normalize_plate(v)
        if len(plate) < 3:
            raise ValueError("License plate is required")
        return plate

    @field_validator("owner_name", "phone_number", "photo_data_uri")
    @classmethod
    def _blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None


class VehicleLookupOut(BaseModel):
    plate: str
    registered: bool
    vehicle: Optional[Vehicle] = None
