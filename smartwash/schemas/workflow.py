# smartwash/schemas/workflow.py
"""
Per-step request structs for the attendant workflow.
Each one validates itself on construction, so a request that exists is a valid one.
"""

from decimal import Decimal
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from smartwash.schemas.transaction import PaymentMethod, Transaction
from smartwash.schemas.vehicle import Vehicle, VehicleType, normalize_plate


class WorkflowStep(str, Enum):
    VEHICLE = "vehicle"
    NEW_VEHICLE = "new-vehicle"
    SERVICES = "services"
    PAYMENT = "payment"
    RECEIPT = "receipt"


class PlateLookupRequest(BaseModel):
    license_plate: str

    @field_validator("license_plate")
    @classmethod
    def _normalize(cls, v: str) -> str:
        plate = normalize_plate(v)
        if len(plate) < 3:
            raise ValueError("License plate is required")
        return plate


class NewVehicleRequest(BaseModel):
    """The plate is not part of this request: it is fixed by the preceding lookup."""
    type: VehicleType
    owner_name: Optional[str] = None
    phone_number: Optional[str] = None


class ServiceSelectionRequest(BaseModel):
    service_ids: list[str] = Field(min_length=1)

    @field_validator("service_ids")
    @classmethod
    def _dedupe(cls, v: list[str]) -> list[str]:
        seen = []
        for sid in v:
            if sid not in seen:
                seen.append(sid)
        if not seen:
            raise ValueError("Please select at least one service.")
        return seen


class PaymentRequest(BaseModel):
    payment_method: PaymentMethod = PaymentMethod.CASH
    reference: Optional[str] = None
    send_notification: bool = False
    save_offline: bool = False

    @field_validator("payment_method")
    @classmethod
    def _counter_methods_only(cls, v: PaymentMethod) -> PaymentMethod:
        if v not in (PaymentMethod.CASH, PaymentMethod.MOBILE_MONEY):
            raise ValueError("Only Cash or Mobile Money can be taken at the counter")
        return v

    @field_validator("reference")
    @classmethod
    def _strip(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

    @model_validator(mode="after")
    def _reference_required_for_mobile_money(self):
        if self.payment_method == PaymentMethod.MOBILE_MONEY and not self.reference:
            raise ValueError("Transaction reference is required for Mobile Money")
        return self


class PlateScanRequest(BaseModel):
    photo_data_uri: str = Field(min_length=1)


class PhotoCaptureRequest(BaseModel):
    photo_data_uri: str = Field(min_length=1)


class Notice(BaseModel):
    level: Literal["info", "warning", "error"] = "info"
    title: str
    message: str = ""


class WorkflowStateOut(BaseModel):
    step: WorkflowStep
    plate_field: str
    pending_plate: Optional[str]
    vehicle: Optional[Vehicle]
    selected_service_ids: list[str]
    total: Decimal
    transaction: Optional[Transaction]
    is_scanning: bool
    has_photo: bool
    can_notify: bool
    notification_link: Optional[str]
    notices: list[Notice]
