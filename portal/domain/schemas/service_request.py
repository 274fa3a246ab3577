"""Pydantic schemas for ServiceRequest."""

import math
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from portal.domain.catalog import ADDITIONAL_SERVICES, MAIN_SERVICES, dedupe_services
from portal.domain.models.service_request import RequestStatus

DATE_FIELDS = (
    "due_date",
    "due_time",
    "start_date",
    "start_time",
    "completion_date",
    "completion_time",
)


def check_date(v: Optional[str]) -> Optional[str]:
    if v:
        date.fromisoformat(v)
    return v


def check_time(v: Optional[str]) -> Optional[str]:
    if v:
        datetime.strptime(v, "%H:%M")
    return v


class ServiceRequestBase(BaseModel):
    manager: Optional[str] = None
    stock_vin: str
    po_number: Optional[str] = None
    vehicle_description: Optional[str] = None
    year: Optional[int] = None
    make: Optional[str] = None
    model: Optional[str] = None
    color: Optional[str] = None
    due_date: Optional[str] = None
    due_time: Optional[str] = None
    main_services: list[str] = Field(default_factory=list)
    additional_services: list[str] = Field(default_factory=list)
    notes: Optional[str] = None


class ServiceRequestCreate(ServiceRequestBase):
    @field_validator("stock_vin")
    @classmethod
    def stock_vin_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Stock/VIN is required")
        return v

    @field_validator("main_services")
    @classmethod
    def main_services_in_catalog(cls, v: list[str]) -> list[str]:
        return dedupe_services(v, MAIN_SERVICES, "main")

    @field_validator("additional_services")
    @classmethod
    def additional_services_in_catalog(cls, v: list[str]) -> list[str]:
        return dedupe_services(v, ADDITIONAL_SERVICES, "additional")

    @field_validator("due_date")
    @classmethod
    def due_date_format(cls, v: Optional[str]) -> Optional[str]:
        return check_date(v)

    @field_validator("due_time")
    @classmethod
    def due_time_format(cls, v: Optional[str]) -> Optional[str]:
        return check_time(v)


class ServiceRequestRead(ServiceRequestBase):
    id: int
    dealership_id: str
    request_number: str
    requested_by: str
    date_requested: str
    start_date: Optional[str] = None
    start_time: Optional[str] = None
    completion_date: Optional[str] = None
    completion_time: Optional[str] = None
    price: float = 0
    status: RequestStatus = RequestStatus.PENDING
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @property
    def due(self) -> str:
        return " ".join(part for part in (self.due_date, self.due_time) if part)


class RequestDatesUpdate(BaseModel):
    """Partial scheduling update: only non-empty fields are applied."""
    due_date: Optional[str] = None
    due_time: Optional[str] = None
    start_date: Optional[str] = None
    start_time: Optional[str] = None
    completion_date: Optional[str] = None
    completion_time: Optional[str] = None

    @field_validator("due_date", "start_date", "completion_date")
    @classmethod
    def date_format(cls, v: Optional[str]) -> Optional[str]:
        return check_date(v)

    @field_validator("due_time", "start_time", "completion_time")
    @classmethod
    def time_format(cls, v: Optional[str]) -> Optional[str]:
        return check_time(v)

    def changes(self) -> dict[str, str]:
        return {name: getattr(self, name) for name in DATE_FIELDS if getattr(self, name)}


class PriceUpdate(BaseModel):
    price: float

    @field_validator("price")
    @classmethod
    def price_non_negative(cls, v: float) -> float:
        if not math.isfinite(v) or v < 0:
            raise ValueError("Price must be a finite, non-negative amount")
        return v


class RequestStats(BaseModel):
    total: int = 0
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    amount_due: float = 0
    amount_paid: float = 0
