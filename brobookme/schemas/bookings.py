# brobookme/schemas/bookings.py

from datetime import datetime
from typing import Optional
from pydantic import AwareDatetime, BaseModel

from ..services.slots.config import BookingStatus


class BookingCreate(BaseModel):
    customer_name: str
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    service_type: Optional[str] = None

    date_time: AwareDatetime

    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class BookingReschedule(BaseModel):
    date_time: AwareDatetime


class BookingCancel(BaseModel):
    reason: Optional[str] = None


class BookingRead(BaseModel):
    id: int
    provider_id: int

    customer_name: str
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    service_type: Optional[str] = None

    date_time: datetime

    status: BookingStatus
    notes: Optional[str] = None
    cancel_reason: Optional[str] = None

    model_config = {"from_attributes": True}
