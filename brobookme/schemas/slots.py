# brobookme/schemas/slots.py
"""
Pydantic schemas for slots API.
"""

from datetime import date, datetime
from pydantic import AwareDatetime, BaseModel, Field


class SlotView(BaseModel):
    """One slot as shown to the booking form or the management grid."""
    start: datetime
    time: str = Field(description='Start in provider timezone, e.g. "9:30 AM"')
    booked: bool = False
    booked_count: int = 0
    day_blocked: bool = False
    individually_blocked: bool = False
    past: bool = False
    bookable: bool = True


class SlotsDayResponse(BaseModel):
    """Slots of one provider day."""
    username: str
    date: date
    date_display: str
    timezone: str
    day_blocked: bool
    slots: list[SlotView]


class NextAvailableResponse(BaseModel):
    username: str
    from_date: date
    next_date: date
    found: bool = Field(description="False when nothing opened within the horizon")


class BlockedSlotToggle(BaseModel):
    slot: AwareDatetime
    block: bool = True


class BlockedDatesUpdate(BaseModel):
    dates: list[date]
    block: bool = True


class BlockedStateResponse(BaseModel):
    username: str
    blocked_dates: list[str]
    blocked_slots: list[datetime]


class InvalidateResponse(BaseModel):
    username: str
    deleted_keys: int
    dates: list[date] | str
