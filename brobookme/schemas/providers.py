# brobookme/schemas/providers.py

from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator, model_validator

from ..config import settings
from ..services.slots.config import WEEKDAYS, parse_time_of_day


class WorkingHoursIn(BaseModel):
    start: str = Field(description='"HH:MM", 24h')
    end: str = Field(description='"HH:MM", 24h')

    @model_validator(mode="after")
    def check_order(self):
        try:
            start = parse_time_of_day(self.start)
            end = parse_time_of_day(self.end)
        except ValueError:
            raise ValueError("working hours must be HH:MM")
        if start >= end:
            raise ValueError("working hours start must be before end")
        return self


class ProviderSettingsIn(BaseModel):
    """Schedule settings of a provider, validated before save."""
    working_hours: dict[str, Optional[WorkingHoursIn]] = {}
    slot_duration_minutes: int = Field(30, gt=0)
    break_minutes: int = Field(0, ge=0)
    booking_delay_hours: float = Field(0, ge=0)
    multiple_bookings_per_slot: bool = False
    bookings_per_slot: int = Field(1, ge=1)
    timezone: str = settings.default_timezone
    date_format: str = "PPP"

    @field_validator("working_hours")
    @classmethod
    def check_weekdays(cls, value: dict) -> dict:
        normalized = {day.lower(): hours for day, hours in value.items()}
        if len(normalized) < len(value):
            raise ValueError("weekday given more than once")
        unknown = set(normalized) - set(WEEKDAYS)
        if unknown:
            raise ValueError(f"unknown weekdays: {', '.join(sorted(unknown))}")
        return normalized

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"unknown timezone: {value}")
        return value


class ProviderCreate(BaseModel):
    username: str = Field(min_length=1)
    name: str
    email: Optional[str] = None
    settings: ProviderSettingsIn = ProviderSettingsIn()


class ProviderRead(BaseModel):
    id: int
    username: str
    name: str
    email: Optional[str] = None
    is_suspended: bool
    settings: ProviderSettingsIn
    blocked_dates: list[str]
    blocked_slots: list[datetime]

    model_config = {"from_attributes": True}
