# brobookme/services/slots/presentation.py
"""
Slot → API shape.

Mapping only: flags are copied field for field from upstream, `past` compares
the slot start with now without any booking-delay buffer.
"""

import re
from datetime import date, datetime
from zoneinfo import ZoneInfo

from ...schemas.slots import SlotView
from .config import Slot


# Provider date formats are stored in date-fns notation
_DATE_TOKENS = {
    "yyyy": "{d.year:04d}",
    "MM": "{d.month:02d}",
    "dd": "{d.day:02d}",
}
_TOKEN_RE = re.compile("|".join(_DATE_TOKENS))


def format_slot_time(start: datetime, timezone: str | ZoneInfo) -> str:
    """Time of day in provider zone, e.g. "9:30 AM"."""
    zone = timezone if isinstance(timezone, ZoneInfo) else ZoneInfo(timezone)
    local = start.astimezone(zone)
    hour = local.hour % 12 or 12
    suffix = "AM" if local.hour < 12 else "PM"
    return f"{hour}:{local.minute:02d} {suffix}"


def format_slot_date(target_date: date, date_format: str | None = None) -> str:
    """
    Render a date with the provider's date format.

    Supports "PPP" (October 19th, 2026) and any combination of
    yyyy / MM / dd with separators. Unknown formats fall back to ISO.
    """
    if not date_format or date_format == "PPP":
        return f"{target_date:%B} {_ordinal(target_date.day)}, {target_date.year}"
    if not _TOKEN_RE.search(date_format):
        return target_date.isoformat()
    return _TOKEN_RE.sub(
        lambda m: _DATE_TOKENS[m.group(0)].format(d=target_date), date_format
    )


def present_slots(
    slots: list[Slot],
    now: datetime,
    timezone: str | ZoneInfo,
) -> list[SlotView]:
    """Convert annotated slots to display descriptors."""
    views = []
    for slot in slots:
        past = slot.start < now
        views.append(SlotView(
            start=slot.start,
            time=format_slot_time(slot.start, timezone),
            booked=slot.taken,
            booked_count=slot.booked_count,
            day_blocked=slot.day_blocked,
            individually_blocked=slot.blocked,
            past=past,
            bookable=slot.is_free and not past,
        ))
    return views


def _ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        return f"{day}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"
