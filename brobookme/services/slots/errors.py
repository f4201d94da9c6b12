# brobookme/services/slots/errors.py

from datetime import datetime


class SlotsError(Exception):
    """Base error for the slots module."""


class ConfigurationError(SlotsError):
    """Provider has no working-hours configuration at all."""


class SlotNoLongerAvailable(SlotsError):
    """Chosen slot failed the availability re-check right before commit."""

    def __init__(self, slot_start: datetime, reason: str = "slot is no longer available"):
        self.slot_start = slot_start
        self.reason = reason
        super().__init__(f"{slot_start.isoformat()}: {reason}")
