# brobookme/services/slots/blocking.py
"""
Manual overrides on top of raw slots.

Two consumption modes, kept as separate entry points:
- annotate_blocks: provider slot management. Every slot stays visible,
  blocks are flags so they can be unblocked again.
- exclude_blocked: customer booking. Blocked days and slots disappear.
"""

from collections.abc import Iterable
from datetime import date, datetime, timezone

from .config import Slot


def date_key(target_date: date) -> str:
    """Stored form of a blocked date: "YYYY-MM-DD"."""
    return target_date.isoformat()


def is_day_blocked(target_date: date, blocked_dates: Iterable[str]) -> bool:
    return date_key(target_date) in set(blocked_dates)


def annotate_blocks(
    raw_slots: list[datetime],
    target_date: date,
    blocked_dates: Iterable[str],
    blocked_slots: Iterable[datetime],
) -> tuple[list[Slot], bool]:
    """
    Flag blocked slots without removing anything.

    Returns:
        (slots, is_day_blocked). On a blocked day every slot has
        day_blocked=True.
    """
    day_blocked = is_day_blocked(target_date, blocked_dates)
    blocked = _normalize(blocked_slots)

    slots = [
        Slot(
            start=start,
            blocked=_utc(start) in blocked,
            day_blocked=day_blocked,
        )
        for start in raw_slots
    ]
    return slots, day_blocked


def exclude_blocked(
    raw_slots: list[datetime],
    target_date: date,
    blocked_dates: Iterable[str],
    blocked_slots: Iterable[datetime],
) -> tuple[list[Slot], bool]:
    """
    Drop blocked days and blocked slots.

    Returns:
        (slots, is_day_blocked). A blocked day yields no slots.
    """
    if is_day_blocked(target_date, blocked_dates):
        return [], True

    blocked = _normalize(blocked_slots)
    slots = [Slot(start=start) for start in raw_slots if _utc(start) not in blocked]
    return slots, False


# ── Helpers ──────────────────────────────────────────────────────────────


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        raise ValueError(f"Blocked slot instant must be timezone-aware: {value!r}")
    return value.astimezone(timezone.utc)


def _normalize(values: Iterable[datetime]) -> set[datetime]:
    return {_utc(v) for v in values}
