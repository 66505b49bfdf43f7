"""Candidate slot suggestions for the poll creation form."""
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import List, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo

from meetpoll.core.constants import (
    DEFAULT_PREFERRED_HOURS,
    SUGGESTION_DAY_END_HOUR,
    SUGGESTION_DAY_START_HOUR,
    SUGGESTION_STEP_MINUTES,
    SUGGESTION_WINDOW_DAYS,
)
from meetpoll.core.logging_config import get_logger
from meetpoll.core.utils import to_timezone, to_utc
from meetpoll.integrations.base import BusyInterval, CalendarProvider

logger = get_logger(__name__)

SOURCE_CALENDAR = "google_calendar"
SOURCE_DEFAULTS = "defaults"


@dataclass(frozen=True)
class SuggestedSlot:
    start_time: datetime
    end_time: datetime


def _is_weekend(day) -> bool:
    return day.weekday() >= 5


def _conflicts(start: datetime, end: datetime, busy: Sequence[BusyInterval]) -> bool:
    return any(start < interval.end and end > interval.start for interval in busy)


def suggest_default_slots(duration_minutes: int, count: int, now: datetime, tz: ZoneInfo) -> List[SuggestedSlot]:
    """One slot per upcoming weekday, rotating through the preferred start hours."""
    if duration_minutes <= 0 or count <= 0:
        return []

    day = to_timezone(now, tz).date() + timedelta(days=1)
    duration = timedelta(minutes=duration_minutes)
    slots = []
    while len(slots) < count:
        if not _is_weekend(day):
            hour = DEFAULT_PREFERRED_HOURS[len(slots) % len(DEFAULT_PREFERRED_HOURS)]
            start = datetime.combine(day, time(hour), tzinfo=tz)
            slots.append(SuggestedSlot(start_time=start, end_time=start + duration))
        day += timedelta(days=1)
    return slots


def suggest_free_slots(
    busy: Sequence[BusyInterval],
    duration_minutes: int,
    count: int,
    now: datetime,
    tz: ZoneInfo,
) -> List[SuggestedSlot]:
    """First free slot of each weekday inside the suggestion window.

    Candidates start every half hour between the day start and end hours
    (local time), must end by the end hour, never start in the past and
    must not overlap a busy interval. At most one slot is taken per day.
    """
    if duration_minutes <= 0 or count <= 0:
        return []

    now = to_utc(now)
    today = to_timezone(now, tz).date()
    duration = timedelta(minutes=duration_minutes)
    step = timedelta(minutes=SUGGESTION_STEP_MINUTES)

    slots: List[SuggestedSlot] = []
    for offset in range(1, SUGGESTION_WINDOW_DAYS + 1):
        if len(slots) >= count:
            break
        day = today + timedelta(days=offset)
        if _is_weekend(day):
            continue

        cutoff = datetime.combine(day, time(SUGGESTION_DAY_END_HOUR), tzinfo=tz)
        start = datetime.combine(day, time(SUGGESTION_DAY_START_HOUR), tzinfo=tz)
        while start + duration <= cutoff:
            end = start + duration
            if start >= now and not _conflicts(start, end, busy):
                slots.append(SuggestedSlot(start_time=start, end_time=end))
                break
            start += step
    return slots


async def suggest_slots(
    calendar: Optional[CalendarProvider],
    duration_minutes: int,
    count: int,
    now: datetime,
    tz: ZoneInfo,
) -> Tuple[List[SuggestedSlot], str]:
    """Suggest slots from calendar free/busy data, falling back to defaults.

    Returns the slots and the source they came from.
    """
    if calendar is not None:
        try:
            busy = await calendar.get_busy_times(now, now + timedelta(days=SUGGESTION_WINDOW_DAYS))
            logger.info("busy_times_loaded", intervals=len(busy))
            return suggest_free_slots(busy, duration_minutes, count, now, tz), SOURCE_CALENDAR
        except Exception as exc:
            logger.warning("calendar_availability_failed", error=str(exc))

    return suggest_default_slots(duration_minutes, count, now, tz), SOURCE_DEFAULTS
