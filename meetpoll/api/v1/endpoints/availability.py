"""Candidate slot suggestions for coordinators."""
from typing import Optional
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, Query, Request

from meetpoll.api.deps import get_calendar_provider, get_timezone, verify_admin_token
from meetpoll.core.constants import DEFAULT_DURATION_MINUTES, MAX_DURATION_MINUTES
from meetpoll.core.rate_limit import limiter, RATE_LIMITS
from meetpoll.core.utils import utcnow
from meetpoll.integrations import CalendarProvider
from meetpoll.schemas import AvailabilityResponse, SuggestedSlotOut
from meetpoll.services.availability import suggest_slots

router = APIRouter(dependencies=[Depends(verify_admin_token)])


@router.get("", response_model=AvailabilityResponse)
@limiter.limit(RATE_LIMITS["admin_read"])
async def suggest_availability(
    request: Request,
    duration: int = Query(DEFAULT_DURATION_MINUTES, ge=1, le=MAX_DURATION_MINUTES),
    count: int = Query(3, ge=1, le=10),
    calendar: Optional[CalendarProvider] = Depends(get_calendar_provider),
    tz: ZoneInfo = Depends(get_timezone),
) -> AvailabilityResponse:
    """
    Suggest candidate slots for a new poll (admin only).

    With a calendar configured, returns the first free slot of each weekday
    in the next two weeks between 09:00 and 14:00 local time. Otherwise, or
    if the calendar cannot be read, returns default weekday slots rotating
    through 09:00, 10:00 and 11:00.

    Example:
        Request:
            GET /api/v1/availability?duration=30&count=3

        Response (200):
            {
                "slots": [
                    {"start_time": "2024-01-09T09:00:00-05:00", "end_time": "2024-01-09T09:30:00-05:00"}
                ],
                "source": "google_calendar"
            }
    """
    slots, source = await suggest_slots(calendar, duration, count, utcnow(), tz)
    return AvailabilityResponse(
        slots=[SuggestedSlotOut(start_time=s.start_time, end_time=s.end_time) for s in slots],
        source=source,
    )
