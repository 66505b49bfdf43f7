"""Shared API dependencies."""
from typing import Dict, Optional, Tuple
from zoneinfo import ZoneInfo

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from meetpoll.core import config
from meetpoll.core.logging_config import get_logger
from meetpoll.core.security import verify_admin_token
from meetpoll.db import get_db
from meetpoll.integrations import (
    BookingProvider,
    CalendarProvider,
    GoogleCalendarProvider,
    Notifier,
    SendGridNotifier,
    ZoomBookingProvider,
)
from meetpoll.services.finalization import FinalizationCoordinator
from meetpoll.services.repository import PollRepository
from meetpoll.services.scheduling import SchedulingService

logger = get_logger(__name__)


def get_timezone() -> ZoneInfo:
    """Display zone for notification text and provider payloads."""
    return ZoneInfo(config.settings.TIMEZONE)


async def get_repository(db: AsyncSession = Depends(get_db)) -> PollRepository:
    return PollRepository(db)


def get_booking_provider() -> Optional[BookingProvider]:
    """Zoom provider when its credentials are configured."""
    s = config.settings
    if not (s.ZOOM_ACCOUNT_ID and s.ZOOM_CLIENT_ID and s.ZOOM_CLIENT_SECRET):
        return None
    return ZoomBookingProvider(s.ZOOM_ACCOUNT_ID, s.ZOOM_CLIENT_ID, s.ZOOM_CLIENT_SECRET, s.TIMEZONE)


# Reused across requests; each instance keeps its own access token
_calendar_providers: Dict[Tuple[str, str, str], GoogleCalendarProvider] = {}


def get_calendar_provider() -> Optional[CalendarProvider]:
    """Google Calendar provider when a service account key is configured."""
    s = config.settings
    if not (s.GOOGLE_SERVICE_ACCOUNT_KEY and s.GOOGLE_CALENDAR_ID):
        return None
    cache_key = (s.GOOGLE_SERVICE_ACCOUNT_KEY, s.GOOGLE_CALENDAR_ID, s.TIMEZONE)
    provider = _calendar_providers.get(cache_key)
    if provider is None:
        try:
            provider = GoogleCalendarProvider(*cache_key)
        except ValueError as exc:
            logger.error("calendar_provider_misconfigured", error=str(exc))
            return None
        _calendar_providers[cache_key] = provider
    return provider


def get_notifier() -> Optional[Notifier]:
    """SendGrid notifier when an API key is configured."""
    s = config.settings
    if not s.SENDGRID_API_KEY:
        return None
    return SendGridNotifier(s.SENDGRID_API_KEY, s.SENDGRID_FROM_EMAIL, s.SENDGRID_FROM_NAME)


def get_coordinator(
    repository: PollRepository = Depends(get_repository),
    booking: Optional[BookingProvider] = Depends(get_booking_provider),
    calendar: Optional[CalendarProvider] = Depends(get_calendar_provider),
    notifier: Optional[Notifier] = Depends(get_notifier),
    tz: ZoneInfo = Depends(get_timezone),
) -> FinalizationCoordinator:
    return FinalizationCoordinator(
        repository,
        config.settings.finalization_config(),
        tz,
        booking=booking,
        calendar=calendar,
        notifier=notifier,
    )


def get_scheduling_service(
    repository: PollRepository = Depends(get_repository),
    coordinator: FinalizationCoordinator = Depends(get_coordinator),
    tz: ZoneInfo = Depends(get_timezone),
) -> SchedulingService:
    return SchedulingService(
        repository,
        coordinator,
        base_url=config.settings.PUBLIC_BASE_URL,
        tz=tz,
        finalize_inline=config.settings.FINALIZE_INLINE,
    )


__all__ = [
    "get_db",
    "verify_admin_token",
    "get_timezone",
    "get_repository",
    "get_booking_provider",
    "get_calendar_provider",
    "get_notifier",
    "get_coordinator",
    "get_scheduling_service",
]
