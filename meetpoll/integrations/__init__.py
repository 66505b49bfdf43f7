"""Outbound integrations: video booking, calendar and email providers."""
from meetpoll.integrations.base import (
    BookingProvider,
    BusyInterval,
    CalendarProvider,
    MeetingBooking,
    NotificationMessage,
    Notifier,
)
from meetpoll.integrations.google_calendar import GoogleCalendarProvider
from meetpoll.integrations.sendgrid import SendGridNotifier
from meetpoll.integrations.zoom import ZoomBookingProvider

__all__ = [
    "BookingProvider",
    "BusyInterval",
    "CalendarProvider",
    "MeetingBooking",
    "NotificationMessage",
    "Notifier",
    "GoogleCalendarProvider",
    "SendGridNotifier",
    "ZoomBookingProvider",
]
